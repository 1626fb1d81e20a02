"""
Export Service — tabular and structured forms of a grading run
for downstream tooling.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, Sequence

import yaml

from ontology_grader.models.schemas import DocumentStatusReport, EntityStatusReport, ResultRecord

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["documentId", "entity", "queryId", "requirementId", "status", "severity", "scope"]
RESOURCE_COLUMNS = ["entity", "statusIri", "statusLabel", "failedRequirements", "failedRecommendations"]


def results_to_rows(records: Sequence[ResultRecord], document_iri: str) -> list[dict[str, str]]:
    """One row per ResultRecord."""
    return [
        {
            "documentId": document_iri,
            "entity": r.entity or "",
            "queryId": r.query_id,
            "requirementId": r.requirement_id or "",
            "status": r.status.value,
            "severity": r.severity,
            "scope": r.scope.value,
        }
        for r in records
    ]


def results_to_csv(records: Sequence[ResultRecord], document_iri: str) -> str:
    return _csv(RESULT_COLUMNS, results_to_rows(records, document_iri))


def resource_reports_to_csv(reports: Sequence[EntityStatusReport]) -> str:
    rows = [
        {
            "entity": r.entity,
            "statusIri": r.status_iri,
            "statusLabel": r.status_label,
            "failedRequirements": ";".join(r.failed_requirements),
            "failedRecommendations": ";".join(r.failed_recommendations),
        }
        for r in reports
    ]
    return _csv(RESOURCE_COLUMNS, rows)


def document_report_to_dict(report: DocumentStatusReport) -> dict[str, Any]:
    """Structured document report: id, status and one entry per requirement."""
    return {
        "documentId": report.document_iri,
        "statusIri": report.status_iri,
        "status": report.status_label,
        "requirements": [
            {
                "id": req.id,
                "type": req.type.value,
                "status": req.status.value,
                "failedEntityCount": req.failed_entity_count,
            }
            for req in report.requirements
        ],
    }


def document_report_to_json(report: DocumentStatusReport) -> str:
    return json.dumps(document_report_to_dict(report), indent=2)


def document_report_to_yaml(report: DocumentStatusReport) -> str:
    return yaml.safe_dump(document_report_to_dict(report), sort_keys=False, allow_unicode=True)


def write_exports(state: dict[str, Any], out_dir: str | Path) -> dict[str, str]:
    """Write the export files for a finished run and return their paths."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    stem = Path(state.get("file_name") or "ontology").stem
    document_iri = state.get("document_iri", "")
    files = {
        "results": (out / f"{stem}_results.csv", results_to_csv(state.get("results", []), document_iri)),
        "resources": (out / f"{stem}_resources.csv", resource_reports_to_csv(state.get("resource_reports", []))),
    }
    if state.get("document_report") is not None:
        report = state["document_report"]
        files["document"] = (out / f"{stem}_report.json", document_report_to_json(report))
        files["document_yaml"] = (out / f"{stem}_report.yaml", document_report_to_yaml(report))

    written: dict[str, str] = {}
    for name, (path, content) in files.items():
        path.write_text(content, encoding="utf-8", newline="")
        written[name] = str(path)
    logger.info(f"Wrote {len(written)} export files to {out}")
    return written


def _csv(columns: list[str], rows: list[dict[str, str]]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()
