"""
Ontology Curation Grader — Main Entry Point

Grade a document directly (CLI):
    python -m ontology_grader path/to/ontology.ttl [--manifest queries/manifest.json] [--out reports/]

Run as an API server:
    python -m ontology_grader --serve
    # or: uvicorn ontology_grader.api:app --reload --port 8000

Or import and run programmatically:
    from ontology_grader.main import run
    state = run("path/to/ontology.ttl")
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ontology_grader.config import get_settings
from ontology_grader.exceptions import DocumentParseError, SetupError
from ontology_grader.orchestration.graph import run_pipeline
from ontology_grader.services.export_service import write_exports
from ontology_grader.utils.logger import setup_logging


def run(
    file_path: str,
    manifest_location: Optional[str] = None,
    out_dir: Optional[str] = None,
) -> dict:
    """Grade one document file and return the final pipeline state."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()}")
    logger.info(f"  Started: {datetime.now(timezone.utc).isoformat()}")
    logger.info("=" * 60)

    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(f"{path.name} is not UTF-8 text: {exc}") from exc
    final_state = run_pipeline(text, file_name=path.name, manifest_location=manifest_location)

    _print_summary(final_state)

    if out_dir:
        written = write_exports(final_state, out_dir)
        for kind, target in written.items():
            logger.info(f"  Export ({kind}): {target}")

    return final_state


def _print_summary(state: dict) -> None:
    """Log a human-readable summary of the grading result."""
    logger = logging.getLogger(__name__)

    report = state.get("document_report")
    resources = state.get("resource_reports", [])
    results = state.get("results", [])

    logger.info("")
    logger.info("-" * 60)
    logger.info("  GRADING RESULT SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Document:       {state.get('document_iri', 'N/A')}")
    logger.info(f"  Status:         {report.status_label if report else 'N/A'}")
    logger.info(f"  Records:        {len(results)}")
    logger.info(f"  Resources:      {len(resources)}")

    if report:
        for req in report.requirements:
            logger.info(
                f"    {req.id:<24} {req.type.value:<15} {req.status.value:<5} "
                f"failing entities: {req.failed_entity_count}"
            )

    by_status: dict[str, int] = {}
    for r in resources:
        by_status[r.status_label] = by_status.get(r.status_label, 0) + 1
    for label, count in sorted(by_status.items()):
        logger.info(f"  {label:<24} {count} resources")

    logger.info("-" * 60)

    audit = state.get("audit_trail", [])
    logger.info(f"  Audit Trail: {len(audit)} entries")
    for entry in audit:
        logger.info(f"    {entry.node} | {entry.action} | {entry.details}")
    logger.info("")


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("ontology_grader.api:app", host=host, port=port)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Grade an ontology against declared checks")
    parser.add_argument("document", nargs="?", help="ontology file to grade")
    parser.add_argument("--manifest", default=None, help="manifest path or URL")
    parser.add_argument("--out", default=None, help="directory for CSV/JSON/YAML exports")
    parser.add_argument("--serve", action="store_true", help="run the HTTP API instead")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    if args.serve:
        serve(port=args.port)
        return 0
    if not args.document:
        parser.error("a document path is required unless --serve is given")

    try:
        run(args.document, manifest_location=args.manifest, out_dir=args.out)
    except (SetupError, OSError) as exc:
        logging.getLogger(__name__).error(f"Grading failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
