"""
LangGraph State Machine — grading pipeline for one document.

    load_inputs → evaluate_queries → ┬→ aggregate_resources ┐
                                     └→ aggregate_document  ┴→ finalize → END

The two aggregation nodes run in the same step over the same, fully
materialized record list and write disjoint state keys.

The query backend and the manifest loader are passed in explicitly;
nothing here holds a process-wide engine.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from langgraph.graph import StateGraph, END

from ontology_grader.config import Settings, get_settings
from ontology_grader.engine.grader import compute_document_report, compute_per_resource_curation
from ontology_grader.engine.normalizer import QueryNormalizer
from ontology_grader.exceptions import SetupError
from ontology_grader.models.enums import CurationStatus, PipelineStatus
from ontology_grader.models.state import GradingState, audit
from ontology_grader.services.manifest_service import ManifestLoader
from ontology_grader.store.base import QueryBackend
from ontology_grader.store.rdf_store import RdfQueryBackend
from ontology_grader.utils.hashing import sha256_hash

logger = logging.getLogger(__name__)


# ── Build the graph ──────────────────────────────────────

def build_graph(
    backend: Optional[QueryBackend] = None,
    loader: Optional[ManifestLoader] = None,
    settings: Optional[Settings] = None,
):
    """
    Construct and compile the grading state machine.
    Returns a compiled graph ready to invoke.
    """
    settings = settings or get_settings()
    backend = backend or RdfQueryBackend(default_format=settings.default_format)

    def _loader_for(state: GradingState) -> ManifestLoader:
        if loader is not None:
            return loader
        return ManifestLoader(
            manifest_location=state.get("manifest_location") or None,
            settings=settings,
        )

    # ── Nodes ────────────────────────────────────────────

    def load_inputs(state: GradingState) -> dict[str, Any]:
        text = state.get("document_text", "")
        file_name = state.get("file_name", "")

        manifest = _loader_for(state).load_manifest()
        store = backend.load(text, file_name)

        document_iri = store.document_iri() or settings.unknown_document_iri
        known_entities = store.entities()
        logger.info(
            f"Loaded {file_name or '<document>'} → {document_iri} "
            f"({len(known_entities) if known_entities is not None else '?'} entities)"
        )
        return {
            "status": PipelineStatus.LOADED,
            "manifest": manifest,
            "store": store,
            "document_iri": document_iri,
            "known_entities": known_entities,
            "document_hash": sha256_hash(text),
            "audit_trail": audit("load_inputs", "completed", f"{len(manifest.queries)} queries declared"),
        }

    def evaluate_queries(state: GradingState) -> dict[str, Any]:
        normalizer = QueryNormalizer(
            store=state["store"],
            document_iri=state["document_iri"],
            classifier_query_ids=settings.classifier_query_ids,
        )
        results = normalizer.evaluate_all(
            state["manifest"],
            _loader_for(state).load_query_text,
            max_workers=settings.max_query_workers,
            timeout=settings.query_timeout_seconds,
        )
        logger.info(f"Evaluated {len(state['manifest'].queries)} queries → {len(results)} records")
        return {
            "status": PipelineStatus.EVALUATED,
            "results": results,
            "audit_trail": audit("evaluate_queries", "completed", f"{len(results)} records"),
        }

    def aggregate_resources(state: GradingState) -> dict[str, Any]:
        reports = compute_per_resource_curation(
            state["results"],
            state["manifest"].requirements,
            all_resources=state.get("known_entities"),
            unknown_resource_iri=settings.unknown_resource_iri,
        )
        return {
            "resource_reports": reports,
            "audit_trail": audit("aggregate_resources", "completed", f"{len(reports)} resources"),
        }

    def aggregate_document(state: GradingState) -> dict[str, Any]:
        report = compute_document_report(
            state["results"],
            state["manifest"].requirements,
            state.get("document_iri"),
        )
        return {
            "document_report": report,
            "audit_trail": audit("aggregate_document", "completed", report.status_label),
        }

    def finalize(state: GradingState) -> dict[str, Any]:
        return {
            "status": PipelineStatus.COMPLETED,
            "audit_trail": audit("finalize", "completed"),
        }

    graph = StateGraph(GradingState)

    graph.add_node("load_inputs", load_inputs)
    graph.add_node("evaluate_queries", evaluate_queries)
    graph.add_node("aggregate_resources", aggregate_resources)
    graph.add_node("aggregate_document", aggregate_document)
    graph.add_node("finalize", finalize)

    graph.set_entry_point("load_inputs")
    graph.add_edge("load_inputs", "evaluate_queries")

    # Fan-out: both aggregators consume the same records
    graph.add_edge("evaluate_queries", "aggregate_resources")
    graph.add_edge("evaluate_queries", "aggregate_document")

    # Fan-in
    graph.add_edge(["aggregate_resources", "aggregate_document"], "finalize")
    graph.add_edge("finalize", END)

    return graph.compile()


# ── Convenience runners ──────────────────────────────────

def run_pipeline(
    document_text: str,
    file_name: str = "",
    manifest_location: Optional[str] = None,
    backend: Optional[QueryBackend] = None,
    loader: Optional[ManifestLoader] = None,
    settings: Optional[Settings] = None,
) -> dict[str, Any]:
    """
    Build the graph and grade one document end-to-end.
    Returns the final state dict. Raises SetupError if the manifest or
    the document cannot be loaded.
    """
    compiled = build_graph(backend=backend, loader=loader, settings=settings)

    state: dict[str, Any] = {
        "document_text": document_text,
        "file_name": file_name,
        "status": PipelineStatus.RECEIVED,
    }
    if manifest_location:
        state["manifest_location"] = manifest_location

    logger.info("═" * 60)
    logger.info(f"  GRADING {file_name or '<document>'}")
    logger.info("═" * 60)

    final_state = compiled.invoke(state)

    report = final_state.get("document_report")
    status = report.status if report else CurationStatus.PENDING_FINAL_VETTING
    logger.info("═" * 60)
    logger.info(f"  GRADING FINISHED — {status.label}")
    logger.info("═" * 60)

    return final_state


def run_batch(
    documents: list[tuple[str, str]],
    manifest_location: Optional[str] = None,
    backend: Optional[QueryBackend] = None,
    loader: Optional[ManifestLoader] = None,
    settings: Optional[Settings] = None,
) -> list[dict[str, Any]]:
    """
    Grade several (file_name, text) documents as independent runs.
    A setup failure fails only its own document. Output order matches input.
    """
    settings = settings or get_settings()

    def _one(item: tuple[str, str]) -> dict[str, Any]:
        file_name, text = item
        try:
            return run_pipeline(
                text,
                file_name=file_name,
                manifest_location=manifest_location,
                backend=backend,
                loader=loader,
                settings=settings,
            )
        except SetupError as exc:
            logger.error(f"Grading failed for {file_name}: {exc}")
            return {
                "file_name": file_name,
                "status": PipelineStatus.FAILED,
                "error_message": str(exc),
            }

    workers = max(1, settings.max_batch_workers)
    if workers == 1:
        return [_one(item) for item in documents]
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="grader-doc") as pool:
        return list(pool.map(_one, documents))
