"""
API routes — thin HTTP layer that delegates to the orchestration.

Routes:
  GET  /health          → API health check
  GET  /api/manifest    → Requirements and queries of the configured manifest
  POST /api/grade       → Upload an ontology file and grade it
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from pydantic import BaseModel

from ontology_grader.config import get_settings
from ontology_grader.exceptions import DocumentParseError, ManifestError
from ontology_grader.models.schemas import DocumentStatusReport, EntityStatusReport, ResultRecord
from ontology_grader.orchestration.graph import run_pipeline
from ontology_grader.services.export_service import document_report_to_dict
from ontology_grader.services.manifest_service import ManifestLoader

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
grade_router = APIRouter()


# ── Response schemas ─────────────────────────────────────
class GradeResponse(BaseModel):
    file_name: str
    document_iri: str
    status: str
    document_hash: str = ""
    document_report: DocumentStatusReport
    export: dict[str, Any]
    resource_reports: list[EntityStatusReport] = []
    results: list[ResultRecord] = []


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Manifest ─────────────────────────────────────────────

@grade_router.get("/manifest")
def get_manifest(manifest: Optional[str] = Query(default=None)):
    try:
        loaded = ManifestLoader(manifest_location=manifest).load_manifest()
    except ManifestError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return loaded.model_dump(by_alias=True, mode="json")


# ── Grade ────────────────────────────────────────────────

@grade_router.post("/grade", response_model=GradeResponse)
def grade_document(
    file: UploadFile = File(...),
    manifest: Optional[str] = Query(default=None),
):
    """Grade an uploaded ontology against the manifest's queries."""
    file_name = file.filename or "ontology.ttl"
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=422, detail=f"{file_name} is not UTF-8 text")

    logger.info(f"Received upload: {file_name} ({len(raw)} bytes)")

    try:
        state = run_pipeline(text, file_name=file_name, manifest_location=manifest)
    except DocumentParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ManifestError as e:
        raise HTTPException(status_code=502, detail=str(e))

    report = state["document_report"]
    return GradeResponse(
        file_name=file_name,
        document_iri=state["document_iri"],
        status=state["status"].value,
        document_hash=state.get("document_hash", ""),
        document_report=report,
        export=document_report_to_dict(report),
        resource_reports=state.get("resource_reports", []),
        results=state.get("results", []),
    )
