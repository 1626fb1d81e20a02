"""
LangGraph shared state — the object that flows through every node.

Design rules:
  1. Each field is "owned" by one node (see comments).
  2. Nodes may READ any field but only return updates for their owned fields.
  3. The two aggregation nodes run in the same step and own disjoint keys.
"""

from __future__ import annotations

from operator import add
from typing import Annotated, Any, Optional, TypedDict

from .enums import PipelineStatus
from .schemas import (
    AuditEntry,
    DocumentStatusReport,
    EntityStatusReport,
    Manifest,
    ResultRecord,
)


class GradingState(TypedDict, total=False):
    # ── Pipeline control (owner: orchestration) ──────────
    status: PipelineStatus
    error_message: str

    # ── Inputs (set by the caller) ───────────────────────
    document_text: str
    file_name: str
    manifest_location: str

    # ── load_inputs ──────────────────────────────────────
    document_hash: str
    manifest: Manifest
    store: Any  # DocumentStore handle, built by the injected backend
    document_iri: str
    known_entities: Optional[list[str]]

    # ── evaluate_queries ─────────────────────────────────
    results: list[ResultRecord]

    # ── aggregate_resources ──────────────────────────────
    resource_reports: list[EntityStatusReport]

    # ── aggregate_document ───────────────────────────────
    document_report: DocumentStatusReport

    # ── Audit trail (append-only, merged across branches) ─
    audit_trail: Annotated[list[AuditEntry], add]


def audit(node: str, action: str, details: str = "") -> list[AuditEntry]:
    """Build a one-entry audit update for a node's return value."""
    return [AuditEntry(node=node, action=action, details=details)]
