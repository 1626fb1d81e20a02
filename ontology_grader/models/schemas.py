"""
Data schemas for the grading pipeline.

Declarations come from the manifest and are read-only. Result records are
produced by the query normalizer and never mutated. Reports are the output
of the two aggregators.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    CurationStatus,
    EntityFlag,
    RequirementType,
    ResultStatus,
    Scope,
)


# ── Manifest declarations ────────────────────────────────


class RequirementDeclaration(BaseModel):
    """A requirement (mandatory) or recommendation (advisory) category."""
    id: str
    type: RequirementType = RequirementType.REQUIREMENT
    weight: float = 1.0

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> RequirementType:
        return RequirementType.parse(value)

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 1.0
        return float(value)


class QueryDeclaration(BaseModel):
    """One declared query of the manifest."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file: str = ""
    kind: str = ""  # kept raw: unknown kinds are skipped, not rejected
    checks_conformity_to: Optional[str] = Field(default=None, alias="checksConformityTo")
    severity: str = "info"
    scope: Scope = Scope.RESOURCE
    polarity: Optional[str] = None
    resource_var: Optional[str] = Field(default=None, alias="resourceVar")
    flags: list[EntityFlag] = []

    @field_validator("severity", mode="before")
    @classmethod
    def _default_severity(cls, value: Any) -> str:
        return value or "info"

    @field_validator("scope", mode="before")
    @classmethod
    def _default_scope(cls, value: Any) -> Any:
        return value or Scope.RESOURCE


class Manifest(BaseModel):
    """Ordered query declarations plus requirement metadata."""
    requirements: list[RequirementDeclaration] = []
    queries: list[QueryDeclaration] = []

    @field_validator("requirements", mode="before")
    @classmethod
    def _drop_anonymous(cls, value: Any) -> Any:
        # Entries without an id cannot be referenced; skip them
        if isinstance(value, list):
            return [r for r in value if not isinstance(r, dict) or r.get("id")]
        return value

    def requirement_types(self) -> dict[str, RequirementType]:
        return {r.id: r.type for r in self.requirements}


# ── Query normalizer output ──────────────────────────────


class ResultRecord(BaseModel):
    """Normalized outcome of one query against one row or boolean."""
    model_config = ConfigDict(frozen=True)

    entity: Optional[str] = None
    query_id: str
    requirement_id: Optional[str] = None
    status: ResultStatus = ResultStatus.FAIL
    severity: str = "info"
    scope: Scope = Scope.RESOURCE
    details: Any = None
    flags: tuple[EntityFlag, ...] = ()


# ── Aggregator output ────────────────────────────────────


class EntityStatusReport(BaseModel):
    entity: str
    status: CurationStatus
    status_iri: str
    status_label: str
    failed_requirements: list[str] = []
    failed_recommendations: list[str] = []


class RequirementReport(BaseModel):
    id: str
    type: RequirementType
    weight: float = 1.0
    status: ResultStatus = ResultStatus.PASS
    failed_entity_count: int = 0
    failing_entities: list[str] = []


class DocumentStatusReport(BaseModel):
    document_iri: str
    status: CurationStatus
    status_iri: str
    status_label: str
    requirements: list[RequirementReport] = []


# ── Audit Trail ──────────────────────────────────────────


class AuditEntry(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    node: str
    action: str
    details: str = ""
