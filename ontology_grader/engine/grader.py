"""
Grader — folds ResultRecords into curation statuses.

Two independent aggregations over the same record sequence:
  - per resource (entity): which requirements / recommendations it fails
  - per document: which requirements fail anywhere, and by how many entities

Both derive their status through status_policy().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from ontology_grader.models.enums import (
    CurationStatus,
    EntityFlag,
    RequirementType,
    ResultStatus,
    Scope,
)
from ontology_grader.models.schemas import (
    DocumentStatusReport,
    EntityStatusReport,
    RequirementDeclaration,
    RequirementReport,
    ResultRecord,
)

logger = logging.getLogger(__name__)

UNKNOWN_DOCUMENT_IRI = "urn:ontology:unknown"
UNKNOWN_RESOURCE_IRI = "urn:resource:unknown"


def status_policy(
    has_requirement_fail: bool,
    has_recommendation_fail: bool,
    flags: Optional[Mapping[EntityFlag, bool]] = None,
) -> CurationStatus:
    """Priority-ordered status decision; the first matching rule wins."""
    flags = flags or {}
    if flags.get(EntityFlag.UNCURATED):
        return CurationStatus.UNCURATED
    if has_requirement_fail:
        return CurationStatus.METADATA_INCOMPLETE
    if has_recommendation_fail:
        return CurationStatus.METADATA_COMPLETE
    if flags.get(EntityFlag.REQUIRES_DISCUSSION):
        return CurationStatus.REQUIRES_DISCUSSION
    if flags.get(EntityFlag.READY_FOR_RELEASE):
        return CurationStatus.READY_FOR_RELEASE
    return CurationStatus.PENDING_FINAL_VETTING


def requirement_type_map(requirements: Iterable[RequirementDeclaration]) -> dict[str, RequirementType]:
    return {r.id: r.type for r in requirements}


# ── Per-resource ─────────────────────────────────────────


@dataclass
class _EntityProfile:
    entity: str
    # dicts used as insertion-ordered sets
    failed_requirements: dict[str, None] = field(default_factory=dict)
    failed_recommendations: dict[str, None] = field(default_factory=dict)
    flags: dict[EntityFlag, bool] = field(
        default_factory=lambda: {flag: False for flag in EntityFlag}
    )

    def to_report(self) -> EntityStatusReport:
        status = status_policy(
            bool(self.failed_requirements),
            bool(self.failed_recommendations),
            self.flags,
        )
        return EntityStatusReport(
            entity=self.entity,
            status=status,
            status_iri=status.iri,
            status_label=status.label,
            failed_requirements=list(self.failed_requirements),
            failed_recommendations=list(self.failed_recommendations),
        )


def compute_per_resource_curation(
    results: Sequence[ResultRecord],
    requirements: Iterable[RequirementDeclaration],
    all_resources: Optional[Iterable[str]] = None,
    unknown_resource_iri: str = UNKNOWN_RESOURCE_IRI,
) -> list[EntityStatusReport]:
    """
    One EntityStatusReport per entity seen in the records, plus one per
    entity of ``all_resources`` that produced no records at all.

    Records without an entity are grouped under ``unknown_resource_iri``.
    Requirement ids missing from the manifest count as mandatory.
    """
    req_type = requirement_type_map(requirements)
    per: dict[str, _EntityProfile] = {}

    for record in results:
        entity = record.entity or unknown_resource_iri
        profile = per.get(entity)
        if profile is None:
            profile = per[entity] = _EntityProfile(entity)

        if record.status is not ResultStatus.FAIL:
            continue

        if record.requirement_id:
            kind = req_type.get(record.requirement_id, RequirementType.REQUIREMENT)
            if kind is RequirementType.RECOMMENDATION:
                profile.failed_recommendations[record.requirement_id] = None
            else:
                profile.failed_requirements[record.requirement_id] = None

        for flag in record.flags:
            profile.flags[flag] = True

    if all_resources is not None:
        for iri in all_resources:
            if iri not in per:
                per[iri] = _EntityProfile(iri)

    reports = [profile.to_report() for profile in per.values()]
    logger.info(f"Graded {len(reports)} resources from {len(results)} records")
    return reports


# ── Per-document ─────────────────────────────────────────


@dataclass
class _RequirementProfile:
    id: str
    type: RequirementType
    weight: float
    has_fail: bool = False
    failing_entities: dict[str, None] = field(default_factory=dict)

    def to_report(self) -> RequirementReport:
        return RequirementReport(
            id=self.id,
            type=self.type,
            weight=self.weight,
            status=ResultStatus.FAIL if self.has_fail else ResultStatus.PASS,
            failed_entity_count=len(self.failing_entities),
            failing_entities=list(self.failing_entities),
        )


def compute_document_report(
    results: Sequence[ResultRecord],
    requirements: Iterable[RequirementDeclaration],
    document_iri: Optional[str] = None,
) -> DocumentStatusReport:
    """
    Per-requirement pass/fail for the whole document and the document's status.
    Every declared requirement is reported, including ones no record touched.
    """
    profiles: dict[str, _RequirementProfile] = {}
    for r in requirements:
        profiles[r.id] = _RequirementProfile(id=r.id, type=r.type, weight=r.weight)

    for record in results:
        if not record.requirement_id or record.requirement_id not in profiles:
            continue
        if record.status is not ResultStatus.FAIL:
            continue

        profile = profiles[record.requirement_id]
        profile.has_fail = True
        # Document-scope failures are not attributed to entities
        if record.scope is Scope.RESOURCE and record.entity:
            profile.failing_entities[record.entity] = None

    has_requirement_fail = any(
        p.has_fail for p in profiles.values() if p.type is RequirementType.REQUIREMENT
    )
    has_recommendation_fail = any(
        p.has_fail for p in profiles.values() if p.type is RequirementType.RECOMMENDATION
    )

    # No document-level classifier exists yet, so no flags
    status = status_policy(has_requirement_fail, has_recommendation_fail, {})

    report = DocumentStatusReport(
        document_iri=document_iri or UNKNOWN_DOCUMENT_IRI,
        status=status,
        status_iri=status.iri,
        status_label=status.label,
        requirements=[p.to_report() for p in profiles.values()],
    )
    logger.info(f"Document {report.document_iri}: {status.label}")
    return report
