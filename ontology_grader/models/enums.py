from __future__ import annotations

from enum import Enum
from typing import Optional


class PipelineStatus(str, Enum):
    RECEIVED = "RECEIVED"
    LOADED = "LOADED"
    EVALUATED = "EVALUATED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class QueryKind(str, Enum):
    SELECT = "SELECT"  # enumerative: rows of bindings
    ASK = "ASK"        # existential-check: one boolean

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional[QueryKind]:
        """Map a manifest kind string to a QueryKind; None when unknown."""
        if not raw:
            return None
        key = str(raw).strip().lower()
        return _KIND_ALIASES.get(key)


_KIND_ALIASES = {
    "select": QueryKind.SELECT,
    "enumerative": QueryKind.SELECT,
    "ask": QueryKind.ASK,
    "existential-check": QueryKind.ASK,
}


class Polarity(str, Enum):
    MATCH_MEANS_FAIL = "matchMeansFail"
    TRUE_MEANS_PASS = "trueMeansPass"
    TRUE_MEANS_FAIL = "trueMeansFail"


class Scope(str, Enum):
    RESOURCE = "resource"
    DOCUMENT = "document"


class RequirementType(str, Enum):
    REQUIREMENT = "requirement"        # mandatory
    RECOMMENDATION = "recommendation"  # advisory

    @classmethod
    def parse(cls, raw: Optional[str]) -> RequirementType:
        """Anything that is not explicitly a recommendation is mandatory."""
        if raw == cls.RECOMMENDATION.value:
            return cls.RECOMMENDATION
        return cls.REQUIREMENT


class ResultStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class EntityFlag(str, Enum):
    """Entity-level classifications a query can attach to its records."""
    UNCURATED = "uncurated"
    REQUIRES_DISCUSSION = "requires_discussion"
    READY_FOR_RELEASE = "ready_for_release"


class CurationStatus(str, Enum):
    """IAO curation-status vocabulary, in priority order."""
    UNCURATED = "uncurated"
    METADATA_INCOMPLETE = "metadata-incomplete"
    METADATA_COMPLETE = "metadata-complete"
    PENDING_FINAL_VETTING = "pending-final-vetting"
    REQUIRES_DISCUSSION = "requires-discussion"  # reserved, no producer yet
    READY_FOR_RELEASE = "ready-for-release"      # reserved, no producer yet

    @property
    def iri(self) -> str:
        return _STATUS_IRIS[self]

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_IRIS = {
    CurationStatus.UNCURATED: "http://purl.obolibrary.org/obo/IAO_0000124",
    CurationStatus.METADATA_INCOMPLETE: "http://purl.obolibrary.org/obo/IAO_0000123",
    CurationStatus.METADATA_COMPLETE: "http://purl.obolibrary.org/obo/IAO_0000120",
    CurationStatus.PENDING_FINAL_VETTING: "http://purl.obolibrary.org/obo/IAO_0000125",
    CurationStatus.REQUIRES_DISCUSSION: "http://example.org/curation-status/requires-discussion",
    CurationStatus.READY_FOR_RELEASE: "http://example.org/curation-status/ready-for-release",
}

_STATUS_LABELS = {
    CurationStatus.UNCURATED: "uncurated",
    CurationStatus.METADATA_INCOMPLETE: "metadata incomplete",
    CurationStatus.METADATA_COMPLETE: "metadata complete",
    CurationStatus.PENDING_FINAL_VETTING: "pending final vetting",
    CurationStatus.REQUIRES_DISCUSSION: "requires discussion",
    CurationStatus.READY_FOR_RELEASE: "ready for release",
}
