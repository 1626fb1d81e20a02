"""Models — enums, manifest/result/report schemas, graph state."""

from .enums import (
    CurationStatus,
    EntityFlag,
    PipelineStatus,
    Polarity,
    QueryKind,
    RequirementType,
    ResultStatus,
    Scope,
)
from .schemas import (
    AuditEntry,
    DocumentStatusReport,
    EntityStatusReport,
    Manifest,
    QueryDeclaration,
    RequirementDeclaration,
    RequirementReport,
    ResultRecord,
)
from .state import GradingState

__all__ = [
    "CurationStatus",
    "EntityFlag",
    "PipelineStatus",
    "Polarity",
    "QueryKind",
    "RequirementType",
    "ResultStatus",
    "Scope",
    "AuditEntry",
    "DocumentStatusReport",
    "EntityStatusReport",
    "Manifest",
    "QueryDeclaration",
    "RequirementDeclaration",
    "RequirementReport",
    "ResultRecord",
    "GradingState",
]
