"""Grading engine — query normalizer and the two aggregators."""

from ontology_grader.engine.grader import (
    compute_document_report,
    compute_per_resource_curation,
    status_policy,
)
from ontology_grader.engine.normalizer import QueryNormalizer, ask_status, resolve_entity

__all__ = [
    "QueryNormalizer",
    "ask_status",
    "resolve_entity",
    "compute_document_report",
    "compute_per_resource_curation",
    "status_policy",
]
