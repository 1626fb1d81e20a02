"""
Error taxonomy for a grading run.

Only SetupError (and its subclasses) aborts a run. QueryExecutionError is
raised for a single declaration and is caught by the normalizer driver.
"""

from __future__ import annotations


class GraderError(Exception):
    """Base class for all grader errors."""


class SetupError(GraderError):
    """The run cannot start: manifest or document unusable."""


class ManifestError(SetupError):
    """Manifest unreachable or malformed."""


class DocumentParseError(SetupError):
    """Document text could not be parsed into a store."""


class QueryExecutionError(GraderError):
    """One declared query could not be loaded or executed."""

    def __init__(self, query_id: str, message: str) -> None:
        super().__init__(f"[{query_id}] {message}")
        self.query_id = query_id
