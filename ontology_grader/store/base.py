"""
Query backend interface.

The grading core only needs three things from a loaded document: run an
enumerative query, run an existential-check query, and name the document.
Backends are constructed explicitly and passed into the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class DocumentStore(ABC):
    """A parsed, read-only document that queries can run against."""

    @abstractmethod
    def select(self, query_text: str) -> list[dict[str, str]]:
        """Run an enumerative query. Each row maps variable name → bound value."""
        ...

    @abstractmethod
    def ask(self, query_text: str) -> bool:
        """Run an existential-check query."""
        ...

    @abstractmethod
    def document_iri(self) -> Optional[str]:
        """Identifier of the document itself, or None if it declares none."""
        ...

    def entities(self) -> Optional[list[str]]:
        """All entity identifiers described by the document, if enumerable."""
        return None


class QueryBackend(ABC):
    """Factory that turns raw document text into a DocumentStore."""

    @abstractmethod
    def load(self, text: str, file_name: str = "") -> DocumentStore:
        """Parse the document. Raises DocumentParseError on failure."""
        ...
