from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import pytest

from ontology_grader.config import Settings
from ontology_grader.models.schemas import Manifest, QueryDeclaration
from ontology_grader.store.base import DocumentStore, QueryBackend

FIXTURES = Path(__file__).parent / "fixtures"

EX = "http://example.org/onto"


class FakeStore(DocumentStore):
    """In-memory store: query text is a key into canned answers."""

    def __init__(
        self,
        selects: Optional[dict[str, list[dict[str, str]]]] = None,
        asks: Optional[dict[str, bool]] = None,
        iri: Optional[str] = EX,
        entities: Optional[list[str]] = None,
        delays: Optional[dict[str, float]] = None,
    ):
        self.selects = selects or {}
        self.asks = asks or {}
        self.iri = iri
        self._entities = entities
        self.delays = delays or {}

    def select(self, query_text: str) -> list[dict[str, str]]:
        self._maybe_sleep(query_text)
        if query_text not in self.selects:
            raise RuntimeError(f"no canned rows for {query_text!r}")
        return self.selects[query_text]

    def ask(self, query_text: str) -> bool:
        self._maybe_sleep(query_text)
        if query_text not in self.asks:
            raise RuntimeError(f"no canned answer for {query_text!r}")
        return self.asks[query_text]

    def document_iri(self) -> Optional[str]:
        return self.iri

    def entities(self) -> Optional[list[str]]:
        return self._entities

    def _maybe_sleep(self, query_text: str) -> None:
        if query_text in self.delays:
            time.sleep(self.delays[query_text])


class FakeBackend(QueryBackend):
    def __init__(self, store: DocumentStore):
        self.store = store
        self.loaded: list[str] = []

    def load(self, text: str, file_name: str = "") -> DocumentStore:
        self.loaded.append(file_name)
        return self.store


class FakeLoader:
    """Stands in for ManifestLoader: query text is the declaration's file name."""

    def __init__(self, manifest: Manifest):
        self.manifest = manifest

    def load_manifest(self) -> Manifest:
        return self.manifest

    def load_query_text(self, declaration: QueryDeclaration) -> str:
        return declaration.file


def declaration(id: str, kind: str = "SELECT", **kwargs) -> QueryDeclaration:
    return QueryDeclaration(id=id, file=kwargs.pop("file", id), kind=kind, **kwargs)


@pytest.fixture
def fixture_manifest_path() -> str:
    return str(FIXTURES / "manifest.json")


@pytest.fixture
def sample_ttl() -> str:
    return (FIXTURES / "sample.ttl").read_text(encoding="utf-8")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)
