"""
RDF document store — rdflib graph + SPARQL.

Parses the ontology text into an in-memory rdflib Graph and runs the
manifest's SELECT / ASK queries against it.
"""

from __future__ import annotations

import logging
from typing import Optional

from rdflib import Graph, URIRef
from rdflib.namespace import OWL, RDF

from ontology_grader.exceptions import DocumentParseError, QueryExecutionError
from ontology_grader.store.base import DocumentStore, QueryBackend

logger = logging.getLogger(__name__)

# Suffix → rdflib parser name
_FORMATS_BY_SUFFIX = [
    ((".ttl", ".turtle"), "turtle"),
    ((".nt", ".ntriples"), "nt"),
    ((".nq",), "nquads"),
    ((".trig",), "trig"),
    ((".rdf", ".owl", ".xml"), "xml"),
    ((".jsonld",), "json-ld"),
]


def guess_format(file_name: str, default: str = "turtle") -> str:
    """Guess the serialization from the filename suffix."""
    if not file_name:
        return default
    lower = file_name.lower()
    for suffixes, fmt in _FORMATS_BY_SUFFIX:
        if lower.endswith(suffixes):
            return fmt
    return default


class RdfDocumentStore(DocumentStore):
    """Read-only view over a parsed rdflib Graph."""

    def __init__(self, graph: Graph):
        self._graph = graph

    @property
    def graph(self) -> Graph:
        return self._graph

    def select(self, query_text: str) -> list[dict[str, str]]:
        result = self._run(query_text)
        if result.type != "SELECT":
            raise QueryExecutionError("select", f"expected a SELECT query, got {result.type}")

        variables = [str(v) for v in (result.vars or [])]
        rows: list[dict[str, str]] = []
        for row in result:
            bound = row.asdict()
            # Keep projection order so "first bound variable" is stable
            rows.append({name: str(bound[name]) for name in variables if bound.get(name) is not None})
        return rows

    def ask(self, query_text: str) -> bool:
        result = self._run(query_text)
        if result.type != "ASK":
            raise QueryExecutionError("ask", f"expected an ASK query, got {result.type}")
        return bool(result.askAnswer)

    def document_iri(self) -> Optional[str]:
        candidates = sorted(str(s) for s in self._graph.subjects(RDF.type, OWL.Ontology))
        return candidates[0] if candidates else None

    def entities(self) -> list[str]:
        doc_iri = self.document_iri()
        subjects = {
            str(s) for s in self._graph.subjects()
            if isinstance(s, URIRef) and str(s) != doc_iri
        }
        return sorted(subjects)

    def _run(self, query_text: str):
        try:
            return self._graph.query(query_text)
        except Exception as exc:
            raise QueryExecutionError("sparql", str(exc)) from exc


class RdfQueryBackend(QueryBackend):
    """Builds an RdfDocumentStore from document text."""

    def __init__(self, default_format: str = "turtle"):
        self.default_format = default_format

    def load(self, text: str, file_name: str = "") -> RdfDocumentStore:
        fmt = guess_format(file_name, self.default_format)
        graph = Graph()
        try:
            graph.parse(data=text, format=fmt)
        except Exception as exc:
            raise DocumentParseError(
                f"Could not parse '{file_name or '<document>'}' as {fmt}: {exc}"
            ) from exc
        logger.info(f"Parsed {file_name or '<document>'} as {fmt}: {len(graph)} triples")
        return RdfDocumentStore(graph)
