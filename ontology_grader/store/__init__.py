"""Document stores — backend interface and the rdflib implementation."""

from ontology_grader.store.base import DocumentStore, QueryBackend
from ontology_grader.store.rdf_store import RdfDocumentStore, RdfQueryBackend, guess_format

__all__ = ["DocumentStore", "QueryBackend", "RdfDocumentStore", "RdfQueryBackend", "guess_format"]
