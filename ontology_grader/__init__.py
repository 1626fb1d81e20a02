"""Ontology curation grader — SPARQL checks folded into IAO curation statuses."""

__version__ = "0.1.0"
