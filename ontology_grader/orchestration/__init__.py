"""Orchestration — LangGraph grading pipeline."""

from ontology_grader.orchestration.graph import build_graph, run_batch, run_pipeline

__all__ = ["build_graph", "run_batch", "run_pipeline"]
