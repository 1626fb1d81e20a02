"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables (prefix GRADER_)."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Ontology Curation Grader"
    debug: bool = True

    # ── Manifest / query source ──────────────────────────
    manifest_location: str = "queries/manifest.json"  # local path or http(s) URL
    queries_base: str = ""  # empty = directory of the manifest
    http_timeout_seconds: float = 30.0
    http_retries: int = 3

    # ── Document store ───────────────────────────────────
    default_format: str = "turtle"
    unknown_document_iri: str = "urn:ontology:unknown"
    unknown_resource_iri: str = "urn:resource:unknown"

    # ── Grading ──────────────────────────────────────────
    # Queries whose failing rows mark an entity as "uncurated"
    classifier_query_ids: list[str] = ["q_onlyLabel"]

    # ── Execution limits ─────────────────────────────────
    max_query_workers: int = 1  # 1 = sequential
    query_timeout_seconds: Optional[float] = None
    max_batch_workers: int = 1

    # ── Exports ──────────────────────────────────────────
    export_dir: str = "./reports"

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "GRADER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
