"""
FastAPI application factory and API package.

Run with:
    uvicorn ontology_grader.api:app --reload --port 8000

Or via main.py:
    python -m ontology_grader --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ontology_grader.config import get_settings
from ontology_grader.api.routes import grade_router, health_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Ontology Curation Grader API",
        description="Grade ontologies against declared SPARQL checks",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow a browser front end (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(grade_router, prefix="/api", tags=["Grading"])

    logger.debug(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn ontology_grader.api:app`
app = create_app()
