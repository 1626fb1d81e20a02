"""
Manifest Service — loads the query manifest and query texts.

Locations may be local paths or http(s) URLs. Query files are resolved
relative to the manifest's directory unless a separate base is configured.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential, wait_random

from ontology_grader.config import Settings, get_settings
from ontology_grader.exceptions import ManifestError, QueryExecutionError
from ontology_grader.models.schemas import Manifest, QueryDeclaration

logger = logging.getLogger(__name__)


class TransientHttpError(RuntimeError):
    pass


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _is_retryable_status(code: int) -> bool:
    return code in {408, 425, 429, 500, 502, 503, 504}


class ManifestLoader:
    """Reads manifest.json and the query files it references."""

    def __init__(
        self,
        manifest_location: Optional[str] = None,
        queries_base: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.manifest_location = manifest_location or self.settings.manifest_location
        self.queries_base = queries_base or self.settings.queries_base or self._default_base()
        self._client = client
        self._fetch = retry(
            retry=retry_if_exception_type((httpx.TransportError, TransientHttpError)),
            wait=wait_exponential(multiplier=0.5, max=5.0) + wait_random(0, 0.5),
            stop=stop_after_attempt(max(1, self.settings.http_retries)),
            reraise=True,
        )(self._fetch_once)

    def _default_base(self) -> str:
        if _is_url(self.manifest_location):
            return urljoin(self.manifest_location, ".")
        return str(Path(self.manifest_location).parent)

    # ── Manifest ─────────────────────────────────────────

    def load_manifest(self) -> Manifest:
        """Load and validate the manifest. Any failure is a setup error."""
        try:
            raw = self._read_text(self.manifest_location)
        except (OSError, UnicodeDecodeError, httpx.HTTPError, TransientHttpError) as exc:
            raise ManifestError(f"Failed to fetch manifest {self.manifest_location}: {exc}") from exc

        try:
            manifest = Manifest.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ManifestError(f"Malformed manifest {self.manifest_location}: {exc}") from exc

        logger.info(
            f"Loaded manifest {self.manifest_location}: "
            f"{len(manifest.requirements)} requirements, {len(manifest.queries)} queries"
        )
        return manifest

    # ── Query texts ──────────────────────────────────────

    def load_query_text(self, declaration: QueryDeclaration) -> str:
        """Load one query's text. Failures are per-query, not fatal."""
        if not declaration.file:
            raise QueryExecutionError(declaration.id, "declaration has no query file")
        location = self._resolve(declaration.file)
        try:
            return self._read_text(location)
        except (OSError, UnicodeDecodeError, httpx.HTTPError, TransientHttpError) as exc:
            raise QueryExecutionError(declaration.id, f"failed to fetch query from {location}: {exc}") from exc

    def _resolve(self, file_name: str) -> str:
        if _is_url(file_name):
            return file_name
        if _is_url(self.queries_base):
            base = self.queries_base if self.queries_base.endswith("/") else self.queries_base + "/"
            return urljoin(base, file_name)
        return str(Path(self.queries_base) / file_name)

    # ── IO ───────────────────────────────────────────────

    def _read_text(self, location: str) -> str:
        if _is_url(location):
            return self._fetch(location)
        return Path(location).read_text(encoding="utf-8")

    def _fetch_once(self, url: str) -> str:
        client = self._client or httpx.Client(
            timeout=httpx.Timeout(self.settings.http_timeout_seconds),
            follow_redirects=True,
        )
        try:
            r = client.get(url)
            if _is_retryable_status(r.status_code):
                raise TransientHttpError(f"Retryable HTTP status {r.status_code} for {url}")
            r.raise_for_status()
            return r.text
        finally:
            if self._client is None:
                client.close()
