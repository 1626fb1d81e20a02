"""
Query Normalizer — turns native query outcomes into ResultRecords.

SELECT (enumerative) queries yield one failing record per matched row.
ASK (existential-check) queries yield exactly one document-scoped record.
Anything that goes wrong for one declaration is logged and contributes no
records; the remaining declarations are still evaluated.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, Iterable, Optional

from ontology_grader.models.enums import EntityFlag, Polarity, QueryKind, ResultStatus
from ontology_grader.models.schemas import Manifest, QueryDeclaration, ResultRecord
from ontology_grader.store.base import DocumentStore

logger = logging.getLogger(__name__)

QueryTextSource = Callable[[QueryDeclaration], str]


def resolve_entity(row: dict[str, str], resource_var: Optional[str] = None) -> Optional[str]:
    """Pick the value that identifies the described entity in a binding row."""
    if resource_var and row.get(resource_var) is not None:
        return row[resource_var]
    if row.get("resource") is not None:
        return row["resource"]
    for value in row.values():
        if value is not None:
            return value
    return None


def ask_status(answer: bool, polarity: Optional[str]) -> ResultStatus:
    """Map an ASK answer to pass/fail; unknown polarities mean true is a pass."""
    if polarity == Polarity.TRUE_MEANS_FAIL.value:
        return ResultStatus.FAIL if answer else ResultStatus.PASS
    return ResultStatus.PASS if answer else ResultStatus.FAIL


class QueryNormalizer:
    """Evaluates declarations against one loaded document."""

    def __init__(
        self,
        store: DocumentStore,
        document_iri: str,
        classifier_query_ids: Iterable[str] = (),
    ):
        self.store = store
        self.document_iri = document_iri
        self.classifier_query_ids = set(classifier_query_ids)

    def flags_for(self, declaration: QueryDeclaration) -> tuple[EntityFlag, ...]:
        flags = list(declaration.flags)
        if declaration.id in self.classifier_query_ids and EntityFlag.UNCURATED not in flags:
            flags.append(EntityFlag.UNCURATED)
        return tuple(flags)

    def evaluate(self, declaration: QueryDeclaration, query_text: str) -> list[ResultRecord]:
        kind = QueryKind.parse(declaration.kind)

        if kind is QueryKind.SELECT:
            return self._evaluate_select(declaration, query_text)
        if kind is QueryKind.ASK:
            return self._evaluate_ask(declaration, query_text)

        logger.warning(f"Unknown query kind for {declaration.id}: {declaration.kind!r}")
        return []

    def _evaluate_select(self, declaration: QueryDeclaration, query_text: str) -> list[ResultRecord]:
        rows = self.store.select(query_text)
        flags = self.flags_for(declaration)

        # Every match is a violation whatever the declared polarity.
        # TODO: branch on polarity once the manifest defines "matchMeansPass".
        return [
            ResultRecord(
                entity=resolve_entity(row, declaration.resource_var),
                query_id=declaration.id,
                requirement_id=declaration.checks_conformity_to,
                status=ResultStatus.FAIL,
                severity=declaration.severity,
                scope=declaration.scope,
                details=row,
                flags=flags,
            )
            for row in rows
        ]

    def _evaluate_ask(self, declaration: QueryDeclaration, query_text: str) -> list[ResultRecord]:
        answer = self.store.ask(query_text)
        status = ask_status(answer, declaration.polarity)
        return [
            ResultRecord(
                entity=self.document_iri,
                query_id=declaration.id,
                requirement_id=declaration.checks_conformity_to,
                status=status,
                severity=declaration.severity,
                scope=declaration.scope,
                details={"askResult": answer},
                flags=self.flags_for(declaration) if status is ResultStatus.FAIL else (),
            )
        ]

    # ── Whole-manifest driver ────────────────────────────

    def _load_and_evaluate(self, declaration: QueryDeclaration, load_text: QueryTextSource) -> list[ResultRecord]:
        return self.evaluate(declaration, load_text(declaration))

    def evaluate_all(
        self,
        manifest: Manifest,
        load_text: QueryTextSource,
        max_workers: int = 1,
        timeout: Optional[float] = None,
    ) -> list[ResultRecord]:
        """
        Evaluate every declaration in manifest order.
        Records come back in manifest order, rows in emission order,
        whether queries ran sequentially or in a thread pool.
        """
        declarations = manifest.queries
        if max_workers <= 1 and timeout is None:
            return self._evaluate_sequential(declarations, load_text)
        return self._evaluate_pooled(declarations, load_text, max(1, max_workers), timeout)

    def _evaluate_sequential(
        self, declarations: list[QueryDeclaration], load_text: QueryTextSource
    ) -> list[ResultRecord]:
        all_results: list[ResultRecord] = []
        for declaration in declarations:
            try:
                records = self._load_and_evaluate(declaration, load_text)
            except Exception as exc:
                logger.exception(f"Error evaluating query {declaration.id}: {exc}")
                continue
            logger.debug(f"{declaration.id}: {len(records)} records")
            all_results.extend(records)
        return all_results

    def _evaluate_pooled(
        self,
        declarations: list[QueryDeclaration],
        load_text: QueryTextSource,
        max_workers: int,
        timeout: Optional[float],
    ) -> list[ResultRecord]:
        if timeout is not None:
            # An overrunning query keeps its thread; nothing may queue behind it
            max_workers = max(max_workers, len(declarations))

        started = [threading.Event() for _ in declarations]
        started_at = [0.0] * len(declarations)

        def _timed(index: int, declaration: QueryDeclaration) -> list[ResultRecord]:
            started_at[index] = time.monotonic()
            started[index].set()
            return self._load_and_evaluate(declaration, load_text)

        all_results: list[ResultRecord] = []
        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="grader-query")
        try:
            futures = [
                (index, declaration, executor.submit(_timed, index, declaration))
                for index, declaration in enumerate(declarations)
            ]
            for index, declaration, future in futures:
                remaining = None
                if timeout is not None:
                    # Deadline runs from when the query started, not from submission
                    started[index].wait()
                    remaining = max(0.0, started_at[index] + timeout - time.monotonic())
                try:
                    records = future.result(timeout=remaining)
                except FutureTimeoutError:
                    logger.error(f"Query {declaration.id} timed out after {timeout}s")
                    continue
                except Exception as exc:
                    logger.exception(f"Error evaluating query {declaration.id}: {exc}")
                    continue
                logger.debug(f"{declaration.id}: {len(records)} records")
                all_results.extend(records)
        finally:
            # Do not block on queries that overran their timeout
            executor.shutdown(wait=False, cancel_futures=True)
        return all_results
