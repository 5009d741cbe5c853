"""Bounded-concurrency batch execution."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

from modtrack.contracts.exceptions import ValidationError
from modtrack.contracts.operation import BatchReport, OperationKind, OperationResult, OperationState
from modtrack.engine.progress import CONFLICTS_PHASE, UPDATE_PHASE, BatchProgress, NullBatchProgress

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

PENDING_MESSAGE = "still pending"

Worker = Callable[[T], Awaitable[OperationResult]]
ConflictResolver = Callable[[T, OperationResult], Awaitable[OperationResult]]


def _item_id(item: object, index: int) -> int:
    if isinstance(item, int):
        return item
    item_id = getattr(item, "id", None)
    return item_id if isinstance(item_id, int) else index


def _failure(item: object, index: int, message: str) -> OperationResult:
    return OperationResult(
        project_id=_item_id(item, index),
        kind=OperationKind.UPDATE,
        state=OperationState.FAILED,
        message=message,
    )


class _BatchRun(Generic[T]):
    def __init__(self, items: Sequence[T], worker: Worker[T], progress: BatchProgress) -> None:
        self.items = items
        self.worker = worker
        self.progress = progress
        self.results: list[OperationResult | None] = [None] * len(items)
        self.deferred: list[int] = []
        self.cursor = 0

    async def work(self) -> None:
        while self.cursor < len(self.items):
            index = self.cursor
            self.cursor += 1
            result = await self.run_item(index)
            if result.state is OperationState.DEFERRED:
                self.deferred.append(index)
            self.results[index] = result
            self.progress.item_done(UPDATE_PHASE, result)

    async def run_item(self, index: int) -> OperationResult:
        item = self.items[index]
        try:
            return await self.worker(item)
        except Exception as exc:
            _LOG.warning("Batch item %d failed: %s", index, exc, exc_info=True)
            return _failure(item, index, str(exc) or exc.__class__.__name__)


class BatchScheduler:
    """Runs one operation per item with at most ``concurrency_limit`` in flight.

    Workers claim items from one shared cursor, so each item runs exactly once.
    A failing item never stops its siblings. Items whose first attempt ended in
    a deferred conflict are confirmed one at a time after every worker has
    finished, in input order.

    ``succeeded + failed + cancelled`` always equals ``len(items)``.
    """

    def __init__(self, *, timeout: float | None = None, progress: BatchProgress | None = None) -> None:
        self._timeout = timeout
        self._progress: BatchProgress = progress or NullBatchProgress()

    async def run_batch(
        self,
        items: Sequence[T],
        worker: Worker[T],
        concurrency_limit: int,
        *,
        resolve_conflict: ConflictResolver[T] | None = None,
    ) -> BatchReport:
        if concurrency_limit < 1:
            raise ValidationError(f"concurrency limit must be at least 1 (got {concurrency_limit})")
        if not items:
            return BatchReport()

        run = _BatchRun(items, worker, self._progress)
        worker_count = min(concurrency_limit, len(items))
        pending: list[int] = []

        self._progress.phase_start(UPDATE_PHASE, len(items))
        try:
            async with asyncio.timeout(self._timeout):
                async with asyncio.TaskGroup() as tg:
                    for _ in range(worker_count):
                        tg.create_task(run.work())
            self._progress.phase_done(UPDATE_PHASE)
        except TimeoutError as exc:
            self._progress.phase_error(UPDATE_PHASE, exc)
            for index, result in enumerate(run.results):
                if result is None:
                    pending.append(_item_id(items[index], index))
                    run.results[index] = _failure(items[index], index, PENDING_MESSAGE)
            _LOG.warning("Batch timed out after %ss; %d item(s) still pending", self._timeout, len(pending))

        if run.deferred:
            await self._resolve_deferred(run, resolve_conflict)

        return self._report([result for result in run.results if result is not None], pending)

    async def _resolve_deferred(self, run: _BatchRun[T], resolve_conflict: ConflictResolver[T] | None) -> None:
        self._progress.phase_start(CONFLICTS_PHASE, len(run.deferred))
        for index in sorted(run.deferred):
            item = run.items[index]
            pending_result = run.results[index]
            assert pending_result is not None
            if resolve_conflict is None:
                resolved = _failure(item, index, pending_result.message or "unresolved install conflict")
            else:
                try:
                    resolved = await resolve_conflict(item, pending_result)
                except Exception as exc:
                    _LOG.warning("Conflict resolution for item %d failed: %s", index, exc, exc_info=True)
                    resolved = _failure(item, index, str(exc) or exc.__class__.__name__)
            run.results[index] = resolved
            self._progress.item_done(CONFLICTS_PHASE, resolved)
        self._progress.phase_done(CONFLICTS_PHASE)

    @staticmethod
    def _report(results: list[OperationResult], pending: list[int]) -> BatchReport:
        report = BatchReport(results=results, pending=pending)
        for result in results:
            if result.state is OperationState.SUCCESS:
                report.succeeded += 1
            elif result.state is OperationState.CANCELLED:
                report.cancelled += 1
            else:
                report.failed += 1
        return report
