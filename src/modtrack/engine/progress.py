"""Batch progress events.

:class:`~modtrack.engine.batch.BatchScheduler` runs an ``Update`` phase (one
event per finished item) and, when conflicts were deferred, a ``Conflicts``
phase that confirms them one by one. Every item event carries the
:class:`OperationResult` it produced, so observers can keep their own tally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter

from modtrack.contracts.operation import OperationResult, OperationState

UPDATE_PHASE = "Update"
CONFLICTS_PHASE = "Conflicts"


class BatchProgress(ABC):
    @abstractmethod
    def phase_start(self, phase: str, total: int) -> None: ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str, result: OperationResult) -> None:
        """*result* is ``DEFERRED`` in the update phase when a conflict awaits confirmation."""

    @abstractmethod
    def phase_done(self, phase: str) -> None: ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The phase ended early, e.g. when the batch timeout expired."""


class NullBatchProgress(BatchProgress):
    def phase_start(self, phase: str, total: int) -> None:
        pass

    def item_done(self, phase: str, result: OperationResult) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass


def tally_text(counts: Counter[OperationState]) -> str:
    """Render per-state counts as ``"3 ok, 1 failed"``; states that never occurred are left out."""
    labels = (
        (OperationState.SUCCESS, "ok"),
        (OperationState.FAILED, "failed"),
        (OperationState.CANCELLED, "cancelled"),
        (OperationState.DEFERRED, "to confirm"),
    )
    return ", ".join(f"{counts[state]} {label}" for state, label in labels if counts[state])
