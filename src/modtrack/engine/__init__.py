"""Update checking, reconciliation and install orchestration."""

from modtrack.engine.batch import BatchScheduler
from modtrack.engine.checker import UpdateChecker
from modtrack.engine.hints import classify_error_hint
from modtrack.engine.progress import CONFLICTS_PHASE, UPDATE_PHASE, BatchProgress, NullBatchProgress
from modtrack.engine.reconciler import ErrorTransition, UpdatePlanReconciler
from modtrack.engine.runner import ConflictAwareOperationRunner

__all__ = [
    "BatchProgress",
    "BatchScheduler",
    "CONFLICTS_PHASE",
    "ConflictAwareOperationRunner",
    "ErrorTransition",
    "NullBatchProgress",
    "UPDATE_PHASE",
    "UpdateChecker",
    "UpdatePlanReconciler",
    "classify_error_hint",
]
