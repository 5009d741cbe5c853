"""Merging of fresh update-check results with previously known plans."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from modtrack.contracts.plan import UpdatePlan


@dataclass(frozen=True)
class ErrorTransition:
    repo_id: int
    error: str | None

    @property
    def recovered(self) -> bool:
        return self.error is None


class UpdatePlanReconciler:
    """Folds "unchanged since last check" answers into prior state.

    A ``not_modified`` plan knows nothing about the latest release, so when the
    previous plan still describes the same installed baseline and had an update
    pending, that update information is carried forward. Otherwise the fresh
    plan wins. A fresh error always takes precedence over a stale one.
    """

    def reconcile(self, previous: Mapping[int, UpdatePlan], fresh: Iterable[UpdatePlan]) -> list[UpdatePlan]:
        return [self.merge(previous.get(plan.repo_id), plan) for plan in fresh]

    @staticmethod
    def merge(previous: UpdatePlan | None, fresh: UpdatePlan) -> UpdatePlan:
        if not fresh.not_modified or previous is None:
            return fresh
        if previous.current != fresh.current or not previous.has_update:
            return fresh
        return fresh.model_copy(
            update={
                "has_update": True,
                "latest": previous.latest,
                "asset_name": previous.asset_name,
                "asset_url": previous.asset_url,
                "repair_needed": previous.repair_needed or fresh.repair_needed,
                "error": fresh.error if fresh.error is not None else previous.error,
            }
        )

    @staticmethod
    def diff_errors(previous: Mapping[int, UpdatePlan], merged: Iterable[UpdatePlan]) -> list[ErrorTransition]:
        """Return plans whose error appeared, changed, or cleared since *previous*."""
        transitions: list[ErrorTransition] = []
        for plan in merged:
            if plan.not_modified:
                continue
            before = previous.get(plan.repo_id)
            before_error = before.error if before is not None else None
            if plan.error is not None and plan.error != before_error:
                transitions.append(ErrorTransition(repo_id=plan.repo_id, error=plan.error))
            elif plan.error is None and before_error is not None:
                transitions.append(ErrorTransition(repo_id=plan.repo_id, error=None))
        return transitions
