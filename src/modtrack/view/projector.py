"""Derived read model over projects and their update plans."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project
from modtrack.contracts.view import (
    Partition,
    ProjectStatus,
    SortDirection,
    SortKey,
    ViewCounts,
    ViewFilter,
    ViewRow,
)
from modtrack.engine.hints import classify_error_hint, is_rate_limited

_STATUS_RANK = {
    ProjectStatus.FETCH_ERROR: 0,
    ProjectStatus.UPDATE_AVAILABLE: 1,
    ProjectStatus.REPAIR_NEEDED: 2,
    ProjectStatus.DISABLED: 3,
    ProjectStatus.UNKNOWN: 4,
    ProjectStatus.UP_TO_DATE: 5,
}

_CHUNKS = re.compile(r"(\d+)")


def _natural_key(value: str | None) -> tuple[int, tuple[tuple[int, int | str], ...]]:
    if not value:
        return (1, ())
    chunks = tuple((0, int(part)) if part.isdigit() else (1, part.lower()) for part in _CHUNKS.split(value) if part)
    return (0, chunks)


def _in_partition(project: Project, partition: Partition | None) -> bool:
    if partition is None:
        return True
    return project.is_addon == (partition is Partition.ADDONS)


class ViewProjector:
    """Pure functions from ``(projects, plans)`` to rows, filters and counts.

    Nothing here mutates its inputs; the same inputs always give the same rows
    in the same order.
    """

    def status(self, project: Project, plan: UpdatePlan | None) -> ProjectStatus:
        if not project.enabled:
            return ProjectStatus.DISABLED
        if plan is None:
            return ProjectStatus.UNKNOWN
        if plan.error is not None:
            return ProjectStatus.FETCH_ERROR
        if plan.repair_needed:
            return ProjectStatus.REPAIR_NEEDED
        if plan.has_update:
            return ProjectStatus.UPDATE_AVAILABLE
        return ProjectStatus.UP_TO_DATE

    def rows(self, projects: Iterable[Project], plans: Mapping[int, UpdatePlan]) -> list[ViewRow]:
        rows: list[ViewRow] = []
        for project in projects:
            plan = plans.get(project.id)
            rows.append(ViewRow(project=project, plan=plan, status=self.status(project, plan)))
        return rows

    def query(
        self,
        projects: Iterable[Project],
        plans: Mapping[int, UpdatePlan],
        *,
        view_filter: ViewFilter = ViewFilter.ALL,
        sort: SortKey = SortKey.NAME,
        direction: SortDirection = SortDirection.ASC,
        search: str = "",
        partition: Partition | None = None,
    ) -> list[ViewRow]:
        rows = [
            row
            for row in self.rows(projects, plans)
            if _in_partition(row.project, partition) and self.matches_filter(row, view_filter)
        ]
        rows = self.search(rows, search)
        return self.sort(rows, sort, direction)

    @staticmethod
    def matches_filter(row: ViewRow, view_filter: ViewFilter) -> bool:
        plan = row.plan
        if view_filter is ViewFilter.UPDATES:
            return row.project.enabled and plan is not None and plan.can_update
        if view_filter is ViewFilter.ERRORS:
            return plan is not None and plan.error is not None
        if view_filter is ViewFilter.DISABLED:
            return not row.project.enabled
        return True

    @staticmethod
    def search(rows: Sequence[ViewRow], text: str) -> list[ViewRow]:
        terms = text.lower().split()
        if not terms:
            return list(rows)

        def haystack(project: Project) -> str:
            return " ".join((project.name, project.owner, project.forge.value, project.host, project.url)).lower()

        return [row for row in rows if all(term in haystack(row.project) for term in terms)]

    @staticmethod
    def sort(rows: Sequence[ViewRow], key: SortKey, direction: SortDirection = SortDirection.ASC) -> list[ViewRow]:
        reverse = direction is SortDirection.DESC
        if key is SortKey.STATUS:
            return sorted(rows, key=lambda row: _STATUS_RANK[row.status], reverse=reverse)
        if key is SortKey.CURRENT:
            return sorted(rows, key=lambda row: _natural_key(row.plan.current if row.plan else None), reverse=reverse)
        if key is SortKey.LATEST:
            return sorted(rows, key=lambda row: _natural_key(row.plan.latest if row.plan else None), reverse=reverse)
        return sorted(rows, key=lambda row: row.project.name.lower(), reverse=reverse)

    def counts(
        self,
        projects: Iterable[Project],
        plans: Mapping[int, UpdatePlan],
        partition: Partition | None = None,
    ) -> ViewCounts:
        counts = ViewCounts()
        for project in projects:
            if not _in_partition(project, partition):
                continue
            plan = plans.get(project.id)
            counts.total += 1
            if not project.enabled:
                counts.disabled += 1
                continue
            counts.enabled += 1
            if plan is None:
                continue
            if plan.can_update:
                counts.updates += 1
            if plan.error is not None:
                counts.errors += 1
                if is_rate_limited(plan.error):
                    counts.rate_limited = True
        return counts

    def tooltip(self, row: ViewRow) -> str:
        if row.status is ProjectStatus.FETCH_ERROR and row.plan is not None and row.plan.error:
            return f"{row.plan.error}\n{classify_error_hint(row.plan.error)}"
        if row.status is ProjectStatus.UPDATE_AVAILABLE and row.plan is not None:
            return f"{row.plan.current or 'not installed'} -> {row.plan.latest or 'unknown'}"
        if row.status is ProjectStatus.REPAIR_NEEDED:
            return "Installed files are missing; reinstall to repair."
        if row.status is ProjectStatus.UNKNOWN:
            return "Not checked yet."
        return row.status.value
