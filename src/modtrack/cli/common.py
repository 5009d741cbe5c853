"""Shared CLI helpers."""

from __future__ import annotations

import argparse
from collections.abc import Iterable

from modtrack.contracts.feedback import Confirmation
from modtrack.contracts.operation import BatchReport, OperationState
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project
from modtrack.contracts.view import ViewCounts, ViewRow
from modtrack.engine.progress import BatchProgress
from modtrack.sdk import ModTrack


class PrintLogSink:
    """Writes operation log lines to stdout."""

    def append_line(self, text: str) -> None:
        print(text)


def open_tracker(
    args: argparse.Namespace,
    *,
    confirmation: Confirmation | None = None,
    progress: BatchProgress | None = None,
) -> ModTrack:
    import modtrack.cli as cli

    config = cli.load_config(args.config)
    tracker = cli.ModTrack.from_config(
        config, confirmation=confirmation, log_sink=PrintLogSink(), progress=progress
    )
    if getattr(args, "profile", None):
        tracker.switch_profile(args.profile)
    return tracker


def format_version(value: str | None) -> str:
    return value if value else "-"


def format_project(project: Project) -> str:
    state = "enabled" if project.enabled else "disabled"
    branch = f" @{project.effective_branch}" if project.is_addon else ""
    return f"  #{project.id:<4} {project.label:<32} {project.forge.value:<7} {project.mode.value}{branch} ({state})"


def format_project_list(projects: Iterable[Project]) -> str:
    lines = [format_project(project) for project in projects]
    return "\n".join(lines) if lines else "  no tracked projects"


def format_plan(project: Project, plan: UpdatePlan) -> str:
    if plan.error is not None:
        detail = f"error: {plan.error}"
    elif plan.has_update:
        detail = f"{format_version(plan.current)} -> {format_version(plan.latest)}"
    else:
        detail = f"up to date ({format_version(plan.current)})"
    return f"  #{project.id:<4} {project.label:<32} {detail}"


def format_rows(rows: Iterable[ViewRow]) -> str:
    lines = []
    for row in rows:
        current = format_version(row.plan.current if row.plan else None)
        latest = format_version(row.plan.latest if row.plan else None)
        lines.append(f"  #{row.project.id:<4} {row.project.label:<32} {current:<12} {latest:<12} {row.status.value}")
    return "\n".join(lines) if lines else "  no matching projects"


def format_counts(counts: ViewCounts) -> str:
    line = (
        f"  {counts.total} total, {counts.enabled} enabled, {counts.disabled} disabled, "
        f"{counts.updates} update(s), {counts.errors} error(s)"
    )
    if counts.rate_limited:
        line += " [rate-limited]"
    return line


def format_batch_report(report: BatchReport, *, dry_run: bool) -> str:
    mode = "dry-run" if dry_run else "apply"
    lines = [
        "",
        f"modtrack - update complete ({mode})",
        "",
        f"  Succeeded: {report.succeeded}",
        f"  Failed:    {report.failed}",
        f"  Cancelled: {report.cancelled}",
    ]
    if report.pending:
        lines.append(f"  Pending:   {', '.join(f'#{item}' for item in report.pending)}")
    for result in report.results:
        if result.state is not OperationState.SUCCESS:
            lines.append(f"  #{result.project_id}: {result.state.value} - {result.message}")
    if dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")
    lines.append("")
    return "\n".join(lines)
