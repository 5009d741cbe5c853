"""Update check and view commands."""

from __future__ import annotations

import argparse

from modtrack.cli.common import format_counts, format_plan, format_rows, open_tracker
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.view import SortDirection
from modtrack.sdk import ModTrack


def format_check_summary(tracker: ModTrack, plans: list[UpdatePlan]) -> str:
    lines = ["", f"modtrack - check complete (profile '{tracker.profile.id}')", ""]
    for plan in sorted(plans, key=lambda item: item.repo_id):
        lines.append(format_plan(tracker.get_project(plan.repo_id), plan))
    if not plans:
        lines.append("  no tracked projects")
    lines.append("")
    lines.append(format_counts(tracker.summary()))
    lines.append("")
    return "\n".join(lines)


async def run_check(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    plans = await tracker.check_updates()
    if args.retry_failed:
        retried = {plan.repo_id: plan for plan in await tracker.retry_failed_checks()}
        plans = [retried.get(plan.repo_id, plan) for plan in plans]
    print(format_check_summary(tracker, plans))
    return 0


async def run_view(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    await tracker.check_updates()
    rows = tracker.query_view(
        args.filter,
        args.sort,
        args.search,
        direction=SortDirection.DESC if args.desc else SortDirection.ASC,
        partition=args.partition,
    )
    print(format_rows(rows))
    print(format_counts(tracker.summary(args.partition)))
    return 0
