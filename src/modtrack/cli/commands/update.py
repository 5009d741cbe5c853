"""Batch update command."""

from __future__ import annotations

import argparse

from modtrack.cli.common import format_batch_report, open_tracker
from modtrack.cli.progress.rich import RichBatchProgress
from modtrack.contracts.feedback import Confirmation
from modtrack.contracts.operation import BatchReport
from modtrack.engine.progress import BatchProgress


async def run_update(args: argparse.Namespace) -> int:
    import modtrack.cli as cli

    confirmation = cli.QuestionaryConfirmation()
    if args.verbose:
        report = await _update(args, confirmation, None)
    else:
        with RichBatchProgress() as progress:
            report = await _update(args, confirmation, progress)

    print(format_batch_report(report, dry_run=args.dry_run))
    return 5 if report.failed else 0


async def _update(args: argparse.Namespace, confirmation: Confirmation, progress: BatchProgress | None) -> BatchReport:
    tracker = open_tracker(args, confirmation=confirmation, progress=progress)
    ids = list(args.ids) or None
    if ids is None:
        await tracker.check_updates()
    return await tracker.update_batch(ids, args.concurrency, dry_run=args.dry_run)
