"""Rich progress display for ``modtrack update``."""

from __future__ import annotations

from collections import Counter
from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.progress import TaskID as RichTaskID

from modtrack.contracts.operation import OperationResult, OperationState
from modtrack.engine.progress import CONFLICTS_PHASE, UPDATE_PHASE, BatchProgress, tally_text

_PHASE_STYLES = {UPDATE_PHASE: "green", CONFLICTS_PHASE: "yellow"}


class RichBatchProgress(BatchProgress):
    """One bar per batch phase, each followed by a running result tally.

    Renders to stderr by default so stdout keeps only the final report::

        with RichBatchProgress() as progress:
            tracker = ModTrack.from_config(config, progress=progress)
            report = await tracker.update_batch(dry_run=True)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>12}"),
            BarColumn(bar_width=24),
            MofNCompleteColumn(),
            TextColumn("{task.fields[tally]}"),
            console=console or Console(stderr=True),
        )
        self._tasks: dict[str, RichTaskID] = {}
        self._tallies: dict[str, Counter[OperationState]] = {}

    def __enter__(self) -> RichBatchProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def tally(self, phase: str) -> Counter[OperationState]:
        return Counter(self._tallies.get(phase, {}))

    def phase_start(self, phase: str, total: int) -> None:
        style = _PHASE_STYLES.get(phase, "cyan")
        self._tallies[phase] = Counter()
        self._tasks[phase] = self._progress.add_task(f"[{style}]{phase}[/]", total=total, tally="")

    def item_done(self, phase: str, result: OperationResult) -> None:
        task_id = self._tasks.get(phase)
        if task_id is None:
            return
        counts = self._tallies[phase]
        counts[result.state] += 1
        self._progress.update(task_id, advance=1, tally=tally_text(counts))

    def phase_done(self, phase: str) -> None:
        task_id = self._tasks.get(phase)
        if task_id is not None:
            self._progress.update(task_id, completed=self._progress.tasks[task_id].total)

    def phase_error(self, phase: str, error: BaseException) -> None:
        task_id = self._tasks.get(phase)
        if task_id is None:
            return
        reason = "timed out" if isinstance(error, TimeoutError) else error.__class__.__name__
        tally = tally_text(self._tallies[phase])
        self._progress.update(
            task_id, description=f"[red]✗ {phase}[/red]", tally=f"{tally}; {reason}" if tally else reason
        )
