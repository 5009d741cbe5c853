from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from modtrack.contracts.exceptions import ValidationError
from modtrack.contracts.operation import BatchReport, OperationKind, OperationResult, OperationState
from modtrack.engine.batch import PENDING_MESSAGE, BatchScheduler
from modtrack.engine.progress import BatchProgress
from modtrack.engine.runner import ConflictAwareOperationRunner
from tests.fakes.builders import make_plan, make_project
from tests.fakes.installer import FakeInstaller, ScriptedConfirmation


class RecordingProgress(BatchProgress):
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []
        self.items: list[tuple[str, int, OperationState]] = []

    def phase_start(self, phase: str, total: int) -> None:
        self.events.append(("start", phase))

    def item_done(self, phase: str, result: OperationResult) -> None:
        self.events.append(("item", phase))
        self.items.append((phase, result.project_id, result.state))

    def phase_done(self, phase: str) -> None:
        self.events.append(("done", phase))

    def phase_error(self, phase: str, error: BaseException) -> None:
        self.events.append(("error", phase))


def _result(item: int, state: OperationState) -> OperationResult:
    return OperationResult(project_id=item, kind=OperationKind.UPDATE, state=state)


def _assert_accounted(report: BatchReport, count: int) -> None:
    assert report.succeeded + report.failed + report.cancelled == count
    assert report.total == count
    assert len(report.results) == count


@pytest.mark.asyncio
async def test_five_items_limit_two_with_one_declined_conflict() -> None:
    installer = FakeInstaller(conflicts={3}, delays={1: 0.01, 2: 0.02, 4: 0.01})
    confirmation = ScriptedConfirmation(answers={3: False})
    runner = ConflictAwareOperationRunner(installer, confirmation, Path("/games/mods"))
    projects = {project_id: make_project(project_id, f"Mod{project_id}") for project_id in range(1, 6)}

    async def worker(project_id: int) -> OperationResult:
        return await runner.run_deferred(projects[project_id], make_plan(project_id))

    async def resolve(project_id: int, pending: OperationResult) -> OperationResult:
        return await runner.resolve_conflict(projects[project_id], make_plan(project_id), pending)

    report = await BatchScheduler().run_batch([1, 2, 3, 4, 5], worker, 2, resolve_conflict=resolve)

    assert (report.succeeded, report.cancelled, report.failed) == (4, 1, 0)
    assert installer.max_in_flight <= 2
    assert len(installer.calls_for(3)) == 1
    assert [result.project_id for result in report.results] == [1, 2, 3, 4, 5]
    _assert_accounted(report, 5)


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [1, 2, 3, 8])
async def test_every_item_runs_exactly_once_with_mixed_outcomes(limit: int) -> None:
    outcomes = {
        1: OperationState.SUCCESS,
        2: OperationState.FAILED,
        3: OperationState.CANCELLED,
        4: OperationState.SUCCESS,
        5: OperationState.FAILED,
        6: OperationState.SUCCESS,
    }
    seen: list[int] = []
    in_flight = 0
    peak = 0

    async def worker(item: int) -> OperationResult:
        nonlocal in_flight, peak
        seen.append(item)
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001 * (item % 3))
        in_flight -= 1
        if item == 5:
            raise RuntimeError("worker crashed")
        return _result(item, outcomes[item])

    report = await BatchScheduler().run_batch(list(outcomes), worker, limit)

    assert sorted(seen) == list(outcomes)
    assert peak <= limit
    assert (report.succeeded, report.failed, report.cancelled) == (3, 2, 1)
    _assert_accounted(report, len(outcomes))


@pytest.mark.asyncio
async def test_worker_exception_becomes_failed_result() -> None:
    async def worker(item: int) -> OperationResult:
        raise RuntimeError(f"item {item} exploded")

    report = await BatchScheduler().run_batch([7], worker, 1)

    assert report.failed == 1
    assert report.results[0].project_id == 7
    assert report.results[0].message == "item 7 exploded"


@pytest.mark.asyncio
async def test_deferred_conflicts_resolved_sequentially_after_workers() -> None:
    order: list[str] = []
    active = 0
    peak = 0

    async def worker(item: int) -> OperationResult:
        order.append(f"work {item}")
        await asyncio.sleep(0)
        state = OperationState.DEFERRED if item in {2, 3} else OperationState.SUCCESS
        return _result(item, state)

    async def resolve(item: int, pending: OperationResult) -> OperationResult:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        order.append(f"resolve {item}")
        await asyncio.sleep(0)
        active -= 1
        return _result(item, OperationState.SUCCESS)

    report = await BatchScheduler().run_batch([1, 2, 3, 4], worker, 4, resolve_conflict=resolve)

    assert order[-2:] == ["resolve 2", "resolve 3"]
    assert all(entry.startswith("work") for entry in order[:4])
    assert peak == 1
    assert report.succeeded == 4


@pytest.mark.asyncio
async def test_deferred_without_resolver_fails() -> None:
    async def worker(item: int) -> OperationResult:
        return _result(item, OperationState.DEFERRED).model_copy(update={"message": "install conflict: x"})

    report = await BatchScheduler().run_batch([1], worker, 1)

    assert report.failed == 1
    assert report.results[0].message == "install conflict: x"


@pytest.mark.asyncio
async def test_timeout_marks_unfinished_items_pending() -> None:
    async def worker(item: int) -> OperationResult:
        if item == 2:
            await asyncio.sleep(10)
        return _result(item, OperationState.SUCCESS)

    report = await BatchScheduler(timeout=0.05).run_batch([1, 2, 3], worker, 1)

    assert report.succeeded == 1
    assert report.failed == 2
    assert report.pending == [2, 3]
    assert [result.message for result in report.results if result.state is OperationState.FAILED] == [
        PENDING_MESSAGE,
        PENDING_MESSAGE,
    ]
    _assert_accounted(report, 3)


@pytest.mark.asyncio
async def test_empty_batch_returns_empty_report() -> None:
    async def worker(item: int) -> OperationResult:
        raise AssertionError("never called")

    assert await BatchScheduler().run_batch([], worker, 3) == BatchReport()


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, -1])
async def test_invalid_concurrency_limit_rejected(limit: int) -> None:
    async def worker(item: int) -> OperationResult:
        return _result(item, OperationState.SUCCESS)

    with pytest.raises(ValidationError):
        await BatchScheduler().run_batch([1], worker, limit)


@pytest.mark.asyncio
async def test_progress_phases_reported() -> None:
    progress = RecordingProgress()

    async def worker(item: int) -> OperationResult:
        state = OperationState.DEFERRED if item == 2 else OperationState.SUCCESS
        return _result(item, state)

    async def resolve(item: int, pending: OperationResult) -> OperationResult:
        return _result(item, OperationState.CANCELLED)

    await BatchScheduler(progress=progress).run_batch([1, 2], worker, 2, resolve_conflict=resolve)

    assert progress.events[0] == ("start", "Update")
    assert progress.events.count(("item", "Update")) == 2
    assert progress.events[-3:] == [("start", "Conflicts"), ("item", "Conflicts"), ("done", "Conflicts")]
    assert sorted(progress.items[:2]) == [
        ("Update", 1, OperationState.SUCCESS),
        ("Update", 2, OperationState.DEFERRED),
    ]
    assert progress.items[2] == ("Conflicts", 2, OperationState.CANCELLED)
