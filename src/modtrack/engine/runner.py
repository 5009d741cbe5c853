"""Single install/update/reinstall execution with conflict confirmation."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from modtrack.contracts.exceptions import ConflictError, ModTrackError, ValidationError
from modtrack.contracts.feedback import Confirmation, LogSink
from modtrack.contracts.installer import InstallOptions, Installer
from modtrack.contracts.operation import OperationKind, OperationResult, OperationState
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project
from modtrack.engine.hints import FALLBACK_HINT, classify_error_hint

_LOG = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled install (existing files kept)."


class ConflictAwareOperationRunner:
    """Runs one operation through ``IDLE -> ATTEMPTING -> SUCCESS | CANCELLED | FAILED``.

    A :class:`ConflictError` from the installer triggers exactly one
    confirmation. Declining ends the operation as ``CANCELLED`` without a second
    installer call; accepting retries once with ``override_conflicts=True``.
    A conflict on that retry is ``FAILED``; there is never a third attempt.

    Confirmations are serialized, so concurrent operations never stack prompts.
    """

    def __init__(
        self,
        installer: Installer,
        confirmation: Confirmation,
        target_dir: Path,
        *,
        options: InstallOptions | None = None,
        log_sink: LogSink | None = None,
    ) -> None:
        self._installer = installer
        self._confirmation = confirmation
        self._target_dir = target_dir
        self._options = options or InstallOptions()
        self._log_sink = log_sink
        self._confirm_lock = asyncio.Lock()

    async def run(
        self,
        project: Project,
        plan: UpdatePlan,
        kind: OperationKind = OperationKind.UPDATE,
        *,
        override_conflicts: bool = False,
    ) -> OperationResult:
        first = await self._attempt(project, plan, kind, override_conflicts=override_conflicts, attempt=1)
        if first.state is OperationState.DEFERRED:
            return await self.resolve_conflict(project, plan, first)
        return self._finish(project, first)

    async def run_deferred(
        self,
        project: Project,
        plan: UpdatePlan,
        kind: OperationKind = OperationKind.UPDATE,
        *,
        override_conflicts: bool = False,
    ) -> OperationResult:
        """Like :meth:`run`, but hand a conflict back as ``DEFERRED`` instead of prompting.

        The caller resolves it later with :meth:`resolve_conflict`.
        """
        first = await self._attempt(project, plan, kind, override_conflicts=override_conflicts, attempt=1)
        if first.state is OperationState.DEFERRED:
            _LOG.debug("Deferring conflict confirmation for %s", project.label)
            return first
        return self._finish(project, first)

    async def resolve_conflict(self, project: Project, plan: UpdatePlan, pending: OperationResult) -> OperationResult:
        if pending.state is not OperationState.DEFERRED:
            raise ValidationError(f"operation for {project.label} has no pending conflict")

        async with self._confirm_lock:
            confirmed = await self._confirmation.confirm(project, pending.conflict_details or "")

        if not confirmed:
            cancelled = pending.model_copy(update={"state": OperationState.CANCELLED, "message": CANCELLED_MESSAGE})
            return self._finish(project, cancelled)

        retry = await self._attempt(project, plan, pending.kind, override_conflicts=True, attempt=pending.attempts + 1)
        return self._finish(project, retry)

    async def _attempt(
        self,
        project: Project,
        plan: UpdatePlan,
        kind: OperationKind,
        *,
        override_conflicts: bool,
        attempt: int,
    ) -> OperationResult:
        options = self._options.model_copy(update={"override_conflicts": override_conflicts})
        _LOG.debug("%s %s (attempt %d, override=%s)", kind.value, project.label, attempt, override_conflicts)
        try:
            if kind is OperationKind.REINSTALL:
                outcome = await self._installer.reinstall(project, plan, self._target_dir, options)
            else:
                outcome = await self._installer.install(project, plan, self._target_dir, options)
        except ConflictError as exc:
            if override_conflicts:
                return OperationResult(
                    project_id=project.id,
                    kind=kind,
                    state=OperationState.FAILED,
                    message=f"Install conflict persisted after override: {exc.details}",
                    attempts=attempt,
                    conflict_details=exc.details,
                )
            return OperationResult(
                project_id=project.id,
                kind=kind,
                state=OperationState.DEFERRED,
                message=str(exc),
                attempts=attempt,
                conflict_details=exc.details,
            )
        except ModTrackError as exc:
            message = str(exc) or exc.__class__.__name__
            hint = classify_error_hint(message)
            if hint != FALLBACK_HINT and hint not in message:
                message = f"{message} ({hint})"
            return OperationResult(
                project_id=project.id,
                kind=kind,
                state=OperationState.FAILED,
                message=message,
                attempts=attempt,
            )

        return OperationResult(
            project_id=project.id,
            kind=kind,
            state=OperationState.SUCCESS,
            steps=list(outcome.steps),
            message=outcome.message or _success_message(project, plan, kind),
            attempts=attempt,
        )

    def _finish(self, project: Project, result: OperationResult) -> OperationResult:
        if self._log_sink is not None:
            for step in result.steps:
                self._log_sink.append_line(step)
            if result.state is OperationState.FAILED:
                self._log_sink.append_line(f"ERROR {project.label}: {result.message}")
            elif result.state is OperationState.CANCELLED:
                self._log_sink.append_line(f"{project.label}: cancelled install (existing files kept).")
            elif result.message:
                self._log_sink.append_line(result.message)
        _LOG.info("%s %s: %s", result.kind.value, project.label, result.state.value)
        return result


def _success_message(project: Project, plan: UpdatePlan, kind: OperationKind) -> str:
    version = plan.latest or plan.current or "latest"
    if kind is OperationKind.REINSTALL:
        return f"Reinstalled {project.label} from {version}."
    return f"Updated {project.label} to {version}."
