"""SDK composition root for modtrack."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from modtrack.contracts.config import ModTrackConfig
from modtrack.contracts.exceptions import NotFoundError, ValidationError
from modtrack.contracts.feedback import Confirmation, LogSink
from modtrack.contracts.forge import ForgeClient
from modtrack.contracts.installer import InstallOptions, Installer
from modtrack.contracts.operation import BatchReport, OperationKind, OperationResult, OperationState
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.profile import Profile, normalize_profile_id
from modtrack.contracts.project import InstallMode, Project
from modtrack.contracts.view import Partition, SortDirection, SortKey, ViewCounts, ViewFilter, ViewRow
from modtrack.engine.batch import BatchScheduler
from modtrack.engine.checker import UpdateChecker
from modtrack.engine.progress import BatchProgress
from modtrack.engine.reconciler import UpdatePlanReconciler
from modtrack.engine.runner import ConflictAwareOperationRunner
from modtrack.forges.factory import create_forge_client
from modtrack.installers.dry_run import DryRunInstaller
from modtrack.installers.logs import LoggingLogSink
from modtrack.registry.registry import ProjectRegistry
from modtrack.registry.store import RegistryStore
from modtrack.view.projector import ViewProjector

_LOG = logging.getLogger(__name__)

NO_UPDATE_MESSAGE = "No update available."


class DeclineConflicts:
    """Confirmation that keeps existing files whenever a conflict is reported."""

    async def confirm(self, project: Project, details: str) -> bool:
        return False


@dataclass
class ProfileState:
    """Everything modtrack knows about the active profile.

    Only :class:`ModTrack` command methods mutate it.
    """

    profile: Profile
    registry: ProjectRegistry
    checker: UpdateChecker
    runner: ConflictAwareOperationRunner
    plans: dict[int, UpdatePlan] = field(default_factory=dict)


class ModTrack:
    """modtrack SDK public API.

    One instance owns the project and plan state of a single active profile.
    Results computed for a profile that was switched away from mid-flight are
    discarded rather than applied.

    Without an *installer* only ``dry_run=True`` operations are accepted, so
    no install is ever recorded that did not happen on disk.
    """

    def __init__(
        self,
        *,
        config: ModTrackConfig,
        forge: ForgeClient,
        installer: Installer | None = None,
        confirmation: Confirmation | None = None,
        store: RegistryStore | None = None,
        log_sink: LogSink | None = None,
        progress: BatchProgress | None = None,
    ) -> None:
        self._config = config
        self._forge = forge
        self._installer: Installer = installer or DryRunInstaller()
        self._previews_only = installer is None
        self._confirmation: Confirmation = confirmation or DeclineConflicts()
        self._store = store
        self._log_sink: LogSink = log_sink or LoggingLogSink()
        self._progress = progress
        self._reconciler = UpdatePlanReconciler()
        self._projector = ViewProjector()
        self._generation = 0
        self._state = self._build_state(config.profile())

    @classmethod
    def from_config(
        cls,
        config: ModTrackConfig,
        *,
        installer: Installer | None = None,
        confirmation: Confirmation | None = None,
        log_sink: LogSink | None = None,
        progress: BatchProgress | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ModTrack:
        return cls(
            config=config,
            forge=create_forge_client(config, transport=transport),
            installer=installer,
            confirmation=confirmation,
            store=RegistryStore(config.registry_path),
            log_sink=log_sink,
            progress=progress,
        )

    @property
    def profile(self) -> Profile:
        return self._state.profile

    @property
    def plans(self) -> dict[int, UpdatePlan]:
        return dict(self._state.plans)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def switch_profile(self, profile_id: str) -> Profile:
        try:
            profile = self._config.profile(profile_id)
        except KeyError as exc:
            raise NotFoundError(f"unknown profile: {profile_id}") from exc
        self._generation += 1
        self._state = self._build_state(profile)
        _LOG.info("Switched to profile '%s'", profile.id)
        return profile

    # ------------------------------------------------------------------
    # Registry commands
    # ------------------------------------------------------------------

    def list_projects(self, profile_id: str | None = None) -> list[Project]:
        if profile_id is None or normalize_profile_id(profile_id) == self._state.profile.id:
            return self._state.registry.list()
        if self._store is None:
            return []
        return self._store.load(profile_id).list()

    def get_project(self, project_id: int) -> Project:
        return self._state.registry.get(project_id)

    def add_project(
        self, url: str, mode: InstallMode | str = InstallMode.AUTO, *, asset_pattern: str | None = None
    ) -> int:
        project_id = self._state.registry.add(url, mode, asset_pattern=asset_pattern)
        self._persist()
        return project_id

    def set_enabled(self, project_id: int, enabled: bool) -> Project:
        project = self._state.registry.set_enabled(project_id, enabled)
        self._persist()
        return project

    def set_branch(self, project_id: int, branch: str | None) -> Project:
        project = self._state.registry.set_branch(project_id, branch)
        self._state.plans.pop(project_id, None)
        self._state.checker.forget(project_id)
        self._persist()
        return project

    async def remove_project(self, project_id: int, remove_local_files: bool = False) -> Project:
        state = self._state
        project = state.registry.get(project_id)
        if remove_local_files:
            removed = await self._installer.remove(project, state.profile.install_root)
            self._log_sink.append_line(f"Removed {removed} local path(s) for {project.label}.")
        state.registry.remove(project_id)
        state.plans.pop(project_id, None)
        state.checker.forget(project_id)
        self._persist()
        return project

    async def list_branches(self, project_id: int) -> list[str]:
        project = self._state.registry.get(project_id)
        async with self._forge:
            return await self._state.checker.list_branches(project)

    # ------------------------------------------------------------------
    # Update checks
    # ------------------------------------------------------------------

    async def check_updates(self, profile_id: str | None = None) -> list[UpdatePlan]:
        state = self._require_active(profile_id)
        return await self._check(state, state.registry.list(), use_etag=True)

    async def retry_failed_checks(self) -> list[UpdatePlan]:
        state = self._state
        failed = [
            project
            for project in state.registry.list()
            if (plan := state.plans.get(project.id)) is not None and plan.error is not None
        ]
        if not failed:
            return []
        return await self._check(state, failed, use_etag=False)

    async def _check(self, state: ProfileState, projects: list[Project], *, use_etag: bool) -> list[UpdatePlan]:
        generation = self._generation
        async with self._forge:
            if use_etag:
                fresh = await state.checker.check_all(projects)
            else:
                fresh = [await state.checker.check(project, use_etag=False) for project in projects]

        if generation != self._generation:
            _LOG.info("Discarding update check results for stale profile '%s'", state.profile.id)
            return []

        previous = dict(state.plans)
        merged = self._reconciler.reconcile(previous, fresh)
        self._log_error_transitions(state, previous, merged)
        state.plans.update({plan.repo_id: plan for plan in merged})
        return merged

    def _log_error_transitions(
        self, state: ProfileState, previous: dict[int, UpdatePlan], merged: Iterable[UpdatePlan]
    ) -> None:
        for transition in self._reconciler.diff_errors(previous, merged):
            if transition.repo_id not in state.registry:
                continue
            label = state.registry.get(transition.repo_id).label
            if transition.recovered:
                self._log_sink.append_line(f"{label}: fetch recovered.")
            else:
                self._log_sink.append_line(f"ERROR fetch {label}: {transition.error}")

    # ------------------------------------------------------------------
    # Install operations
    # ------------------------------------------------------------------

    async def update_project(self, project_id: int, *, dry_run: bool = False) -> OperationResult:
        return await self._run_single(project_id, OperationKind.UPDATE, dry_run=dry_run)

    async def reinstall_project(self, project_id: int, *, dry_run: bool = False) -> OperationResult:
        return await self._run_single(project_id, OperationKind.REINSTALL, dry_run=dry_run)

    async def update_batch(
        self,
        project_ids: Iterable[int] | None = None,
        concurrency_limit: int | None = None,
        *,
        dry_run: bool = False,
    ) -> BatchReport:
        self._require_installer(dry_run)
        state = self._state
        runner = self._dry_run_runner(state) if dry_run else state.runner
        generation = self._generation
        if project_ids is None:
            ids = [project.id for project in state.registry.list() if self._needs_update(state, project)]
        else:
            ids = list(dict.fromkeys(project_ids))
            unchecked = [state.registry.get(project_id) for project_id in ids if project_id not in state.plans]
            if unchecked:
                await self._check(state, unchecked, use_etag=True)

        limit = concurrency_limit if concurrency_limit is not None else self._config.max_concurrent
        plans = {project_id: state.plans[project_id] for project_id in ids if project_id in state.plans}

        async def worker(project_id: int) -> OperationResult:
            project = state.registry.get(project_id)
            skipped = self._precheck(project, plans.get(project_id), OperationKind.UPDATE)
            if skipped is not None:
                return skipped
            return await runner.run_deferred(project, plans[project_id], OperationKind.UPDATE)

        async def resolve(project_id: int, pending: OperationResult) -> OperationResult:
            return await runner.resolve_conflict(state.registry.get(project_id), plans[project_id], pending)

        scheduler = BatchScheduler(timeout=self._config.batch_timeout, progress=self._progress)
        report = await scheduler.run_batch(ids, worker, limit, resolve_conflict=resolve)

        if generation != self._generation:
            _LOG.info("Discarding batch results for stale profile '%s'", state.profile.id)
        elif not dry_run:
            for result in report.results:
                if result.state is OperationState.SUCCESS and result.project_id in plans:
                    self._apply_success(state, result.project_id, plans[result.project_id])
            self._persist()

        # precheck skips never reach the installer and carry attempts == 0
        updated = sum(1 for result in report.results if result.state is OperationState.SUCCESS and result.attempts)
        self._log_sink.append_line(f"Done. Updated {updated} repo(s); {report.failed} failed.")
        return report

    async def _run_single(self, project_id: int, kind: OperationKind, *, dry_run: bool) -> OperationResult:
        self._require_installer(dry_run)
        state = self._state
        generation = self._generation
        project = state.registry.get(project_id)
        if project.id not in state.plans:
            await self._check(state, [project], use_etag=True)
        plan = state.plans.get(project.id)

        skipped = self._precheck(project, plan, kind)
        if skipped is not None:
            if skipped.state is OperationState.FAILED:
                self._log_sink.append_line(f"ERROR {project.label}: {skipped.message}")
            else:
                self._log_sink.append_line(skipped.message)
            return skipped
        assert plan is not None

        runner = self._dry_run_runner(state) if dry_run else state.runner
        result = await runner.run(project, plan, kind)
        if result.state is OperationState.SUCCESS and not dry_run and generation == self._generation:
            self._apply_success(state, project_id, plan)
            self._persist()
        return result

    @staticmethod
    def _precheck(project: Project, plan: UpdatePlan | None, kind: OperationKind) -> OperationResult | None:
        def result(state: OperationState, message: str) -> OperationResult:
            return OperationResult(project_id=project.id, kind=kind, state=state, message=message)

        if not project.enabled:
            return result(OperationState.FAILED, f"{project.label} is disabled")
        if plan is None:
            return result(OperationState.FAILED, f"{project.label} has not been checked for updates")
        if plan.error is not None:
            return result(OperationState.FAILED, plan.error)
        if kind is OperationKind.UPDATE and not plan.has_update and not plan.repair_needed:
            return result(OperationState.SUCCESS, NO_UPDATE_MESSAGE)
        return None

    @staticmethod
    def _needs_update(state: ProfileState, project: Project) -> bool:
        plan = state.plans.get(project.id)
        return project.enabled and plan is not None and (plan.can_update or plan.repair_needed)

    def _apply_success(self, state: ProfileState, project_id: int, plan: UpdatePlan) -> None:
        if project_id not in state.registry or not (plan.has_update or plan.repair_needed):
            return
        state.registry.record_install(project_id, version=plan.latest, asset_name=plan.asset_name or None)
        state.plans[project_id] = plan.model_copy(
            update={"current": plan.latest, "has_update": False, "repair_needed": False, "asset_url": ""}
        )

    # ------------------------------------------------------------------
    # Read model
    # ------------------------------------------------------------------

    def query_view(
        self,
        view_filter: ViewFilter | str = ViewFilter.ALL,
        sort: SortKey | str = SortKey.NAME,
        search: str = "",
        *,
        direction: SortDirection | str = SortDirection.ASC,
        partition: Partition | str | None = None,
    ) -> list[ViewRow]:
        try:
            return self._projector.query(
                self._state.registry.list(),
                self._state.plans,
                view_filter=ViewFilter(view_filter),
                sort=SortKey(sort),
                direction=SortDirection(direction),
                search=search,
                partition=Partition(partition) if partition is not None else None,
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def summary(self, partition: Partition | str | None = None) -> ViewCounts:
        try:
            wanted = Partition(partition) if partition is not None else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return self._projector.counts(self._state.registry.list(), self._state.plans, wanted)

    def tooltip(self, row: ViewRow) -> str:
        return self._projector.tooltip(row)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_state(self, profile: Profile) -> ProfileState:
        registry = self._store.load(profile.id) if self._store is not None else ProjectRegistry(profile.id)
        preferences = self._config.install_options
        runner = ConflictAwareOperationRunner(
            self._installer,
            self._confirmation,
            profile.install_root,
            options=InstallOptions(
                use_symlinks=preferences.use_symlinks,
                set_xattr_comment=preferences.set_xattr_comment,
            ),
            log_sink=self._log_sink,
        )
        checker = UpdateChecker(
            self._forge,
            max_concurrent=self._config.max_concurrent,
            timeout=self._config.check_timeout,
            installer=self._installer,
            target_dir=profile.install_root,
        )
        return ProfileState(profile=profile, registry=registry, checker=checker, runner=runner)

    def _dry_run_runner(self, state: ProfileState) -> ConflictAwareOperationRunner:
        installer = self._installer if isinstance(self._installer, DryRunInstaller) else DryRunInstaller()
        return ConflictAwareOperationRunner(
            installer, self._confirmation, state.profile.install_root, log_sink=self._log_sink
        )

    def _require_installer(self, dry_run: bool) -> None:
        if not dry_run and self._previews_only:
            raise ValidationError("no installer configured; pass installer= to apply changes or use dry_run=True")

    def _require_active(self, profile_id: str | None) -> ProfileState:
        if profile_id is not None and normalize_profile_id(profile_id) != self._state.profile.id:
            raise ValidationError(
                f"profile '{profile_id}' is not active (active: '{self._state.profile.id}'); switch profiles first"
            )
        return self._state

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._state.registry)
