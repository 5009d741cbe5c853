"""Turns forge lookups into update plans."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from modtrack.contracts.exceptions import DEFAULT_AUTH_HINT, AuthenticationError, ModTrackError
from modtrack.contracts.forge import ForgeClient, LatestRelease, ReleaseLookup
from modtrack.contracts.installer import Installer
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import ForgeKind, Project
from modtrack.engine.assets import current_version, effective_label, pick_asset

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


class UpdateChecker:
    """Checks projects against their forge with bounded concurrency.

    Failures never propagate: each one becomes ``UpdatePlan.error`` for the
    project that caused it. ETags are remembered per project so unchanged
    releases come back as ``not_modified`` plans.

    When GitHub reports an exhausted quota with a reset time and no token is
    in use, the host is not called again until that time; checks in between
    get a rate-limited plan straight away. With an *installer*, installed
    projects whose files went missing get ``repair_needed``.
    """

    def __init__(
        self,
        client: ForgeClient,
        *,
        max_concurrent: int = 4,
        timeout: float | None = 30.0,
        installer: Installer | None = None,
        target_dir: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._timeout = timeout
        self._installer = installer
        self._target_dir = target_dir
        self._clock = clock
        self._etags: dict[int, str] = {}
        self._rate_limits: dict[str, int] = {}

    def forget(self, project_id: int) -> None:
        self._etags.pop(project_id, None)

    def rate_limited_until(self, host: str) -> int | None:
        return self._rate_limits.get(host.lower())

    async def check_all(self, projects: Sequence[Project]) -> list[UpdatePlan]:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self.check(project)) for project in projects]
        return [task.result() for task in tasks]

    async def check(self, project: Project, *, use_etag: bool = True) -> UpdatePlan:
        if not project.enabled:
            return _blank_plan(project)

        gated = self._gate(project)
        if gated is not None:
            return gated

        try:
            missing = await self._missing_targets(project)
            lookup = await self._lookup(project, self._etags.get(project.id) if use_etag else None)
            if lookup.not_modified and use_etag and (project.installed_version is None or missing):
                # a bare 304 has no asset to download, so nothing to install or repair from
                _LOG.debug("%s: not modified but a download is needed, refetching without etag", project.label)
                lookup = await self._lookup(project, None)
            if project.is_addon:
                await self._validate_branch(project)
        except TimeoutError:
            return _blank_plan(project, error=f"Timed out after {self._timeout}s checking {project.label}")
        except AuthenticationError as exc:
            if exc.reset_at is not None and self._gates(project):
                self._rate_limits[project.host.lower()] = exc.reset_at
                _LOG.warning("GitHub quota exhausted for %s until unix %d", project.host, exc.reset_at)
                return _rate_limited_plan(project, exc.reset_at)
            return _blank_plan(project, error=str(exc) or exc.__class__.__name__)
        except ModTrackError as exc:
            return _blank_plan(project, error=str(exc) or exc.__class__.__name__)

        if project.forge is ForgeKind.GITHUB:
            self._rate_limits.pop(project.host.lower(), None)
        if lookup.etag:
            self._etags[project.id] = lookup.etag

        if lookup.not_modified:
            return _blank_plan(project).model_copy(
                update={"not_modified": True, "asset_name": project.installed_asset_name or ""}
            )
        if lookup.release is None:
            return _blank_plan(project)
        return _plan_from_release(project, lookup.release, missing=missing)

    async def list_branches(self, project: Project) -> list[str]:
        return await self._guarded(self._client.fetch_branches(project))

    def _gates(self, project: Project) -> bool:
        return project.forge is ForgeKind.GITHUB and not self._client.authenticated

    def _gate(self, project: Project) -> UpdatePlan | None:
        host = project.host.lower()
        reset_at = self._rate_limits.get(host)
        if reset_at is None:
            return None
        if self._gates(project) and self._clock() < reset_at:
            return _rate_limited_plan(project, reset_at)
        del self._rate_limits[host]
        return None

    async def _missing_targets(self, project: Project) -> bool:
        if self._installer is None or self._target_dir is None or project.installed_version is None:
            return False
        return await self._installer.missing_targets(project, self._target_dir)

    async def _lookup(self, project: Project, etag: str | None) -> ReleaseLookup:
        return await self._guarded(self._client.fetch_latest_release(project, etag=etag))

    async def _validate_branch(self, project: Project) -> None:
        branches = await self.list_branches(project)
        if branches and project.effective_branch not in branches:
            raise ModTrackError(f"Branch '{project.effective_branch}' not found on {project.label}")

    async def _guarded(self, op: Awaitable[T]) -> T:
        async with self._semaphore:
            async with asyncio.timeout(self._timeout):
                return await op


def _blank_plan(project: Project, *, error: str | None = None) -> UpdatePlan:
    current = current_version(project)
    return UpdatePlan(
        repo_id=project.id,
        current=current,
        latest=current,
        error=error,
        checked_at=datetime.now(UTC),
    )


def _rate_limited_plan(project: Project, reset_at: int) -> UpdatePlan:
    return _blank_plan(
        project, error=f"GitHub API rate-limited for {project.host} until unix {reset_at}. {DEFAULT_AUTH_HINT}"
    )


def _plan_from_release(project: Project, release: LatestRelease, *, missing: bool = False) -> UpdatePlan:
    current = current_version(project)
    if project.is_addon and not release.assets:
        latest = release.tag.strip()
        installed_matches = current == latest
        return UpdatePlan(
            repo_id=project.id,
            current=current,
            latest=latest,
            has_update=not installed_matches,
            repair_needed=missing and installed_matches,
            checked_at=datetime.now(UTC),
        )

    try:
        asset = pick_asset(release, project.mode, project.asset_pattern)
    except ModTrackError as exc:
        return _blank_plan(project, error=str(exc))

    latest = effective_label(release.tag, asset.name)
    installed_matches = current == latest and project.installed_asset_name in (None, asset.name)
    needs_download = not installed_matches or missing
    return UpdatePlan(
        repo_id=project.id,
        current=current,
        latest=latest,
        has_update=not installed_matches,
        repair_needed=missing and installed_matches,
        asset_name=asset.name,
        asset_url=asset.download_url if needs_download else "",
        checked_at=datetime.now(UTC),
    )
