"""Tracked-project registry for one profile."""

from __future__ import annotations

import logging

from modtrack.contracts.exceptions import NotFoundError, ValidationError
from modtrack.contracts.profile import DEFAULT_PROFILE_ID, normalize_profile_id
from modtrack.contracts.project import DEFAULT_BRANCH, InstallMode, Project, ProjectSnapshot, RepoKey
from modtrack.registry.urls import detect_repo

_LOG = logging.getLogger(__name__)


def _coerce_mode(mode: InstallMode | str) -> InstallMode:
    if isinstance(mode, InstallMode):
        return mode
    parsed = InstallMode.parse(str(mode))
    if parsed is None:
        raise ValidationError(f"invalid install mode: {mode!r}")
    return parsed


class ProjectRegistry:
    """Owns the projects of a single profile.

    ``add`` is idempotent on the canonical repository key, so repeated
    "quick add" requests for the same repository return the same id.
    """

    def __init__(self, profile_id: str = DEFAULT_PROFILE_ID, *, projects: list[Project] | None = None) -> None:
        self.profile_id = normalize_profile_id(profile_id)
        self._projects: dict[int, Project] = {}
        self._ids_by_key: dict[RepoKey, int] = {}
        self._next_id = 1
        for project in projects or []:
            self._store(project)

    @classmethod
    def from_snapshot(cls, snapshot: ProjectSnapshot) -> ProjectRegistry:
        registry = cls(snapshot.profile_id, projects=snapshot.projects)
        registry._next_id = max(registry._next_id, snapshot.next_id)
        return registry

    def snapshot(self) -> ProjectSnapshot:
        return ProjectSnapshot(profile_id=self.profile_id, next_id=self._next_id, projects=self.list())

    def add(self, url: str, mode: InstallMode | str = InstallMode.AUTO, *, asset_pattern: str | None = None) -> int:
        install_mode = _coerce_mode(mode)
        detected = detect_repo(url)

        existing_id = self._ids_by_key.get(detected.key)
        if existing_id is not None:
            _LOG.debug("Project %s already tracked as #%d", detected.key, existing_id)
            return existing_id

        project = Project(
            id=self._next_id,
            url=detected.canonical_url,
            forge=detected.forge,
            host=detected.host,
            owner=detected.owner,
            name=detected.name,
            mode=install_mode,
            branch=DEFAULT_BRANCH if install_mode is InstallMode.ADDON_GIT else None,
            asset_pattern=asset_pattern,
        )
        self._store(project)
        _LOG.info("Tracking %s as #%d (%s)", project.label, project.id, project.mode.value)
        return project.id

    def get(self, project_id: int) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise NotFoundError(f"unknown project id: {project_id}")
        return project

    def list(self, profile_id: str | None = None) -> list[Project]:
        if profile_id is not None and normalize_profile_id(profile_id) != self.profile_id:
            return []
        return list(self._projects.values())

    def find(self, url: str) -> Project | None:
        project_id = self._ids_by_key.get(detect_repo(url).key)
        return self._projects.get(project_id) if project_id is not None else None

    def set_enabled(self, project_id: int, enabled: bool) -> Project:
        return self._replace(self.get(project_id), enabled=enabled)

    def set_branch(self, project_id: int, branch: str | None) -> Project:
        project = self.get(project_id)
        if not project.is_addon:
            raise ValidationError(f"{project.label} is not a git addon; branches only apply to addon_git projects")
        chosen = (branch or "").strip() or DEFAULT_BRANCH
        return self._replace(project, branch=chosen)

    def record_install(self, project_id: int, *, version: str | None, asset_name: str | None) -> Project:
        return self._replace(self.get(project_id), installed_version=version, installed_asset_name=asset_name)

    def remove(self, project_id: int) -> Project:
        project = self.get(project_id)
        del self._projects[project_id]
        self._ids_by_key.pop(project.key, None)
        _LOG.info("Stopped tracking %s (#%d)", project.label, project_id)
        return project

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._projects

    def _replace(self, project: Project, **changes: object) -> Project:
        updated = project.model_copy(update=changes)
        self._projects[project.id] = updated
        return updated

    def _store(self, project: Project) -> None:
        if project.key in self._ids_by_key and self._ids_by_key[project.key] != project.id:
            raise ValidationError(f"duplicate project for {project.key}")
        self._projects[project.id] = project
        self._ids_by_key[project.key] = project.id
        self._next_id = max(self._next_id, project.id + 1)
