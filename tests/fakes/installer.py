"""Scriptable installer and confirmation fakes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from modtrack.contracts.exceptions import ConflictError
from modtrack.contracts.installer import InstallOptions, InstallOutcome, Installer
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project


@dataclass
class FakeInstaller(Installer):
    """Records calls; conflicts are raised for ids in ``conflicts`` unless overridden.

    Ids in ``stubborn`` conflict even when the override flag is set.
    """

    conflicts: set[int] = field(default_factory=set)
    stubborn: set[int] = field(default_factory=set)
    errors: dict[int, Exception] = field(default_factory=dict)
    delays: dict[int, float] = field(default_factory=dict)
    calls: list[tuple[str, int, bool]] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)
    missing: set[int] = field(default_factory=set)
    in_flight: int = 0
    max_in_flight: int = 0

    async def install(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        return await self._run("install", project, options)

    async def reinstall(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        return await self._run("reinstall", project, options)

    async def remove(self, project: Project, target_dir: Path) -> int:
        self.removed.append(project.id)
        return 2

    async def missing_targets(self, project: Project, target_dir: Path) -> bool:
        return project.id in self.missing

    def calls_for(self, project_id: int) -> list[tuple[str, int, bool]]:
        return [call for call in self.calls if call[1] == project_id]

    async def _run(self, name: str, project: Project, options: InstallOptions) -> InstallOutcome:
        self.calls.append((name, project.id, options.override_conflicts))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(project.id, 0.0))
            if project.id in self.stubborn:
                raise ConflictError(f"{project.name} files are locked")
            if project.id in self.conflicts and not options.override_conflicts:
                raise ConflictError(f"{project.name} already present")
            error = self.errors.get(project.id)
            if error is not None:
                raise error
            return InstallOutcome(steps=[f"{name} {project.label}"])
        finally:
            self.in_flight -= 1


class DirectoryInstaller(Installer):
    """Writes ``<name>.dll`` and ``<name>.toc`` into the target directory.

    Refuses with :class:`ConflictError` when either file already exists unless
    the override flag is set, and never touches the directory in that case.
    """

    def __init__(self) -> None:
        self.installed: dict[int, list[str]] = {}

    @staticmethod
    def payload(project: Project, plan: UpdatePlan) -> dict[str, bytes]:
        version = (plan.latest or "").encode()
        return {f"{project.name}.dll": b"MZ" + version, f"{project.name}.toc": b"## Version: " + version}

    async def install(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        files = self.payload(project, plan)
        existing = sorted(name for name in files if (target_dir / name).exists())
        if existing and not options.override_conflicts:
            raise ConflictError(", ".join(existing))
        target_dir.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            (target_dir / name).write_bytes(content)
        self.installed[project.id] = sorted(files)
        return InstallOutcome(steps=[f"wrote {name}" for name in sorted(files)])

    async def reinstall(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        return await self.install(project, plan, target_dir, options)

    async def remove(self, project: Project, target_dir: Path) -> int:
        names = self.installed.pop(project.id, [])
        for name in names:
            (target_dir / name).unlink(missing_ok=True)
        return len(names)

    async def missing_targets(self, project: Project, target_dir: Path) -> bool:
        return any(not (target_dir / name).exists() for name in self.installed.get(project.id, []))


def snapshot_dir(root: Path) -> dict[str, bytes | None]:
    """Relative path -> bytes for files, ``None`` for directories."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes() if path.is_file() else None
        for path in sorted(root.rglob("*"))
    }


@dataclass
class ScriptedConfirmation:
    """Answers conflict prompts from ``answers`` (default ``True``) and records them."""

    answers: dict[int, bool] = field(default_factory=dict)
    default: bool = True
    prompts: list[tuple[int, str]] = field(default_factory=list)
    active: int = 0
    max_active: int = 0

    async def confirm(self, project: Project, details: str) -> bool:
        self.prompts.append((project.id, details))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            return self.answers.get(project.id, self.default)
        finally:
            self.active -= 1
