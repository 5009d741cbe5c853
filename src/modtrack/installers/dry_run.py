"""In-memory dry-run installer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from modtrack.contracts.exceptions import ConflictError
from modtrack.contracts.installer import InstallOptions, InstallOutcome, Installer
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project


@dataclass(frozen=True)
class DryRunOperation:
    """Deterministic dry-run operation log entry."""

    sequence: int
    name: str
    project_id: int
    payload: dict[str, str]


class DryRunInstaller(Installer):
    """Installer that records what it would do without touching disk.

    Projects listed in ``conflicts`` raise :class:`ConflictError` until they are
    retried with ``override_conflicts``, which makes the confirm/retry path
    previewable. Projects listed in ``missing`` report missing targets, which
    makes the repair path previewable.
    """

    def __init__(
        self, *, conflicts: Iterable[int] = (), conflict_details: str = "", missing: Iterable[int] = ()
    ) -> None:
        self._conflicts = set(conflicts)
        self._conflict_details = conflict_details
        self._missing = set(missing)
        self._operations: list[DryRunOperation] = []

    @property
    def operations(self) -> tuple[DryRunOperation, ...]:
        return tuple(self._operations)

    def prime_conflict(self, project_id: int) -> None:
        self._conflicts.add(project_id)

    async def install(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        return self._apply("install", project, plan, target_dir, options)

    async def reinstall(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        return self._apply("reinstall", project, plan, target_dir, options)

    async def remove(self, project: Project, target_dir: Path) -> int:
        self._record("remove", project, {"target_dir": str(target_dir)})
        return 0

    async def missing_targets(self, project: Project, target_dir: Path) -> bool:
        return project.installed_version is not None and project.id in self._missing

    def _apply(
        self, name: str, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome:
        if project.id in self._conflicts and not options.override_conflicts:
            self._record(f"{name}_conflict", project, {"target_dir": str(target_dir)})
            raise ConflictError(self._conflict_details or f"{project.name} already has files in {target_dir}")

        source = plan.asset_name or (f"branch {project.effective_branch}" if project.is_addon else "release")
        self._record(
            name,
            project,
            {
                "target_dir": str(target_dir),
                "source": source,
                "version": plan.latest or "",
                "override": str(options.override_conflicts).lower(),
            },
        )
        steps = [f"[dry-run] would {name} {project.label} from {source} into {target_dir}"]
        return InstallOutcome(steps=steps)

    def _record(self, name: str, project: Project, payload: dict[str, str]) -> None:
        self._operations.append(
            DryRunOperation(sequence=len(self._operations) + 1, name=name, project_id=project.id, payload=payload)
        )
