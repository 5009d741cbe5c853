"""Installer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project


class InstallOptions(BaseModel):
    use_symlinks: bool = False
    set_xattr_comment: bool = False
    override_conflicts: bool = False

    model_config = {"frozen": True}


class InstallOutcome(BaseModel):
    steps: list[str] = Field(default_factory=list)
    message: str = ""


class Installer(ABC):
    """Places release assets or git checkouts under a profile's install root.

    ``install`` and ``reinstall`` raise :class:`~modtrack.contracts.exceptions.ConflictError`
    when pre-existing files would be overwritten and ``options.override_conflicts``
    is false. A conflicting call must leave the target untouched.
    """

    @abstractmethod
    async def install(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome: ...  # pragma: no cover

    @abstractmethod
    async def reinstall(
        self, project: Project, plan: UpdatePlan, target_dir: Path, options: InstallOptions
    ) -> InstallOutcome: ...  # pragma: no cover

    @abstractmethod
    async def remove(self, project: Project, target_dir: Path) -> int:
        """Delete the project's installed files and return how many paths were removed."""

    @abstractmethod
    async def missing_targets(self, project: Project, target_dir: Path) -> bool:
        """Return True when files recorded for the project's install are gone from *target_dir*.

        Projects with no recorded install have nothing to miss.
        """
