"""Small builders for projects and plans."""

from __future__ import annotations

from typing import Any

from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import ForgeKind, InstallMode, Project


def make_project(project_id: int = 1, name: str = "SuperMod", **overrides: Any) -> Project:
    values: dict[str, Any] = {
        "id": project_id,
        "url": f"https://github.com/owner/{name}",
        "forge": ForgeKind.GITHUB,
        "host": "github.com",
        "owner": "owner",
        "name": name,
        "mode": InstallMode.AUTO,
    }
    values.update(overrides)
    return Project(**values)


def make_plan(repo_id: int = 1, **overrides: Any) -> UpdatePlan:
    values: dict[str, Any] = {"repo_id": repo_id, "current": "1.0.0", "latest": "1.1.0", "has_update": True}
    values.update(overrides)
    return UpdatePlan(**values)
