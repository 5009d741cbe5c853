"""Interactive conflict confirmation."""

from __future__ import annotations

import sys

import questionary

from modtrack.contracts.project import Project


class QuestionaryConfirmation:
    """Asks on the terminal before overwriting existing files; declines when not interactive."""

    async def confirm(self, project: Project, details: str) -> bool:
        if not sys.stdin.isatty():
            return False
        answer = await questionary.confirm(
            f"{project.label}: {details} Overwrite existing files?",
            default=False,
        ).ask_async()
        return bool(answer)
