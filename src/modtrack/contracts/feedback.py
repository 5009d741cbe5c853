"""Contracts for user-facing feedback: conflict prompts and the operation log."""

from __future__ import annotations

from typing import Protocol

from modtrack.contracts.project import Project


class Confirmation(Protocol):
    async def confirm(self, project: Project, details: str) -> bool:
        pass


class LogSink(Protocol):
    def append_line(self, text: str) -> None:
        pass
