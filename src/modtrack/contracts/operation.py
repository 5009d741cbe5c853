"""Operation and batch result contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class OperationKind(StrEnum):
    INSTALL = "install"
    UPDATE = "update"
    REINSTALL = "reinstall"


class OperationState(StrEnum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    DEFERRED = "deferred"
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {OperationState.SUCCESS, OperationState.CANCELLED, OperationState.FAILED}


class OperationResult(BaseModel):
    """Outcome of one install/update/reinstall.

    ``DEFERRED`` is only produced when the caller asked the runner to postpone
    conflict confirmation; ``conflict_details`` then holds what to prompt with.
    """

    project_id: int
    kind: OperationKind
    state: OperationState
    steps: list[str] = Field(default_factory=list)
    message: str = ""
    attempts: int = 0
    conflict_details: str | None = None


class BatchReport(BaseModel):
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    pending: list[int] = Field(default_factory=list)
    results: list[OperationResult] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.cancelled
