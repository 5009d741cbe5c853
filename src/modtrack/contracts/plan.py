"""Update plan contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class UpdatePlan(BaseModel):
    """Computed update status of one project as of the last check.

    ``not_modified`` means the forge answered "nothing changed" and the plan
    carries no new version information of its own; it has to be reconciled
    against the previously known plan before use.
    """

    repo_id: int
    current: str | None = None
    latest: str | None = None
    has_update: bool = False
    error: str | None = None
    repair_needed: bool = False
    not_modified: bool = False
    asset_name: str = ""
    asset_url: str = ""
    checked_at: datetime | None = None

    model_config = {"frozen": True}

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def can_update(self) -> bool:
        return self.has_update and self.error is None
