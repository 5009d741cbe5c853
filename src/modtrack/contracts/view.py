"""Read-model contracts for project listings."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.project import Project


class ViewFilter(StrEnum):
    ALL = "all"
    UPDATES = "updates"
    ERRORS = "errors"
    DISABLED = "disabled"


class SortKey(StrEnum):
    NAME = "name"
    CURRENT = "current"
    LATEST = "latest"
    STATUS = "status"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class Partition(StrEnum):
    MODS = "mods"
    ADDONS = "addons"


class ProjectStatus(StrEnum):
    DISABLED = "Disabled"
    FETCH_ERROR = "Fetch error"
    REPAIR_NEEDED = "Repair needed"
    UPDATE_AVAILABLE = "Update available"
    UP_TO_DATE = "Up to date"
    UNKNOWN = "Unknown"


class ViewRow(BaseModel):
    project: Project
    plan: UpdatePlan | None = None
    status: ProjectStatus


class ViewCounts(BaseModel):
    total: int = 0
    enabled: int = 0
    disabled: int = 0
    updates: int = 0
    errors: int = 0
    rate_limited: bool = False
