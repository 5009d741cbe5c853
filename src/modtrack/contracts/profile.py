"""Profile contracts."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_PROFILE_ID = "default"

_SEPARATOR_RUNS = re.compile(r"[^a-z0-9_-]+")


def normalize_profile_id(value: str) -> str:
    """Lowercase *value* and collapse anything outside ``[a-z0-9_-]`` into single dashes."""
    slug = _SEPARATOR_RUNS.sub("-", value.strip().lower()).strip("-")
    return slug or DEFAULT_PROFILE_ID


class LaunchConfig(BaseModel):
    method: str = "auto"
    executable: Path | None = None
    arguments: list[str] = Field(default_factory=list)


class Profile(BaseModel):
    id: str = DEFAULT_PROFILE_ID
    name: str = "Default"
    install_root: Path = Path(".")
    launch: LaunchConfig = Field(default_factory=LaunchConfig)

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: object) -> str:
        return normalize_profile_id(str(value or ""))
