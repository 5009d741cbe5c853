"""JSON persistence for per-profile registries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from modtrack.contracts.exceptions import ConfigError, ModTrackError
from modtrack.contracts.profile import normalize_profile_id
from modtrack.contracts.project import ProjectSnapshot
from modtrack.registry.registry import ProjectRegistry


class RegistryStore:
    """Reads and writes every profile's projects in one JSON document.

    Layout::

        {"profiles": {"default": {"profile_id": "default", "next_id": 3, "projects": [...]}}}
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self, profile_id: str) -> ProjectRegistry:
        wanted = normalize_profile_id(profile_id)
        raw = self._read().get(wanted)
        if raw is None:
            return ProjectRegistry(wanted)
        try:
            snapshot = ProjectSnapshot.model_validate(raw)
        except PydanticValidationError as exc:
            raise ConfigError(f"invalid registry entry for profile '{wanted}' in {self._path}") from exc
        return ProjectRegistry.from_snapshot(snapshot.model_copy(update={"profile_id": wanted}))

    def save(self, registry: ProjectRegistry) -> None:
        profiles = self._read()
        profiles[registry.profile_id] = registry.snapshot().model_dump(mode="json", exclude_none=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"profiles": profiles}, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ModTrackError(f"failed to write registry file: {self._path}") from exc

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"failed to read registry file: {self._path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in registry file: {self._path}") from exc

        profiles = payload.get("profiles") if isinstance(payload, dict) else None
        if not isinstance(profiles, dict):
            raise ConfigError(f"registry file must contain a 'profiles' object: {self._path}")
        return profiles
