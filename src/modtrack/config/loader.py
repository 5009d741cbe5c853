"""Config loading and path resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from modtrack.contracts.config import ModTrackConfig
from modtrack.contracts.exceptions import ConfigError


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def load_config(path: str | Path) -> ModTrackConfig:
    """Load and validate config from JSON, resolving relative paths against the config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = ModTrackConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except PydanticValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    profiles = [
        profile.model_copy(update={"install_root": _resolve_path(profile.install_root, base_dir=config_dir)})
        for profile in parsed.profiles
    ]
    return parsed.model_copy(
        update={
            "registry_path": _resolve_path(parsed.registry_path, base_dir=config_dir),
            "profiles": profiles,
        }
    )
