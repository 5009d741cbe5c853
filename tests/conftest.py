"""Shared test fixtures for modtrack tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modtrack.contracts.config import ModTrackConfig
from modtrack.contracts.profile import Profile
from modtrack.installers.logs import MemoryLogSink
from tests.fakes.forge import FakeForgeClient
from tests.fakes.installer import FakeInstaller, ScriptedConfirmation


@pytest.fixture
def forge() -> FakeForgeClient:
    return FakeForgeClient()


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def confirmation() -> ScriptedConfirmation:
    return ScriptedConfirmation()


@pytest.fixture
def log_sink() -> MemoryLogSink:
    return MemoryLogSink()


@pytest.fixture
def sample_config(tmp_path: Path) -> ModTrackConfig:
    """Two profiles with install roots and the registry under *tmp_path*."""
    return ModTrackConfig(
        registry_path=tmp_path / "registry.json",
        profiles=[
            Profile(id="default", name="Default", install_root=tmp_path / "game"),
            Profile(id="modded", name="Modded", install_root=tmp_path / "modded"),
        ],
        auth="none",
        batch_timeout=None,
        release_cache_ttl=0,
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "modtrack.json"
    path.write_text(
        json.dumps(
            {
                "registry_path": "registry.json",
                "profiles": [{"id": "default", "install_root": "game"}],
                "auth": "none",
            }
        ),
        encoding="utf-8",
    )
    return path
