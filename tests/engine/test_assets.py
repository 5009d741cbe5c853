from __future__ import annotations

import pytest

from modtrack.contracts.exceptions import ForgeError, ValidationError
from modtrack.contracts.project import InstallMode
from modtrack.engine.assets import (
    asset_extension,
    current_version,
    effective_label,
    is_generic_label,
    pick_asset,
    version_from_asset_name,
)
from tests.fakes.builders import make_project
from tests.fakes.forge import make_release


def test_pick_asset_prefers_zip_then_dll() -> None:
    release = make_release("v1.0", "SuperMod.dll", "SuperMod.zip")

    assert pick_asset(release, InstallMode.AUTO).name == "SuperMod.zip"
    assert pick_asset(make_release("v1.0", "SuperMod.dll"), InstallMode.AUTO).name == "SuperMod.dll"


def test_pick_asset_never_selects_executables() -> None:
    release = make_release("v1.0", "setup.exe", "install.sh")

    with pytest.raises(ForgeError, match="No safe/compatible release asset"):
        pick_asset(release, InstallMode.AUTO)


def test_pick_asset_addon_git_accepts_only_zip() -> None:
    with pytest.raises(ForgeError):
        pick_asset(make_release("v1.0", "addon.dll"), InstallMode.ADDON_GIT)


def test_pick_asset_uses_pattern_among_allowed_assets() -> None:
    release = make_release("v2.0", "mod-linux.zip", "mod-windows.zip", "mod-windows.exe")

    assert pick_asset(release, InstallMode.AUTO, r"windows").name == "mod-windows.zip"


def test_pick_asset_falls_back_when_pattern_misses() -> None:
    release = make_release("v2.0", "mod.zip")

    assert pick_asset(release, InstallMode.AUTO, r"nomatch").name == "mod.zip"


def test_pick_asset_rejects_invalid_pattern() -> None:
    with pytest.raises(ValidationError):
        pick_asset(make_release("v2.0", "mod.zip"), InstallMode.AUTO, "(")


def test_pick_asset_without_assets_raises() -> None:
    with pytest.raises(ForgeError, match="No assets found"):
        pick_asset(make_release("v2.0"), InstallMode.AUTO)


def test_asset_extension() -> None:
    assert asset_extension("Mod.ZIP") == "zip"
    assert asset_extension("README") is None


@pytest.mark.parametrize(
    ("label", "generic"),
    [("", True), ("Latest", True), ("release 3", True), ("v1.2.0", False), ("2024-05", False)],
)
def test_is_generic_label(label: str, generic: bool) -> None:
    assert is_generic_label(label) is generic


def test_version_from_asset_name() -> None:
    assert version_from_asset_name("SuperMod-1_5_1.zip") == "1.5.1"
    assert version_from_asset_name("SuperMod-v2.0.3.zip") == "v2.0.3"
    assert version_from_asset_name("SuperMod.zip") is None


def test_effective_label_falls_back_to_asset_version_for_generic_tags() -> None:
    assert effective_label("latest", "SuperMod-1.4.zip") == "1.4"
    assert effective_label("v3.0", "SuperMod-1.4.zip") == "v3.0"
    assert effective_label("latest", "SuperMod.zip") == "latest"


def test_current_version_resolves_generic_installed_label() -> None:
    project = make_project(installed_version="latest", installed_asset_name="SuperMod-1.4.zip")

    assert current_version(project) == "1.4"
    assert current_version(make_project(installed_version="v1.0")) == "v1.0"
    assert current_version(make_project()) is None
