"""Release asset selection and version labels."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from modtrack.contracts.exceptions import ForgeError, ValidationError
from modtrack.contracts.forge import LatestRelease, ReleaseAsset
from modtrack.contracts.project import InstallMode, Project

BLOCKED_EXTENSIONS = frozenset(
    {
        "exe",
        "msi",
        "msix",
        "appx",
        "bat",
        "cmd",
        "ps1",
        "vbs",
        "js",
        "jse",
        "wsf",
        "wsh",
        "scr",
        "com",
        "sh",
        "run",
        "apk",
        "jar",
        "py",
        "pl",
        "rb",
        "dmg",
        "pkg",
    }
)

_GENERIC_LABELS = frozenset({"release", "latest", "stable", "current", "download"})
_GENERIC_PREFIXES = ("release ", "latest ", "stable ")
_VERSION_IN_NAME = re.compile(r"\bv?\d+(?:[._]\d+){1,3}(?:[-+][0-9A-Za-z.-]+)?\b", re.IGNORECASE)


def asset_extension(name: str) -> str | None:
    suffix = PurePosixPath(name.strip()).suffix
    return suffix[1:].lower() if len(suffix) > 1 else None


def is_asset_allowed(asset: ReleaseAsset, mode: InstallMode) -> bool:
    ext = asset_extension(asset.name)
    if ext is None or ext in BLOCKED_EXTENSIONS:
        return False
    if mode is InstallMode.ADDON_GIT:
        return ext == "zip"
    return ext in {"dll", "zip"}


def pick_asset(release: LatestRelease, mode: InstallMode, asset_pattern: str | None = None) -> ReleaseAsset:
    """Choose the asset to install from *release*.

    An ``asset_pattern`` match wins, then the first ``.zip``, then the first
    ``.dll``. Executables and scripts are never selected.
    """
    if not release.assets:
        raise ForgeError(f"No assets found in latest release {release.tag}")

    allowed = [asset for asset in release.assets if is_asset_allowed(asset, mode)]

    if asset_pattern:
        try:
            matcher = re.compile(asset_pattern)
        except re.error as exc:
            raise ValidationError(f"invalid asset pattern {asset_pattern!r}: {exc}") from exc
        for asset in allowed:
            if matcher.search(asset.name):
                return asset

    for wanted in ("zip", "dll"):
        for asset in allowed:
            if asset_extension(asset.name) == wanted:
                return asset

    raise ForgeError(f"No safe/compatible release asset found for mode {mode.value} in {release.tag}.")


def is_generic_label(label: str | None) -> bool:
    lowered = (label or "").strip().lower()
    if not lowered:
        return True
    return lowered in _GENERIC_LABELS or lowered.startswith(_GENERIC_PREFIXES)


def version_from_asset_name(asset_name: str) -> str | None:
    """Extract a version-like fragment, e.g. ``"SuperMod-1_5_1.zip"`` -> ``"1.5.1"``."""
    match = _VERSION_IN_NAME.search(asset_name)
    if match is None:
        return None
    return match.group(0).strip().replace("_", ".") or None


def effective_label(tag: str, asset_name: str) -> str:
    trimmed = tag.strip()
    if not is_generic_label(trimmed):
        return trimmed
    return version_from_asset_name(asset_name) or trimmed


def current_version(project: Project) -> str | None:
    """The installed version, resolving generic labels through the installed asset name."""
    current = project.installed_version
    if current is None or not is_generic_label(current):
        return current
    if project.installed_asset_name:
        return version_from_asset_name(project.installed_asset_name) or current
    return current
