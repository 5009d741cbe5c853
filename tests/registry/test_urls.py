from __future__ import annotations

import pytest

from modtrack.contracts.exceptions import ValidationError
from modtrack.contracts.project import ForgeKind
from modtrack.registry.urls import detect_repo


@pytest.mark.parametrize(
    ("url", "forge", "owner", "name"),
    [
        ("https://github.com/Owner/SuperMod", ForgeKind.GITHUB, "Owner", "SuperMod"),
        ("https://github.com/owner/SuperMod.git", ForgeKind.GITHUB, "owner", "SuperMod"),
        ("https://github.com/owner/SuperMod/releases", ForgeKind.GITHUB, "owner", "SuperMod"),
        ("https://github.com/owner/SuperMod/releases/latest", ForgeKind.GITHUB, "owner", "SuperMod"),
        ("https://gitlab.com/group/sub/addon", ForgeKind.GITLAB, "group/sub", "addon"),
        ("https://gitlab.com/group/addon/-/releases", ForgeKind.GITLAB, "group", "addon"),
        ("https://codeberg.org/someone/tool", ForgeKind.GITEA, "someone", "tool"),
        ("https://git.example.org/team/tool", ForgeKind.GITEA, "team", "tool"),
    ],
)
def test_detect_repo_recognizes_forge_urls(url: str, forge: ForgeKind, owner: str, name: str) -> None:
    detected = detect_repo(url)

    assert detected.forge is forge
    assert detected.owner == owner
    assert detected.name == name
    assert detected.project_path == f"{owner}/{name}"


def test_detect_repo_builds_canonical_url_without_suffixes() -> None:
    detected = detect_repo("https://github.com/owner/SuperMod.git/releases/latest")

    assert detected.canonical_url == "https://github.com/owner/SuperMod"


def test_detect_repo_key_ignores_case_and_git_suffix() -> None:
    mixed = detect_repo("https://GitHub.com/Owner/SuperMod.git")

    assert mixed.key == detect_repo("https://github.com/owner/supermod").key


@pytest.mark.parametrize("url", ["", "   ", "not a url", "https://github.com/", "https://github.com/owner"])
def test_detect_repo_rejects_malformed_urls(url: str) -> None:
    with pytest.raises(ValidationError):
        detect_repo(url)
