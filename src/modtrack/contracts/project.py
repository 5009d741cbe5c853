"""Project contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

DEFAULT_BRANCH = "master"


class InstallMode(StrEnum):
    AUTO = "auto"
    ADDON_GIT = "addon_git"

    @classmethod
    def parse(cls, value: str) -> InstallMode | None:
        normalized = value.strip().lower()
        if normalized == "auto":
            return cls.AUTO
        if normalized in {"addon_git", "addongit", "git_addon"}:
            return cls.ADDON_GIT
        return None


class ForgeKind(StrEnum):
    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"


class RepoKey(BaseModel):
    """Case-insensitive identity of a remote repository."""

    host: str
    owner: str
    name: str

    model_config = {"frozen": True}

    @classmethod
    def of(cls, host: str, owner: str, name: str) -> RepoKey:
        cleaned = name.strip()
        if cleaned.lower().endswith(".git"):
            cleaned = cleaned[:-4]
        return cls(host=host.strip().lower(), owner=owner.strip().lower(), name=cleaned.lower())

    def __str__(self) -> str:
        return f"{self.host}|{self.owner}|{self.name}"


class Project(BaseModel):
    id: int
    url: str
    forge: ForgeKind
    host: str
    owner: str
    name: str
    mode: InstallMode = InstallMode.AUTO
    branch: str | None = None
    enabled: bool = True
    asset_pattern: str | None = None
    installed_version: str | None = None
    installed_asset_name: str | None = None

    @property
    def key(self) -> RepoKey:
        return RepoKey.of(self.host, self.owner, self.name)

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def is_addon(self) -> bool:
        return self.mode is InstallMode.ADDON_GIT

    @property
    def effective_branch(self) -> str:
        return (self.branch or "").strip() or DEFAULT_BRANCH


class ProjectSnapshot(BaseModel):
    """Persisted registry content for one profile."""

    profile_id: str
    next_id: int = 1
    projects: list[Project] = Field(default_factory=list)
