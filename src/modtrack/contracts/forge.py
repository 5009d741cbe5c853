"""Forge client contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from pydantic import BaseModel, Field

from modtrack.contracts.project import Project


class ReleaseAsset(BaseModel):
    id: str | None = None
    name: str
    download_url: str
    size: int | None = None
    content_type: str | None = None
    sha256: str | None = None


class LatestRelease(BaseModel):
    tag: str
    name: str | None = None
    assets: list[ReleaseAsset] = Field(default_factory=list)


class ReleaseLookup(BaseModel):
    """Result of a conditional latest-release fetch.

    ``release`` is ``None`` when the forge answered 304 (``not_modified``)
    or the project has no release at all.
    """

    etag: str | None = None
    release: LatestRelease | None = None
    not_modified: bool = False


class ForgeClient(ABC):
    @property
    def authenticated(self) -> bool:
        """Whether GitHub requests carry a token. Only meaningful while open."""
        return False

    @abstractmethod
    async def __aenter__(self) -> ForgeClient: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def fetch_latest_release(self, project: Project, *, etag: str | None = None) -> ReleaseLookup:
        """Fetch the latest release, raising NetworkError, AuthenticationError or NotFoundError."""

    @abstractmethod
    async def fetch_branches(self, project: Project) -> list[str]: ...  # pragma: no cover
