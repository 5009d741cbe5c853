"""In-memory forge client fake."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import TracebackType

from modtrack.contracts.forge import ForgeClient, LatestRelease, ReleaseAsset, ReleaseLookup
from modtrack.contracts.project import Project


def make_release(tag: str, *asset_names: str) -> LatestRelease:
    return LatestRelease(
        tag=tag,
        assets=[ReleaseAsset(name=name, download_url=f"https://dl.example/{tag}/{name}") for name in asset_names],
    )


@dataclass
class FakeForgeClient(ForgeClient):
    """Serves canned releases keyed by project id and records every call."""

    releases: dict[int, LatestRelease] = field(default_factory=dict)
    errors: dict[int, Exception] = field(default_factory=dict)
    branches: dict[int, list[str]] = field(default_factory=dict)
    etags: dict[int, str] = field(default_factory=dict)
    delay: float = 0.0
    calls: list[tuple[int, str | None]] = field(default_factory=list)
    branch_calls: list[int] = field(default_factory=list)
    authenticated: bool = False
    entered: int = 0

    async def __aenter__(self) -> FakeForgeClient:
        self.entered += 1
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    async def fetch_latest_release(self, project: Project, *, etag: str | None = None) -> ReleaseLookup:
        self.calls.append((project.id, etag))
        if self.delay:
            await asyncio.sleep(self.delay)
        error = self.errors.get(project.id)
        if error is not None:
            raise error
        current_etag = self.etags.get(project.id)
        if etag is not None and etag == current_etag:
            return ReleaseLookup(etag=etag, not_modified=True)
        return ReleaseLookup(etag=current_etag, release=self.releases.get(project.id))

    async def fetch_branches(self, project: Project) -> list[str]:
        self.branch_calls.append(project.id)
        return list(self.branches.get(project.id, []))
