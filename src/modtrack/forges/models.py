"""Forge-specific release payloads.

These models parse raw API responses at the client boundary and are not
part of the forge-agnostic contracts.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from modtrack.contracts.forge import LatestRelease, ReleaseAsset

# ------------------------------------------------------------------
# GitHub
# ------------------------------------------------------------------


class GitHubAsset(BaseModel):
    id: int | None = None
    name: str
    browser_download_url: str
    size: int | None = None
    content_type: str | None = None
    digest: str | None = None
    """``sha256:<hex>`` on newer GitHub releases."""


class GitHubRelease(BaseModel):
    tag_name: str
    name: str | None = None
    assets: list[GitHubAsset] = Field(default_factory=list)

    def to_release(self) -> LatestRelease:
        return LatestRelease(
            tag=self.tag_name,
            name=self.name,
            assets=[
                ReleaseAsset(
                    id=str(asset.id) if asset.id is not None else None,
                    name=asset.name,
                    download_url=asset.browser_download_url,
                    size=asset.size,
                    content_type=asset.content_type,
                    sha256=_sha256_from_digest(asset.digest),
                )
                for asset in self.assets
            ],
        )


# ------------------------------------------------------------------
# GitLab
# ------------------------------------------------------------------


class GitLabLink(BaseModel):
    name: str
    url: str
    direct_asset_url: str | None = None


class GitLabAssets(BaseModel):
    links: list[GitLabLink] = Field(default_factory=list)


class GitLabRelease(BaseModel):
    tag_name: str
    name: str | None = None
    assets: GitLabAssets = Field(default_factory=GitLabAssets)

    def to_release(self) -> LatestRelease:
        return LatestRelease(
            tag=self.tag_name,
            name=self.name,
            assets=[
                ReleaseAsset(name=link.name, download_url=link.direct_asset_url or link.url)
                for link in self.assets.links
            ],
        )


# ------------------------------------------------------------------
# Gitea / Codeberg
# ------------------------------------------------------------------


class GiteaAsset(BaseModel):
    id: int | None = None
    name: str
    browser_download_url: str
    size: int | None = None


class GiteaRelease(BaseModel):
    tag_name: str
    name: str | None = None
    assets: list[GiteaAsset] = Field(default_factory=list)

    def to_release(self) -> LatestRelease:
        return LatestRelease(
            tag=self.tag_name,
            name=self.name,
            assets=[
                ReleaseAsset(
                    id=str(asset.id) if asset.id is not None else None,
                    name=asset.name,
                    download_url=asset.browser_download_url,
                    size=asset.size,
                )
                for asset in self.assets
            ],
        )


class BranchRef(BaseModel):
    name: str


def _sha256_from_digest(digest: str | None) -> str | None:
    if not digest:
        return None
    algo, _, value = digest.partition(":")
    return value.lower() if algo.lower() == "sha256" and value else None
