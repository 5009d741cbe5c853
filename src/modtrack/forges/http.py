"""HTTP client for GitHub, GitLab and Gitea release APIs."""

from __future__ import annotations

import asyncio
import logging
import time
from types import TracebackType
from urllib.parse import quote, urlparse

import httpx
from pydantic import ValidationError as PydanticValidationError

from modtrack.auth.base import TokenResolver
from modtrack.contracts.exceptions import AuthenticationError, ForgeError, NetworkError, NotFoundError
from modtrack.contracts.forge import ForgeClient, ReleaseLookup
from modtrack.contracts.project import ForgeKind, Project
from modtrack.forges._retrying_transport import RetryingTransport
from modtrack.forges.models import BranchRef, GiteaRelease, GitHubRelease, GitLabRelease

_LOG = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
USER_AGENT = "modtrack"

_FORGE_NAMES = {ForgeKind.GITHUB: "GitHub", ForgeKind.GITLAB: "GitLab", ForgeKind.GITEA: "Gitea"}
_ReleaseModel = GitHubRelease | GitLabRelease | GiteaRelease
_RELEASE_MODELS: dict[ForgeKind, type[_ReleaseModel]] = {
    ForgeKind.GITHUB: GitHubRelease,
    ForgeKind.GITLAB: GitLabRelease,
    ForgeKind.GITEA: GiteaRelease,
}


def _compact(body: str) -> str:
    return body.replace("\n", " ").strip()[:220]


class HttpForgeClient(ForgeClient):
    """Fetches latest releases and branch lists over the forges' REST APIs.

    Use as an async context manager; the token is resolved on enter and only
    sent to GitHub. Entering is reference-counted, so overlapping
    ``async with`` blocks share one connection pool that closes when the last
    of them exits. Successful lookups are cached in-process for
    ``cache_ttl`` seconds to absorb repeated checks.
    """

    def __init__(
        self,
        *,
        token_resolver: TokenResolver | None = None,
        cache_ttl: float = 45.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_resolver = token_resolver
        self._cache_ttl = cache_ttl
        self._timeout = timeout
        self._transport = transport
        self._token: str | None = None
        self._client: httpx.AsyncClient | None = None
        self._users = 0
        self._open_lock = asyncio.Lock()
        self._cache: dict[str, tuple[float, ReleaseLookup]] = {}

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> HttpForgeClient:
        async with self._open_lock:
            if self._client is None:
                if self._token_resolver is not None:
                    self._token = await self._token_resolver.resolve()
                self._client = httpx.AsyncClient(
                    transport=RetryingTransport(self._transport),
                    headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                    timeout=httpx.Timeout(self._timeout),
                    follow_redirects=True,
                )
            self._users += 1
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        async with self._open_lock:
            self._users = max(self._users - 1, 0)
            if self._users == 0 and self._client is not None:
                client, self._client = self._client, None
                await client.aclose()

    async def fetch_latest_release(self, project: Project, *, etag: str | None = None) -> ReleaseLookup:
        cache_key = f"{project.forge.value}|{project.host.lower()}|{project.label.lower()}"
        cached = self._cache.get(cache_key)
        if cached is not None and cached[0] > time.monotonic():
            lookup = cached[1]
            if etag is not None and lookup.etag == etag:
                return ReleaseLookup(etag=etag, not_modified=True)
            return lookup

        forge_name = _FORGE_NAMES[project.forge]
        headers = self._headers(project)
        if project.forge is ForgeKind.GITHUB:
            headers["Accept"] = "application/vnd.github+json"
        if etag:
            headers["If-None-Match"] = etag

        response = await self._get(project, self._release_url(project), headers)
        if response.status_code == 304:
            _LOG.debug("%s: release not modified", project.label)
            return ReleaseLookup(etag=etag, not_modified=True)
        self._raise_for_status(project, response, what="repo/release")

        release = self._parse(response, _RELEASE_MODELS[project.forge], forge_name).to_release()
        lookup = ReleaseLookup(etag=response.headers.get("etag"), release=release)
        if self._cache_ttl > 0:
            self._cache[cache_key] = (time.monotonic() + self._cache_ttl, lookup)
        return lookup

    async def fetch_branches(self, project: Project) -> list[str]:
        response = await self._get(project, self._branches_url(project), self._headers(project))
        self._raise_for_status(project, response, what="repository")
        invalid = f"invalid {_FORGE_NAMES[project.forge]} branch list for {project.label}"
        try:
            payload = response.json() if response.content else []
        except ValueError as exc:
            raise ForgeError(invalid) from exc
        if not isinstance(payload, list):
            raise ForgeError(invalid)
        try:
            return [BranchRef.model_validate(entry).name for entry in payload]
        except PydanticValidationError as exc:
            raise ForgeError(invalid) from exc

    def clear_cache(self) -> None:
        self._cache.clear()

    def _headers(self, project: Project) -> dict[str, str]:
        headers: dict[str, str] = {}
        if project.forge is ForgeKind.GITHUB and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _base_url(project: Project) -> str:
        scheme = urlparse(project.url).scheme or "https"
        return f"{scheme}://{project.host}"

    def _release_url(self, project: Project) -> str:
        if project.forge is ForgeKind.GITHUB:
            return f"{GITHUB_API}/repos/{project.owner}/{project.name}/releases/latest"
        if project.forge is ForgeKind.GITLAB:
            encoded = quote(project.label, safe="")
            return f"{self._base_url(project)}/api/v4/projects/{encoded}/releases/permalink/latest"
        return f"{self._base_url(project)}/api/v1/repos/{project.owner}/{project.name}/releases/latest"

    def _branches_url(self, project: Project) -> str:
        if project.forge is ForgeKind.GITHUB:
            return f"{GITHUB_API}/repos/{project.owner}/{project.name}/branches?per_page=100"
        if project.forge is ForgeKind.GITLAB:
            encoded = quote(project.label, safe="")
            return f"{self._base_url(project)}/api/v4/projects/{encoded}/repository/branches?per_page=100"
        return f"{self._base_url(project)}/api/v1/repos/{project.owner}/{project.name}/branches"

    async def _get(self, project: Project, url: str, headers: dict[str, str]) -> httpx.Response:
        if self._client is None:
            raise ForgeError("forge client is not open; use 'async with'")
        try:
            return await self._client.get(url, headers=headers)
        except httpx.TransportError as exc:
            raise NetworkError(f"{_FORGE_NAMES[project.forge]} request failed for {project.label}: {exc}") from exc

    @staticmethod
    def _raise_for_status(project: Project, response: httpx.Response, *, what: str) -> None:
        status = response.status_code
        if status < 400:
            return
        forge_name = _FORGE_NAMES[project.forge]
        if status == 404:
            raise NotFoundError(f"{forge_name} {what} not found for {project.label} (no latest release?)")
        if project.forge is ForgeKind.GITHUB and status in {403, 429}:
            remaining = response.headers.get("x-ratelimit-remaining", "?")
            reset = response.headers.get("x-ratelimit-reset", "?")
            raise AuthenticationError(
                f"GitHub API rate-limited or forbidden (HTTP {status}, remaining {remaining}, reset {reset}). "
                f"{_compact(response.text)}".strip(),
                reset_at=int(reset) if reset.isdigit() else None,
            )
        raise NetworkError(f"{forge_name} API error HTTP {status}: {_compact(response.text)}".strip())

    @staticmethod
    def _parse(response: httpx.Response, model: type[_ReleaseModel], forge_name: str) -> _ReleaseModel:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ForgeError(f"invalid {forge_name} json") from exc
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise ForgeError(f"invalid {forge_name} release payload") from exc
