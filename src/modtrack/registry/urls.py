"""Repository URL detection and canonicalization."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from modtrack.contracts.exceptions import ValidationError
from modtrack.contracts.project import ForgeKind, RepoKey

_KNOWN_HOSTS = {
    "github.com": ForgeKind.GITHUB,
    "gitlab.com": ForgeKind.GITLAB,
    "codeberg.org": ForgeKind.GITEA,
}


@dataclass(frozen=True)
class DetectedRepo:
    forge: ForgeKind
    host: str
    owner: str
    name: str
    canonical_url: str

    @property
    def project_path(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def key(self) -> RepoKey:
        return RepoKey.of(self.host, self.owner, self.name)


def _strip_release_suffixes(segments: list[str]) -> list[str]:
    segs = list(segments)
    if len(segs) >= 3 and segs[2].lower() == "releases":
        segs = segs[:2]
    if len(segs) >= 3:
        while segs and segs[-1].lower() == "latest":
            segs.pop()
        if len(segs) >= 2 and segs[-2] == "-" and segs[-1].lower() in {"releases", "tags"}:
            segs = segs[:-2]
        if segs and segs[-1].lower() == "tags":
            segs.pop()
    return segs


def _strip_git_suffix(name: str) -> str:
    return name[:-4] if name.lower().endswith(".git") else name


def detect_repo(url: str) -> DetectedRepo:
    """Parse a forge URL (with or without ``/releases``) into a canonical repository."""
    raw = (url or "").strip()
    if not raw:
        raise ValidationError("repository URL is empty")

    parsed = urlparse(raw)
    if not parsed.scheme or not parsed.hostname:
        raise ValidationError(f"invalid repository URL: {raw}")

    host = parsed.hostname
    segments = [segment for segment in parsed.path.split("/") if segment.strip()]
    if not segments:
        raise ValidationError(f"repository URL path is empty: {raw}")
    segments = _strip_release_suffixes(segments)

    forge = _KNOWN_HOSTS.get(host.lower())
    if forge is None:
        forge = ForgeKind.GITLAB if "/-/" in parsed.path else ForgeKind.GITEA

    if forge is ForgeKind.GITLAB:
        if len(segments) < 2:
            raise ValidationError(f"expected URL like https://host/group/project (got path {parsed.path})")
        project_segments = segments[:-1] + [_strip_git_suffix(segments[-1])]
        owner = "/".join(project_segments[:-1])
        name = project_segments[-1]
    else:
        if len(segments) < 2:
            raise ValidationError(f"expected URL like https://host/owner/repo (got path {parsed.path})")
        owner = segments[0]
        name = _strip_git_suffix(segments[1])

    if not name:
        raise ValidationError(f"repository name is empty: {raw}")

    return DetectedRepo(
        forge=forge,
        host=host,
        owner=owner,
        name=name,
        canonical_url=f"{parsed.scheme}://{host}/{owner}/{name}",
    )
