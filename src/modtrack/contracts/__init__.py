"""Public contracts for modtrack."""

from modtrack.contracts.config import InstallPreferences, ModTrackConfig
from modtrack.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    ConflictError,
    ForgeError,
    InstallError,
    ModTrackError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from modtrack.contracts.feedback import Confirmation, LogSink
from modtrack.contracts.forge import ForgeClient, LatestRelease, ReleaseAsset, ReleaseLookup
from modtrack.contracts.installer import InstallOptions, InstallOutcome, Installer
from modtrack.contracts.operation import BatchReport, OperationKind, OperationResult, OperationState
from modtrack.contracts.plan import UpdatePlan
from modtrack.contracts.profile import LaunchConfig, Profile, normalize_profile_id
from modtrack.contracts.project import DEFAULT_BRANCH, ForgeKind, InstallMode, Project, ProjectSnapshot, RepoKey
from modtrack.contracts.view import (
    Partition,
    ProjectStatus,
    SortDirection,
    SortKey,
    ViewCounts,
    ViewFilter,
    ViewRow,
)

__all__ = [
    "DEFAULT_BRANCH",
    "AuthenticationError",
    "BatchReport",
    "ConfigError",
    "Confirmation",
    "ConflictError",
    "ForgeClient",
    "ForgeError",
    "ForgeKind",
    "InstallError",
    "InstallMode",
    "InstallOptions",
    "InstallOutcome",
    "InstallPreferences",
    "Installer",
    "LatestRelease",
    "LaunchConfig",
    "LogSink",
    "ModTrackConfig",
    "ModTrackError",
    "NetworkError",
    "NotFoundError",
    "OperationKind",
    "OperationResult",
    "OperationState",
    "Partition",
    "Profile",
    "Project",
    "ProjectSnapshot",
    "ProjectStatus",
    "ReleaseAsset",
    "ReleaseLookup",
    "RepoKey",
    "SortDirection",
    "SortKey",
    "UpdatePlan",
    "ValidationError",
    "ViewCounts",
    "ViewFilter",
    "ViewRow",
    "normalize_profile_id",
]
