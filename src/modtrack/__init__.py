"""Public API surface for modtrack."""

__version__ = "0.4.0"

from modtrack.auth import TokenResolver, create_token_resolver
from modtrack.config import load_config
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
from modtrack.contracts.profile import LaunchConfig, Profile
from modtrack.contracts.project import ForgeKind, InstallMode, Project
from modtrack.contracts.view import Partition, ProjectStatus, SortDirection, SortKey, ViewCounts, ViewFilter, ViewRow
from modtrack.engine import (
    BatchProgress,
    BatchScheduler,
    ConflictAwareOperationRunner,
    UpdateChecker,
    UpdatePlanReconciler,
    classify_error_hint,
)
from modtrack.forges import HttpForgeClient, create_forge_client
from modtrack.installers import DryRunInstaller, LoggingLogSink, MemoryLogSink
from modtrack.registry import ProjectRegistry, RegistryStore, detect_repo
from modtrack.sdk import DeclineConflicts, ModTrack
from modtrack.view import ViewProjector

__all__ = [
    "AuthenticationError",
    "BatchProgress",
    "BatchReport",
    "BatchScheduler",
    "ConfigError",
    "Confirmation",
    "ConflictAwareOperationRunner",
    "ConflictError",
    "DeclineConflicts",
    "DryRunInstaller",
    "ForgeClient",
    "ForgeError",
    "ForgeKind",
    "HttpForgeClient",
    "InstallError",
    "InstallMode",
    "InstallOptions",
    "InstallOutcome",
    "InstallPreferences",
    "Installer",
    "LatestRelease",
    "LaunchConfig",
    "LogSink",
    "LoggingLogSink",
    "MemoryLogSink",
    "ModTrack",
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
    "ProjectRegistry",
    "ProjectStatus",
    "RegistryStore",
    "ReleaseAsset",
    "ReleaseLookup",
    "SortDirection",
    "SortKey",
    "TokenResolver",
    "UpdateChecker",
    "UpdatePlan",
    "UpdatePlanReconciler",
    "ValidationError",
    "ViewCounts",
    "ViewFilter",
    "ViewProjector",
    "ViewRow",
    "__version__",
    "classify_error_hint",
    "create_forge_client",
    "create_token_resolver",
    "detect_repo",
    "load_config",
]
