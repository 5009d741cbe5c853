"""Project registry and its persistence."""

from modtrack.registry.registry import ProjectRegistry
from modtrack.registry.store import RegistryStore
from modtrack.registry.urls import DetectedRepo, detect_repo

__all__ = ["DetectedRepo", "ProjectRegistry", "RegistryStore", "detect_repo"]
