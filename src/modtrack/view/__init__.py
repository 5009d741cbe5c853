"""Read model for project listings."""

from modtrack.view.projector import ViewProjector

__all__ = ["ViewProjector"]
