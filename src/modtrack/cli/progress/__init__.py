"""CLI progress displays."""

from modtrack.cli.progress.rich import RichBatchProgress

__all__ = ["RichBatchProgress"]
