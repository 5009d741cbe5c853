"""Installer implementations and operation log sinks."""

from modtrack.installers.dry_run import DryRunInstaller, DryRunOperation
from modtrack.installers.logs import LoggingLogSink, MemoryLogSink

__all__ = ["DryRunInstaller", "DryRunOperation", "LoggingLogSink", "MemoryLogSink"]
