"""Operation log sinks."""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass

_LOG = logging.getLogger("modtrack.operations")

MAX_LOG_LINES = 4000

_ERROR_LINE = re.compile(r"(^|\s)ERROR\b")


def is_error_line(text: str) -> bool:
    return _ERROR_LINE.search(text) is not None


class LoggingLogSink:
    """Forwards operation lines to the ``modtrack.operations`` logger."""

    def append_line(self, text: str) -> None:
        _LOG.log(logging.ERROR if is_error_line(text) else logging.INFO, "%s", text)


@dataclass(frozen=True)
class LogLine:
    text: str
    level: str


class MemoryLogSink:
    """Keeps the most recent ``max_lines`` operation lines with their level."""

    def __init__(self, max_lines: int = MAX_LOG_LINES) -> None:
        self._lines: deque[LogLine] = deque(maxlen=max_lines)

    def append_line(self, text: str) -> None:
        for line in text.splitlines() or [""]:
            self._lines.append(LogLine(text=line, level="error" if is_error_line(line) else "info"))

    @property
    def lines(self) -> list[LogLine]:
        return list(self._lines)

    def text(self) -> str:
        return "\n".join(line.text for line in self._lines)

    def errors(self) -> list[str]:
        return [line.text for line in self._lines if line.level == "error"]

    def clear(self) -> None:
        self._lines.clear()
