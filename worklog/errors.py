"""Fatal error types. Every one of these aborts the run; nothing is retried."""

from __future__ import annotations

from datetime import date
from typing import Optional


class WorklogError(ValueError):
    """Base class for all worklog errors."""


class LogFormatError(WorklogError):
    """A single line of the log is malformed."""

    def __init__(self, message: str, line: Optional[str] = None, line_number: Optional[int] = None) -> None:
        self.reason = message
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        if line is not None:
            message = f"{message}: {line!r}"
        super().__init__(message)


class LogStructureError(WorklogError):
    """Clock markers, timestamps or day markers do not fit together."""

    def __init__(self, message: str, date: Optional[date | str] = None) -> None:
        self.date = date
        if date is not None:
            message = f"{message} on {date}"
        super().__init__(message)


class InvocationError(WorklogError):
    """Missing file, unknown mode or unusable arguments."""
