"""Error types shared by the configuration layer and the sample feed."""

from __future__ import annotations

from typing import Sequence


class ConfigurationError(ValueError):
    """Raised when detector parameters are missing, partial, or out of range."""

    def __init__(self, message: str, problems: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])


class MalformedSampleError(ValueError):
    """Raised when an input line does not match ``timestamp ; value``."""

    def __init__(self, reason: str, *, line: str, line_number: int | None = None) -> None:
        where = f"line {line_number}" if line_number is not None else "input line"
        super().__init__(f"Malformed sample on {where}: {reason} ({line!r})")
        self.reason = reason
        self.line = line
        self.line_number = line_number
