"""
Exception types shared across sizesort.

Only ConfigError (and its subclasses) aborts a run. Traversal problems are
recorded as ScanIssue values instead of being raised, and a PatchFailure is
caught by the pipeline so the unpatched report survives.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SizesortError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(SizesortError, ValueError):
    """Bad root path, bad output path or malformed division string."""

    exit_code = 1

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidDivision(ConfigError):
    exit_code = 3

    def __init__(self, token: str, reason: str):
        super().__init__(f"invalid division '{token}': {reason}")
        self.token = token
        self.reason = reason


class InternalConsistencyFault(SizesortError, RuntimeError):
    """An invariant between the scan collections or report body was broken."""


class PatchFailure(SizesortError, OSError):
    """
    The summary could not be spliced into the report.

    `temp_path` is set when a temp file exists (or may still exist) on disk so
    the operator can recover the patched report by hand.
    """

    def __init__(self, message: str, *, stage: str, output_path: Path, temp_path: Optional[Path] = None):
        super().__init__(message)
        self.stage = stage
        self.output_path = output_path
        self.temp_path = temp_path

    def __str__(self) -> str:
        text = f"{self.args[0]} (stage={self.stage}, report='{self.output_path}'"
        if self.temp_path is not None:
            text += f", temp='{self.temp_path}'"
        return text + ")"


class SentinelNotFound(PatchFailure, InternalConsistencyFault):
    """The report body has no placeholder for the summary block."""
