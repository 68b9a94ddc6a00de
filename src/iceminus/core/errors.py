"""
Purpose: Error types raised by the redaction pipeline.
Constraints: Exception definitions only.
"""

from __future__ import annotations

from typing import List, Optional, Tuple


class IceminusError(Exception):
    """Base class for every error surfaced to the CLI."""


class ConfigError(IceminusError):
    """Required setting missing or settings failed validation."""


class WordListLoadError(IceminusError):
    """The sensitive-word source could not be read."""


class TraversalError(IceminusError):
    """A filesystem walk or read step failed."""


class FileReplaceError(IceminusError):
    """Every replacement strategy failed for one file."""

    def __init__(
        self,
        path: str,
        attempts: List[Tuple[str, BaseException]],
        temp_path: Optional[str] = None,
        backup_path: Optional[str] = None,
    ):
        self.path = path
        self.attempts = list(attempts)
        self.temp_path = temp_path
        self.backup_path = backup_path
        details = "; ".join(f"{name}: {exc}" for name, exc in self.attempts)
        message = f"could not replace {path}: {details or 'no strategy attempted'}"
        if backup_path:
            message += f"; original kept at {backup_path}"
        if temp_path:
            message += f"; new content kept at {temp_path}"
        super().__init__(message)
