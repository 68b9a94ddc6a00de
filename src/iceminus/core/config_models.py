"""
Purpose: Typed configuration models with validation.
Constraints: Pure models; no file I/O or side effects.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXTENSIONS = [".yaml", ".yml"]
DEFAULT_WORDLIST_NAME = "sensitive_words.txt"


class ScanSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    path: str = ""
    dry_run: bool = False
    sensitive: str = DEFAULT_WORDLIST_NAME
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    continue_on_error: bool = False

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("at least one file extension is required")
        return normalized


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    log_level: str = "WARNING"
    log_dir: Optional[str] = None
    json_logging: bool = False
    sentry_dsn: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


class Settings(BaseModel):
    scan: ScanSettings = Field(default_factory=ScanSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)
