"""
Purpose: Shared data models for cross-module communication.
Constraints: Data containers only; no I/O.
"""

# Imports

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# Public API
@dataclass(frozen=True)
class Line:
    """One physical line; content excludes the terminator."""

    number: int
    content: str
    terminator: str = ""


@dataclass(frozen=True)
class LineMatch:
    """Sensitive words found on one line, in word-list order."""

    line_number: int
    words: List[str]


@dataclass
class RewriteOutcome:
    new_content: Optional[bytes] = None
    matches: List[LineMatch] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        return self.new_content is not None

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass
class ScanStats:
    """Aggregate counters for one run; filled in during the walk."""

    scanned_folder: str = ""
    files_scanned: int = 0
    files_with_matches: int = 0
    total_matches: int = 0
    ops_per_file: Dict[str, int] = field(default_factory=dict)
    failed_files: Dict[str, str] = field(default_factory=dict)

    def record_file(self, path: str, match_count: int) -> None:
        if match_count <= 0:
            return
        self.files_with_matches += 1
        self.total_matches += match_count
        self.ops_per_file[path] = match_count

    def record_failure(self, path: str, error: Exception) -> None:
        self.failed_files[path] = str(error)
