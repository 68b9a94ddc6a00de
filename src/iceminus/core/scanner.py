"""
Purpose: Walk a file or directory tree and redact sensitive lines file by file.
Constraints: Sequential; each file is fully read and closed before it is replaced.
"""

from __future__ import annotations

# Imports
import os
import stat
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Union

from iceminus.core.config_models import DEFAULT_EXTENSIONS
from iceminus.core.errors import FileReplaceError, TraversalError
from iceminus.core.line_rewriter import rewrite
from iceminus.core.logging import get_logger
from iceminus.core.models import ScanStats
from iceminus.core.reporting import format_match
from iceminus.core.storage.atomic_replace import replace_file
from iceminus.core.word_set import WordSet

logger = get_logger(__name__)

Reporter = Callable[[str], None]
Replacer = Callable[[Union[str, Path], bytes], object]


def _raise_walk_error(exc: OSError) -> None:
    raise TraversalError(f"cannot walk {exc.filename}: {exc}") from exc


# Public API
class TreeScanner:
    """Runs the rewrite + replace pipeline over every eligible file under a root."""

    def __init__(
        self,
        words: WordSet,
        dry_run: bool = False,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        continue_on_error: bool = False,
        reporter: Reporter = print,
        replacer: Replacer = replace_file,
    ):
        self.words = words
        self.dry_run = dry_run
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.continue_on_error = continue_on_error
        self.reporter = reporter
        self.replacer = replacer

    def is_eligible(self, name: str) -> bool:
        return os.path.splitext(name)[1].lower() in self.extensions

    def iter_files(self, root: str) -> Iterator[str]:
        """Yield eligible files below root in lexical order; walk errors abort."""
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            dirnames.sort()
            for name in sorted(filenames):
                if not self.is_eligible(name):
                    continue
                path = os.path.join(dirpath, name)
                # FIFOs, sockets and devices are skipped; broken symlinks still fail on read
                if os.path.isfile(path) or not os.path.exists(path):
                    yield path
                else:
                    logger.debug("Skipping non-regular file %s", path, extra={"path": path})

    def scan(self, root: Union[str, Path], stats: Optional[ScanStats] = None) -> ScanStats:
        root = str(root)
        stats = stats or ScanStats()
        try:
            info = os.stat(root)
        except OSError as exc:
            raise TraversalError(f"cannot stat {root}: {exc}") from exc
        is_dir = stat.S_ISDIR(info.st_mode)

        absolute = os.path.abspath(root)
        stats.scanned_folder = absolute if is_dir else os.path.dirname(absolute)

        if is_dir:
            for path in self.iter_files(root):
                self._scan_file(path, stats)
        else:
            # A file given directly is processed whatever its extension
            self._scan_file(root, stats)
        return stats

    def _scan_file(self, path: str, stats: ScanStats) -> None:
        stats.files_scanned += 1
        try:
            count = self.process_file(path)
        except FileReplaceError as exc:
            if not self.continue_on_error:
                raise
            logger.error("Skipping %s: %s", path, exc, extra={"path": path})
            stats.record_failure(path, exc)
            return
        stats.record_file(path, count)

    def process_file(self, path: str) -> int:
        """Rewrite one file; returns the number of matched lines."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise TraversalError(f"cannot read {path}: {exc}") from exc

        outcome = rewrite(data, self.words, dry_run=self.dry_run)
        logger.debug(
            "Scanned %s",
            path,
            extra={"path": path, "match_count": outcome.match_count, "dry_run": self.dry_run},
        )
        for match in outcome.matches:
            logger.debug(
                "Match in %s:%d",
                path,
                match.line_number,
                extra={
                    "path": path,
                    "line_number": match.line_number,
                    "words": match.words,
                    "dry_run": self.dry_run,
                },
            )
            self.reporter(format_match(path, match))

        if outcome.new_content is not None:
            self.replacer(path, outcome.new_content)
            logger.info(
                "Commented %d line(s) in %s",
                outcome.match_count,
                path,
                extra={"path": path, "match_count": outcome.match_count},
            )
        return outcome.match_count


def scan_path(
    root: Union[str, Path],
    words: WordSet,
    dry_run: bool = False,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    continue_on_error: bool = False,
    reporter: Reporter = print,
) -> ScanStats:
    """Convenience wrapper: scan root with a fresh ScanStats."""
    scanner = TreeScanner(
        words,
        dry_run=dry_run,
        extensions=extensions,
        continue_on_error=continue_on_error,
        reporter=reporter,
    )
    return scanner.scan(root)
