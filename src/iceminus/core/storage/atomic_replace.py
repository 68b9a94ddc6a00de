"""
Purpose: Replace a file's content through a sibling temp file with ordered fallbacks.
Constraints: Storage only; callers decide what content to write.

Every strategy either completes or leaves the original file in place. The
original is never deleted outright: it is moved (or copied) to a sibling
backup first and restored from there when the next step fails.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from iceminus.core.errors import FileReplaceError
from iceminus.core.logging import get_logger

logger = get_logger(__name__)

TEMP_SUFFIX = ".tmp_iceminus"
BACKUP_SUFFIX = ".bak_iceminus"

ReplaceStrategy = Tuple[str, Callable[[Path, Path], None]]


class OriginalDisplacedError(OSError):
    """A step failed and the original could not be put back; it survives at backup."""

    def __init__(self, message: str, backup: Path):
        super().__init__(message)
        self.backup = backup


# Helpers
def backup_path(target: Path) -> Path:
    return target.with_name(target.name + BACKUP_SUFFIX)


def _make_writable(path: Path) -> None:
    mode = stat.S_IMODE(os.stat(path).st_mode)
    os.chmod(path, mode | stat.S_IREAD | stat.S_IWRITE)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove %s: %s", path, exc)


def _restore(backup: Path, target: Path, cause: OSError) -> None:
    try:
        os.replace(backup, target)
    except OSError as exc:
        raise OriginalDisplacedError(
            f"{cause}; restoring original failed: {exc}", backup
        ) from cause


def _swap_via_backup(tmp: Path, target: Path) -> None:
    # Stands in for "delete then rename": the original is moved aside, not deleted
    backup = backup_path(target)
    os.replace(target, backup)
    try:
        os.replace(tmp, target)
    except OSError as exc:
        _restore(backup, target, exc)
        raise
    _discard(backup)


# Strategies: each receives (temp_path, target_path) and raises OSError on failure.
def _rename(tmp: Path, target: Path) -> None:
    os.replace(tmp, target)


def _remove_then_rename(tmp: Path, target: Path) -> None:
    # Destination locked on some platforms
    _swap_via_backup(tmp, target)


def _clear_readonly_remove_then_rename(tmp: Path, target: Path) -> None:
    original_mode = stat.S_IMODE(os.stat(target).st_mode)
    _make_writable(target)
    try:
        _make_writable(tmp)
        _swap_via_backup(tmp, target)
    except OriginalDisplacedError:
        raise
    except OSError:
        os.chmod(target, original_mode)
        raise


def _open_for_overwrite(target: Path):
    try:
        return open(target, "wb")
    except PermissionError:
        _make_writable(target)
        return open(target, "wb")


def _overwrite_in_place(tmp: Path, target: Path) -> None:
    data = tmp.read_bytes()
    backup = backup_path(target)
    try:
        shutil.copyfile(target, backup)
    except OSError:
        _discard(backup)
        raise
    try:
        handle = _open_for_overwrite(target)
    except OSError:
        # open() failed before truncating, so the original is intact
        _discard(backup)
        raise
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        _restore(backup, target, exc)
        raise
    _discard(backup)
    _discard(tmp)


DEFAULT_STRATEGIES: List[ReplaceStrategy] = [
    ("rename", _rename),
    ("remove_then_rename", _remove_then_rename),
    ("clear_readonly_then_rename", _clear_readonly_remove_then_rename),
    ("overwrite_in_place", _overwrite_in_place),
]


def write_temp_sibling(target: Path, content: bytes) -> Path:
    """Write content next to target so a rename stays on the same filesystem."""
    fd, name = tempfile.mkstemp(prefix=target.name + ".", suffix=TEMP_SUFFIX, dir=target.parent)
    tmp = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600; keep the original file's permissions
        shutil.copymode(target, tmp)
    except BaseException:
        _discard(tmp)
        raise
    return tmp


# Public API
def replace_file(
    path: Union[str, Path],
    content: bytes,
    strategies: Sequence[ReplaceStrategy] = DEFAULT_STRATEGIES,
) -> str:
    """
    Replace path with content, trying each strategy in order.

    Returns the name of the strategy that succeeded. Raises FileReplaceError
    listing every failed attempt when none does. The temp file is removed
    only while the original is still in place; otherwise both the temp file
    and the backup of the original are kept and named in the error.
    """
    target = Path(path)
    attempts: List[Tuple[str, BaseException]] = []

    try:
        tmp = write_temp_sibling(target, content)
    except OSError as exc:
        raise FileReplaceError(str(target), [("write_temp", exc)]) from exc

    displaced: Optional[Path] = None
    for name, strategy in strategies:
        try:
            strategy(tmp, target)
        except OriginalDisplacedError as exc:
            logger.error(
                "Replace strategy %s failed for %s and the original is at %s: %s",
                name,
                target,
                exc.backup,
                exc,
                extra={"path": str(target), "strategy": name},
            )
            attempts.append((name, exc))
            displaced = exc.backup
            break
        except OSError as exc:
            logger.warning(
                "Replace strategy %s failed for %s: %s",
                name,
                target,
                exc,
                extra={"path": str(target), "strategy": name},
            )
            attempts.append((name, exc))
            continue
        logger.debug("Replaced %s via %s", target, name, extra={"path": str(target), "strategy": name})
        return name

    if displaced is None and target.exists():
        _discard(tmp)
        raise FileReplaceError(str(target), attempts)
    raise FileReplaceError(
        str(target),
        attempts,
        temp_path=str(tmp) if tmp.exists() else None,
        backup_path=str(displaced) if displaced is not None else None,
    )
