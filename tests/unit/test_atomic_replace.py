import builtins
import os
import stat
import sys
from pathlib import Path

import pytest

from iceminus.core.errors import FileReplaceError
from iceminus.core.storage import atomic_replace
from iceminus.core.storage.atomic_replace import (
    BACKUP_SUFFIX,
    DEFAULT_STRATEGIES,
    TEMP_SUFFIX,
    replace_file,
)


def _leftover_temps(directory):
    return [p for p in directory.iterdir() if p.name.endswith((TEMP_SUFFIX, BACKUP_SUFFIX))]


def _failing(tmp, target):
    raise PermissionError("locked")


def test_replace_uses_atomic_rename(tmp_path):
    target = tmp_path / "base.dict.yaml"
    target.write_bytes(b"old\n")
    assert replace_file(target, b"new\n") == "rename"
    assert target.read_bytes() == b"new\n"
    assert _leftover_temps(tmp_path) == []


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_replace_keeps_original_permissions(tmp_path):
    target = tmp_path / "base.dict.yaml"
    target.write_bytes(b"old\n")
    os.chmod(target, 0o640)
    replace_file(target, b"new\n")
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o640


def test_falls_back_to_next_strategy(tmp_path):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"old")
    strategies = [("broken", _failing)] + DEFAULT_STRATEGIES[1:]
    assert replace_file(target, b"new", strategies=strategies) == "remove_then_rename"
    assert target.read_bytes() == b"new"
    assert _leftover_temps(tmp_path) == []


def test_overwrite_in_place_when_rename_impossible(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"old")

    def no_rename(src, dst):
        raise OSError("rename not supported")

    monkeypatch.setattr(atomic_replace.os, "replace", no_rename)
    assert replace_file(target, b"new") == "overwrite_in_place"
    assert target.read_bytes() == b"new"
    assert _leftover_temps(tmp_path) == []


def test_all_strategies_failing_reports_every_attempt(tmp_path):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"original")
    strategies = [("first", _failing), ("second", _failing)]

    with pytest.raises(FileReplaceError) as excinfo:
        replace_file(target, b"new", strategies=strategies)

    err = excinfo.value
    assert err.path == str(target)
    assert [name for name, _ in err.attempts] == ["first", "second"]
    assert "first: locked" in str(err)
    assert target.read_bytes() == b"original"
    assert _leftover_temps(tmp_path) == []


def test_temp_write_failure_is_reported(tmp_path):
    target = tmp_path / "missing_dir" / "a.yaml"
    with pytest.raises(FileReplaceError) as excinfo:
        replace_file(target, b"new")
    assert excinfo.value.attempts[0][0] == "write_temp"


_real_replace = os.replace
_real_open = builtins.open


def _writable(path):
    return bool(os.stat(path).st_mode & stat.S_IWRITE)


def test_original_survives_when_nothing_can_replace_it(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"original dictionary")

    def no_rename(src, dst):
        raise OSError("rename not supported")

    def no_open(*args, **kwargs):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(atomic_replace.os, "replace", no_rename)
    monkeypatch.setattr(atomic_replace, "open", no_open, raising=False)

    with pytest.raises(FileReplaceError) as excinfo:
        replace_file(target, b"redacted")

    assert [name for name, _ in excinfo.value.attempts] == [
        "rename",
        "remove_then_rename",
        "clear_readonly_then_rename",
        "overwrite_in_place",
    ]
    assert target.read_bytes() == b"original dictionary"
    assert _leftover_temps(tmp_path) == []


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_read_only_target_uses_clear_readonly_strategy(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"old")
    os.chmod(target, 0o444)

    def locked_while_read_only(src, dst):
        for path in (src, dst):
            if str(path) == str(target) and os.path.exists(target) and not _writable(target):
                raise PermissionError("read-only")
        _real_replace(src, dst)

    monkeypatch.setattr(atomic_replace.os, "replace", locked_while_read_only)

    assert replace_file(target, b"new") == "clear_readonly_then_rename"
    assert target.read_bytes() == b"new"
    assert _writable(target)
    assert _leftover_temps(tmp_path) == []


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_overwrite_retries_after_clearing_readonly(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"old")
    os.chmod(target, 0o444)
    denied = []

    def no_rename(src, dst):
        raise OSError("rename not supported")

    def open_denied_once(path, *args, **kwargs):
        if str(path) == str(target) and not denied:
            denied.append(path)
            raise PermissionError("read-only")
        return _real_open(path, *args, **kwargs)

    monkeypatch.setattr(atomic_replace.os, "replace", no_rename)
    monkeypatch.setattr(atomic_replace, "open", open_denied_once, raising=False)

    assert replace_file(target, b"new") == "overwrite_in_place"
    assert denied
    assert target.read_bytes() == b"new"
    assert _writable(target)
    assert _leftover_temps(tmp_path) == []


class _ShortWriter:
    """File handle that writes a few bytes and then fails."""

    def __init__(self, path):
        self._handle = _real_open(path, "wb")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._handle.close()

    def write(self, data):
        self._handle.write(data[:3])
        self._handle.flush()
        raise OSError("disk full")

    def flush(self):
        self._handle.flush()

    def fileno(self):
        return self._handle.fileno()


def test_failed_swaps_and_partial_overwrite_restore_original(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"original dictionary")

    def temp_never_moves(src, dst):
        if str(src).endswith(TEMP_SUFFIX):
            raise OSError("destination locked")
        _real_replace(src, dst)

    monkeypatch.setattr(atomic_replace.os, "replace", temp_never_moves)
    monkeypatch.setattr(atomic_replace, "open", lambda path, mode: _ShortWriter(path), raising=False)

    with pytest.raises(FileReplaceError) as excinfo:
        replace_file(target, b"redacted content")

    assert excinfo.value.backup_path is None
    assert "disk full" in str(excinfo.value)
    assert target.read_bytes() == b"original dictionary"
    assert _leftover_temps(tmp_path) == []


def test_unrestorable_original_keeps_backup_and_temp(tmp_path, monkeypatch):
    target = tmp_path / "a.yaml"
    target.write_bytes(b"original dictionary")

    def only_set_aside(src, dst):
        if str(dst).endswith(BACKUP_SUFFIX):
            _real_replace(src, dst)
            return
        raise OSError("destination locked")

    monkeypatch.setattr(atomic_replace.os, "replace", only_set_aside)
    strategies = [name_and_fn for name_and_fn in DEFAULT_STRATEGIES if name_and_fn[0] == "remove_then_rename"]

    with pytest.raises(FileReplaceError) as excinfo:
        replace_file(target, b"redacted", strategies=strategies)

    err = excinfo.value
    assert not target.exists()
    assert err.backup_path is not None and err.temp_path is not None
    assert Path(err.backup_path).read_bytes() == b"original dictionary"
    assert Path(err.temp_path).read_bytes() == b"redacted"
    assert "original kept at" in str(err)
