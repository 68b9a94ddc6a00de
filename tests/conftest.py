import os

import pytest

from iceminus.core.logging import UnifiedLogger


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep ICEMINUS_* settings and stray .env files out of every test."""
    for name in list(os.environ):
        if name.startswith("ICEMINUS_") or name == "SENTRY_DSN":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    UnifiedLogger.reset()
    yield
    UnifiedLogger.reset()
