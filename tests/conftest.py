import os
from datetime import datetime, timedelta, timezone

import pytest

from claudeswitch.config import SwitchContext
from claudeswitch.credentials import CredentialSource
from claudeswitch.reporter import Reporter

FIXED_TIME = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=8)))


class RecordingReporter(Reporter):
    def __init__(self):
        self.messages = []

    def emit(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def texts(self, level=None):
        return [text for lvl, text in self.messages if level is None or lvl == level]


@pytest.fixture(autouse=True)
def restore_environ():
    """Keep global environment stable across CLI invocations."""
    original = os.environ.copy()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@pytest.fixture()
def temp_config_dir(tmp_path, monkeypatch):
    """Put claude-switch config and home directories in a temp location."""
    import platform

    home_dir = tmp_path / "home"
    config_root = tmp_path / "xdg"
    claude_dir = home_dir / ".claude"
    home_dir.mkdir(parents=True, exist_ok=True)
    config_root.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_root))
    monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(claude_dir))
    monkeypatch.delenv("ZAI_AUTH_TOKEN", raising=False)

    if platform.system() == "Windows":
        from pathlib import Path
        monkeypatch.setattr(Path, "home", lambda: home_dir)

    return claude_dir


@pytest.fixture()
def context(temp_config_dir):
    return SwitchContext(config_dir=temp_config_dir, clock=lambda: FIXED_TIME)


@pytest.fixture()
def reporter():
    return RecordingReporter()


@pytest.fixture()
def make_credentials(context, reporter):
    """Credential source fed from fixed values instead of a terminal."""
    def factory(token="", environ=None, save=False):
        return CredentialSource(
            context,
            reporter,
            environ=environ if environ is not None else {},
            prompt=lambda: token,
            confirm=lambda: save,
        )
    return factory
