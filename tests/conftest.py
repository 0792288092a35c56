"""
Shared test fixtures and configuration for shellscope tests.

This module provides common fixtures used across all test types:
- Temporary home directory with shell startup files
- Isolated configuration file and environment
- Fixed live-session alias listings
"""

from pathlib import Path

import pytest

from shellscope.config_manager import ConfigManager
from shellscope.models import ConfigSource, Origin
from shellscope.modules.session_reader import StaticAliasLister

# ============================================================================
# ISOLATION FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.shellscope/config.toml and env overrides."""
    config_file = tmp_path / "shellscope-config" / "config.toml"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", config_file.parent)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_file)
    for var in ("SHELLSCOPE_SHELL", "SHELLSCOPE_SESSION_TIMEOUT", "SHELLSCOPE_MAX_WORKERS"):
        monkeypatch.delenv(var, raising=False)
    return config_file


# ============================================================================
# DIRECTORY FIXTURES
# ============================================================================


@pytest.fixture
def temp_home_dir(tmp_path, monkeypatch):
    """Temporary home directory for testing.

    Sets HOME environment variable to temporary directory so that nothing
    reads the real user's startup files.
    """
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def write_rc(temp_home_dir):
    """Factory writing a startup file into the temporary home directory."""

    def _write(filename: str, content: str) -> Path:
        path = temp_home_dir / filename
        path.write_text(content)
        return path

    return _write


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================


@pytest.fixture
def zshrc_source(tmp_path):
    """A ConfigSource named 'zshrc' (the file need not exist)."""
    return ConfigSource.from_path(tmp_path / ".zshrc")


@pytest.fixture
def zshrc_origin(zshrc_source):
    return Origin.config_file(zshrc_source)


@pytest.fixture
def bash_session_lister():
    """Live session lister returning a bash-style alias listing."""
    return StaticAliasLister("alias gs='git status -sb'\nalias ll='ls -la'\n")


@pytest.fixture
def empty_session_lister():
    return StaticAliasLister("")
