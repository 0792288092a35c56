"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores which startup files to scan, which shell to ask for live aliases, and
how long to wait for it.

Precedence (highest first):
- Environment variables (SHELLSCOPE_SHELL, SHELLSCOPE_SESSION_TIMEOUT,
  SHELLSCOPE_MAX_WORKERS)
- ~/.shellscope/config.toml (or --config PATH)
- Built-in defaults
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for Python versions that ship tomllib
    try:
        import tomllib as tomli  # type: ignore[import,no-redef]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

from shellscope.exceptions import ConfigError
from shellscope.modules.source_enumerator import DEFAULT_CANDIDATE_FILES

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT = 5.0
DEFAULT_MAX_WORKERS = 4


def _get_env_float(env_var: str, default: float) -> float:
    """Get float config from environment with safe fallback."""
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {env_var}, using default: {default}")
        return default
    if value <= 0:
        logger.warning(f"{env_var} must be positive, using default: {default}")
        return default
    return value


def _get_env_int(env_var: str, default: int) -> int:
    """Get integer config from environment with safe fallback."""
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {env_var}, using default: {default}")
        return default
    if value < 1:
        logger.warning(f"{env_var} must be at least 1, using default: {default}")
        return default
    return value


@dataclass
class ShellScopeConfig:
    """shellscope configuration data."""

    candidate_files: list[str] = field(default_factory=lambda: list(DEFAULT_CANDIDATE_FILES))
    shell: str | None = None  # None -> $SHELL, then /bin/bash
    session_timeout: float = DEFAULT_SESSION_TIMEOUT
    include_session: bool = True
    max_workers: int = DEFAULT_MAX_WORKERS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        # TOML has no null
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShellScopeConfig":
        """Create from dictionary.

        Raises:
            ConfigError: If a value has the wrong type
        """
        candidate_files = data.get("candidate_files", list(DEFAULT_CANDIDATE_FILES))
        if not isinstance(candidate_files, list) or not all(
            isinstance(name, str) for name in candidate_files
        ):
            raise ConfigError("candidate_files must be a list of file names")

        try:
            session_timeout = float(data.get("session_timeout", DEFAULT_SESSION_TIMEOUT))
            max_workers = int(data.get("max_workers", DEFAULT_MAX_WORKERS))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if session_timeout <= 0:
            raise ConfigError("session_timeout must be positive")
        if max_workers < 1:
            raise ConfigError("max_workers must be at least 1")

        return cls(
            candidate_files=list(candidate_files),
            shell=data.get("shell"),
            session_timeout=session_timeout,
            include_session=bool(data.get("include_session", True)),
            max_workers=max_workers,
        )

    def with_env_overrides(self) -> "ShellScopeConfig":
        """Return a copy with environment variable overrides applied."""
        return ShellScopeConfig(
            candidate_files=list(self.candidate_files),
            shell=os.getenv("SHELLSCOPE_SHELL") or self.shell,
            session_timeout=_get_env_float("SHELLSCOPE_SESSION_TIMEOUT", self.session_timeout),
            include_session=self.include_session,
            max_workers=_get_env_int("SHELLSCOPE_MAX_WORKERS", self.max_workers),
        )


class ConfigManager:
    """Manage shellscope configuration file.

    Configuration is stored at ~/.shellscope/config.toml with owner-only
    permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".shellscope"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path was given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> ShellScopeConfig:
        """Load configuration from file, then apply environment overrides.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            ShellScopeConfig object

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ShellScopeConfig().with_env_overrides()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return ShellScopeConfig.from_dict(data).with_env_overrides()

    @classmethod
    def save_config(cls, config: ShellScopeConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Existing comments and formatting are preserved; the write goes through
        a temporary file and an atomic rename.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Returns:
            Path written

        Raises:
            ConfigError: If saving fails
        """
        config_path = (
            Path(custom_path).expanduser().resolve() if custom_path else cls.DEFAULT_CONFIG_FILE
        )
        temp_path = config_path.with_suffix(".tmp")

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()
                doc.add(tomlkit.comment("shellscope configuration"))

            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

        logger.debug(f"Saved config to: {config_path}")
        return config_path


__all__ = ["ConfigManager", "ShellScopeConfig"]
