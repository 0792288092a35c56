"""Custom exceptions for shellscope."""


class ShellScopeError(Exception):
    """Base exception for shellscope errors."""

    pass


class ConfigError(ShellScopeError):
    """Raised when configuration operations fail."""

    pass


class SessionReadError(ShellScopeError):
    """Live shell session could not be listed (spawn, exit code, or timeout)."""

    pass
