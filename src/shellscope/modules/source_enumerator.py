"""Shell configuration file discovery.

Philosophy:
- Single responsibility: resolve candidate filenames against a home directory
- Standard library only (no external dependencies)
- Missing files are normal, not errors

Public API (the "studs"):
    DEFAULT_CANDIDATE_FILES: Canonical priority order
    EnumerationResult: Sources plus warnings
    SourceEnumerator: Main enumerator class
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from shellscope.models import ConfigSource, ScanWarning, WarningKind

logger = logging.getLogger(__name__)

# Shell-specific files first, generic ones last
DEFAULT_CANDIDATE_FILES: tuple[str, ...] = (
    ".zshrc",
    ".zsh_aliases",
    ".zsh_functions",
    ".bashrc",
    ".bash_profile",
    ".bash_aliases",
    ".bash_functions",
    ".profile",
    ".aliases",
)


@dataclass(frozen=True)
class EnumerationResult:
    """Readable sources in priority order and warnings for unusable ones."""

    sources: tuple[ConfigSource, ...] = ()
    warnings: tuple[ScanWarning, ...] = ()


class SourceEnumerator:
    """Resolve the ordered set of existing, readable config files."""

    def __init__(
        self, filenames: Sequence[str] = DEFAULT_CANDIDATE_FILES, home: Path | None = None
    ):
        """Initialize enumerator.

        Args:
            filenames: Candidate filenames in priority order
            home: Directory to resolve against (default: Path.home())
        """
        self.filenames = tuple(filenames)
        self.home = home or Path.home()

    def enumerate(self) -> EnumerationResult:
        """Check each candidate for existence and readability.

        Example:
            >>> result = SourceEnumerator([".zshrc"], home=Path("/nonexistent")).enumerate()
            >>> result.sources
            ()
        """
        sources: list[ConfigSource] = []
        warnings: list[ScanWarning] = []
        seen: set[Path] = set()

        for filename in self.filenames:
            path = self.home / filename
            if path in seen:
                continue
            seen.add(path)

            if not path.exists():
                logger.debug(f"Skipping missing config file: {path}")
                continue

            source = ConfigSource.from_path(path)
            if not path.is_file():
                warnings.append(
                    ScanWarning(WarningKind.IO, source.name, f"Not a regular file: {path}")
                )
                continue
            if not os.access(path, os.R_OK):
                warnings.append(
                    ScanWarning(WarningKind.IO, source.name, f"Permission denied: {path}")
                )
                continue

            sources.append(source)

        logger.debug(f"Found {len(sources)} config file(s) in {self.home}")
        return EnumerationResult(sources=tuple(sources), warnings=tuple(warnings))


__all__ = ["DEFAULT_CANDIDATE_FILES", "EnumerationResult", "SourceEnumerator"]
