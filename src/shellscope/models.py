"""Value records produced by a shellscope scan.

Every record is a frozen dataclass created once by the pipeline stage that owns
it. Nothing here is mutated after construction, so records can cross thread
boundaries freely.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

SESSION_SOURCE_NAME = "session"


class OriginKind(Enum):
    """Where a record came from."""

    LIVE_SESSION = "live_session"
    CONFIG_FILE = "config_file"


class StatementKind(Enum):
    """Shape of a segmented statement."""

    SIMPLE = "simple"
    FUNCTION = "function"


class WarningKind(Enum):
    """Non-fatal problem categories surfaced alongside scan results."""

    IO = "io"
    PROCESS = "process"
    PARSE = "parse"


@dataclass(frozen=True)
class ConfigSource:
    """A shell configuration file and its short display name."""

    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> "ConfigSource":
        """Build a source whose name is the filename without its leading dot."""
        return cls(path=path, name=path.name.lstrip(".") or path.name)


@dataclass(frozen=True)
class Origin:
    """Provenance of a record: the live session or a specific config file."""

    kind: OriginKind
    source: ConfigSource | None = None

    @classmethod
    def live_session(cls) -> "Origin":
        return cls(kind=OriginKind.LIVE_SESSION)

    @classmethod
    def config_file(cls, source: ConfigSource) -> "Origin":
        return cls(kind=OriginKind.CONFIG_FILE, source=source)

    @property
    def is_live_session(self) -> bool:
        return self.kind is OriginKind.LIVE_SESSION

    @property
    def display_name(self) -> str:
        if self.source is None:
            return SESSION_SOURCE_NAME
        return self.source.name


@dataclass(frozen=True)
class RawStatement:
    """A contiguous span of source text produced by the segmenter.

    Line numbers are 1-based and inclusive. For FUNCTION statements
    ``body_start`` and ``body_end`` are the offsets in ``text`` of the opening
    and the matching closing brace.
    """

    start_line: int
    end_line: int
    text: str
    kind: StatementKind = StatementKind.SIMPLE
    body_start: int | None = None
    body_end: int | None = None

    @property
    def body(self) -> str:
        """Text between the braces, exclusive of the braces themselves."""
        if self.body_start is None or self.body_end is None:
            return ""
        return self.text[self.body_start + 1 : self.body_end]


@dataclass(frozen=True)
class ParseFailure:
    """A statement the segmenter could not terminate."""

    start_line: int
    end_line: int
    reason: str


@dataclass(frozen=True)
class CommentBlock:
    """Contiguous comment lines directly above a definition, top to bottom."""

    start_line: int
    lines: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class AliasEntry:
    """A name bound to a literal replacement command."""

    name: str
    command: str
    origin: Origin
    line: int | None = None

    record_type = "alias"

    @property
    def source_name(self) -> str:
        return self.origin.display_name

    def search_fields(self) -> tuple[str, ...]:
        return (self.name, self.command, self.source_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.record_type,
            "name": self.name,
            "command": self.command,
            "source": self.source_name,
            "line": self.line,
        }


@dataclass(frozen=True)
class FunctionEntry:
    """A shell function with its documentation and (possibly inferred) usage."""

    name: str
    description: str
    usage: str
    body: str
    origin: Origin
    start_line: int
    end_line: int

    record_type = "function"

    @property
    def source_name(self) -> str:
        return self.origin.display_name

    def search_fields(self) -> tuple[str, ...]:
        return (self.name, self.description, self.usage, self.source_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.record_type,
            "name": self.name,
            "description": self.description,
            "usage": self.usage,
            "source": self.source_name,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


ParsedRecord = AliasEntry | FunctionEntry


@dataclass(frozen=True)
class ScanWarning:
    """Non-fatal problem attached to a source (and optionally a line range)."""

    kind: WarningKind
    source: str
    message: str
    start_line: int | None = None
    end_line: int | None = None

    def __str__(self) -> str:
        location = self.source
        if self.start_line is not None:
            end = self.end_line if self.end_line is not None else self.start_line
            location = f"{self.source}:{self.start_line}-{end}"
        return f"[{self.kind.value}] {location}: {self.message}"


@dataclass(frozen=True)
class FileScan:
    """Everything parsed out of one source before merging."""

    source: ConfigSource
    aliases: tuple[AliasEntry, ...] = ()
    functions: tuple[FunctionEntry, ...] = ()
    warnings: tuple[ScanWarning, ...] = ()


@dataclass(frozen=True)
class ScanResult:
    """Final ordered records plus accumulated warnings."""

    records: tuple[ParsedRecord, ...] = ()
    warnings: tuple[ScanWarning, ...] = field(default_factory=tuple)

    @property
    def aliases(self) -> list[AliasEntry]:
        return [r for r in self.records if isinstance(r, AliasEntry)]

    @property
    def functions(self) -> list[FunctionEntry]:
        return [r for r in self.records if isinstance(r, FunctionEntry)]


__all__ = [
    "SESSION_SOURCE_NAME",
    "AliasEntry",
    "CommentBlock",
    "ConfigSource",
    "FileScan",
    "FunctionEntry",
    "Origin",
    "OriginKind",
    "ParseFailure",
    "ParsedRecord",
    "RawStatement",
    "ScanResult",
    "ScanWarning",
    "StatementKind",
    "WarningKind",
]
