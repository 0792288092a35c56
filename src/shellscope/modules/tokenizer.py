"""Statement segmentation for shell startup files.

Philosophy:
- Single responsibility: turn raw script text into logical statements
- Standard library only (no external dependencies)
- Pure cursor transitions, so the scanner state is testable in isolation
- Malformed input costs one statement, never the whole file

Public API (the "studs"):
    QuoteMode: Quote state enum
    Cursor: Immutable scan state
    advance: Pure single-character transition
    scan: Fold a string through advance
    FunctionHead: Recognized function definition head
    match_function_head: Recognize a function head line
    StatementSegmenter: Split text into RawStatements and ParseFailures
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum

from shellscope.models import ParseFailure, RawStatement, StatementKind

logger = logging.getLogger(__name__)

# Characters after which a '#' starts a comment
WORD_BREAKS = frozenset(" \t\n;|&()")

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# function NAME() {   /   function NAME {   /   function NAME()
KEYWORD_HEAD = re.compile(r"^\s*function\s+(?P<name>[^\s(){}]+)\s*(?:\(\s*\))?\s*(?P<rest>.*)$")
# NAME() {   /   NAME()
POSIX_HEAD = re.compile(r"^\s*(?P<name>[^\s(){}=#'\"$;|&]+)\s*\(\s*\)\s*(?P<rest>.*)$")

ALIAS_START = re.compile(r"^\s*alias\s")

HEREDOC = re.compile(
    r"(?<!<)<<(?P<strip>-?)\s*(?P<quote>['\"]?)(?P<delim>[A-Za-z_][A-Za-z0-9_]*)(?P=quote)"
)


class QuoteMode(Enum):
    """Quote state of the scanner."""

    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"


@dataclass(frozen=True)
class Cursor:
    """Scanner state between two characters.

    The cursor never changes in place; ``advance`` returns a new one.
    """

    quote: QuoteMode = QuoteMode.NONE
    escape: bool = False
    depth: int = 0
    in_comment: bool = False
    at_word_start: bool = True

    @property
    def is_balanced(self) -> bool:
        """True when a newline here would end a simple statement."""
        return self.quote is QuoteMode.NONE and self.depth == 0 and not self.escape


def advance(cursor: Cursor, ch: str) -> Cursor:
    """Return the cursor state after consuming ``ch``."""
    if cursor.in_comment:
        if ch == "\n":
            return replace(cursor, in_comment=False, at_word_start=True)
        return cursor

    if cursor.escape:
        return replace(cursor, escape=False, at_word_start=False)

    if cursor.quote is QuoteMode.SINGLE:
        if ch == "'":
            return replace(cursor, quote=QuoteMode.NONE, at_word_start=False)
        return cursor

    if cursor.quote is QuoteMode.DOUBLE:
        if ch == "\\":
            return replace(cursor, escape=True)
        if ch == '"':
            return replace(cursor, quote=QuoteMode.NONE, at_word_start=False)
        return cursor

    if ch == "\\":
        return replace(cursor, escape=True, at_word_start=False)
    if ch == "'":
        return replace(cursor, quote=QuoteMode.SINGLE, at_word_start=False)
    if ch == '"':
        return replace(cursor, quote=QuoteMode.DOUBLE, at_word_start=False)
    if ch == "#" and cursor.at_word_start:
        return replace(cursor, in_comment=True)
    if ch == "{":
        return replace(cursor, depth=cursor.depth + 1, at_word_start=False)
    if ch == "}":
        return replace(cursor, depth=max(cursor.depth - 1, 0), at_word_start=False)
    return replace(cursor, at_word_start=ch in WORD_BREAKS)


def scan(text: str, cursor: Cursor | None = None) -> Cursor:
    """Fold ``text`` through ``advance`` starting from ``cursor``."""
    state = cursor or Cursor()
    for ch in text:
        state = advance(state, ch)
    return state


@dataclass(frozen=True)
class FunctionHead:
    """A line that opens a function definition."""

    name: str
    rest: str

    @property
    def has_inline_brace(self) -> bool:
        return self.rest.startswith("{")


def match_function_head(line: str) -> FunctionHead | None:
    """Recognize ``function NAME() {``, ``function NAME {`` and ``NAME() {``.

    The opening brace may be absent here and appear on the following line.
    Names that are not shell identifiers are rejected.
    """
    match = KEYWORD_HEAD.match(line) or POSIX_HEAD.match(line)
    if not match:
        return None

    name = match.group("name")
    rest = match.group("rest").strip()
    if not IDENTIFIER.match(name):
        return None
    if rest and not rest.startswith("{"):
        return None
    return FunctionHead(name=name, rest=rest)


def in_arithmetic(text: str) -> bool:
    """True when ``text`` ends inside an open ``((`` or ``$((`` expression."""
    return text.count("((") > text.count("))")


def looks_like_statement_start(line: str) -> bool:
    """Heuristic used to resume scanning after a parse failure."""
    stripped = line.strip()
    if not stripped or stripped.startswith(("#", "}")):
        return False
    if ALIAS_START.match(line) or match_function_head(line):
        return True
    return not line[0].isspace()


def is_top_level_definition(line: str) -> bool:
    """A non-indented alias or function head."""
    if not line or line[0].isspace():
        return False
    return bool(ALIAS_START.match(line) or match_function_head(line))


@dataclass(frozen=True)
class SegmentResult:
    """Statements and failures from one segmentation pass."""

    statements: tuple[RawStatement, ...] = ()
    failures: tuple[ParseFailure, ...] = ()


class StatementSegmenter:
    """Split script text into logical statements.

    Example:
        >>> result = StatementSegmenter().segment("alias ll='ls -la'\\n")
        >>> result.statements[0].text
        "alias ll='ls -la'"
    """

    def segment(self, text: str) -> SegmentResult:
        lines = text.splitlines()
        statements: list[RawStatement] = []
        failures: list[ParseFailure] = []

        index = 0
        while index < len(lines):
            stripped = lines[index].strip()
            if not stripped or stripped.startswith("#"):
                index += 1
                continue

            outcome = self._consume(lines, index)
            if isinstance(outcome, ParseFailure):
                logger.debug(
                    f"Parse failure at lines {outcome.start_line}-{outcome.end_line}: "
                    f"{outcome.reason}"
                )
                failures.append(outcome)
                index = self._resume_index(lines, index + 1)
            else:
                statements.append(outcome)
                index = outcome.end_line

        return SegmentResult(statements=tuple(statements), failures=tuple(failures))

    def _consume(self, lines: list[str], start: int) -> RawStatement | ParseFailure:
        head = match_function_head(lines[start])
        is_function = head is not None and self._has_body_brace(lines, start, head)

        cursor = Cursor()
        parts: list[str] = []
        offset = 0
        body_start: int | None = None
        body_end: int | None = None
        heredoc: tuple[str, bool] | None = None

        for index in range(start, len(lines)):
            line = lines[index]

            if heredoc is not None:
                delimiter, strip_tabs = heredoc
                candidate = line.lstrip("\t") if strip_tabs else line
                closed = candidate.strip() == delimiter
                if closed:
                    heredoc = None
                # Simple statements blank out here-document bodies
                kept = line if is_function or closed else ""
                parts.append(kept)
                offset += len(kept) + 1
                if closed and not is_function and cursor.is_balanced:
                    return RawStatement(
                        start_line=start + 1, end_line=index + 1, text="\n".join(parts)
                    )
                continue

            parts.append(line)

            for ch in line:
                following = advance(cursor, ch)
                if is_function:
                    if body_start is None and cursor.depth == 0 and following.depth == 1:
                        body_start = offset
                    elif (
                        body_start is not None
                        and body_end is None
                        and cursor.depth == 1
                        and following.depth == 0
                    ):
                        body_end = offset
                cursor = following
                offset += 1

            continued = cursor.escape and cursor.quote is QuoteMode.NONE
            cursor = advance(cursor, "\n")
            offset += 1

            if cursor.quote is QuoteMode.NONE:
                heredoc = self._heredoc_after(line)

            is_last = index + 1 >= len(lines)
            end_line = index + 1

            if is_function:
                if body_end is not None:
                    return RawStatement(
                        start_line=start + 1,
                        end_line=end_line,
                        text="\n".join(parts),
                        kind=StatementKind.FUNCTION,
                        body_start=body_start,
                        body_end=body_end,
                    )
            elif heredoc is None and cursor.quote is QuoteMode.NONE and cursor.depth == 0:
                if not continued or is_last:
                    return RawStatement(
                        start_line=start + 1, end_line=end_line, text="\n".join(parts)
                    )
            elif (
                cursor.quote is not QuoteMode.NONE
                and not is_last
                and is_top_level_definition(lines[index + 1])
            ):
                return ParseFailure(start + 1, end_line, "unterminated quote")

        if heredoc is not None:
            reason = f"unterminated here-document (missing {heredoc[0]})"
        elif cursor.quote is not QuoteMode.NONE:
            reason = "unterminated quote"
        else:
            reason = "unbalanced braces"
        return ParseFailure(start + 1, len(lines), reason)

    @staticmethod
    def _has_body_brace(lines: list[str], start: int, head: FunctionHead) -> bool:
        if head.has_inline_brace:
            return True
        for line in lines[start + 1 :]:
            stripped = line.strip()
            if not stripped:
                continue
            return stripped.startswith("{")
        return False

    @staticmethod
    def _heredoc_after(line: str) -> tuple[str, bool] | None:
        for match in HEREDOC.finditer(line):
            before = line[: match.start()]
            if in_arithmetic(before):
                continue
            prefix = scan(before)
            if prefix.quote is QuoteMode.NONE and not prefix.in_comment:
                return match.group("delim"), bool(match.group("strip"))
        return None

    @staticmethod
    def _resume_index(lines: list[str], index: int) -> int:
        while index < len(lines) and not looks_like_statement_start(lines[index]):
            index += 1
        return index


__all__ = [
    "Cursor",
    "FunctionHead",
    "QuoteMode",
    "SegmentResult",
    "StatementSegmenter",
    "advance",
    "in_arithmetic",
    "is_top_level_definition",
    "looks_like_statement_start",
    "match_function_head",
    "scan",
]
