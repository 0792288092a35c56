"""Alias definition parsing.

Philosophy:
- Single responsibility: recognize ``alias NAME=VALUE`` and nothing else
- Standard library only (no external dependencies)
- Lines that are not aliases are ignored, not reported

Public API (the "studs"):
    AliasParser: Parses statements and live session listings
    split_commands: Shell-ish word splitting used by the parser
"""

import logging

from shellscope.models import AliasEntry, Origin, RawStatement
from shellscope.modules.tokenizer import StatementSegmenter

logger = logging.getLogger(__name__)

COMMAND_SEPARATORS = frozenset(";&|\n")
BLANKS = frozenset(" \t")
FORBIDDEN_NAME_CHARS = frozenset(" \t\n=\"'")


def split_commands(text: str) -> list[list[str]]:
    """Split ``text`` into simple commands made of unquoted words.

    Quote characters are removed. Backslash escapes inside double quotes are
    kept verbatim; an unquoted backslash escape keeps only the escaped
    character. An unquoted ``#`` at the start of a word comments out the rest
    of the line.
    """
    commands: list[list[str]] = [[]]
    word: list[str] | None = None
    quote: str | None = None
    i = 0
    n = len(text)

    def finish_word() -> None:
        nonlocal word
        if word is not None:
            commands[-1].append("".join(word))
            word = None

    while i < n:
        ch = text[i]

        if quote == "'":
            if ch == "'":
                quote = None
            else:
                word.append(ch)  # type: ignore[union-attr]
        elif quote == '"':
            if ch == "\\" and i + 1 < n:
                word.extend((ch, text[i + 1]))  # type: ignore[union-attr]
                i += 1
            elif ch == '"':
                quote = None
            else:
                word.append(ch)  # type: ignore[union-attr]
        elif ch == "\\" and i + 1 < n:
            # Backslash-newline is a line continuation and adds nothing
            if text[i + 1] != "\n":
                if word is None:
                    word = []
                word.append(text[i + 1])
            i += 1
        elif ch in "'\"":
            if word is None:
                word = []
            quote = ch
        elif ch in BLANKS:
            finish_word()
        elif ch in COMMAND_SEPARATORS:
            finish_word()
            if commands[-1]:
                commands.append([])
            if ch in "&|" and text[i + 1 : i + 2] == ch:
                i += 1
        elif ch == "#" and word is None:
            while i + 1 < n and text[i + 1] != "\n":
                i += 1
        else:
            if word is None:
                word = []
            word.append(ch)
        i += 1

    finish_word()
    return [command for command in commands if command]


def _is_valid_name(name: str) -> bool:
    return bool(name) and not any(ch in FORBIDDEN_NAME_CHARS for ch in name)


class AliasParser:
    """Extract AliasEntry records from statements."""

    def __init__(self, segmenter: StatementSegmenter | None = None):
        """Initialize alias parser.

        Args:
            segmenter: Segmenter used for live session listings
        """
        self.segmenter = segmenter or StatementSegmenter()

    def parse_statement(
        self, statement: RawStatement, origin: Origin, allow_bare: bool = False
    ) -> list[AliasEntry]:
        """Parse every alias assignment found in one statement.

        Args:
            statement: Segmented statement
            origin: Origin to tag entries with
            allow_bare: Accept ``NAME=VALUE`` without the ``alias`` keyword
                (the zsh listing format)

        Returns:
            AliasEntry list, empty when the statement defines no alias
        """
        line = None if origin.is_live_session else statement.start_line
        entries: list[AliasEntry] = []

        for words in split_commands(statement.text):
            for name, command in self._assignments(words, allow_bare):
                entries.append(AliasEntry(name=name, command=command, origin=origin, line=line))

        return entries

    def parse_text(self, text: str, origin: Origin) -> list[AliasEntry]:
        """Segment ``text`` and parse every statement in it."""
        result = self.segmenter.segment(text)
        entries: list[AliasEntry] = []
        for statement in result.statements:
            entries.extend(self.parse_statement(statement, origin))
        return entries

    def parse_session_listing(self, text: str) -> list[AliasEntry]:
        """Parse the output of the interactive shell's ``alias`` builtin.

        Bash prints ``alias name='value'``; zsh prints ``name=value`` or
        ``name='value'``. Both are accepted.
        """
        origin = Origin.live_session()
        result = self.segmenter.segment(text)
        for failure in result.failures:
            logger.debug(
                f"Skipping malformed session listing lines "
                f"{failure.start_line}-{failure.end_line}: {failure.reason}"
            )

        entries: list[AliasEntry] = []
        for statement in result.statements:
            entries.extend(self.parse_statement(statement, origin, allow_bare=True))
        return entries

    @staticmethod
    def _assignments(words: list[str], allow_bare: bool) -> list[tuple[str, str]]:
        if words[0] == "alias":
            candidates = words[1:]
        elif allow_bare and len(words) == 1:
            candidates = words
        else:
            return []

        assignments: list[tuple[str, str]] = []
        options_done = False
        for word in candidates:
            if not options_done and word.startswith("-") and "=" not in word:
                options_done = word == "--"
                continue
            options_done = True
            if "=" not in word:
                continue
            name, command = word.split("=", 1)
            if not _is_valid_name(name):
                logger.debug(f"Skipping alias with invalid name: {name!r}")
                continue
            assignments.append((name, command))
        return assignments


__all__ = ["AliasParser", "split_commands"]
