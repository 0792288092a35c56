"""Comment-block documentation for shell functions.

Three comment dialects are understood, each by its own classifier:

- explicit tags: ``# desc: ...`` / ``# usage: ...``
- structured tags: ``# @description ...`` / ``# @param NAME TEXT``
- plain prose, with an optional inline ``Usage: ...``

Classifiers are tried in priority order for every line and the first match
wins. A comment block is the run of comment lines directly above the
definition; a blank line ends it.
"""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from shellscope.models import CommentBlock

logger = logging.getLogger(__name__)

EXPLICIT_DESCRIPTION = re.compile(r"^(?:desc|description)\s*:\s*(?P<text>.*)$", re.IGNORECASE)
EXPLICIT_USAGE = re.compile(r"^(?:usage|use)\s*:\s*(?P<text>.*)$", re.IGNORECASE)
STRUCTURED_DESCRIPTION = re.compile(r"^@(?:description|desc)\b\s*:?\s*(?P<text>.*)$")
STRUCTURED_PARAM = re.compile(r"^@(?:param|arg)\s+(?P<name>\S+)(?:\s+(?P<text>.*))?$")
INLINE_USAGE = re.compile(r"\bUsage\s*:", re.IGNORECASE)


class Dialect(Enum):
    """Documentation comment conventions."""

    EXPLICIT_TAG = "explicit_tag"
    STRUCTURED_TAG = "structured_tag"
    PLAIN = "plain"


class DocField(Enum):
    """Which part of the documentation a line contributes to."""

    DESCRIPTION = "description"
    USAGE = "usage"
    PARAM = "param"


@dataclass(frozen=True)
class DocLine:
    """One classified piece of a comment line."""

    dialect: Dialect
    field: DocField
    value: str


@dataclass(frozen=True)
class Documentation:
    """Description and usage extracted for one function."""

    description: str = ""
    usage: str = ""

    @property
    def has_usage(self) -> bool:
        return bool(self.usage)


Classifier = Callable[[str], list[DocLine] | None]


def comment_text(line: str) -> str:
    """Strip leading whitespace, the ``#`` run and surrounding blanks."""
    return line.strip().lstrip("#").strip()


def classify_explicit_tag(text: str) -> list[DocLine] | None:
    match = EXPLICIT_DESCRIPTION.match(text)
    if match:
        return [DocLine(Dialect.EXPLICIT_TAG, DocField.DESCRIPTION, match.group("text").strip())]
    match = EXPLICIT_USAGE.match(text)
    if match:
        return [DocLine(Dialect.EXPLICIT_TAG, DocField.USAGE, match.group("text").strip())]
    return None


def classify_structured_tag(text: str) -> list[DocLine] | None:
    match = STRUCTURED_DESCRIPTION.match(text)
    if match:
        return [
            DocLine(Dialect.STRUCTURED_TAG, DocField.DESCRIPTION, match.group("text").strip())
        ]
    match = STRUCTURED_PARAM.match(text)
    if match:
        return [DocLine(Dialect.STRUCTURED_TAG, DocField.PARAM, match.group("name"))]
    return None


def classify_plain(text: str) -> list[DocLine] | None:
    """Fallback: prose, with an inline ``Usage:`` split off."""
    if not text:
        return None
    match = INLINE_USAGE.search(text)
    if not match:
        return [DocLine(Dialect.PLAIN, DocField.DESCRIPTION, text)]

    pieces = []
    before = text[: match.start()].strip()
    after = text[match.end() :].strip()
    if before:
        pieces.append(DocLine(Dialect.PLAIN, DocField.DESCRIPTION, before))
    if after:
        pieces.append(DocLine(Dialect.PLAIN, DocField.USAGE, after))
    return pieces


CLASSIFIERS: tuple[Classifier, ...] = (
    classify_explicit_tag,
    classify_structured_tag,
    classify_plain,
)


class DocExtractor:
    """Associate a comment block with a definition and classify it."""

    def __init__(self, classifiers: Sequence[Classifier] = CLASSIFIERS):
        self.classifiers = tuple(classifiers)

    def comment_block(self, lines: Sequence[str], start_line: int) -> CommentBlock:
        """Collect the contiguous comment lines above ``start_line`` (1-based).

        Stops at the first blank line, non-comment line, or shebang.
        """
        collected: list[str] = []
        index = start_line - 2
        while index >= 0:
            stripped = lines[index].strip()
            if not stripped.startswith("#") or stripped.startswith("#!"):
                break
            collected.append(lines[index])
            index -= 1

        collected.reverse()
        return CommentBlock(start_line=index + 2, lines=tuple(collected))

    def classify(self, block: CommentBlock) -> list[DocLine]:
        doc_lines: list[DocLine] = []
        for line in block.lines:
            text = comment_text(line)
            for classifier in self.classifiers:
                result = classifier(text)
                if result is not None:
                    doc_lines.extend(result)
                    break
        return doc_lines

    def extract(self, lines: Sequence[str], start_line: int, function_name: str) -> Documentation:
        """Build the Documentation for a function defined at ``start_line``."""
        block = self.comment_block(lines, start_line)
        if block.is_empty:
            return Documentation()
        return self.resolve(self.classify(block), function_name)

    @staticmethod
    def resolve(doc_lines: Sequence[DocLine], function_name: str) -> Documentation:
        """Pick description and usage by dialect priority."""

        def values(dialects: tuple[Dialect, ...], field: DocField) -> list[str]:
            return [d.value for d in doc_lines if d.dialect in dialects and d.field is field]

        tagged = (Dialect.EXPLICIT_TAG, Dialect.STRUCTURED_TAG)
        descriptions = [v for v in values(tagged, DocField.DESCRIPTION) if v]
        if not descriptions:
            descriptions = values((Dialect.PLAIN,), DocField.DESCRIPTION)
        description = " ".join(descriptions)

        usage = ""
        explicit = [v for v in values((Dialect.EXPLICIT_TAG,), DocField.USAGE) if v]
        params = values((Dialect.STRUCTURED_TAG,), DocField.PARAM)
        plain = values((Dialect.PLAIN,), DocField.USAGE)
        if explicit:
            usage = explicit[-1]
        elif params:
            usage = " ".join([function_name, *(f"<{p}>" for p in params)])
        elif plain:
            usage = plain[-1]

        return Documentation(description=description, usage=usage)


__all__ = [
    "CLASSIFIERS",
    "Dialect",
    "DocExtractor",
    "DocField",
    "DocLine",
    "Documentation",
    "classify_explicit_tag",
    "classify_plain",
    "classify_structured_tag",
    "comment_text",
]
