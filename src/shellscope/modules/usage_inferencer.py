"""Best-effort usage strings for undocumented shell functions.

Signals, strongest first:
- a body line that echoes/prints ``Usage: ...`` is taken as-is
- ``getopts`` adds ``[options]``
- the highest of ``$1``..``$9`` adds ``<param1>`` .. ``<paramN>``
- ``shift``, ``"$@"`` or ``$*`` add a trailing ``[args...]``

Quoting is tracked with the same cursor the segmenter uses. Comments are
ignored everywhere, and single-quoted or escaped text never counts as an
expansion, so ``awk '{print $2}'`` and ``"\\$1"`` add no parameters while
``echo "don't $1"`` does.
"""

import logging
import re
from dataclasses import dataclass

from shellscope.modules.tokenizer import Cursor, QuoteMode, advance

logger = logging.getLogger(__name__)

BODY_USAGE = re.compile(
    r"(?:^|[\s;&|{])(?:echo|printf)\b.*?\bUsage\s*:\s*(?P<text>.*)$", re.IGNORECASE
)
GETOPTS = re.compile(r"\bgetopts\b")
POSITIONAL = re.compile(r"\$\{?(?P<index>[1-9])(?![0-9])")
SHIFT = re.compile(r"(?:^|[\s;&|(])shift\b")
ALL_ARGS = re.compile(r"\$\{?[@*]")

QUOTE_CHARS = re.compile(r"[\"']")
TRAILING_JUNK = " \t;)"
SELF_REFERENCE = re.compile(r"\$\{?(?:0|FUNCNAME(?:\[0\])?)\}?")


@dataclass(frozen=True)
class UsageSignals:
    """What the body says about its arguments."""

    body_usage: str = ""
    uses_getopts: bool = False
    max_positional: int = 0
    variable_arity: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.body_usage or self.uses_getopts or self.max_positional or self.variable_arity
        )


@dataclass(frozen=True)
class BodyViews:
    """Two readings of a function body.

    ``code`` is the body without comments, quotes intact, for ``Usage:``
    lines. ``expansions`` additionally drops single-quoted spans and escaped
    characters, leaving only text where ``$1`` would really expand.
    """

    code: str
    expansions: str


def _strip_noise(body: str) -> BodyViews:
    """Walk the body with the statement cursor so quoting is tracked exactly."""
    code: list[str] = []
    expansions: list[str] = []
    cursor = Cursor()
    for ch in body:
        following = advance(cursor, ch)
        if not following.in_comment:
            code.append(ch)
            single_quoted = QuoteMode.SINGLE in (cursor.quote, following.quote)
            if not (single_quoted or cursor.escape):
                expansions.append(ch)
        cursor = following
    return BodyViews(code="".join(code), expansions="".join(expansions))


def _body_usage(body: str, name: str) -> str:
    for line in body.splitlines():
        match = BODY_USAGE.search(line)
        if match:
            text = QUOTE_CHARS.split(match.group("text"), maxsplit=1)[0]
            text = text.rstrip(TRAILING_JUNK)
            text = text.replace("\\n", "").strip()
            text = SELF_REFERENCE.sub(name, text)
            if text:
                return text
    return ""


class UsageInferencer:
    """Derive a usage string from a function body."""

    def signals(self, name: str, body: str) -> UsageSignals:
        views = _strip_noise(body)
        cleaned = views.expansions
        indexes = [int(m.group("index")) for m in POSITIONAL.finditer(cleaned)]
        return UsageSignals(
            body_usage=_body_usage(views.code, name),
            uses_getopts=bool(GETOPTS.search(cleaned)),
            max_positional=max(indexes, default=0),
            variable_arity=bool(SHIFT.search(cleaned) or ALL_ARGS.search(cleaned)),
        )

    def infer(self, name: str, body: str) -> str:
        """Return ``name`` plus derived tokens, or "" when the body has no signals.

        Example:
            >>> UsageInferencer().infer("killport", "lsof -ti:$1 | xargs kill -9")
            'killport <param1>'
        """
        found = self.signals(name, body)
        if found.body_usage:
            return found.body_usage
        if found.is_empty:
            return ""

        tokens = [name]
        if found.uses_getopts:
            tokens.append("[options]")
        tokens.extend(f"<param{i}>" for i in range(1, found.max_positional + 1))
        if found.variable_arity:
            tokens.append("[args...]")

        usage = " ".join(tokens)
        logger.debug(f"Inferred usage for {name}: {usage}")
        return usage


__all__ = ["UsageInferencer", "UsageSignals"]
