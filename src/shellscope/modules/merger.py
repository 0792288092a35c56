"""Merge, deduplicate and filter parsed records.

Alias priority mirrors an interactive shell: what the live session reports
wins over any file, and an earlier startup file wins over a later one. Inside a
single file the last definition is the one the shell ends up with.

Functions are never deduplicated across files.
"""

import logging
from collections.abc import Iterable, Sequence

from shellscope.models import AliasEntry, FileScan, ParsedRecord

logger = logging.getLogger(__name__)


def last_definition_wins(aliases: Iterable[AliasEntry]) -> list[AliasEntry]:
    """Collapse same-name aliases from one origin, keeping the final value."""
    by_name: dict[str, AliasEntry] = {}
    for entry in aliases:
        by_name[entry.name] = entry
    return list(by_name.values())


def merge(
    session_aliases: Sequence[AliasEntry], file_scans: Sequence[FileScan]
) -> list[ParsedRecord]:
    """Combine all records into one ordered, alias-unique sequence.

    Args:
        session_aliases: Aliases from the live session (highest priority)
        file_scans: Per-source results in enumeration order

    Returns:
        Aliases (session first, then sources in order) followed by functions
    """
    merged: dict[str, AliasEntry] = {}

    for entry in last_definition_wins(session_aliases):
        merged.setdefault(entry.name, entry)

    for scan in file_scans:
        for entry in last_definition_wins(scan.aliases):
            kept = merged.get(entry.name)
            if kept is not None:
                logger.debug(
                    f"Alias {entry.name} from {entry.source_name} shadowed by {kept.source_name}"
                )
                continue
            merged[entry.name] = entry

    functions = [function for scan in file_scans for function in scan.functions]
    return [*merged.values(), *functions]


def _normalize_source(name: str) -> str:
    return name.lstrip(".")


def filter_records(
    records: Iterable[ParsedRecord], pattern: str | None = None, source: str | None = None
) -> list[ParsedRecord]:
    """Apply the post-parse filters.

    Args:
        records: Records to filter
        pattern: Case-insensitive substring matched against name,
            command/description, usage, and source
        source: Exact source name (``zshrc`` or ``.zshrc``)

    Returns:
        Matching records in their original order
    """
    needle = pattern.lower() if pattern else None
    wanted_source = _normalize_source(source) if source else None

    selected: list[ParsedRecord] = []
    for record in records:
        if wanted_source is not None and record.source_name != wanted_source:
            continue
        if needle is not None and not any(
            needle in value.lower() for value in record.search_fields()
        ):
            continue
        selected.append(record)
    return selected


__all__ = ["filter_records", "last_definition_wins", "merge"]
