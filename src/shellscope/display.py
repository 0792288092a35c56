"""Rich rendering for scan results.

Table layouts:
    Alias | Command | Source
    Function | Description | Usage | Source
"""

import json
from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from shellscope.models import AliasEntry, ConfigSource, FunctionEntry, ParsedRecord, ScanWarning

MAX_DESCRIPTION_LENGTH = 80
EMPTY_CELL = "-"


def truncate(text: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    """Shorten ``text`` to ``limit`` characters, ending in '...'."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def make_console(plain: bool = False, stderr: bool = False) -> Console:
    """Console for tables (stdout) or warnings (stderr)."""
    return Console(stderr=stderr, no_color=plain, highlight=False, soft_wrap=False)


def _table(title: str, plain: bool) -> Table:
    return Table(
        title=title,
        show_header=True,
        header_style="" if plain else "bold",
        box=box.ASCII if plain else box.ROUNDED,
    )


def build_alias_table(aliases: Sequence[AliasEntry], plain: bool = False) -> Table:
    table = _table("Shell Aliases", plain)
    table.add_column("Alias", style="" if plain else "cyan", no_wrap=True)
    table.add_column("Command", style="" if plain else "green")
    table.add_column("Source", style="" if plain else "yellow", no_wrap=True)

    for alias in sorted(aliases, key=lambda a: a.name):
        # Text() keeps rich from interpreting [brackets] in commands as markup
        table.add_row(Text(alias.name), Text(alias.command), Text(alias.source_name))
    return table


def build_function_table(functions: Sequence[FunctionEntry], plain: bool = False) -> Table:
    table = _table("Shell Functions", plain)
    table.add_column("Function", style="" if plain else "cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Usage", style="" if plain else "green")
    table.add_column("Source", style="" if plain else "yellow", no_wrap=True)

    for function in sorted(functions, key=lambda f: (f.name, f.source_name)):
        table.add_row(
            Text(function.name),
            Text(truncate(function.description) or EMPTY_CELL),
            Text(function.usage or EMPTY_CELL),
            Text(function.source_name),
        )
    return table


def build_sources_table(sources: Sequence[ConfigSource], plain: bool = False) -> Table:
    table = _table("Config Files", plain)
    table.add_column("Source", style="" if plain else "yellow", no_wrap=True)
    table.add_column("Path")
    for source in sources:
        table.add_row(Text(source.name), Text(str(source.path)))
    return table


def print_warnings(console: Console, warnings: Sequence[ScanWarning]) -> None:
    for warning in warnings:
        console.print(Text(f"Warning: {warning}", style="yellow"))


def pluralize(noun: str) -> str:
    return f"{noun}es" if noun.endswith("s") else f"{noun}s"


def print_summary(console: Console, count: int, noun: str) -> None:
    plural = noun if count == 1 else pluralize(noun)
    console.print()
    console.print(Text.assemble("Found ", (str(count), "bold"), f" {plural}"))


def records_to_json(records: Sequence[ParsedRecord], warnings: Sequence[ScanWarning]) -> str:
    """Serialize records and warnings for --json output."""
    payload = {
        "records": [record.to_dict() for record in records],
        "warnings": [
            {
                "kind": w.kind.value,
                "source": w.source,
                "message": w.message,
                "start_line": w.start_line,
                "end_line": w.end_line,
            }
            for w in warnings
        ],
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "build_alias_table",
    "build_function_table",
    "build_sources_table",
    "make_console",
    "pluralize",
    "print_summary",
    "print_warnings",
    "records_to_json",
    "truncate",
]
