"""shellscope command line interface.

Commands:
    aliases     Show aliases from the live session and config files (default)
    functions   Show documented shell functions from config files
    sources     Show which config files would be scanned
    config      Show or initialize ~/.shellscope/config.toml
"""

import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import click
import tomlkit

from shellscope import __version__
from shellscope.click_group import ShellScopeGroup
from shellscope.config_manager import ConfigManager, ShellScopeConfig
from shellscope.display import (
    build_alias_table,
    build_function_table,
    build_sources_table,
    make_console,
    pluralize,
    print_summary,
    print_warnings,
    records_to_json,
)
from shellscope.exceptions import ConfigError
from shellscope.models import ParsedRecord, ScanResult, ScanWarning
from shellscope.modules.merger import filter_records
from shellscope.scanner import ShellScanner

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Configure logging levels based on verbose flag."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")
    # Scan internals only log at DEBUG; keep them quiet unless asked
    internal_level = logging.DEBUG if verbose else logging.WARNING
    for name in ("shellscope.modules", "shellscope.scanner"):
        logging.getLogger(name).setLevel(internal_level)


def load_config_or_exit(config_path: str | None) -> ShellScopeConfig:
    try:
        return ConfigManager.load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


SCAN_OPTIONS = (
    click.option(
        "--filter",
        "-f",
        "filter_pattern",
        help="Case-insensitive match on name, command/description, usage, or source",
    ),
    click.option("--source", "-s", help="Only show entries from this source (e.g. zshrc)"),
    click.option("--plain", is_flag=True, help="Disable colors and use ASCII table borders"),
    click.option("--json", "as_json", is_flag=True, help="Print records as JSON"),
    click.option("--config", "config_path", help="Config file path"),
    click.option("--verbose", "-v", is_flag=True, help="Show debug logging"),
)


def scan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Apply the options shared by the aliases and functions commands."""
    for option in reversed(SCAN_OPTIONS):
        func = option(func)
    return func


def run_scan(config: ShellScopeConfig, include_session: bool) -> ScanResult:
    try:
        return ShellScanner(config).scan(include_session=include_session)
    except KeyboardInterrupt:
        click.echo("\nInterrupted; no results.", err=True)
        sys.exit(130)


def render(
    records: Sequence[ParsedRecord],
    warnings: Sequence[ScanWarning],
    noun: str,
    table_builder: Callable[..., Any],
    filter_pattern: str | None,
    source: str | None,
    plain: bool,
    as_json: bool,
) -> None:
    if as_json:
        click.echo(records_to_json(records, warnings))
        return

    console = make_console(plain=plain)
    print_warnings(make_console(plain=plain, stderr=True), warnings)

    if filter_pattern:
        console.print(f"Filtering by: {filter_pattern}", markup=False)
    if source:
        console.print(f"Filtering by source: {source}", markup=False)

    if not records:
        console.print(f"No {pluralize(noun)} found matching your criteria.", style="yellow")
        return

    console.print(table_builder(records, plain=plain))
    print_summary(console, len(records), noun)


@click.group(
    cls=ShellScopeGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.pass_context
@click.version_option(version=__version__)
def main(ctx: click.Context) -> None:
    """shellscope - explore shell aliases and functions.

    Reads the live interactive shell session and the well-known startup files
    in your home directory (~/.zshrc, ~/.bashrc, ~/.bash_aliases, ...).

    \b
    COMMANDS:
        aliases     Show aliases (default)
        functions   Show documented functions
        sources     Show which config files are scanned
        config      Show or initialize configuration

    \b
    EXAMPLES:
        $ shellscope
        $ shellscope functions --filter git
        $ shellscope aliases --source zshrc --plain
        $ shellscope functions --json

    \b
    CONFIGURATION:
        Config file: ~/.shellscope/config.toml
        Environment: SHELLSCOPE_SHELL, SHELLSCOPE_SESSION_TIMEOUT, SHELLSCOPE_MAX_WORKERS
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(aliases_command)


@main.command(name="aliases")
@scan_options
@click.option("--no-session", is_flag=True, help="Skip the live shell session")
def aliases_command(
    filter_pattern: str | None = None,
    source: str | None = None,
    plain: bool = False,
    as_json: bool = False,
    config_path: str | None = None,
    verbose: bool = False,
    no_session: bool = False,
) -> None:
    """Show shell aliases.

    Aliases reported by the live session win over file definitions with the
    same name; among files, the earlier startup file wins.

    \b
    Examples:
      $ shellscope aliases
      $ shellscope aliases --filter git
      $ shellscope aliases --source bash_aliases --no-session
    """
    configure_logging(verbose)
    config = load_config_or_exit(config_path)
    result = run_scan(config, include_session=config.include_session and not no_session)

    records = filter_records(result.aliases, filter_pattern, source)
    render(
        records,
        result.warnings,
        "alias",
        build_alias_table,
        filter_pattern,
        source,
        plain,
        as_json,
    )


@main.command(name="functions")
@scan_options
def functions_command(
    filter_pattern: str | None = None,
    source: str | None = None,
    plain: bool = False,
    as_json: bool = False,
    config_path: str | None = None,
    verbose: bool = False,
) -> None:
    """Show shell functions with their documentation.

    Descriptions and usage come from the comment block directly above each
    definition (desc:/usage:, @description/@param, or plain prose). When no
    usage is documented it is inferred from the body.

    \b
    Examples:
      $ shellscope functions
      $ shellscope functions --filter docker --plain
    """
    configure_logging(verbose)
    config = load_config_or_exit(config_path)
    result = run_scan(config, include_session=False)

    records = filter_records(result.functions, filter_pattern, source)
    render(
        records,
        result.warnings,
        "function",
        build_function_table,
        filter_pattern,
        source,
        plain,
        as_json,
    )


@main.command(name="sources")
@click.option("--plain", is_flag=True, help="Disable colors and use ASCII table borders")
@click.option("--config", "config_path", help="Config file path")
def sources_command(plain: bool, config_path: str | None) -> None:
    """Show the config files that exist and will be scanned."""
    config = load_config_or_exit(config_path)
    enumerated = ShellScanner(config).enumerator.enumerate()

    console = make_console(plain=plain)
    print_warnings(make_console(plain=plain, stderr=True), enumerated.warnings)
    if not enumerated.sources:
        console.print("No shell config files found.", style="yellow")
        return
    console.print(build_sources_table(enumerated.sources, plain=plain))


@main.group(name="config")
def config_group() -> None:
    """Show or initialize shellscope configuration."""
    pass


@config_group.command(name="show")
@click.option("--config", "config_path", help="Config file path")
def config_show(config_path: str | None) -> None:
    """Print the effective configuration as TOML."""
    config = load_config_or_exit(config_path)
    click.echo(tomlkit.dumps(config.to_dict()), nl=False)


@config_group.command(name="init")
@click.option("--config", "config_path", help="Config file path")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def config_init(config_path: str | None, force: bool) -> None:
    """Write a config file with the default settings."""
    target = Path(config_path).expanduser() if config_path else ConfigManager.DEFAULT_CONFIG_FILE
    if target.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    try:
        path = ConfigManager.save_config(ShellScopeConfig(), str(target))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote default configuration to {path}")


if __name__ == "__main__":
    main()
