"""Scan pipeline: enumerate, read and parse in parallel, then merge.

File reads and the live session read are independent, so they run
concurrently in a ThreadPoolExecutor. Results are joined in submission order
(session first, then sources in enumeration order) rather than completion
order, which keeps alias priority deterministic regardless of I/O timing.

An interrupt abandons the whole scan; nothing partial is merged.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from shellscope.config_manager import ShellScopeConfig
from shellscope.models import (
    AliasEntry,
    ConfigSource,
    FileScan,
    Origin,
    ScanResult,
    ScanWarning,
    StatementKind,
    WarningKind,
)
from shellscope.modules.alias_parser import AliasParser
from shellscope.modules.function_parser import FunctionParser
from shellscope.modules.merger import merge
from shellscope.modules.session_reader import (
    AliasLister,
    InteractiveShellAliasLister,
    LiveSessionReader,
)
from shellscope.modules.source_enumerator import SourceEnumerator
from shellscope.modules.tokenizer import StatementSegmenter

logger = logging.getLogger(__name__)


def parse_text(
    text: str,
    source: ConfigSource,
    segmenter: StatementSegmenter | None = None,
    alias_parser: AliasParser | None = None,
    function_parser: FunctionParser | None = None,
) -> FileScan:
    """Parse one file's text into aliases, functions and PARSE warnings."""
    segmenter = segmenter or StatementSegmenter()
    alias_parser = alias_parser or AliasParser(segmenter)
    function_parser = function_parser or FunctionParser()

    origin = Origin.config_file(source)
    lines = text.splitlines()
    segmented = segmenter.segment(text)

    aliases: list[AliasEntry] = []
    for statement in segmented.statements:
        if statement.kind is StatementKind.SIMPLE:
            aliases.extend(alias_parser.parse_statement(statement, origin))

    functions = function_parser.parse_all(segmented.statements, origin, lines)

    warnings = tuple(
        ScanWarning(
            kind=WarningKind.PARSE,
            source=source.name,
            message=failure.reason,
            start_line=failure.start_line,
            end_line=failure.end_line,
        )
        for failure in segmented.failures
    )

    return FileScan(
        source=source, aliases=tuple(aliases), functions=tuple(functions), warnings=warnings
    )


def read_source(source: ConfigSource) -> FileScan:
    """Read and parse one source.

    An unreadable file becomes an IO warning and an unexpected parser error a
    PARSE warning, so one bad file never costs the others.
    """
    try:
        text = source.path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read {source.path}: {e}")
        return FileScan(
            source=source,
            warnings=(ScanWarning(WarningKind.IO, source.name, f"Cannot read file: {e}"),),
        )
    try:
        return parse_text(text, source)
    except Exception as e:
        logger.debug(f"Parser failed on {source.path}", exc_info=True)
        return FileScan(
            source=source,
            warnings=(ScanWarning(WarningKind.PARSE, source.name, f"Parser error: {e}"),),
        )


class ShellScanner:
    """Run a full scan of the live session and config files."""

    def __init__(
        self,
        config: ShellScopeConfig | None = None,
        lister: AliasLister | None = None,
        home: Path | None = None,
    ):
        """Initialize scanner.

        Args:
            config: Scan configuration (default: built-in defaults)
            lister: Live alias lister (default: spawn the interactive shell)
            home: Home directory to enumerate (default: Path.home())
        """
        self.config = config or ShellScopeConfig()
        self.lister = lister or InteractiveShellAliasLister(
            shell=self.config.shell, timeout=self.config.session_timeout
        )
        self.enumerator = SourceEnumerator(self.config.candidate_files, home=home)

    def scan(self, include_session: bool | None = None) -> ScanResult:
        """Scan everything and return merged records plus warnings.

        Args:
            include_session: Override config.include_session

        Raises:
            KeyboardInterrupt: Re-raised after cancelling pending work
        """
        if include_session is None:
            include_session = self.config.include_session

        enumerated = self.enumerator.enumerate()
        reader = LiveSessionReader(self.lister)

        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            session_future: Future | None = (
                executor.submit(reader.read) if include_session else None
            )
            file_futures = [executor.submit(read_source, s) for s in enumerated.sources]

            # Join barrier: submission order, not completion order
            session_aliases: list[AliasEntry] = []
            session_warning: ScanWarning | None = None
            if session_future is not None:
                session_aliases, session_warning = session_future.result()
            file_scans = [future.result() for future in file_futures]
        except BaseException:
            logger.debug("Scan aborted, abandoning in-flight reads")
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        warnings: list[ScanWarning] = []
        if session_warning is not None:
            warnings.append(session_warning)
        warnings.extend(enumerated.warnings)
        for file_scan in file_scans:
            warnings.extend(file_scan.warnings)

        records = merge(session_aliases, file_scans)
        logger.debug(
            f"Scan complete: {len(records)} record(s), {len(warnings)} warning(s) "
            f"from {len(file_scans)} file(s)"
        )
        return ScanResult(records=tuple(records), warnings=tuple(warnings))


__all__ = ["ShellScanner", "parse_text", "read_source"]
