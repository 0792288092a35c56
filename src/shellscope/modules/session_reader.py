"""Live interactive shell alias listing.

Philosophy:
- Single responsibility: ask the running shell for its aliases
- Standard library only (no external dependencies)
- Fails soft: any process problem becomes a warning, never an exception

Public API (the "studs"):
    AliasLister: Capability protocol ("list current aliases as text, or fail")
    ProcessOutput: Captured process result
    run_captured: Spawn with pipe draining and a bounded wait
    InteractiveShellAliasLister: Real lister spawning ``$SHELL -i -c alias``
    StaticAliasLister: Fixed-text lister for tests and offline runs
    LiveSessionReader: Lister + parser, returning entries and a warning
"""

import logging
import os
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Protocol

from shellscope.exceptions import SessionReadError
from shellscope.models import SESSION_SOURCE_NAME, AliasEntry, ScanWarning, WarningKind
from shellscope.modules.alias_parser import AliasParser

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/bash"
DEFAULT_TIMEOUT = 5.0


class AliasLister(Protocol):
    """Anything that can list the current aliases as text."""

    def list_aliases(self) -> str:
        """Return the raw alias listing.

        Raises:
            SessionReadError: If the listing cannot be produced
        """
        ...


@dataclass
class ProcessOutput:
    """Result of a captured process run."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool


def _drain(pipe: IO[bytes], sink: list[bytes]) -> None:
    try:
        data = pipe.read()
        if data:
            sink.append(data)
    except OSError:
        # Pipe closed while the process was being killed
        pass


def _kill_group(process: subprocess.Popen) -> None:
    try:
        os.killpg(process.pid, signal.SIGTERM)
        process.wait(timeout=1)
    except subprocess.TimeoutExpired:
        try:
            os.killpg(process.pid, signal.SIGKILL)
            process.wait(timeout=1)
        except (subprocess.TimeoutExpired, OSError) as e:
            # Still reported as timed out; returncode stays None
            logger.debug(f"Process group {process.pid} did not exit after SIGKILL: {e}")
    except (ProcessLookupError, PermissionError):
        pass


def run_captured(
    cmd: list[str], timeout: float, env: dict[str, str] | None = None
) -> ProcessOutput:
    """Run ``cmd`` with stdin closed, draining both pipes on background threads.

    The child gets its own session so that an interactive shell and anything
    its startup files spawn can be killed together on timeout.

    Raises:
        SessionReadError: If the process cannot be spawned
    """
    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
    except FileNotFoundError as e:
        raise SessionReadError(f"Shell not found: {cmd[0]}") from e
    except OSError as e:
        raise SessionReadError(f"Failed to start {cmd[0]}: {e}") from e

    stdout_data: list[bytes] = []
    stderr_data: list[bytes] = []
    drains = [
        threading.Thread(target=_drain, args=(process.stdout, stdout_data), daemon=True),
        threading.Thread(target=_drain, args=(process.stderr, stderr_data), daemon=True),
    ]
    for thread in drains:
        thread.start()

    timed_out = False
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_group(process)

    for thread in drains:
        thread.join(timeout=1)

    return ProcessOutput(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=b"".join(stdout_data).decode("utf-8", errors="replace"),
        stderr=b"".join(stderr_data).decode("utf-8", errors="replace"),
        timed_out=timed_out,
    )


class InteractiveShellAliasLister:
    """List aliases by running the user's shell interactively."""

    def __init__(self, shell: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Initialize lister.

        Args:
            shell: Shell executable (default: $SHELL, then /bin/bash)
            timeout: Seconds to wait for the shell
        """
        self.shell = shell or os.environ.get("SHELL") or DEFAULT_SHELL
        self.timeout = timeout

    def command(self) -> list[str]:
        return [self.shell, "-i", "-c", "alias"]

    def list_aliases(self) -> str:
        env = dict(os.environ)
        env.setdefault("TERM", "dumb")

        output = run_captured(self.command(), timeout=self.timeout, env=env)

        if output.timed_out:
            raise SessionReadError(f"{self.shell} did not list aliases within {self.timeout}s")
        if output.returncode != 0:
            detail = output.stderr.strip().splitlines()[-1:] or ["no error output"]
            raise SessionReadError(
                f"{self.shell} exited with status {output.returncode}: {detail[0]}"
            )
        return output.stdout


class StaticAliasLister:
    """Lister returning fixed text."""

    def __init__(self, text: str = ""):
        self.text = text

    def list_aliases(self) -> str:
        return self.text


class LiveSessionReader:
    """Read and parse the live session's aliases, failing soft."""

    def __init__(self, lister: AliasLister, parser: AliasParser | None = None):
        self.lister = lister
        self.parser = parser or AliasParser()

    def read(self) -> tuple[list[AliasEntry], ScanWarning | None]:
        """Return the session aliases and an optional PROCESS warning.

        On any lister failure the alias list is empty and the warning explains
        why; callers continue with configuration files only.
        """
        try:
            text = self.lister.list_aliases()
        except SessionReadError as e:
            logger.debug(f"Live session unavailable: {e}")
            return [], ScanWarning(WarningKind.PROCESS, SESSION_SOURCE_NAME, str(e))

        entries = self.parser.parse_session_listing(text)
        logger.debug(f"Read {len(entries)} alias(es) from live session")
        return entries, None


__all__ = [
    "AliasLister",
    "InteractiveShellAliasLister",
    "LiveSessionReader",
    "ProcessOutput",
    "StaticAliasLister",
    "run_captured",
]
