"""Tests for the scan pipeline.

Covers the end-to-end scenarios: documented functions in each comment
dialect, usage inference, alias precedence and recovery from malformed input.
"""

import time
from unittest.mock import Mock, patch

import pytest

from shellscope.config_manager import ShellScopeConfig
from shellscope.exceptions import SessionReadError
from shellscope.models import ConfigSource, WarningKind
from shellscope.modules.session_reader import StaticAliasLister
from shellscope.scanner import ShellScanner, parse_text, read_source

LIST_FILES = """\
# desc: List files in a directory
# usage: listFiles [directory]
listFiles() {
  ls -la "${1:-.}"
}
"""

GENERATE_REPO = """\
# @description Generate a text tree of a repository
# @param output_file File to write
# @param repo_path Repository root
generate_repo_structure() {
  tree "$2" > "$1"
}
"""

KILLPORT = """\
killport() {
  lsof -ti:$1 | xargs kill -9
}
"""

MALFORMED = """\
alias before='x'
broken() {
  echo "unfinished"
alias after='ok'
"""


def _scanner(home, lister=None, files=(".zshrc", ".bashrc"), **config):
    config = ShellScopeConfig(candidate_files=list(files), max_workers=2, **config)
    return ShellScanner(config, lister=lister or StaticAliasLister(), home=home)


class TestParseText:
    """Unit tests for single-file parsing."""

    def test_explicit_tags(self, zshrc_source):
        (function,) = parse_text(LIST_FILES, zshrc_source).functions

        assert function.name == "listFiles"
        assert function.description == "List files in a directory"
        assert function.usage == "listFiles [directory]"

    def test_structured_tags(self, zshrc_source):
        (function,) = parse_text(GENERATE_REPO, zshrc_source).functions

        assert function.usage == "generate_repo_structure <output_file> <repo_path>"
        assert function.description == "Generate a text tree of a repository"

    def test_positional_inference(self, zshrc_source):
        (function,) = parse_text(KILLPORT, zshrc_source).functions

        assert function.description == ""
        assert function.usage == "killport <param1>"

    def test_malformed_block_isolated(self, zshrc_source):
        scan = parse_text(MALFORMED, zshrc_source)

        assert [(a.name, a.line) for a in scan.aliases] == [("before", 1), ("after", 4)]
        assert scan.functions == ()
        (warning,) = scan.warnings
        assert warning.kind is WarningKind.PARSE
        assert warning.source == "zshrc"
        assert (warning.start_line, warning.end_line) == (2, 4)

    def test_aliases_inside_functions_not_reported(self, zshrc_source):
        text = "setup() {\n  alias inner='x'\n}\nalias outer='y'\n"
        scan = parse_text(text, zshrc_source)

        assert [a.name for a in scan.aliases] == ["outer"]
        assert [f.name for f in scan.functions] == ["setup"]

    def test_arithmetic_shift_is_not_a_heredoc(self, zshrc_source):
        scan = parse_text("export MASK=$(( 1 << n ))\nalias a=b\n", zshrc_source)

        assert scan.warnings == ()
        assert [(a.name, a.line) for a in scan.aliases] == [("a", 2)]

    def test_inference_with_apostrophe_in_double_quotes(self, zshrc_source):
        text = "f() {\n  echo \"don't panic\"\n  cp \"$1\" \"$2\"\n  echo 'done'\n}\n"
        (function,) = parse_text(text, zshrc_source).functions

        assert function.usage == "f <param1> <param2>"

    def test_empty_file(self, zshrc_source):
        scan = parse_text("", zshrc_source)

        assert (scan.aliases, scan.functions, scan.warnings) == ((), (), ())


class TestReadSource:
    def test_unreadable_file_becomes_io_warning(self, tmp_path):
        source = ConfigSource.from_path(tmp_path / ".missing")

        scan = read_source(source)

        assert scan.aliases == ()
        (warning,) = scan.warnings
        assert warning.kind is WarningKind.IO
        assert warning.message.startswith("Cannot read file")

    def test_parser_crash_becomes_parse_warning(self, tmp_path):
        path = tmp_path / ".zshrc"
        path.write_text("alias a=b\n")

        with patch("shellscope.scanner.parse_text", side_effect=RuntimeError("boom")):
            scan = read_source(ConfigSource.from_path(path))

        (warning,) = scan.warnings
        assert warning.kind is WarningKind.PARSE
        assert warning.message == "Parser error: boom"

    def test_invalid_utf8_is_replaced(self, tmp_path):
        path = tmp_path / ".zshrc"
        path.write_bytes(b"alias a='\xff'\n")

        (alias,) = read_source(ConfigSource.from_path(path)).aliases

        assert alias.command == "\ufffd"


class TestShellScanner:
    """Tests for ShellScanner.scan."""

    def test_session_alias_wins(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias gs='git status'\nalias ll='ls -la'\n")
        lister = StaticAliasLister("alias gs='git status -sb'\n")

        result = _scanner(temp_home_dir, lister).scan()

        aliases = {a.name: a for a in result.aliases}
        assert aliases["gs"].command == "git status -sb"
        assert aliases["gs"].source_name == "session"
        assert aliases["ll"].source_name == "zshrc"
        assert len(result.aliases) == 2

    def test_records_ordered_session_files_functions(self, temp_home_dir, write_rc):
        write_rc(".bashrc", "alias b=1\n" + KILLPORT)
        write_rc(".zshrc", "alias z=1\n" + LIST_FILES)

        result = _scanner(temp_home_dir, StaticAliasLister("alias s=1\n")).scan()

        assert [r.name for r in result.records] == ["s", "z", "b", "listFiles", "killport"]

    def test_join_order_independent_of_timing(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias gs='from file'\n")

        class SlowLister:
            def list_aliases(self):
                time.sleep(0.2)
                return "alias gs='from session'\n"

        result = _scanner(temp_home_dir, SlowLister()).scan()

        assert result.aliases[0].command == "from session"

    def test_session_skipped_when_disabled(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias ll='ls -la'\n")
        lister = Mock()

        result = _scanner(temp_home_dir, lister).scan(include_session=False)

        lister.list_aliases.assert_not_called()
        assert [a.name for a in result.aliases] == ["ll"]

    def test_config_disables_session(self, temp_home_dir):
        lister = Mock()

        _scanner(temp_home_dir, lister, include_session=False).scan()

        lister.list_aliases.assert_not_called()

    def test_session_failure_is_a_warning(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias ll='ls -la'\n")
        lister = Mock()
        lister.list_aliases.side_effect = SessionReadError("zsh did not list aliases within 5s")

        result = _scanner(temp_home_dir, lister).scan()

        assert [a.name for a in result.aliases] == ["ll"]
        assert result.warnings[0].kind is WarningKind.PROCESS

    def test_warning_order(self, temp_home_dir, write_rc):
        (temp_home_dir / ".zshrc").mkdir()
        write_rc(".bashrc", MALFORMED)
        lister = Mock()
        lister.list_aliases.side_effect = SessionReadError("failed")

        result = _scanner(temp_home_dir, lister).scan()

        assert [w.kind for w in result.warnings] == [
            WarningKind.PROCESS,
            WarningKind.IO,
            WarningKind.PARSE,
        ]

    def test_one_bad_file_does_not_affect_others(self, temp_home_dir, write_rc):
        write_rc(".zshrc", MALFORMED)
        write_rc(".bashrc", LIST_FILES)

        result = _scanner(temp_home_dir).scan()

        assert [f.name for f in result.functions] == ["listFiles"]
        assert {a.name for a in result.aliases} == {"before", "after"}

    def test_no_sources_is_valid(self, temp_home_dir):
        result = _scanner(temp_home_dir).scan()

        assert result.records == ()
        assert result.warnings == ()

    def test_scan_is_repeatable(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias a=1\n" + LIST_FILES + MALFORMED)
        scanner = _scanner(temp_home_dir, StaticAliasLister("alias s=1\n"))

        assert scanner.scan() == scanner.scan()

    def test_interrupt_propagates(self, temp_home_dir, write_rc):
        write_rc(".zshrc", "alias a=1\n")
        lister = Mock()
        lister.list_aliases.side_effect = KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            _scanner(temp_home_dir, lister).scan()

    def test_default_lister_uses_config(self, temp_home_dir):
        config = ShellScopeConfig(shell="/bin/zsh", session_timeout=2.0)

        scanner = ShellScanner(config, home=temp_home_dir)

        assert scanner.lister.shell == "/bin/zsh"
        assert scanner.lister.timeout == 2.0
