"""Tests for alias parsing from files and live session listings."""

import pytest

from shellscope.models import Origin, RawStatement
from shellscope.modules.alias_parser import AliasParser, split_commands


def _statement(text: str, start_line: int = 1) -> RawStatement:
    return RawStatement(start_line=start_line, end_line=start_line, text=text)


class TestSplitCommands:
    """Unit tests for shell-ish word splitting."""

    def test_separators(self):
        commands = split_commands("alias a='x y' && alias b=\"z\"; echo hi | cat")

        assert commands == [
            ["alias", "a=x y"],
            ["alias", "b=z"],
            ["echo", "hi"],
            ["cat"],
        ]

    def test_newlines_separate_commands(self):
        assert split_commands("alias a=1\nalias b=2") == [["alias", "a=1"], ["alias", "b=2"]]

    def test_concatenated_quote_segments(self):
        assert split_commands("alias it='it'\\''s'") == [["alias", "it=it's"]]

    def test_double_quote_escapes_kept_verbatim(self):
        words = split_commands('alias g="log --format=\\"%h\\""')[0]
        assert words[1] == 'g=log --format=\\"%h\\"'

    def test_trailing_comment_dropped(self):
        assert split_commands("alias a=b # alias c=d") == [["alias", "a=b"]]

    def test_hash_inside_word_kept(self):
        assert split_commands("alias h=a#b") == [["alias", "h=a#b"]]

    def test_line_continuation_removed(self):
        assert split_commands("alias a='x' \\\n  b='y'") == [["alias", "a=x", "b=y"]]


class TestAliasParser:
    """Unit tests for AliasParser."""

    @pytest.fixture
    def parser(self):
        return AliasParser()

    def test_simple_alias(self, parser, zshrc_origin):
        entries = parser.parse_statement(_statement("alias ll='ls -la'", 7), zshrc_origin)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.name == "ll"
        assert entry.command == "ls -la"
        assert entry.line == 7
        assert entry.source_name == "zshrc"

    def test_multiple_assignments(self, parser, zshrc_origin):
        entries = parser.parse_statement(_statement("alias a=1 b='two words'"), zshrc_origin)

        assert [(e.name, e.command) for e in entries] == [("a", "1"), ("b", "two words")]

    def test_zsh_flags_skipped(self, parser, zshrc_origin):
        entries = parser.parse_statement(_statement("alias -g G='| grep'"), zshrc_origin)

        assert [(e.name, e.command) for e in entries] == [("G", "| grep")]

    def test_empty_value(self, parser, zshrc_origin):
        entries = parser.parse_statement(_statement("alias nothing=''"), zshrc_origin)

        assert entries[0].command == ""

    def test_value_with_equals(self, parser, zshrc_origin):
        entries = parser.parse_statement(_statement("alias e='env FOO=bar'"), zshrc_origin)

        assert (entries[0].name, entries[0].command) == ("e", "env FOO=bar")

    @pytest.mark.parametrize(
        "text",
        [
            "export FOO=bar",
            "alias",
            "alias ll",
            "unalias ll",
            "echo alias x=y",
            "alias 'bad name'=x",
        ],
    )
    def test_non_aliases_ignored(self, parser, zshrc_origin, text):
        assert parser.parse_statement(_statement(text), zshrc_origin) == []

    def test_alias_after_separator(self, parser, zshrc_origin):
        text = "command -v eza >/dev/null && alias ls='eza'"
        entries = parser.parse_statement(_statement(text), zshrc_origin)

        assert [(e.name, e.command) for e in entries] == [("ls", "eza")]

    def test_parse_text(self, parser, zshrc_origin):
        text = "# aliases\nalias a=1\n\nalias b=2\n"
        entries = parser.parse_text(text, zshrc_origin)

        assert [(e.name, e.line) for e in entries] == [("a", 2), ("b", 4)]

    def test_bash_session_listing(self, parser):
        entries = parser.parse_session_listing("alias gs='git status'\nalias ll='ls -la'\n")

        assert [(e.name, e.command) for e in entries] == [("gs", "git status"), ("ll", "ls -la")]
        assert all(e.origin == Origin.live_session() for e in entries)
        assert all(e.line is None for e in entries)
        assert all(e.source_name == "session" for e in entries)

    def test_zsh_session_listing(self, parser):
        entries = parser.parse_session_listing("gs='git status'\nll=ls\nrun-help=man\n")

        assert [(e.name, e.command) for e in entries] == [
            ("gs", "git status"),
            ("ll", "ls"),
            ("run-help", "man"),
        ]

    def test_bare_assignments_only_accepted_in_listings(self, parser, zshrc_origin):
        assert parser.parse_statement(_statement("FOO=bar"), zshrc_origin) == []

    def test_session_listing_with_quote_escape(self, parser):
        entries = parser.parse_session_listing("alias q='echo '\\''hi'\\'''\n")

        assert entries[0].command == "echo 'hi'"
