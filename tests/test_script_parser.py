"""
Unit tests for whole-script parsing.
"""

import logging
import os
from unittest.mock import patch

import pytest

from oxtest.core.types import CommandType
from oxtest.error_handling.exceptions import ParseError, ScriptReadError
from oxtest.parsing.script import OxtestParser, ParsedScript, ParseIssue

LOGIN_SCRIPT = """# Login flow
navigate url=https://shop.example.com/login

fill placeholder=Email value=user@example.com
fill css=input[type=password] value="s3cret pass"
click text=Login fallback css=button[type=submit]
   # indented comment
assert_exists css=.welcome
"""

BROKEN_SCRIPT = """navigate url=https://example.com
click
fill css=#q value=hello
frobnicate css=a
wait timeout=100
"""


class TestParseContent:
    """Tests for OxtestParser.parse_content."""

    def test_parses_all_commands(self):
        """Test blank and comment lines are skipped."""
        script = OxtestParser(error_policy="abort").parse_content(LOGIN_SCRIPT)
        assert isinstance(script, ParsedScript)
        assert [c.type for c in script.commands] == [
            CommandType.NAVIGATE,
            CommandType.FILL,
            CommandType.FILL,
            CommandType.CLICK,
            CommandType.ASSERT_VISIBLE,
        ]
        assert script.commands[2].params["value"] == "s3cret pass"
        assert script.commands[3].selector.fallbacks[0].value == "button[type=submit]"
        assert script.ok is True
        assert script.issues == []

    def test_empty_content(self):
        """Test empty content yields no commands."""
        script = OxtestParser(error_policy="abort").parse_content("")
        assert script.commands == []
        assert script.ok

    def test_windows_line_endings(self):
        """Test carriage returns are trimmed with the line."""
        script = OxtestParser(error_policy="abort").parse_content(
            "navigate url=https://a.example\r\nreload\r\n"
        )
        assert script.commands[0].params["url"] == "https://a.example"
        assert script.commands[1].type == CommandType.RELOAD

    def test_abort_policy_raises_first_error(self):
        """Test abort stops at the first bad line with its number."""
        parser = OxtestParser(error_policy="abort")
        with pytest.raises(ParseError) as exc_info:
            parser.parse_content(BROKEN_SCRIPT)
        error = exc_info.value
        assert error.line_number == 2
        assert error.reason == "click requires a selector"
        assert error.line == "click"
        assert str(error) == "Line 2: click requires a selector"

    def test_skip_policy_collects_issues(self, caplog):
        """Test skip records bad lines and keeps the good ones."""
        parser = OxtestParser(error_policy="skip")
        with caplog.at_level(logging.WARNING, logger="oxtest.parsing.script"):
            script = parser.parse_content(BROKEN_SCRIPT, source="broken.ox.test")

        assert [c.type for c in script.commands] == [
            CommandType.NAVIGATE,
            CommandType.FILL,
            CommandType.WAIT,
        ]
        assert script.ok is False
        assert script.source == "broken.ox.test"
        assert script.issues == [
            ParseIssue(line_number=2, reason="click requires a selector", line="click"),
            ParseIssue(line_number=4, reason="Unknown command: frobnicate", line="frobnicate css=a"),
        ]
        assert str(script.issues[1]) == "Line 4: Unknown command: frobnicate"
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2

    def test_line_numbers_count_blank_lines(self):
        """Test line numbers refer to source lines, not commands."""
        parser = OxtestParser(error_policy="abort")
        with pytest.raises(ParseError, match="Line 4: Missing required parameter: url"):
            parser.parse_content("# header\n\nreload\nnavigate\n")

    def test_policy_from_settings(self):
        """Test the default policy comes from settings."""
        with patch.dict(os.environ, {"PARSE_ERROR_POLICY": "skip"}):
            parser = OxtestParser()
        assert parser.error_policy == "skip"
        assert parser.parse_content("click\nreload").issues[0].line_number == 1

    def test_invalid_policy(self):
        """Test unknown policies are rejected."""
        with pytest.raises(ValueError, match="Invalid parse error policy"):
            OxtestParser(error_policy="ignore")

    def test_parse_line(self):
        """Test parsing a single line."""
        parser = OxtestParser(error_policy="abort")
        assert parser.parse_line("   ", 1) is None
        assert parser.parse_line("# note", 2) is None
        assert parser.parse_line("go_back", 3).type == CommandType.GO_BACK


class TestParseFile:
    """Tests for OxtestParser.parse_file."""

    def test_parse_file(self, tmp_path):
        """Test reading and parsing a script file."""
        script_path = tmp_path / "login.ox.test"
        script_path.write_text(LOGIN_SCRIPT, encoding="utf-8")

        script = OxtestParser(error_policy="abort").parse_file(script_path)
        assert len(script.commands) == 5
        assert script.source == str(script_path)

    def test_unicode_content(self, tmp_path):
        """Test non-ASCII values survive the round trip from disk."""
        script_path = tmp_path / "intl.ox.test"
        script_path.write_text('fill label=Straße value="Grüße aus München"\n', encoding="utf-8")

        command = OxtestParser(error_policy="abort").parse_file(script_path).commands[0]
        assert command.selector.value == "Straße"
        assert command.params["value"] == "Grüße aus München"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ScriptReadError."""
        missing = tmp_path / "nope.ox.test"
        with pytest.raises(ScriptReadError, match="File not found") as exc_info:
            OxtestParser(error_policy="abort").parse_file(missing)
        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_directory_is_read_error(self, tmp_path):
        """Test a directory path raises ScriptReadError."""
        with pytest.raises(ScriptReadError):
            OxtestParser(error_policy="abort").parse_file(tmp_path)

    def test_undecodable_file(self, tmp_path):
        """Test invalid UTF-8 raises ScriptReadError."""
        script_path = tmp_path / "bad.ox.test"
        script_path.write_bytes(b"click css=\xff\xfe\n")
        with pytest.raises(ScriptReadError, match="Failed to read file"):
            OxtestParser(error_policy="abort").parse_file(script_path)
