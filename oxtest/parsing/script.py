"""
Whole-script parsing for OXTest.

Runs the tokenizer and command parser over every line of a script. Lines are
parsed independently; what happens on a bad line is decided by the error
policy: ``abort`` re-raises the first ParseError, ``skip`` records it as a
ParseIssue and moves on.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from oxtest.config.settings import PARSE_ERROR_POLICIES, get_settings
from oxtest.core.types import Command
from oxtest.error_handling.exceptions import ParseError, ScriptReadError
from oxtest.parsing.command_parser import CommandParser
from oxtest.parsing.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class ParseIssue(BaseModel):
    """A line that was skipped because it failed to parse."""

    line_number: int = Field(..., ge=1)
    reason: str
    line: str = Field("", description="Source text of the offending line")

    @classmethod
    def from_error(cls, error: ParseError) -> "ParseIssue":
        return cls(
            line_number=error.line_number,
            reason=error.reason,
            line=error.line or "",
        )

    def __str__(self) -> str:
        return f"Line {self.line_number}: {self.reason}"


class ParsedScript(BaseModel):
    """Commands parsed from one script, plus any skipped lines."""

    commands: List[Command] = Field(default_factory=list)
    issues: List[ParseIssue] = Field(default_factory=list)
    source: Optional[str] = Field(None, description="File path, when parsed from disk")

    @property
    def ok(self) -> bool:
        return not self.issues


class OxtestParser:
    """Parses OXTest scripts line by line."""

    def __init__(
        self,
        tokenizer: Optional[Tokenizer] = None,
        command_parser: Optional[CommandParser] = None,
        error_policy: Optional[str] = None,
    ) -> None:
        """
        Initialize the script parser.

        Args:
            tokenizer: Line tokenizer (defaults to a new Tokenizer)
            command_parser: Token parser (defaults to a new CommandParser)
            error_policy: 'abort' or 'skip' (defaults to settings)
        """
        policy = (error_policy or get_settings().parse_error_policy).lower()
        if policy not in PARSE_ERROR_POLICIES:
            raise ValueError(
                f"Invalid parse error policy: {error_policy}. "
                f"Allowed values: {list(PARSE_ERROR_POLICIES)}"
            )

        self.tokenizer = tokenizer or Tokenizer()
        self.command_parser = command_parser or CommandParser()
        self.error_policy = policy

    def parse_line(self, line: str, line_number: int) -> Optional[Command]:
        """
        Parse one line.

        Returns:
            The command, or None for blank and comment lines

        Raises:
            ParseError: If the line fails to parse, annotated with its text
        """
        tokens = self.tokenizer.tokenize(line)
        if not tokens:
            return None

        try:
            return self.command_parser.parse(tokens, line_number)
        except ParseError as exc:
            raise exc.with_line(line.strip()) from exc

    def parse_content(self, content: str, source: Optional[str] = None) -> ParsedScript:
        """
        Parse OXTest content from a string.

        Args:
            content: Script text
            source: Optional origin label carried into the result

        Returns:
            Parsed commands and, under the skip policy, skipped lines

        Raises:
            ParseError: First failing line, under the abort policy
        """
        commands: List[Command] = []
        issues: List[ParseIssue] = []

        for line_number, line in enumerate(content.split("\n"), start=1):
            try:
                command = self.parse_line(line, line_number)
            except ParseError as exc:
                if self.error_policy == "abort":
                    raise
                logger.warning(
                    f"Skipping invalid line: {exc.message}",
                    extra={
                        "script": source,
                        "line_number": exc.line_number,
                        "reason": exc.reason,
                    },
                )
                issues.append(ParseIssue.from_error(exc))
                continue

            if command is not None:
                commands.append(command)

        logger.debug(
            f"Parsed {len(commands)} commands",
            extra={"script": source, "commands": len(commands), "issues": len(issues)},
        )
        return ParsedScript(commands=commands, issues=issues, source=source)

    def parse_file(self, file_path: Union[str, Path]) -> ParsedScript:
        """
        Parse an .ox.test file.

        Raises:
            ScriptReadError: If the file cannot be read or decoded
            ParseError: First failing line, under the abort policy
        """
        path = Path(file_path)
        encoding = get_settings().script_encoding

        try:
            content = path.read_text(encoding=encoding)
        except FileNotFoundError as exc:
            raise ScriptReadError(f"File not found: {path}", path, cause=exc) from exc
        except PermissionError as exc:
            raise ScriptReadError(f"Permission denied: {path}", path, cause=exc) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ScriptReadError(
                f"Failed to read file {path}: {exc}", path, cause=exc
            ) from exc

        return self.parse_content(content, source=str(path))
