"""
Command parser for tokenized OXTest lines.

This is the only place grammar and semantic errors are raised. Each call is
self-contained: the first rule a line violates raises a ParseError carrying
the line number and the reason.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from oxtest.core.types import (
    SELECTOR_REQUIRED_COMMANDS,
    Command,
    CommandType,
    SelectorSpec,
    missing_params,
)
from oxtest.error_handling.exceptions import ParseError
from oxtest.parsing.tokenizer import Token, TokenType


class CommandParser:
    """Builds validated Command values from tokens."""

    def parse(self, tokens: Sequence[Token], line_number: int) -> Command:
        """
        Parse the tokens of one line into a Command.

        Args:
            tokens: Tokens from the tokenizer, command token first
            line_number: 1-based source line, used in error messages

        Returns:
            The parsed command

        Raises:
            ParseError: If the line is malformed or misses a requirement
        """
        if not tokens:
            raise ParseError("No tokens to parse", line_number)

        command_token = tokens[0]
        if command_token.type != TokenType.COMMAND:
            raise ParseError("Expected command token", line_number)

        command_name = command_token.value or ""
        if not CommandType.is_valid(command_name):
            raise ParseError(f"Unknown command: {command_name}", line_number)
        command_type = CommandType(command_name)

        selector_token = next(
            (token for token in tokens[1:] if token.type == TokenType.SELECTOR), None
        )
        if command_type in SELECTOR_REQUIRED_COMMANDS and selector_token is None:
            raise ParseError(f"{command_type.value} requires a selector", line_number)

        params = self._build_params(tokens)
        missing = missing_params(command_type, params)
        if missing:
            raise ParseError(f"Missing required parameter: {missing[0]}", line_number)

        selector = self._build_selector(selector_token, line_number)

        return Command(type=command_type, params=params, selector=selector)

    def _build_selector(
        self, token: Optional[Token], line_number: int
    ) -> Optional[SelectorSpec]:
        """Build a SelectorSpec, flattening the nested fallback tokens."""
        if token is None:
            return None

        try:
            fallbacks: List[SelectorSpec] = []
            current = token.fallback
            while current is not None:
                fallbacks.append(
                    SelectorSpec(strategy=current.strategy, value=current.value or "")
                )
                current = current.fallback

            return SelectorSpec(
                strategy=token.strategy,
                value=token.value or "",
                fallbacks=tuple(fallbacks),
            )
        except PydanticValidationError as exc:
            errors = exc.errors()
            detail = errors[0]["msg"] if errors else str(exc)
            raise ParseError(
                f"Invalid selector '{token.strategy}={token.value}': {detail}",
                line_number,
                cause=exc,
            ) from exc

    def _build_params(self, tokens: Sequence[Token]) -> Dict[str, str]:
        """Collect params; a repeated key keeps its last value."""
        params: Dict[str, str] = {}
        for token in tokens:
            if token.type == TokenType.PARAM and token.key:
                params[token.key] = token.value or ""
        return params


_default_parser = CommandParser()


def parse_tokens(tokens: Sequence[Token], line_number: int) -> Command:
    """Parse tokens with a shared stateless parser."""
    return _default_parser.parse(tokens, line_number)
