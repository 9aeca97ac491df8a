"""
OXTest parsing: line tokenizer, command parser and script parser.
"""

from oxtest.parsing.command_parser import CommandParser, parse_tokens
from oxtest.parsing.script import OxtestParser, ParsedScript, ParseIssue
from oxtest.parsing.tokenizer import (
    COMMAND_ALIASES,
    Token,
    Tokenizer,
    TokenType,
    normalize_command_name,
    split_fields,
    tokenize,
)

__all__ = [
    "Token",
    "TokenType",
    "Tokenizer",
    "COMMAND_ALIASES",
    "normalize_command_name",
    "split_fields",
    "tokenize",
    "CommandParser",
    "parse_tokens",
    "OxtestParser",
    "ParsedScript",
    "ParseIssue",
]
