"""
OXTest - a line-oriented command language for browser automation steps.
"""

from oxtest.core.types import Command, CommandType, SelectorSpec, SelectorStrategy
from oxtest.error_handling.exceptions import OxtestError, ParseError, ScriptReadError
from oxtest.parsing.command_parser import CommandParser
from oxtest.parsing.script import OxtestParser, ParsedScript
from oxtest.parsing.tokenizer import Token, Tokenizer, TokenType

__version__ = "0.1.0"

__all__ = [
    "Command",
    "CommandType",
    "SelectorSpec",
    "SelectorStrategy",
    "Token",
    "TokenType",
    "Tokenizer",
    "CommandParser",
    "OxtestParser",
    "ParsedScript",
    "OxtestError",
    "ParseError",
    "ScriptReadError",
    "__version__",
]
