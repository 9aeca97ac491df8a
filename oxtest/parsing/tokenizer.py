"""
Tokenizer for OXTest lines.

Turns one source line into COMMAND, SELECTOR and PARAM tokens. The tokenizer
is deliberately permissive: it never raises, and fields it does not
recognise are dropped so that newer grammar can pass through older readers.
All correctness judgement happens in the command parser.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from oxtest.core.types import SelectorStrategy


class TokenType(str, Enum):
    """Kinds of token produced by the tokenizer."""

    COMMAND = "command"
    SELECTOR = "selector"
    PARAM = "param"


@dataclass(frozen=True)
class Token:
    """A single lexical unit of an OXTest line."""

    type: TokenType
    value: Optional[str] = None
    key: Optional[str] = None
    strategy: Optional[str] = None
    fallback: Optional["Token"] = None


# Legacy snake_case spellings mapped to canonical command names
COMMAND_ALIASES: Dict[str, str] = {
    "assert_exists": "assertVisible",
    "assert_not_exists": "assertHidden",
    "assert_visible": "assertVisible",
    "assert_hidden": "assertHidden",
    "assert_text": "assertText",
    "assert_value": "assertValue",
    "assert_enabled": "assertEnabled",
    "assert_disabled": "assertDisabled",
    "assert_checked": "assertChecked",
    "assert_unchecked": "assertUnchecked",
    "assert_url": "assertUrl",
    "assert_title": "assertTitle",
    "wait_for": "waitForSelector",
    "wait_navigation": "wait",
    "go_back": "goBack",
    "go_forward": "goForward",
    "select_option": "selectOption",
    "set_viewport": "setViewport",
}

FALLBACK_KEYWORD = "fallback"
INLINE_FALLBACK_PREFIX = f"{FALLBACK_KEYWORD}="

_SELECTOR_PREFIXES: Tuple[str, ...] = tuple(
    f"{strategy.value}=" for strategy in SelectorStrategy
)
_QUOTES = ("'", '"')


def normalize_command_name(name: str) -> str:
    """Resolve a command alias; unknown names pass through unchanged."""
    return COMMAND_ALIASES.get(name, name)


def is_selector_field(field: str) -> bool:
    """Check whether a field has the form ``<strategy>=<value>``."""
    return field.startswith(_SELECTOR_PREFIXES)


def _split_selector(field: str) -> Tuple[str, str]:
    strategy, _, value = field.partition("=")
    return strategy, value


def split_fields(line: str) -> List[str]:
    """
    Split a line on spaces, honouring quotes and backslash escapes.

    Quotes may open anywhere in a field and are removed from the output; a
    quote of the other kind inside a quoted run is kept literally. A backslash
    makes the next character literal and is itself removed.

    Args:
        line: Source text

    Returns:
        Non-empty fields in source order
    """
    fields: List[str] = []
    current: List[str] = []
    quote_char: Optional[str] = None
    escaped = False

    for char in line:
        if escaped:
            current.append(char)
            escaped = False
            continue

        if char == "\\":
            escaped = True
            continue

        if char in _QUOTES:
            if quote_char is None:
                quote_char = char
            elif char == quote_char:
                quote_char = None
            else:
                current.append(char)
            continue

        if char == " " and quote_char is None:
            if current:
                fields.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        fields.append("".join(current))

    return fields


class Tokenizer:
    """Stateless OXTest line tokenizer."""

    def tokenize(self, line: str) -> List[Token]:
        """
        Tokenize a single OXTest line.

        Args:
            line: The line to tokenize

        Returns:
            Tokens in source order, empty for blank and comment lines
        """
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return []

        fields = split_fields(stripped)
        command_name = normalize_command_name(fields[0] if fields else "")
        tokens: List[Token] = [Token(type=TokenType.COMMAND, value=command_name)]

        index = 1
        while index < len(fields):
            field = fields[index]

            if is_selector_field(field):
                token, index = self._read_selector(fields, index, field)
                tokens.append(token)
            elif "=" in field:
                key, _, value = field.partition("=")
                tokens.append(Token(type=TokenType.PARAM, key=key, value=value))
                index += 1
            else:
                index += 1

        return tokens

    def _read_selector(
        self, fields: List[str], index: int, field: str
    ) -> Tuple[Token, int]:
        """
        Read a selector and any fallbacks chained directly after it.

        Returns the selector token, with fallbacks nested in source order,
        and the index of the first field not consumed.
        """
        chain = [_split_selector(field)]
        index += 1

        while index < len(fields):
            following = fields[index]
            if (
                following == FALLBACK_KEYWORD
                and index + 1 < len(fields)
                and is_selector_field(fields[index + 1])
            ):
                chain.append(_split_selector(fields[index + 1]))
                index += 2
            elif following.startswith(INLINE_FALLBACK_PREFIX) and is_selector_field(
                following[len(INLINE_FALLBACK_PREFIX):]
            ):
                chain.append(_split_selector(following[len(INLINE_FALLBACK_PREFIX):]))
                index += 1
            else:
                break

        token: Optional[Token] = None
        for strategy, value in reversed(chain):
            token = Token(
                type=TokenType.SELECTOR,
                strategy=strategy,
                value=value,
                fallback=token,
            )
        return token, index


_default_tokenizer = Tokenizer()


def tokenize(line: str) -> List[Token]:
    """Tokenize a line with a shared stateless tokenizer."""
    return _default_tokenizer.tokenize(line)
