"""
Core module exports.
"""

from oxtest.core.types import (
    ASSERTION_COMMANDS,
    INTERACTION_COMMANDS,
    REQUIRED_PARAMS,
    SELECTOR_REQUIRED_COMMANDS,
    Command,
    CommandType,
    SelectorSpec,
    SelectorStrategy,
    missing_params,
)

__all__ = [
    "Command",
    "CommandType",
    "SelectorSpec",
    "SelectorStrategy",
    "INTERACTION_COMMANDS",
    "ASSERTION_COMMANDS",
    "SELECTOR_REQUIRED_COMMANDS",
    "REQUIRED_PARAMS",
    "missing_params",
]
