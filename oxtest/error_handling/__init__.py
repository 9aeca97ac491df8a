"""
Error handling for OXTest.

Parse errors carry the 1-based line number and a human-readable reason so
callers can report them and decide whether to abort or skip.
"""

from .exceptions import (
    OxtestError,
    ParseError,
    ScriptReadError,
)

__all__ = [
    "OxtestError",
    "ParseError",
    "ScriptReadError",
]
