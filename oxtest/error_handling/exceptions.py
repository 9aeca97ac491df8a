"""
Exception hierarchy for OXTest parsing.

The tokenizer never raises; everything here is raised by the command parser,
the script parser, or the file-reading layer around them.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union


class OxtestError(Exception):
    """Base exception for all OXTest errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ParseError(OxtestError):
    """A single OXTest line violated the command grammar."""

    def __init__(
        self,
        reason: str,
        line_number: int,
        line: Optional[str] = None,
        **kwargs
    ):
        super().__init__(f"Line {line_number}: {reason}", **kwargs)
        self.reason = reason
        self.line_number = line_number
        self.line = line
        self.details.update({
            "line_number": line_number,
            "reason": reason,
            "line": line
        })

    def with_line(self, line: str) -> "ParseError":
        """Return a copy annotated with the offending source text."""
        return ParseError(
            self.reason,
            self.line_number,
            line=line,
            error_code=self.error_code,
            cause=self.cause
        )


class ScriptReadError(OxtestError):
    """An OXTest script could not be read from disk."""

    def __init__(
        self,
        message: str,
        path: Union[str, Path],
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.path = str(path)
        self.details.update({"path": self.path})
