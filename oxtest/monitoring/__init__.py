"""
Monitoring module exports.
"""

from oxtest.monitoring.logger import (
    ContextLogAdapter,
    JSONFormatter,
    get_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "JSONFormatter",
    "ContextLogAdapter",
]
