"""
Converters from parsed OXTest commands to other test formats.
"""

from oxtest.converters.playwright import (
    ConversionOptions,
    ConversionResult,
    PlaywrightConverter,
    escape_regex,
    escape_ts,
    locator_expression,
)

__all__ = [
    "PlaywrightConverter",
    "ConversionOptions",
    "ConversionResult",
    "escape_ts",
    "escape_regex",
    "locator_expression",
]
