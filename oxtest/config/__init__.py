"""
Configuration module exports.
"""

from oxtest.config.settings import PARSE_ERROR_POLICIES, Settings, get_settings

__all__ = [
    "Settings",
    "PARSE_ERROR_POLICIES",
    "get_settings",
]
