"""
Shared pytest fixtures.
"""

import pytest

from oxtest.config.settings import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
