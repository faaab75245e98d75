"""
Global pytest configuration and fixtures
"""

import pytest

from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear cache before each test so idempotency markers never leak"""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def engine_config():
    from core.config import EngineConfig

    return EngineConfig()
