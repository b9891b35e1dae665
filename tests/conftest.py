"""Integration test configuration."""

import pytest
from skyloom.config import reset_settings_cache


@pytest.fixture
def sample_natal():
    """Natal longitudes for testing."""
    return {
        "sun": 324.73,
        "moon": 228.41,
        "mercury": 310.2,
        "venus": 290.5,
        "mars": 112.0,
        "jupiter": 95.3,
        "saturn": 355.1,
        "ascendant": 15.0,
        "midheaven": 285.0,
    }


@pytest.fixture
def sample_transit_series():
    """Transit longitudes, newest sample first."""
    return {
        "sun": [84.9, 83.95, 83.0],
        "moon": [190.0, 177.0, 164.0],
        "mercury": [66.4, 66.6, 66.5],
        "mars": [140.2, 139.6, 139.0],
        "saturn": [18.3, 18.2, 18.1],
    }


@pytest.fixture
def clean_settings(monkeypatch):
    """Settings read fresh from a clean environment."""
    for name in (
        "REDIS_URL",
        "CHART_CACHE_BACKEND",
        "CHART_CACHE_PREFIX",
        "CHART_CACHE_GRACE_SECONDS",
        "CHART_CACHE_MAX_ENTRIES",
        "TIMEZONE",
        "TRANSIT_ORB_FACTOR",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
