"""Tests for environment-driven settings."""

from skyloom.config import Settings, get_settings, reset_settings_cache


def test_defaults(clean_settings, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    s = Settings()
    assert s.redis_url == "redis://localhost:6379/0"
    assert s.chart_cache_backend == "memory"
    assert s.chart_cache_prefix == "chartcache"
    assert s.chart_cache_grace_seconds == 3600
    assert s.chart_cache_max_entries == 1024
    assert s.timezone == "UTC"
    assert s.transit_orb_factor == 0.8
    assert s.log_level == "INFO"


def test_env_override(clean_settings, monkeypatch):
    monkeypatch.setenv("CHART_CACHE_BACKEND", "redis")
    monkeypatch.setenv("TIMEZONE", "Asia/Tokyo")
    monkeypatch.setenv("CHART_CACHE_GRACE_SECONDS", "120")

    s = get_settings()

    assert s.chart_cache_backend == "redis"
    assert s.timezone == "Asia/Tokyo"
    assert s.chart_cache_grace_seconds == 120


def test_settings_are_cached(clean_settings, monkeypatch):
    first = get_settings()
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    assert get_settings() is first

    reset_settings_cache()
    assert get_settings().log_level == "DEBUG"
