"""Tests for default configuration values."""

from pathlib import Path

from imagecache.config.defaults import (
    DEFAULT_CACHE_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_BACKGROUND_WRITES,
    DEFAULT_QUALITY,
    get_defaults,
)
from imagecache.config.hierarchy import _coerce_env_value


class TestDefaults:
    def test_default_quality(self):
        assert DEFAULT_QUALITY == 90

    def test_default_background_writes(self):
        assert DEFAULT_MAX_BACKGROUND_WRITES == 4

    def test_default_log_level(self):
        assert DEFAULT_LOG_LEVEL == "WARNING"

    def test_default_cache_under_home(self):
        assert Path(DEFAULT_CACHE_PATH).is_relative_to(Path.home())

    def test_get_defaults_has_all_keys(self):
        d = get_defaults()
        assert set(d) == {"cache_path", "default_quality", "max_background_writes", "log_level"}
        assert d["default_quality"] == DEFAULT_QUALITY


class TestCoerceEnvValue:
    def test_int_coercion(self):
        assert _coerce_env_value("default_quality", "75") == 75

    def test_bad_int_passthrough(self):
        assert _coerce_env_value("max_background_writes", "many") == "many"

    def test_string_passthrough(self):
        assert _coerce_env_value("cache_path", "/tmp/cache") == "/tmp/cache"
