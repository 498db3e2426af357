"""
Tests for SearchConfig loading, the observable Store and logger levels.
"""

import logging

import pytest

from shift_market.core.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    SearchConfig,
    get_config,
    set_config,
)
from shift_market.store import Store
from shift_market.utils.logger import get_logger, set_level


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("SHIFT_MARKET_DATA_SOURCE", raising=False)
    monkeypatch.delenv("SHIFT_MARKET_SEED_PATH", raising=False)


class TestSearchConfig:
    def test_defaults(self):
        config = SearchConfig()
        assert config.page_size == 12
        assert config.price_ceiling == 10_000_000
        assert config.debounce_seconds == pytest.approx(0.3)
        assert "Electronics" in config.categories

    def test_bundled_yaml(self, clean_env):
        config = SearchConfig.from_yaml(DEFAULT_CONFIG_PATH)
        assert config.page_size == 12
        assert config.currency == "UGX"
        assert config.data_source == "supabase"

    def test_from_yaml(self, tmp_path, clean_env):
        path = tmp_path / "search.yaml"
        path.write_text(
            "search:\n"
            "  page_size: 24\n"
            "  categories: [Books]\n"
            "price:\n"
            "  ceiling: 500000\n"
            "data:\n"
            "  source: memory\n"
            "  seed_path: /tmp/seed.json\n"
            "logging:\n"
            "  level: warning\n"
        )
        config = SearchConfig.from_yaml(path)
        assert config.page_size == 24
        assert config.categories == ["Books"]
        assert config.price_ceiling == 500_000
        assert config.data_source == "memory"
        assert config.seed_path == "/tmp/seed.json"
        assert config.log_level == "WARNING"

    def test_missing_file_uses_defaults(self, tmp_path, clean_env):
        assert SearchConfig.from_yaml(tmp_path / "absent.yaml") == SearchConfig()

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SHIFT_MARKET_DATA_SOURCE", "memory")
        monkeypatch.setenv("SHIFT_MARKET_SEED_PATH", "rows.json")
        config = SearchConfig.from_yaml(DEFAULT_CONFIG_PATH)
        assert config.data_source == "memory"
        assert config.seed_path == "rows.json"

    @pytest.mark.parametrize("kwargs", [
        {"page_size": 0},
        {"price_ceiling": 0},
        {"price_step": 10_000_000},
        {"data_source": "postgres"},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            SearchConfig(**kwargs)

    def test_global_config(self):
        custom = SearchConfig(page_size=5, data_source="memory")
        set_config(custom)
        try:
            assert get_config() is custom
        finally:
            set_config(None)


class TestStore:
    def test_set_notifies_on_change_only(self):
        store = Store(1)
        seen = []
        store.subscribe(lambda new, old: seen.append((new, old)))
        assert store.set(2) is True
        assert store.set(2) is False
        assert store.update(lambda v: v * 10) is True
        assert seen == [(2, 1), (20, 2)]
        assert store.get() == 20

    def test_unsubscribe(self):
        store = Store("a")
        seen = []
        unsubscribe = store.subscribe(lambda new, old: seen.append(new))
        unsubscribe()
        unsubscribe()
        store.set("b")
        assert seen == []


class TestLogger:
    def test_child_loggers_follow_configured_level(self):
        root = get_logger()
        original = root.level
        try:
            set_level("debug")
            assert get_logger("search.session").isEnabledFor(logging.DEBUG)
            set_level(SearchConfig(log_level="ERROR").log_level)
            assert not get_logger("search.session").isEnabledFor(logging.WARNING)
        finally:
            root.setLevel(original)

    def test_logger_names(self):
        assert get_logger("api.server").name == "shift_market.api.server"
        assert get_logger().propagate is False
