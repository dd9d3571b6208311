"""
Tests for configuration and logging setup.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging

import pytest


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    from mediscout.config import reset_settings
    from mediscout.db.client import reset_clients

    for name in (
        "MEDISCOUT_STORE",
        "MEDISCOUT_STORE_PATH",
        "MEDISCOUT_RECORDS_PER_CONDITION",
        "MEDISCOUT_PREDICT_DELAY",
        "MEDISCOUT_LOG_LEVEL",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory from leaking in
    monkeypatch.setattr("mediscout.config.load_dotenv", lambda: False)
    reset_settings()
    reset_clients()
    yield
    reset_settings()
    reset_clients()


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        from mediscout.config import get_settings, DEFAULT_STORE_PATH

        settings = get_settings()
        assert settings.store_backend == "file"
        assert settings.store_path == DEFAULT_STORE_PATH
        assert settings.records_per_condition == 15
        assert settings.predict_delay == 1.5
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        from mediscout.config import get_settings

        monkeypatch.setenv("MEDISCOUT_STORE", "Memory")
        monkeypatch.setenv("MEDISCOUT_STORE_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("MEDISCOUT_RECORDS_PER_CONDITION", "3")
        monkeypatch.setenv("MEDISCOUT_PREDICT_DELAY", "0")
        monkeypatch.setenv("MEDISCOUT_LOG_LEVEL", "debug")

        settings = get_settings()
        assert settings.store_backend == "memory"
        assert settings.store_path == tmp_path / "s.json"
        assert settings.records_per_condition == 3
        assert settings.predict_delay == 0
        assert settings.log_level == "DEBUG"

    def test_settings_are_cached(self, monkeypatch):
        from mediscout.config import get_settings, reset_settings

        first = get_settings()
        monkeypatch.setenv("MEDISCOUT_RECORDS_PER_CONDITION", "4")
        assert get_settings() is first
        reset_settings()
        assert get_settings().records_per_condition == 4

    @pytest.mark.parametrize("name,value", [
        ("MEDISCOUT_STORE", "redis"),
        ("MEDISCOUT_RECORDS_PER_CONDITION", "0"),
        ("MEDISCOUT_PREDICT_DELAY", "-1"),
    ])
    def test_invalid_settings(self, monkeypatch, name, value):
        from mediscout.config import get_settings

        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            get_settings()


class TestBuildStore:
    """Test store construction."""

    def test_memory_store(self, monkeypatch):
        from mediscout.config import build_store
        from mediscout.db import MemoryStore

        monkeypatch.setenv("MEDISCOUT_STORE", "memory")
        assert isinstance(build_store(), MemoryStore)

    def test_file_store(self, monkeypatch, tmp_path):
        from mediscout.config import build_store
        from mediscout.db import JsonFileStore

        monkeypatch.setenv("MEDISCOUT_STORE_PATH", str(tmp_path / "store.json"))
        store = build_store()
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "store.json"

    def test_supabase_requires_credentials(self, monkeypatch):
        from mediscout.config import build_store

        monkeypatch.setenv("MEDISCOUT_STORE", "supabase")
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            build_store()


class TestLogging:

    def test_setup_logging(self):
        from mediscout.log import setup_logging

        logger = setup_logging("mediscout.test", "debug")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

        # Calling again reconfigures the level without stacking handlers
        logger = setup_logging("mediscout.test", logging.WARNING)
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_unknown_level(self):
        from mediscout.log import setup_logging

        with pytest.raises(ValueError):
            setup_logging("mediscout.test", "LOUD")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
