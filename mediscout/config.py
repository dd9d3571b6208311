"""
Runtime configuration for MediScout.

Settings come from environment variables, optionally loaded from a `.env`
file in the working directory.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from mediscout.db.store import KeyValueStore, MemoryStore, JsonFileStore
from mediscout.engines.cohort import DEFAULT_RECORDS_PER_CONDITION
from mediscout.predictor.matcher import DEFAULT_DELAY_SECONDS

STORE_BACKENDS = ("memory", "file", "supabase")
DEFAULT_STORE_PATH = Path.home() / ".mediscout" / "store.json"


class Settings:
    """Configuration read from the environment."""

    def __init__(self):
        load_dotenv()
        self.store_backend = os.environ.get("MEDISCOUT_STORE", "file").lower()
        self.store_path = Path(
            os.environ.get("MEDISCOUT_STORE_PATH", str(DEFAULT_STORE_PATH))
        ).expanduser()
        self.records_per_condition = int(
            os.environ.get("MEDISCOUT_RECORDS_PER_CONDITION", DEFAULT_RECORDS_PER_CONDITION)
        )
        self.predict_delay = float(
            os.environ.get("MEDISCOUT_PREDICT_DELAY", DEFAULT_DELAY_SECONDS)
        )
        self.log_level = os.environ.get("MEDISCOUT_LOG_LEVEL", "INFO").upper()

    def validate(self) -> None:
        """Raise error if the settings cannot be used."""
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"MEDISCOUT_STORE must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {self.store_backend!r}"
            )
        if self.records_per_condition < 1:
            raise ValueError("MEDISCOUT_RECORDS_PER_CONDITION must be at least 1")
        if self.predict_delay < 0:
            raise ValueError("MEDISCOUT_PREDICT_DELAY cannot be negative")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the settings (singleton)."""
    global _settings
    if _settings is None:
        settings = Settings()
        settings.validate()
        _settings = settings
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None


def build_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """Construct the key-value store the settings select."""
    settings = settings or get_settings()

    if settings.store_backend == "memory":
        return MemoryStore()
    if settings.store_backend == "file":
        return JsonFileStore(settings.store_path)

    from mediscout.db.client import SupabaseStore, get_client, get_config

    return SupabaseStore(get_client(), get_config().table)
