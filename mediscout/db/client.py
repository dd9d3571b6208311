"""
Supabase client wrapper for MediScout.

Provides singleton access to a Supabase client and a key-value store backed
by a single Supabase table with `key` and `value` text columns.
"""

import os
from typing import Optional

from supabase import create_client, Client

from mediscout.db.store import KeyValueStore


DEFAULT_TABLE = "kv_store"


class SupabaseConfig:
  """Configuration for Supabase connection."""

  def __init__(self):
    self.url = os.environ.get("SUPABASE_URL")
    self.anon_key = os.environ.get("SUPABASE_ANON_KEY")
    self.table = os.environ.get("MEDISCOUT_SUPABASE_TABLE", DEFAULT_TABLE)

  @property
  def is_configured(self) -> bool:
    """Check if Supabase is properly configured."""
    return bool(self.url and self.anon_key)

  def validate(self) -> None:
    """Raise error if not properly configured."""
    if not self.url:
      raise ValueError("SUPABASE_URL environment variable not set")
    if not self.anon_key:
      raise ValueError("SUPABASE_ANON_KEY environment variable not set")


class SupabaseClient:
  """Thin wrapper around the Supabase client."""

  def __init__(self, client: Client):
    self._client = client

  @property
  def client(self) -> Client:
    """Get the underlying Supabase client."""
    return self._client

  def table(self, name: str):
    """Get a table reference for queries."""
    return self._client.table(name)


class SupabaseStore(KeyValueStore):
  """Key-value store over a Supabase table."""

  def __init__(self, client: SupabaseClient, table_name: str = DEFAULT_TABLE):
    self._client = client
    self.table_name = table_name

  @property
  def table(self):
    return self._client.table(self.table_name)

  def get(self, key: str) -> Optional[str]:
    response = self.table.select("value").eq("key", key).limit(1).execute()
    if not response.data:
      return None
    return response.data[0].get("value")

  def set(self, key: str, value: str) -> None:
    self.table.upsert({"key": key, "value": value}).execute()

  def delete(self, key: str) -> None:
    self.table.delete().eq("key", key).execute()


# -----------------------------------------------------------------------------
# Singleton instances
# -----------------------------------------------------------------------------

_client: Optional[SupabaseClient] = None
_config: Optional[SupabaseConfig] = None


def get_config() -> SupabaseConfig:
  """Get the Supabase configuration (singleton)."""
  global _config
  if _config is None:
    _config = SupabaseConfig()
  return _config


def get_client() -> SupabaseClient:
  """Get the Supabase client (singleton)."""
  global _client
  if _client is None:
    config = get_config()
    config.validate()
    raw_client = create_client(config.url, config.anon_key)
    _client = SupabaseClient(raw_client)
  return _client


def is_configured() -> bool:
  """Check if Supabase is configured without raising errors."""
  return get_config().is_configured


def reset_clients() -> None:
  """Reset client singletons (useful for testing)."""
  global _client, _config
  _client = None
  _config = None
