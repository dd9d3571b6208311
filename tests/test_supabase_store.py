"""
Tests for the Supabase-backed key-value store, using an in-memory table.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import json
from types import SimpleNamespace

import pytest


class FakeQuery:
    """Records a chained query against a FakeTable and applies it on execute()."""

    def __init__(self, table, action, payload=None):
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = {}
        self.row_limit = None

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row):
        return all(row.get(k) == v for k, v in self.filters.items())

    def execute(self):
        rows = self.table.rows
        if self.action == "select":
            data = [{c: row[c] for c in self.payload} for row in rows if self._matches(row)]
            if self.row_limit is not None:
                data = data[:self.row_limit]
            return SimpleNamespace(data=data)
        if self.action == "upsert":
            for row in rows:
                if row["key"] == self.payload["key"]:
                    row.update(self.payload)
                    break
            else:
                rows.append(dict(self.payload))
            return SimpleNamespace(data=[self.payload])
        if self.action == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.table.rows = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=removed)
        raise AssertionError(f"unexpected action {self.action}")


class FakeTable:

    def __init__(self):
        self.rows = []

    def select(self, *columns):
        return FakeQuery(self, "select", columns)

    def upsert(self, row):
        return FakeQuery(self, "upsert", row)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeSupabase:
    """Stands in for supabase.Client: one FakeTable per table name."""

    def __init__(self):
        self.tables = {}

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())


@pytest.fixture
def raw_client():
    return FakeSupabase()


@pytest.fixture
def store(raw_client):
    from mediscout.db.client import SupabaseClient, SupabaseStore
    return SupabaseStore(SupabaseClient(raw_client))


class TestSupabaseStore:
    """Test SupabaseStore against an in-memory table."""

    def test_missing_key(self, store):
        assert store.get("absent") is None

    def test_set_and_get(self, store, raw_client):
        store.set("k", '{"a": 1}')
        assert store.get("k") == '{"a": 1}'
        assert raw_client.tables["kv_store"].rows == [{"key": "k", "value": '{"a": 1}'}]

    def test_set_overwrites(self, store, raw_client):
        store.set("k", "1")
        store.set("k", "2")
        assert store.get("k") == "2"
        assert len(raw_client.tables["kv_store"].rows) == 1

    def test_delete(self, store):
        store.set("k", "1")
        store.set("other", "2")
        store.delete("k")
        assert store.get("k") is None
        assert store.get("other") == "2"

    def test_custom_table(self, raw_client):
        from mediscout.db.client import SupabaseClient, SupabaseStore

        store = SupabaseStore(SupabaseClient(raw_client), table_name="mediscout_kv")
        store.set("k", "v")
        assert "mediscout_kv" in raw_client.tables
        assert "kv_store" not in raw_client.tables


class TestRepositoriesOverSupabase:
    """The repositories work unchanged over the Supabase store."""

    def test_cohort_cache(self, store):
        from mediscout.db import CohortRepository
        from mediscout.engines import CohortAssembler, RandomSource
        from mediscout.models import COHORT_STORAGE_KEY

        repo = CohortRepository(store, assembler=CohortAssembler(rng=RandomSource(3)), per_condition_count=2)
        first = repo.get_cohort()
        assert len(first) == 19
        assert [r.id for r in repo.get_cohort()] == [r.id for r in first]
        assert json.loads(store.get(COHORT_STORAGE_KEY))[0]["id"] == first[0].id

    def test_user_accounts(self, store):
        from mediscout.auth import AccountService
        from mediscout.db import UserRepository
        from mediscout.models import RegistrationRequest

        service = AccountService(UserRepository(store))
        registered = service.register(RegistrationRequest(username="asha", password="pw"))
        assert registered.success
        assert service.login("asha", "pw").user == registered.user


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
