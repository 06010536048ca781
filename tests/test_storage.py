"""
Tests for storage backends and transaction support

The same behaviour is checked against the in-memory backend and a temporary
SQLite file.
"""

import pytest
import tempfile
import shutil
from datetime import datetime, timezone
from pathlib import Path

from finance_tracker.storage import InMemoryStorage, SQLiteStorage, create_storage


def _record(record_id, **fields):
    now = datetime.now(timezone.utc).isoformat()
    data = {"id": record_id, "created_at": now, "updated_at": now}
    data.update(fields)
    return data


class StorageBehaviour:
    """Checks shared by every backend; subclasses provide the storage"""

    def make_storage(self):
        raise NotImplementedError

    def setup_method(self):
        self.storage = self.make_storage()

    def teardown_method(self):
        self.storage.close()

    def test_save_load_roundtrip(self):
        record = _record("a1", name="Checking", amount="100.50", tags=["x", "y"], is_active=True)
        self.storage.save("accounts", "a1", record)

        assert self.storage.load("accounts", "a1") == record
        assert self.storage.exists("accounts", "a1")
        assert not self.storage.exists("accounts", "missing")
        assert self.storage.load("accounts", "missing") is None

    def test_save_replaces_existing(self):
        self.storage.save("accounts", "a1", _record("a1", name="Old"))
        self.storage.save("accounts", "a1", _record("a1", name="New"))

        assert self.storage.count("accounts") == 1
        assert self.storage.load("accounts", "a1")["name"] == "New"

    def test_load_returns_copy(self):
        self.storage.save("accounts", "a1", _record("a1", name="Checking"))
        loaded = self.storage.load("accounts", "a1")
        loaded["name"] = "Mutated"
        assert self.storage.load("accounts", "a1")["name"] == "Checking"

    def test_delete(self):
        self.storage.save("accounts", "a1", _record("a1"))
        assert self.storage.delete("accounts", "a1") is True
        assert self.storage.delete("accounts", "a1") is False
        assert self.storage.count("accounts") == 0

    def test_find_by_string_bool_and_null(self):
        self.storage.save("transactions", "t1", _record("t1", account_id="a1", category_id=None, flag=True))
        self.storage.save("transactions", "t2", _record("t2", account_id="a1", category_id="c1", flag=False))
        self.storage.save("transactions", "t3", _record("t3", account_id="a2", category_id="c1", flag=True))

        assert {r["id"] for r in self.storage.find("transactions", {"account_id": "a1"})} == {"t1", "t2"}
        assert {r["id"] for r in self.storage.find("transactions", {"category_id": None})} == {"t1"}
        assert {r["id"] for r in self.storage.find("transactions", {"flag": True})} == {"t1", "t3"}
        assert {
            r["id"] for r in self.storage.find("transactions", {"account_id": "a1", "category_id": "c1"})
        } == {"t2"}
        assert self.storage.find("transactions", {"account_id": "nope"}) == []

    def test_load_all_and_clear(self):
        for i in range(3):
            self.storage.save("goals", f"g{i}", _record(f"g{i}"))
        assert len(self.storage.load_all("goals")) == 3

        self.storage.clear_table("goals")
        assert self.storage.load_all("goals") == []

    def test_atomic_commits(self):
        with self.storage.atomic():
            self.storage.save("accounts", "a1", _record("a1"))
            self.storage.save("accounts", "a2", _record("a2"))

        assert self.storage.count("accounts") == 2

    def test_atomic_rolls_back_on_error(self):
        self.storage.save("accounts", "a1", _record("a1", name="Before"))

        with pytest.raises(RuntimeError):
            with self.storage.atomic():
                self.storage.save("accounts", "a1", _record("a1", name="During"))
                self.storage.save("accounts", "a2", _record("a2"))
                self.storage.delete("accounts", "a1")
                raise RuntimeError("boom")

        assert self.storage.load("accounts", "a1")["name"] == "Before"
        assert not self.storage.exists("accounts", "a2")

    def test_nested_atomic_joins_outer(self):
        with pytest.raises(RuntimeError):
            with self.storage.atomic():
                self.storage.save("accounts", "a1", _record("a1"))
                with self.storage.atomic():
                    self.storage.save("accounts", "a2", _record("a2"))
                raise RuntimeError("outer fails after inner committed")

        assert not self.storage.exists("accounts", "a1")
        assert not self.storage.exists("accounts", "a2")

    def test_rollback_of_new_table_keeps_table_usable(self):
        with pytest.raises(RuntimeError):
            with self.storage.atomic():
                self.storage.save("budgets", "b1", _record("b1"))
                raise RuntimeError("boom")

        assert self.storage.load_all("budgets") == []
        self.storage.save("budgets", "b2", _record("b2"))
        assert self.storage.exists("budgets", "b2")


class TestInMemoryStorage(StorageBehaviour):

    def make_storage(self):
        return InMemoryStorage()

    def test_get_all_data(self):
        self.storage.save("accounts", "a1", _record("a1"))
        assert list(self.storage.get_all_data()["accounts"]) == ["a1"]


class TestSQLiteStorage(StorageBehaviour):

    def make_storage(self):
        self.temp_dir = tempfile.mkdtemp()
        return SQLiteStorage(Path(self.temp_dir) / "ledger.db")

    def teardown_method(self):
        super().teardown_method()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_data_survives_reopen(self):
        self.storage.save("accounts", "a1", _record("a1", name="Persistent"))
        self.storage.close()

        self.storage = SQLiteStorage(Path(self.temp_dir) / "ledger.db")
        assert self.storage.load("accounts", "a1")["name"] == "Persistent"


class TestCreateStorage:
    """Backend selection by configuration value"""

    def test_memory(self):
        assert isinstance(create_storage("memory"), InMemoryStorage)

    def test_sqlite_defaults_to_in_memory_database(self):
        storage = create_storage("SQLITE")
        assert isinstance(storage, SQLiteStorage)
        assert storage.db_path == ":memory:"
        storage.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage("postgres")
