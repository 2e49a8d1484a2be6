"""
Tests for the SQL-backed store adapter.

Run with: python -m pytest tests/test_store_adapter.py -v
"""

import types

import pytest
from app.core.exceptions.exceptions import StoreError
from app.services.database import build_engine
from app.services.store_adapter import BaseStoreAdapter, SQLStoreAdapter


class TestScan:

    def test_empty_store(self, store: SQLStoreAdapter):
        assert list(store.scan()) == []

    def test_ascending_key_order(self, abc_store: SQLStoreAdapter):
        assert list(abc_store.scan()) == [
            {"key": "a", "value": 1},
            {"key": "b", "value": 2},
            {"key": "c", "value": 3},
        ]

    def test_scan_is_lazy(self, abc_store: SQLStoreAdapter):
        scan = abc_store.scan()
        assert isinstance(scan, types.GeneratorType)
        assert next(scan) == {"key": "a", "value": 1}
        scan.close()

    def test_scan_spans_several_batches(self, store: SQLStoreAdapter):
        # batch_size is 2 in the fixture
        store.put_many({"key": f"k{i:02d}", "value": i} for i in range(7))
        assert [e["value"] for e in store.scan()] == list(range(7))

    def test_json_values_round_trip(self, store: SQLStoreAdapter):
        doc = {"name": "Laptop 1", "tags": ["new"], "specs": {"weight": "2kg"}, "inStock": True}
        store.put("product:1", doc)
        store.put("settings:1", "dark")
        assert list(store.scan()) == [
            {"key": "product:1", "value": doc},
            {"key": "settings:1", "value": "dark"},
        ]

    def test_scan_reflects_keyspace_at_call_time(self, abc_store: SQLStoreAdapter):
        abc_store.put("d", 4)
        assert [e["key"] for e in abc_store.scan()] == ["a", "b", "c", "d"]

    def test_scan_failure_raises_store_error(self):
        # no init_schema: the table does not exist
        broken = SQLStoreAdapter(build_engine("sqlite://"))
        with pytest.raises(StoreError) as exc_info:
            list(broken.scan())
        assert exc_info.value.operation == "scan"
        assert exc_info.value.__cause__ is not None

    def test_abandoned_scan_does_not_block_writes(self, abc_store: SQLStoreAdapter):
        scan = abc_store.scan()
        next(scan)
        scan.close()

        abc_store.put("z", 26)
        assert abc_store.count() == 4


class TestWrites:

    def test_put_upserts(self, store: SQLStoreAdapter):
        store.put("a", 1)
        store.put("a", 2)
        assert list(store.scan()) == [{"key": "a", "value": 2}]

    def test_put_many_returns_written_count(self, store: SQLStoreAdapter):
        assert store.put_many([{"key": "x", "value": 1}, {"key": "y", "value": 2}]) == 2
        assert store.count() == 2

    def test_clear(self, abc_store: SQLStoreAdapter):
        assert abc_store.clear() == 3
        assert abc_store.count() == 0
        assert list(abc_store.scan()) == []

    def test_init_schema_is_idempotent(self, abc_store: SQLStoreAdapter):
        abc_store.init_schema()
        assert abc_store.count() == 3

    def test_init_schema_creates_sqlite_directory(self, tmp_path):
        db_file = tmp_path / "nested" / "kv.db"
        file_store = SQLStoreAdapter(build_engine(f"sqlite:///{db_file}"))

        file_store.init_schema()
        file_store.put("a", 1)

        assert db_file.parent.is_dir()
        assert list(file_store.scan()) == [{"key": "a", "value": 1}]
        file_store.engine.dispose()


def test_base_adapter_requires_scan():
    with pytest.raises(TypeError):
        BaseStoreAdapter()
