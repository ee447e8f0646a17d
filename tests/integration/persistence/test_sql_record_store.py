"""Integration tests for SqlRecordStore against in-memory SQLite."""

import pytest
from sqlalchemy import update

from ddd_foundation.infrastructure.persistence.adapter.sql_store import SqlRecordStore


def _make_order_record(store: SqlRecordStore, id: str = "order-1", customer: str = "alice"):
    record = store.new_record(id)
    record.fill({"customer": customer, "status": "draft", "note": None})
    return record


def _make_line_record(store: SqlRecordStore, id: str, order_id: str):
    record = store.new_record(id)
    record.fill({"order_id": order_id, "sku": "SKU-1", "quantity": 1})
    return record


class TestSqlCreate:
    def test_create_inserts_version_one(self, sql_order_store):
        record = _make_order_record(sql_order_store)
        assert sql_order_store.create(record)
        assert record.exists
        assert record.version == 1

        loaded = sql_order_store.find_by_id("order-1")
        assert loaded.exists
        assert loaded.version == 1
        assert loaded["customer"] == "alice"
        assert loaded.created_at.tzinfo is not None

    def test_create_duplicate_returns_false(self, sql_order_store):
        assert sql_order_store.create(_make_order_record(sql_order_store))
        assert sql_order_store.create(_make_order_record(sql_order_store)) is False

    def test_find_missing(self, sql_order_store):
        assert sql_order_store.find_by_id("missing") is None
        assert not sql_order_store.exists("missing")

    def test_standard_columns_are_not_fields(self, sql_order_store):
        sql_order_store.create(_make_order_record(sql_order_store))
        loaded = sql_order_store.find_by_id("order-1")
        assert set(loaded.fields) == {"customer", "status", "note"}


class TestSqlConditionalUpdate:
    def test_update_with_matching_version(self, sql_order_store):
        sql_order_store.create(_make_order_record(sql_order_store))
        record = sql_order_store.find_by_id("order-1")
        record.fill({"customer": "bob"})

        assert sql_order_store.update(record, expected_version=1)
        assert record.version == 2
        loaded = sql_order_store.find_by_id("order-1")
        assert loaded.version == 2
        assert loaded["customer"] == "bob"

    def test_update_with_stale_version_changes_nothing(self, sql_order_store):
        sql_order_store.create(_make_order_record(sql_order_store))
        record = sql_order_store.find_by_id("order-1")
        record.fill({"customer": "bob"})

        assert sql_order_store.update(record, expected_version=7) is False
        loaded = sql_order_store.find_by_id("order-1")
        assert loaded.version == 1
        assert loaded["customer"] == "alice"

    def test_two_writers_with_same_expected_version(self, sql_order_store):
        sql_order_store.create(_make_order_record(sql_order_store))
        first = sql_order_store.find_by_id("order-1")
        second = sql_order_store.find_by_id("order-1")
        first.fill({"customer": "bob"})
        second.fill({"customer": "carol"})

        assert sql_order_store.update(first, expected_version=1)
        assert sql_order_store.update(second, expected_version=1) is False
        assert sql_order_store.find_by_id("order-1")["customer"] == "bob"

    def test_update_sees_out_of_band_version_change(self, sql_order_store, sql_sessions, sql_tables):
        orders, _ = sql_tables
        sql_order_store.create(_make_order_record(sql_order_store))
        record = sql_order_store.find_by_id("order-1")

        with sql_sessions.begin() as session:
            session.execute(update(orders).where(orders.c.id == "order-1").values(version=5))

        assert sql_order_store.update(record, expected_version=1) is False
        assert sql_order_store.update(record, expected_version=5)
        assert sql_order_store.find_by_id("order-1").version == 6


class TestSqlDelete:
    def test_delete(self, sql_order_store):
        record = _make_order_record(sql_order_store)
        sql_order_store.create(record)
        assert sql_order_store.delete(record)
        assert not record.exists
        assert sql_order_store.find_by_id("order-1") is None

    def test_delete_missing_returns_false(self, sql_order_store):
        assert sql_order_store.delete(sql_order_store.new_record("missing")) is False


class TestSqlRelations:
    @pytest.fixture
    def parent(self, sql_order_store, sql_line_store):
        parent = _make_order_record(sql_order_store, "order-1")
        sql_order_store.create(parent)
        sql_order_store.create(_make_order_record(sql_order_store, "order-2"))
        sql_line_store.create(_make_line_record(sql_line_store, "line-1", "order-1"))
        sql_line_store.create(_make_line_record(sql_line_store, "line-2", "order-2"))
        return parent

    def test_unknown_relation(self, sql_order_store, parent):
        assert sql_order_store.relation(parent, "payments") is None

    def test_find_is_scoped_to_parent(self, sql_order_store, parent):
        handle = sql_order_store.relation(parent, "lines")
        assert handle.find("line-1").id == "line-1"
        assert handle.find("line-2") is None

    def test_delete_related(self, sql_order_store, sql_line_store, parent):
        handle = sql_order_store.relation(parent, "lines")
        assert handle.delete(handle.find("line-1"))
        assert not sql_line_store.exists("line-1")

    def test_delete_foreign_child_is_refused(self, sql_order_store, sql_line_store, parent):
        handle = sql_order_store.relation(parent, "lines")
        assert handle.delete(sql_line_store.find_by_id("line-2")) is False
        assert sql_line_store.exists("line-2")
