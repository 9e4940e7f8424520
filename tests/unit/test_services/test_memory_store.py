"""Tests for the in-memory store."""

import pytest
from realty_crm.services.memory_store import InMemoryStore, generate_id
from realty_crm.services.store import BUYER_GROUPS_TABLE
from realty_crm.utils.errors import StoreError


@pytest.mark.unit
def test_generate_id_is_ulid():
    first, second = generate_id(), generate_id()

    assert len(first) == 26
    assert first != second


@pytest.mark.unit
@pytest.mark.asyncio
async def test_insert_assigns_ids_and_timestamps(memory_store):
    rows = await memory_store.insert("tags", [{"name": "VIP"}, {"id": "fixed", "name": "Cash"}])

    assert len(rows[0]["id"]) == 26
    assert rows[1]["id"] == "fixed"
    assert rows[0]["created_at"] and rows[0]["updated_at"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_join_rows_get_no_id(memory_store):
    rows = await memory_store.insert(BUYER_GROUPS_TABLE, [{"buyer_id": "b1", "group_id": "g1"}])

    assert rows == [{"buyer_id": "b1", "group_id": "g1"}]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_returned_rows_are_copies(memory_store):
    await memory_store.insert("tags", [{"name": "VIP", "meta": {"a": 1}}])

    rows = await memory_store.select("tags")
    rows[0]["meta"]["a"] = 2

    assert memory_store.tables["tags"][0]["meta"] == {"a": 1}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_select_match_ilike_and_order():
    store = InMemoryStore({"tags": [
        {"id": "1", "name": "cash buyer", "usage_count": 3},
        {"id": "2", "name": "Investor", "usage_count": None},
        {"id": "3", "name": "Cash Flow", "usage_count": 1},
    ]})

    assert [row["id"] for row in await store.select("tags", ilike=("name", "CASH"))] == ["1", "3"]
    assert [row["id"] for row in await store.select("tags", order_by="name")] == ["1", "3", "2"]
    assert [row["id"] for row in await store.select("tags", order_by="usage_count")] == ["3", "1", "2"]
    assert [row["id"] for row in await store.select("tags", order_by="usage_count", descending=True)] == ["2", "1", "3"]
    assert await store.select("tags", match={"id": "2", "name": "nope"}) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_delete_and_count():
    store = InMemoryStore({"tags": [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]})

    updated = await store.update("tags", {"name": "z"}, {"id": "2"})
    await store.delete("tags", {"id": "1"})

    assert updated == [{"id": "2", "name": "z"}]
    assert store.tables["tags"] == [{"id": "2", "name": "z"}]
    assert await store.count("tags") == 1
    assert await store.count("missing") == 0
