"""Unit tests for query matching and the in-memory / JSON file collections."""
import asyncio
import json

import pytest

from spellbook.exceptions import StoreError
from spellbook.repositories.document_store import DocumentStore, create_store
from spellbook.repositories.json_file_collection import JsonFileCollection
from spellbook.repositories.memory_collection import InMemoryCollection
from spellbook.repositories.query import matches, normalize_sort, sort_documents


DOC = {"title": "Cat", "modelIds": ["m1", "m2"], "isTop": False, "tagIds": ["t1", "color"]}


@pytest.mark.parametrize("query, expected", [
    (None, True),
    ({}, True),
    ({"title": "Cat"}, True),
    ({"title": "Dog"}, False),
    ({"modelIds": "m2"}, True),
    ({"modelIds": ["m1", "m2"]}, True),
    ({"modelIds": ["m1"]}, False),
    ({"title": {"$ne": "Dog"}}, True),
    ({"title": {"$in": ["Dog", "Cat"]}}, True),
    ({"title": {"$nin": ["Cat"]}}, False),
    ({"tagIds": {"$elemMatch": {"$eq": "color"}}}, True),
    ({"tagIds": {"$elemMatch": {"$eq": "nope"}}}, False),
    ({"$or": [{"title": "Dog"}, {"isTop": False}]}, True),
    ({"$and": [{"title": "Cat"}, {"isTop": True}]}, False),
    ({"author": {"$exists": False}}, True),
    ({"formulaId": {"$ne": "f1"}}, True),
])
def test_matches(query, expected):
    assert matches(DOC, query) is expected


def test_unknown_operator_raises():
    with pytest.raises(ValueError):
        matches(DOC, {"title": {"$regex": "C"}})


def test_normalize_sort():
    assert normalize_sort(["sortOrder", ("updatedAt", "desc"), ("isTop", "desc", False)]) == [
        ("sortOrder", False, None), ("updatedAt", True, None), ("isTop", True, False)
    ]


def test_sort_default_stands_in_for_missing_field():
    """A record without isTop ranks with unpinned records, by recency."""
    docs = [
        {"id": "old", "isTop": False, "updatedAt": "2020-01-01"},
        {"id": "new", "updatedAt": "2025-01-01"},
        {"id": "pinned", "isTop": True, "updatedAt": "2019-01-01"},
        {"id": "null", "isTop": None, "updatedAt": "2022-01-01"},
    ]

    result = sort_documents(docs, [("isTop", "desc", False), ("updatedAt", "desc")])

    assert [d["id"] for d in result] == ["pinned", "new", "null", "old"]


def test_sort_documents_multi_field_with_missing_values():
    docs = [
        {"id": 1, "isTop": False, "updatedAt": "2024-01-01"},
        {"id": 2, "isTop": True, "updatedAt": "2023-01-01"},
        {"id": 3, "isTop": False},
        {"id": 4, "isTop": False, "updatedAt": "2024-06-01"},
    ]

    result = sort_documents(docs, [("isTop", "desc"), ("updatedAt", "desc")])

    assert [d["id"] for d in result] == [2, 4, 1, 3]


@pytest.mark.asyncio
async def test_memory_collection_assigns_storage_ids():
    collection = InMemoryCollection("tags")

    stored = await collection.upsert([{"slug": "a"}, {"slug": "b"}])

    assert all(doc["_id"] for doc in stored)
    assert stored[0]["_id"] != stored[1]["_id"]
    assert len(collection) == 2


@pytest.mark.asyncio
async def test_memory_collection_upsert_replaces_by_id():
    collection = InMemoryCollection("tags")
    stored = (await collection.upsert({"slug": "a", "extra": 1}))[0]

    await collection.upsert({"_id": stored["_id"], "slug": "b"})

    docs = await collection.find({})
    assert docs == [{"_id": stored["_id"], "slug": "b"}]


@pytest.mark.asyncio
async def test_memory_collection_returns_copies():
    collection = InMemoryCollection("tags", [{"slug": "a", "tagIds": []}])

    doc = await collection.find_one({"slug": "a"})
    doc["slug"] = "changed"

    assert await collection.find_one({"slug": "a"}) is not None


@pytest.mark.asyncio
async def test_memory_collection_remove():
    collection = InMemoryCollection("tags")
    stored = (await collection.upsert({"slug": "a"}))[0]

    assert await collection.remove(stored["_id"]) is True
    assert await collection.remove(stored["_id"]) is False


@pytest.mark.asyncio
async def test_json_file_collection_persists(tmp_path):
    collection = JsonFileCollection("formulas", tmp_path)
    stored = (await collection.upsert({"formulaId": "f1", "title": "猫"}))[0]

    reopened = JsonFileCollection("formulas", tmp_path)

    assert await reopened.find_one({"formulaId": "f1"}) == stored
    on_disk = json.loads((tmp_path / "formulas.json").read_text(encoding="utf-8"))
    assert on_disk == [stored]

    await reopened.remove(stored["_id"])
    assert len(JsonFileCollection("formulas", tmp_path)) == 0


@pytest.mark.asyncio
async def test_json_file_collection_rolls_back_failed_write(tmp_path):
    collection = JsonFileCollection("formulas", tmp_path)
    await collection.upsert({"formulaId": "f1"})

    with pytest.raises(StoreError):
        await collection.upsert({"formulaId": "f2", "bad": object()})

    assert [d["formulaId"] for d in await collection.find({})] == ["f1"]
    assert len(JsonFileCollection("formulas", tmp_path)) == 1
    assert list(tmp_path.glob("*.tmp")) == []


@pytest.mark.asyncio
async def test_json_file_collection_concurrent_upserts(tmp_path):
    collection = JsonFileCollection("snippets", tmp_path)

    await asyncio.gather(*[
        collection.upsert({"snippetId": f"s{i}", "content": f"text {i}"}) for i in range(30)
    ])

    assert len(collection) == 30
    reopened = JsonFileCollection("snippets", tmp_path)
    assert len(reopened) == 30
    assert list(tmp_path.glob("*.tmp")) == []


def test_json_file_collection_rejects_corrupt_file(tmp_path):
    (tmp_path / "tags.json").write_text("{oops", encoding="utf-8")

    with pytest.raises(StoreError):
        JsonFileCollection("tags", tmp_path)


def test_document_store_unknown_collection():
    with pytest.raises(ValueError):
        DocumentStore.in_memory().collection("users")


@pytest.mark.asyncio
async def test_create_store_file_backend(tmp_path, monkeypatch):
    from spellbook.config import settings

    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path))

    store = await create_store("file")
    await store.tags.upsert({"tagId": "t1"})

    assert (tmp_path / "db" / "tags.json").exists()
