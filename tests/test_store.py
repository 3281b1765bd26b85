"""Tests for the collection store."""

import asyncio
from pathlib import Path

import pytest

from myrkat.core.exceptions import (
    CorruptCollectionError,
    DuplicateDocumentIdError,
    InvalidRequestError,
)
from myrkat.core.store import CollectionStore


@pytest.mark.asyncio
async def test_insert_single_returns_document_with_store_fields(store: CollectionStore, clock) -> None:
    note = await store.insert("notes", {"title": "A", "content": "hello"})

    assert isinstance(note, dict)
    assert note["title"] == "A"
    assert note["content"] == "hello"
    assert isinstance(note["id"], str) and note["id"]
    assert note["createdAt"] == clock.now
    assert note["updatedAt"] == clock.now


@pytest.mark.asyncio
async def test_insert_list_preserves_shape_and_order(store: CollectionStore) -> None:
    created = await store.insert("notes", [{"title": "1"}, {"title": "2"}, {"title": "3"}])

    assert isinstance(created, list)
    assert [d["title"] for d in created] == ["1", "2", "3"]
    assert [d["title"] for d in await store.find("notes")] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_insert_does_not_mutate_caller_data(store: CollectionStore) -> None:
    data = {"title": "A", "tags": ["x"]}

    await store.insert("notes", data)

    assert data == {"title": "A", "tags": ["x"]}


@pytest.mark.asyncio
async def test_insert_empty_list_writes_nothing(store: CollectionStore, data_dir: Path) -> None:
    assert await store.insert("notes", []) == []
    assert not (data_dir / "notes.json").exists()


@pytest.mark.asyncio
async def test_round_trip_by_id_and_field(store: CollectionStore) -> None:
    a = await store.insert("notes", {"title": "A", "kind": "x"})
    b = await store.insert("notes", {"title": "B", "kind": "x"})
    await store.insert("notes", {"title": "C", "kind": "y"})

    assert await store.find("notes", {"id": a["id"]}) == [a]
    assert await store.find("notes", {"kind": "x"}) == [a, b]


@pytest.mark.asyncio
async def test_caller_fields_cannot_override_timestamps(store: CollectionStore, clock) -> None:
    note = await store.insert("notes", {"title": "A", "createdAt": 1, "updatedAt": 2})

    assert note["createdAt"] == clock.now
    assert note["updatedAt"] == clock.now


@pytest.mark.asyncio
async def test_supplied_id_is_kept(store: CollectionStore) -> None:
    note = await store.insert("notes", {"id": "custom-1", "title": "A"})

    assert note["id"] == "custom-1"


@pytest.mark.asyncio
async def test_duplicate_supplied_id_rejected_without_write(store: CollectionStore, data_dir: Path) -> None:
    await store.insert("notes", {"id": "n1", "title": "A"})
    before = (data_dir / "notes.json").read_bytes()

    with pytest.raises(DuplicateDocumentIdError):
        await store.insert("notes", {"id": "n1", "title": "again"})
    with pytest.raises(DuplicateDocumentIdError):
        await store.insert("notes", [{"id": "n2"}, {"id": "n2"}])

    assert (data_dir / "notes.json").read_bytes() == before


@pytest.mark.asyncio
async def test_ids_are_unique(store: CollectionStore) -> None:
    await store.insert("notes", [{"title": str(i)} for i in range(50)])
    await store.insert("notes", {"title": "extra"})

    ids = [d["id"] for d in await store.find("notes")]
    assert len(ids) == 51
    assert len(set(ids)) == 51


@pytest.mark.asyncio
async def test_find_missing_collection_is_empty(store: CollectionStore) -> None:
    assert await store.find("nothing-here") == []
    assert await store.find("nothing-here", {"id": "x"}) == []


@pytest.mark.asyncio
async def test_find_uses_strict_equality(store: CollectionStore) -> None:
    await store.insert("notes", [
        {"title": "flag", "pinned": True},
        {"title": "one", "pinned": 1},
        {"title": "null", "parentId": None},
        {"title": "missing"},
    ])

    assert [d["title"] for d in await store.find("notes", {"pinned": True})] == ["flag"]
    assert [d["title"] for d in await store.find("notes", {"pinned": 1})] == ["one"]
    assert [d["title"] for d in await store.find("notes", {"parentId": None})] == ["null"]
    assert len(await store.find("notes", {})) == 4


@pytest.mark.asyncio
async def test_update_merges_and_refreshes_updated_at(store: CollectionStore, clock) -> None:
    note = await store.insert("notes", {"title": "A", "content": "old"})
    clock.advance(10)

    updated = await store.update("notes", {"id": note["id"]}, {"content": "new", "extra": 1})

    assert len(updated) == 1
    doc = updated[0]
    assert doc["title"] == "A"
    assert doc["content"] == "new"
    assert doc["extra"] == 1
    assert doc["createdAt"] == note["createdAt"]
    assert doc["updatedAt"] == clock.now
    assert await store.find("notes", {"id": note["id"]}) == [doc]


@pytest.mark.asyncio
async def test_update_ignores_reserved_fields(store: CollectionStore) -> None:
    note = await store.insert("notes", {"title": "A"})

    [doc] = await store.update(
        "notes", {"id": note["id"]}, {"id": "hijack", "createdAt": 0, "updatedAt": 0, "title": "B"}
    )

    assert doc["id"] == note["id"]
    assert doc["createdAt"] == note["createdAt"]
    assert doc["updatedAt"] > note["updatedAt"]
    assert doc["title"] == "B"


@pytest.mark.asyncio
async def test_updated_at_strictly_increases_within_one_second(store: CollectionStore) -> None:
    note = await store.insert("notes", {"title": "A"})
    stamps = [note["updatedAt"]]

    for i in range(5):
        [doc] = await store.update("notes", {"id": note["id"]}, {"title": f"v{i}"})
        stamps.append(doc["updatedAt"])

    assert all(later > earlier for earlier, later in zip(stamps, stamps[1:]))
    assert all(stamp >= note["createdAt"] for stamp in stamps)


@pytest.mark.asyncio
async def test_update_keeps_collection_order(store: CollectionStore) -> None:
    await store.insert("notes", [{"title": "1", "k": "a"}, {"title": "2", "k": "b"}, {"title": "3", "k": "a"}])

    updated = await store.update("notes", {"k": "a"}, {"seen": True})

    assert [d["title"] for d in updated] == ["1", "3"]
    assert [d["title"] for d in await store.find("notes")] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_no_match_update_and_delete_leave_file_untouched(store: CollectionStore, data_dir: Path) -> None:
    await store.insert("notes", {"title": "A"})
    path = data_dir / "notes.json"
    before = path.read_bytes()
    mtime = path.stat().st_mtime_ns

    assert await store.update("notes", {"id": "missing"}, {"title": "B"}) == []
    assert await store.delete("notes", {"id": "missing"}) == 0

    assert path.read_bytes() == before
    assert path.stat().st_mtime_ns == mtime


@pytest.mark.asyncio
async def test_no_match_on_absent_collection_creates_nothing(store: CollectionStore, data_dir: Path) -> None:
    assert await store.update("ghost", {"id": "x"}, {"a": 1}) == []
    assert await store.delete("ghost", {"id": "x"}) == 0

    assert not (data_dir / "ghost.json").exists()


@pytest.mark.asyncio
async def test_delete_returns_count(store: CollectionStore) -> None:
    await store.insert("notes", [{"k": "a"}, {"k": "b"}, {"k": "a"}])

    assert await store.delete("notes", {"k": "a"}) == 2
    assert [d["k"] for d in await store.find("notes")] == ["b"]


@pytest.mark.asyncio
async def test_replace_all_skips_stamping(store: CollectionStore) -> None:
    await store.insert("notes", {"title": "old"})
    restored = [{"id": "r1", "title": "restored", "createdAt": 5, "updatedAt": 6}, {"title": "bare"}]

    assert await store.replace_all("notes", restored) is None

    assert await store.find("notes") == restored


@pytest.mark.asyncio
async def test_invalid_arguments_rejected(store: CollectionStore) -> None:
    with pytest.raises(InvalidRequestError):
        await store.insert("notes", "not a document")
    with pytest.raises(InvalidRequestError):
        await store.update("notes", {"id": "x"}, ["not", "a", "patch"])
    with pytest.raises(InvalidRequestError):
        await store.replace_all("notes", {"id": "x"})
    with pytest.raises(InvalidRequestError):
        await store.find("../etc")


@pytest.mark.asyncio
async def test_corrupt_collection_surfaces_and_is_not_overwritten(store: CollectionStore, data_dir: Path) -> None:
    data_dir.mkdir(parents=True)
    path = data_dir / "notes.json"
    path.write_text("[{broken", encoding="utf-8")

    with pytest.raises(CorruptCollectionError):
        await store.find("notes")
    with pytest.raises(CorruptCollectionError):
        await store.insert("notes", {"title": "A"})

    assert path.read_text(encoding="utf-8") == "[{broken"


@pytest.mark.asyncio
async def test_initialize_is_idempotent_and_preserves_data(store: CollectionStore, data_dir: Path) -> None:
    await store.initialize()
    note = await store.insert("notes", {"title": "A"})
    before = (data_dir / "notes.json").read_bytes()

    await asyncio.gather(
        store.initialize(),
        store.initialize(),
        store.find("notes"),
        store.initialize(),
    )

    assert data_dir.is_dir()
    assert (data_dir / "notes.json").read_bytes() == before
    assert await store.find("notes") == [note]


@pytest.mark.asyncio
async def test_note_hierarchy_scenario(store: CollectionStore) -> None:
    a = await store.insert("notes", {"title": "A"})
    b = await store.insert("notes", {"title": "B", "parentId": a["id"]})

    assert await store.find("notes", {"parentId": a["id"]}) == [b]
    assert await store.delete("notes", {"id": a["id"]}) == 1
    assert await store.find("notes", {"id": a["id"]}) == []

    [orphan] = await store.find("notes", {"id": b["id"]})
    assert orphan["parentId"] == a["id"]
