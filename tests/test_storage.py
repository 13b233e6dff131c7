import json

import pytest

from devhelper.core.exceptions import StoreReadError, StoreWriteError
from devhelper.core.storage import JsonFileStore, MemoryStore


@pytest.mark.asyncio
async def test_memory_store_isolates_values():
    store = MemoryStore()
    value = {"achievements": ["first_task"]}
    await store.update("key", value)

    value["achievements"].append("mutated")
    loaded = await store.get("key")
    loaded["achievements"].append("mutated again")

    assert await store.get("key") == {"achievements": ["first_task"]}
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_json_store_round_trip_across_instances(tmp_path):
    path = tmp_path / "state" / "devhelper.json"
    store = JsonFileStore(path)
    await store.update("progress", {"level": 3, "title": "Iniciante"})
    await store.update("history", [{"task_id": "t1"}])
    await store.close()

    reopened = JsonFileStore(path)
    try:
        assert await reopened.get("progress") == {"level": 3, "title": "Iniciante"}
        assert await reopened.get("history") == [{"task_id": "t1"}]
        assert await reopened.get("missing") is None
    finally:
        await reopened.close()

    assert not path.with_suffix(".tmp").exists()
    assert json.loads(path.read_text(encoding="utf-8"))["progress"]["level"] == 3


@pytest.mark.asyncio
async def test_json_store_missing_file_reads_none(tmp_path):
    store = JsonFileStore(tmp_path / "absent.json")
    try:
        assert await store.get("anything") is None
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_json_store_corrupted_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    try:
        with pytest.raises(StoreReadError) as exc_info:
            await store.get("progress")
        assert exc_info.value.key == "progress"

        # a write replaces the unreadable document
        await store.update("progress", {"level": 1})
        assert await store.get("progress") == {"level": 1}
        assert store.stats.error_count == 1
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_json_store_health(tmp_path):
    store = JsonFileStore(tmp_path / "health.json")
    await store.update("k", 1)
    health = store.get_health_status()
    assert health["healthy"] is True
    assert health["file_exists"] is True
    assert health["stats"]["write_count"] == 1

    await store.close()
    assert store.get_health_status()["healthy"] is False


@pytest.mark.asyncio
async def test_json_store_rejects_calls_after_close(tmp_path):
    store = JsonFileStore(tmp_path / "closed.json")
    await store.update("k", 1)
    await store.close()

    with pytest.raises(StoreWriteError, match="Store is closed"):
        await store.update("k", 2)
    with pytest.raises(StoreReadError, match="Store is closed"):
        await store.get("k")
