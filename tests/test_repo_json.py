import json

import pytest

from app import create_store, make_storage
from repo_json import JSONFileStorage, MemoryStorage, StorageError


def test_missing_file_reads_as_empty(tmp_path):
    storage = JSONFileStorage(str(tmp_path / "nested" / "store.json"))
    assert storage.get_item("habits") is None
    assert (tmp_path / "nested").is_dir()


def test_set_get_remove(tmp_path):
    path = tmp_path / "store.json"
    storage = JSONFileStorage(str(path))
    storage.set_item("habits", "{}")
    storage.set_item("userHabits", "[]")
    assert storage.get_item("habits") == "{}"
    storage.remove_item("habits")
    assert json.loads(path.read_text(encoding="utf-8")) == {"userHabits": "[]"}
    assert not (tmp_path / "store.json.tmp").exists()


def test_corrupt_file_raises_storage_error(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JSONFileStorage(str(path)).get_item("habits")


def test_non_string_values_read_as_missing(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"habits": {"2024-01-01": []}}), encoding="utf-8")
    assert JSONFileStorage(str(path)).get_item("habits") is None


def test_store_survives_restart_on_file_storage(tmp_path):
    path = str(tmp_path / "store.json")
    store = create_store(storage=JSONFileStorage(path))
    store.add_habit("Meditate")
    store.toggle_habit("meditate", "2024-01-01")

    reopened = create_store(storage=JSONFileStorage(path))
    assert reopened.get_habit("meditate").name == "Meditate"
    assert reopened.is_habit_completed("meditate", "2024-01-01")


def test_store_on_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[", encoding="utf-8")
    store = create_store(storage=JSONFileStorage(str(path)))
    assert store.all_habits == []
    assert store.completions == {}


def test_write_replaces_corrupt_file_and_keeps_a_copy(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("not json", encoding="utf-8")
    storage = JSONFileStorage(str(path))
    storage.set_item("habits", "{}")
    assert storage.get_item("habits") == "{}"
    assert (tmp_path / "store.json.corrupt").read_text(encoding="utf-8") == "not json"


def test_store_recovers_from_corrupt_file_on_next_save(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[", encoding="utf-8")
    store = create_store(storage=JSONFileStorage(str(path)))
    store.add_habit("Run")
    store.toggle_habit("run", "2024-01-01")
    store.flush()

    reopened = create_store(storage=JSONFileStorage(str(path)))
    assert reopened.get_habit("run").name == "Run"
    assert reopened.is_habit_completed("run", "2024-01-01")


def test_make_storage_backends(tmp_path):
    assert isinstance(make_storage("memory"), MemoryStorage)
    assert isinstance(make_storage("file", data_path=str(tmp_path / "s.json")), JSONFileStorage)
    with pytest.raises(ValueError):
        make_storage("cloud")
