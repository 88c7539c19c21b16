"""Tests for the JSON-file RecordStore."""
import json
import threading

import pytest

from clever_sis.db.store import CLASSES, USERS, RecordStore
from clever_sis.errors import StorageError


class TestLoadSave:
    def test_missing_file_loads_empty(self, store):
        assert store.load(USERS) == []

    def test_load_does_not_create_data_dir(self, store):
        store.load(USERS)
        assert not store.data_dir.exists()

    def test_save_creates_data_dir(self, store):
        store.save(USERS, [])
        assert store.data_dir.is_dir()

    def test_save_then_load(self, store):
        store.save(USERS, [{"id": "a", "student_id": "S1"}])
        assert store.load(USERS) == [{"id": "a", "student_id": "S1"}]

    def test_save_is_pretty_printed(self, store):
        store.save(CLASSES, [{"id": "c1"}])
        raw = (store.data_dir / "classes.json").read_text()
        assert raw == json.dumps([{"id": "c1"}], indent=2)

    def test_save_replaces_whole_collection(self, store):
        store.save(USERS, [{"id": "a"}, {"id": "b"}])
        store.save(USERS, [{"id": "c"}])
        assert store.load(USERS) == [{"id": "c"}]

    def test_save_leaves_no_temp_files(self, store):
        store.save(USERS, [{"id": "a"}])
        store.save(USERS, [{"id": "b"}])
        assert sorted(p.name for p in store.data_dir.iterdir()) == ["users.json"]

    def test_unknown_collection_rejected(self, store):
        with pytest.raises(ValueError):
            store.load("grades")


class TestCorruptFiles:
    def test_invalid_json_raises_storage_error(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / "users.json").write_text("{not json")
        with pytest.raises(StorageError):
            store.load(USERS)

    def test_non_array_raises_storage_error(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / "users.json").write_text('{"id": "a"}')
        with pytest.raises(StorageError):
            store.load(USERS)

    def test_corrupt_file_is_not_overwritten_by_edit(self, store):
        store.data_dir.mkdir(parents=True)
        path = store.data_dir / "users.json"
        path.write_text("garbage")
        with pytest.raises(StorageError):
            with store.edit(USERS) as users:
                users.append({"id": "new"})
        assert path.read_text() == "garbage"


class TestEdit:
    def test_edit_saves_on_clean_exit(self, store):
        with store.edit(USERS) as users:
            users.append({"id": "a"})
        assert store.load(USERS) == [{"id": "a"}]

    def test_edit_discards_on_exception(self, store):
        store.save(USERS, [{"id": "a"}])
        with pytest.raises(RuntimeError):
            with store.edit(USERS) as users:
                users.append({"id": "b"})
                raise RuntimeError("boom")
        assert store.load(USERS) == [{"id": "a"}]

    def test_edit_is_reentrant(self, store):
        with store.edit(USERS) as outer:
            outer.append({"id": "a"})
            assert store.load(USERS) == []  # not yet saved
        assert store.load(USERS) == [{"id": "a"}]

    def test_concurrent_edits_do_not_lose_updates(self, store):
        """Each thread appends under the collection lock; every append survives."""
        store.save(USERS, [])

        def append(n):
            for i in range(10):
                with store.edit(USERS) as users:
                    users.append({"id": f"{n}-{i}"})

        threads = [threading.Thread(target=append, args=(n,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.load(USERS)) == 50

    def test_collections_are_independent_files(self, tmp_path):
        store = RecordStore(tmp_path)
        store.save(USERS, [{"id": "u"}])
        store.save(CLASSES, [{"id": "c"}])
        assert store.load(USERS) == [{"id": "u"}]
        assert store.load(CLASSES) == [{"id": "c"}]

    def test_unchanged_edit_does_not_write(self, store):
        with store.edit(USERS) as users:
            assert users == []
        assert not store.path_for(USERS).exists()

    def test_in_place_field_change_is_saved(self, store):
        store.save(USERS, [{"id": "a", "grade": "9"}])
        with store.edit(USERS) as users:
            users[0]["grade"] = "10"
        assert store.load(USERS) == [{"id": "a", "grade": "10"}]
