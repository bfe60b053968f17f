"""SQLite key-value store: versions, compare-and-swap, prefix scans, failures."""

import pytest

from sitter_board_api.app.core.config import settings
from sitter_board_api.app.core.errors import StorageError
from sitter_board_api.app.core.store import SQLiteKeyValueStore, get_store, set_store


@pytest.fixture
def store():
    return SQLiteKeyValueStore()


def test_missing_key(store):
    assert store.get("notice:nope") is None
    assert store.get_with_version("notice:nope") == (None, 0)


def test_compare_and_swap_creates_only_once(store):
    assert store.compare_and_swap("notice:1", 0, {"v": 1})
    assert not store.compare_and_swap("notice:1", 0, {"v": 2})
    assert store.get_with_version("notice:1") == ({"v": 1}, 1)


def test_compare_and_swap_requires_current_version(store):
    store.compare_and_swap("notice:1", 0, {"v": 1})
    assert store.compare_and_swap("notice:1", 1, {"v": 2})
    assert not store.compare_and_swap("notice:1", 1, {"v": 3})
    assert store.get_with_version("notice:1") == ({"v": 2}, 2)


def test_compare_and_swap_on_missing_key_with_version_fails(store):
    assert not store.compare_and_swap("notice:ghost", 3, {"v": 1})
    assert store.get("notice:ghost") is None


def test_put_bumps_version(store):
    assert store.put("profile:1", {"name": "a"}) == 1
    assert store.put("profile:1", {"name": "b"}) == 2
    assert store.get("profile:1") == {"name": "b"}


def test_delete_removes_key(store):
    store.put("email:a@example.com", {"user_id": "1"})
    assert store.delete("email:a@example.com")
    assert store.get_with_version("email:a@example.com") == (None, 0)
    assert not store.delete("email:a@example.com")
    assert store.compare_and_swap("email:a@example.com", 0, {"user_id": "2"})


def test_scan_prefix_matches_literal_prefix(store):
    store.put("notice:1", {"id": "1"})
    store.put("notice:2", {"id": "2"})
    store.put("noticeboard:3", {"id": "3"})
    store.put("profile:1", {"id": "p"})
    store.put("a_b:1", {"id": "underscore"})
    store.put("axb:1", {"id": "x"})
    assert [r["id"] for r in store.scan_prefix("notice:")] == ["1", "2"]
    assert [r["id"] for r in store.scan_prefix("a_b:")] == ["underscore"]
    assert store.scan_prefix("missing:") == []


def test_unreachable_database_raises_storage_error(store, tmp_path, monkeypatch):
    # A directory cannot be opened as a database file.
    monkeypatch.setattr(settings, "database_url", str(tmp_path))
    with pytest.raises(StorageError):
        store.get("notice:1")
    with pytest.raises(StorageError):
        store.compare_and_swap("notice:1", 0, {"v": 1})
    with pytest.raises(StorageError):
        store.scan_prefix("notice:")


def test_get_store_is_process_wide_and_replaceable(store):
    assert get_store() is get_store()
    set_store(store)
    assert get_store() is store
    set_store(None)
    assert get_store() is not store
