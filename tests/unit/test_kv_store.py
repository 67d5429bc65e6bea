"""Sanity checks for the key-value stores and the demo-pool flag."""

from tiermatch.core.storage.kv_store import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    is_demo_database_loaded,
    mark_demo_database_loaded,
    reset_demo_database,
)


def test_file_store_roundtrip(tmp_path):
    store = FileKeyValueStore(tmp_path / "kv")

    assert store.get("missing") is None

    store.set("match-cache-abc", '{"ok": true}')
    assert store.get("match-cache-abc") == '{"ok": true}'

    store.set("match-cache-abc", "replaced")
    assert store.get("match-cache-abc") == "replaced"

    store.remove("match-cache-abc")
    assert store.get("match-cache-abc") is None
    # removing twice is fine
    store.remove("match-cache-abc")


def test_file_store_keys_with_path_characters_stay_inside_base_dir(tmp_path):
    base = tmp_path / "kv"
    store = FileKeyValueStore(base)

    store.set("../escape/key", "value")

    assert store.get("../escape/key") == "value"
    assert [p.parent for p in base.iterdir()] == [base]


def test_file_store_persists_across_instances(tmp_path):
    FileKeyValueStore(tmp_path / "kv").set("k", "v")
    assert FileKeyValueStore(tmp_path / "kv").get("k") == "v"


def test_demo_flag_lifecycle():
    store = InMemoryKeyValueStore()
    assert not is_demo_database_loaded(store)

    mark_demo_database_loaded(store)
    assert is_demo_database_loaded(store)

    reset_demo_database(store)
    assert not is_demo_database_loaded(store)
