"""Durable key-value stores backing the result cache and the demo-pool flag.

Values are opaque strings. The file store keeps one text file per key so a
corrupt entry only affects that key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
from urllib.parse import quote

DEMO_LOADED_KEY = "demoDatabaseLoaded"


class KeyValueStore(Protocol):
    """Minimal string store consumed by the cache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, mostly for tests and one-off runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore:
    """Directory-backed persistence layer."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir) if base_dir else Path("data/kv")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _path(self, key: str) -> Path:
        return self.base_dir / f"{quote(key, safe='')}.txt"

    # ------------------------------------------------------------------
    # KeyValueStore
    # ------------------------------------------------------------------
    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ----------------------------------------------------------------------
# Demo pool flag
# ----------------------------------------------------------------------
def is_demo_database_loaded(store: KeyValueStore) -> bool:
    return store.get(DEMO_LOADED_KEY) == "true"


def mark_demo_database_loaded(store: KeyValueStore) -> None:
    store.set(DEMO_LOADED_KEY, "true")


def reset_demo_database(store: KeyValueStore) -> None:
    store.remove(DEMO_LOADED_KEY)
