"""Key/value blob store ABC with in-memory and local filesystem backends.

Blobs are opaque text values under short string keys. The workspace layer
decides what the text means; the store only reads, writes, and deletes.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key) or key in (".", ".."):
        msg = f"Invalid blob key '{key}'."
        raise ValueError(msg)
    return key


class BlobStore(ABC):
    """ABC for persisting text blobs by key."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def put(self, key: str, text: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def keys(self) -> list[str]: ...


class InMemoryBlobStore(BlobStore):
    """In-memory implementation for tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._blobs.get(_check_key(key))

    def put(self, key: str, text: str) -> None:
        self._blobs[_check_key(key)] = text

    def delete(self, key: str) -> None:
        self._blobs.pop(_check_key(key), None)

    def keys(self) -> list[str]:
        return sorted(self._blobs)


class LocalBlobStore(BlobStore):
    """Local filesystem-backed blob store: one ``<key>.json`` file per key."""

    SUFFIX = ".json"

    def __init__(self, storage_root: str | Path) -> None:
        self._root = Path(storage_root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{_check_key(key)}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, key: str, text: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return sorted(p.stem for p in self._root.glob(f"*{self.SUFFIX}"))
