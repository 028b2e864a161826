"""In-process store bindings.

Used by the test-suite and for local runs without redis or S3. Writes are
guarded by a lock so the conditional puts are atomic across threads.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Mapping

from ..protocols import BlobObject


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore.

    Example:
        ```python
        store = InMemoryKeyValueStore()
        store.put_if_absent("docs", '{"url": "https://example.com"}')  # True
        store.put_if_absent("docs", "{}")                              # False
        ```

    Attributes:
        _data: Internal dict mapping key -> stored string.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put_if_absent(self, key: str, value: str) -> bool:
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = value
            return True

    def put_if_present(self, key: str, value: str) -> bool:
        with self._lock:
            if key not in self._data:
                return False
            self._data[key] = value
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None


class InMemoryBlobStore:
    """Dict-backed BlobStore holding whole objects in memory."""

    def __init__(self) -> None:
        self._objects: dict[str, tuple[bytes, dict[str, str]]] = {}

    def put(self, key: str, data: bytes, **http_metadata: str) -> None:
        """Store ``data`` under ``key``.

        Keyword arguments are response headers, with underscores standing in
        for dashes: ``put("a.txt", b"hi", Content_Type="text/plain")``.
        """
        headers = {name.replace("_", "-"): value for name, value in http_metadata.items()}
        self._objects[key] = (data, headers)

    def get(self, key: str) -> BlobObject | None:
        item = self._objects.get(key)
        if item is None:
            return None

        data, headers = item
        etag = f'"{hashlib.md5(data, usedforsecurity=False).hexdigest()}"'
        return BlobObject(body=iter([data]), etag=etag, http_metadata=dict(headers))
