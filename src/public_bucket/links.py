"""Short link records on top of a key-value store.

Each short link is stored as one JSON value under its key:

    {"url": "...", "created": "...", "createdBy": "...",
     "updated": "...", "updatedBy": "..."}

Classes:
    ShortLinkRecord:
        The persisted record (creation and update provenance included).

    LinkStore:
        Existence-checked lookup / create / replace / remove.

Example:
    >>> store = LinkStore(InMemoryKeyValueStore())
    >>> store.create("docs", "https://example.com", subject="auth0|42").url
    'https://example.com'
    >>> store.lookup("docs").created_by
    'auth0|42'
    >>> store.remove("docs")
    'docs'
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any

from .errors import LinkConflict, LinkNotFound
from .protocols import KeyValueStore

logger = logging.getLogger(__name__)

UNKNOWN_SUBJECT = "unknown"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2025-01-02T03:04:05.678Z``."""
    # fmt: off
    return datetime.now(UTC) \
                   .isoformat(timespec="milliseconds") \
                   .replace("+00:00", "Z")
    # fmt: on


@dataclass(frozen=True, slots=True)
class ShortLinkRecord:
    """A stored short link.

    Attributes:
        url: Redirect target. Not validated as a URL.
        created / created_by: Set by the first write, kept by later updates.
        updated / updated_by: Set by every replace.
    """

    url: str
    created: str | None = None
    created_by: str | None = None
    updated: str | None = None
    updated_by: str | None = None

    def to_json(self) -> str:
        data: dict[str, Any] = {"url": self.url}
        if self.created is not None:
            data["created"] = self.created
        if self.created_by is not None:
            data["createdBy"] = self.created_by
        if self.updated is not None:
            data["updated"] = self.updated
        if self.updated_by is not None:
            data["updatedBy"] = self.updated_by
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> ShortLinkRecord:
        """Parse a stored value.

        Raises:
            ValueError: If the value is not a JSON object with a string ``url``,
                or the ``url`` cannot be sent as a ``Location`` header.
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or not isinstance(data.get("url"), str):
            raise ValueError("short link record must be an object with a string 'url'")
        if "\r" in data["url"] or "\n" in data["url"]:
            raise ValueError("short link url must not contain line breaks")
        return cls(
            url=data["url"],
            created=data.get("created"),
            created_by=data.get("createdBy"),
            updated=data.get("updated"),
            updated_by=data.get("updatedBy"),
        )


class LinkStore:
    """Existence-checked short link operations over a KeyValueStore.

    Methods:
        lookup(key) -> ShortLinkRecord | None:
            Read path. Corrupt values are logged and reported as absent.

        create(key, url, subject) -> ShortLinkRecord:
            Raises LinkConflict when the key is taken.

        replace(key, url, subject) -> ShortLinkRecord:
            Field-preserving update. Raises LinkNotFound when the key is unused.

        remove(key) -> str:
            Raises LinkNotFound when the key is unused.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def lookup(self, key: str) -> ShortLinkRecord | None:
        raw = self.kv.get(key)
        if raw is None:
            return None

        try:
            return ShortLinkRecord.from_json(raw)
        except ValueError:
            logger.warning(
                "Failed to parse short link data; treating as absent.",
                extra={"key": key},
            )
            return None

    def create(self, key: str, url: str, subject: str | None) -> ShortLinkRecord:
        record = ShortLinkRecord(
            url=url,
            created=utc_timestamp(),
            created_by=subject or UNKNOWN_SUBJECT,
        )
        if not self.kv.put_if_absent(key, record.to_json()):
            raise LinkConflict(f"Short link '{key}' already exists.")
        return record

    def replace(self, key: str, url: str, subject: str | None) -> ShortLinkRecord:
        raw = self.kv.get(key)
        if raw is None:
            raise LinkNotFound(f"Short link '{key}' not found.")

        try:
            previous = ShortLinkRecord.from_json(raw)
        except ValueError:
            logger.warning(
                "Overwriting unparseable short link data.",
                extra={"key": key},
            )
            previous = None

        record = ShortLinkRecord(
            url=url,
            created=previous.created if previous else None,
            created_by=previous.created_by if previous else None,
            updated=utc_timestamp(),
            updated_by=subject or UNKNOWN_SUBJECT,
        )
        # A delete racing between the read above and this write wins.
        if not self.kv.put_if_present(key, record.to_json()):
            raise LinkNotFound(f"Short link '{key}' not found.")
        return record

    def remove(self, key: str) -> str:
        if not self.kv.delete(key):
            raise LinkNotFound(f"Short link '{key}' not found.")
        return key
