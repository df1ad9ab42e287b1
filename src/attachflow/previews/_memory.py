"""InMemoryPreviewStore: dict-based preview storage for development and testing."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from attachflow.errors import PreviewNotFoundError
from attachflow.previews._store import PreviewEntry, normalize_preview_id, utc_now
from attachflow.types import Preview

if TYPE_CHECKING:
    from collections.abc import Mapping


class InMemoryPreviewStore:
    """In-memory preview store addressed by ``mem://<id>`` URIs."""

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self._data: dict[str, bytes] = {}
        self._entries: dict[str, PreviewEntry] = {}

    @classmethod
    def from_preloaded(cls, payloads: Mapping[str, tuple[bytes, str | None]]) -> InMemoryPreviewStore:
        """Build a store from preloaded ``id -> (bytes, media_type)`` data."""
        store = cls()
        for preview_id, (data, media_type) in payloads.items():
            store._insert(str(preview_id), data, media_type)
        return store

    def _insert(self, preview_id: str, data: bytes, media_type: str | None) -> Preview:
        uri = f"mem://{preview_id}"
        self._data[preview_id] = data
        self._entries[preview_id] = PreviewEntry(
            id=preview_id,
            uri=uri,
            media_type=media_type,
            size=len(data),
            created_at=utc_now(),
        )
        return Preview(uri=uri, media_type=media_type, handle=preview_id)

    def put_preview(self, data: bytes, *, media_type: str | None = None) -> Preview:
        """Store bytes and return a handle-backed Preview."""
        return self._insert(uuid.uuid4().hex, bytes(data), media_type)

    def get_preview(self, preview_or_id: Preview | str) -> bytes:
        """Retrieve preview bytes."""
        preview_id = normalize_preview_id(preview_or_id)
        data = self._data.get(preview_id) if preview_id is not None else None
        if data is None:
            raise PreviewNotFoundError(str(preview_id))
        return data

    def has_preview(self, preview_or_id: Preview | str) -> bool:
        """Check whether a preview is still held."""
        preview_id = normalize_preview_id(preview_or_id)
        return preview_id is not None and preview_id in self._data

    def delete_preview(self, preview_or_id: Preview | str) -> bool:
        """Release a preview by Preview or handle ID."""
        preview_id = normalize_preview_id(preview_or_id)
        if preview_id is None:
            return False
        self._entries.pop(preview_id, None)
        return self._data.pop(preview_id, None) is not None

    def list_previews(self) -> tuple[PreviewEntry, ...]:
        """List held previews, oldest first."""
        return tuple(sorted(self._entries.values(), key=lambda entry: (entry.created_at, entry.id)))
