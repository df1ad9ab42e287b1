"""ResourceRegistry: release every handle-backed preview exactly once."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from attachflow.previews._store import PreviewStore
    from attachflow.types import Preview

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """Track which attachment owns which preview handle.

    Inert previews are ignored. Releasing an owner that holds nothing, or
    releasing the same owner twice, is a no-op.
    """

    def __init__(self, store: PreviewStore | None = None) -> None:
        """Initialize with the store that issued the handles, if any."""
        self._store = store
        self._held: dict[str, Preview] = {}

    @property
    def store(self) -> PreviewStore | None:
        """Return the backing preview store."""
        return self._store

    def register(self, owner_id: str, preview: Preview | None) -> bool:
        """Record that ``owner_id`` holds ``preview``. Return whether it was tracked."""
        if preview is None or preview.is_inert:
            return False
        previous = self._held.get(owner_id)
        if previous is not None and previous.handle != preview.handle:
            self._discard(owner_id, previous)
        self._held[owner_id] = preview
        return True

    def release(self, owner_id: str) -> bool:
        """Release the preview held by ``owner_id``."""
        preview = self._held.pop(owner_id, None)
        if preview is None:
            return False
        self._discard(owner_id, preview)
        return True

    def release_preview(self, preview: Preview | None) -> bool:
        """Release a preview that was never registered to an owner."""
        if preview is None or preview.is_inert:
            return False
        for owner_id, held in list(self._held.items()):
            if held.handle == preview.handle:
                return self.release(owner_id)
        self._discard(None, preview)
        return True

    def release_all(self) -> int:
        """Release every held preview and return how many were released."""
        owners = list(self._held)
        released = sum(1 for owner_id in owners if self.release(owner_id))
        if released:
            logger.debug("Released %d preview resource(s)", released)
        return released

    def held(self) -> tuple[str, ...]:
        """Return owner IDs that currently hold a preview."""
        return tuple(self._held)

    def __len__(self) -> int:
        return len(self._held)

    def _discard(self, owner_id: str | None, preview: Preview) -> None:
        if self._store is None:
            return
        try:
            self._store.delete_preview(preview)
        except OSError:
            logger.exception("Failed to release preview %s (owner=%s)", preview.handle, owner_id)
