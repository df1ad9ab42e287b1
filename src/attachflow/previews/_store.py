"""PreviewStore: protocol for handle-backed preview storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from attachflow.types import Preview


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def normalize_preview_id(preview_or_id: Preview | str) -> str | None:
    """Normalize a preview selector into a handle ID, ``None`` for inert previews."""
    if isinstance(preview_or_id, str):
        return preview_or_id
    return preview_or_id.handle


@dataclass(frozen=True, slots=True)
class PreviewEntry:
    """One stored preview and its store-side metadata."""

    id: str
    uri: str
    media_type: str | None
    size: int
    created_at: datetime


@runtime_checkable
class PreviewStore(Protocol):
    """Preview storage protocol.

    A store hands out previews whose ``handle`` keeps an entry alive until
    ``delete_preview`` is called for it. Deleting twice, or deleting an
    inert preview, must return ``False`` rather than raise.
    """

    def put_preview(self, data: bytes, *, media_type: str | None = None) -> Preview:
        """Store bytes and return a handle-backed Preview."""
        ...

    def get_preview(self, preview_or_id: Preview | str) -> bytes:
        """Retrieve preview bytes."""
        ...

    def has_preview(self, preview_or_id: Preview | str) -> bool:
        """Check whether a preview is still held."""
        ...

    def delete_preview(self, preview_or_id: Preview | str) -> bool:
        """Release a preview. Return ``True`` when something was released."""
        ...

    def list_previews(self) -> tuple[PreviewEntry, ...]:
        """List held previews, oldest first."""
        ...
