"""AttachmentStore: the single owner of in-flight attachments."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import TYPE_CHECKING

from attachflow.kinds import infer_kind
from attachflow.types import STATUS_ORDER, Attachment, AttachmentStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from attachflow.types import MediaBlob

    Listener = Callable[[tuple[Attachment, ...]], None]

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = frozenset({"kind", "status", "preview", "caption", "editing_caption", "error"})


def _is_forward(current: AttachmentStatus, target: AttachmentStatus) -> bool:
    """Return whether ``current -> target`` is a legal pipeline transition."""
    if current in ("done", "failed"):
        return False
    if target == "failed":
        return True
    return STATUS_ORDER.index(target) > STATUS_ORDER.index(current)


class AttachmentStore:
    """Ordered, capacity-bounded collection of attachments.

    Every operation is synchronous, so under asyncio it runs atomically with
    respect to pipeline tasks. Operations that target an ID no longer present
    are no-ops rather than errors: a pipeline may finish after its attachment
    was deleted.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize an empty store holding at most ``capacity`` attachments."""
        if capacity < 0:
            msg = "capacity must be >= 0."
            raise ValueError(msg)
        self._capacity = capacity
        self._items: dict[str, Attachment] = {}
        self._listeners: list[Listener] = []

    @property
    def capacity(self) -> int:
        """Return the maximum number of attachments."""
        return self._capacity

    @property
    def remaining(self) -> int:
        """Return how many more attachments fit."""
        return max(0, self._capacity - len(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, attachment_id: object) -> bool:
        return attachment_id in self._items

    def __iter__(self) -> Iterator[Attachment]:
        return iter(self.snapshot())

    def get(self, attachment_id: str) -> Attachment | None:
        """Return the current attachment for an ID, if still present."""
        return self._items.get(attachment_id)

    def snapshot(self) -> tuple[Attachment, ...]:
        """Return the attachments in insertion order."""
        return tuple(self._items.values())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def append(self, candidates: Iterable[MediaBlob]) -> tuple[Attachment, ...]:
        """Add queued placeholders up to the remaining capacity; drop the rest."""
        offered = list(candidates)
        accepted = offered[: self.remaining]
        if len(accepted) < len(offered):
            logger.debug("Capacity reached: dropped %d of %d candidate(s)", len(offered) - len(accepted), len(offered))
        if not accepted:
            return ()

        created: list[Attachment] = []
        for blob in accepted:
            attachment = Attachment(
                id=uuid.uuid4().hex,
                blob=blob,
                kind=infer_kind(blob.media_type),
                status="queued",
            )
            self._items[attachment.id] = attachment
            created.append(attachment)
        self._notify()
        return tuple(created)

    def update(self, attachment_id: str, **changes: object) -> Attachment | None:
        """Apply a partial change. Return the new attachment, or ``None`` if it is gone."""
        unknown = sorted(set(changes) - _MUTABLE_FIELDS)
        if unknown:
            msg = f"Cannot update attachment field(s): {', '.join(unknown)}."
            raise TypeError(msg)
        current = self._items.get(attachment_id)
        if current is None:
            logger.debug("Ignoring update for missing attachment %s", attachment_id)
            return None
        updated = dataclasses.replace(current, **changes)  # type: ignore[arg-type]
        if updated == current:
            return current
        self._items[attachment_id] = updated
        self._notify()
        return updated

    def transition(self, attachment_id: str, status: AttachmentStatus, **changes: object) -> Attachment | None:
        """Move an attachment forward in its lifecycle.

        Backward moves and moves out of a terminal state are refused and
        return ``None``, as does a missing ID.
        """
        current = self._items.get(attachment_id)
        if current is None:
            logger.debug("Ignoring %s transition for missing attachment %s", status, attachment_id)
            return None
        if not _is_forward(current.status, status):
            logger.debug("Refusing transition %s -> %s for %s", current.status, status, attachment_id)
            return None
        return self.update(attachment_id, status=status, **changes)

    def remove(self, attachment_id: str) -> Attachment | None:
        """Remove and return an attachment so the caller can release its resources."""
        removed = self._items.pop(attachment_id, None)
        if removed is not None:
            self._notify()
        return removed

    def clear(self) -> tuple[Attachment, ...]:
        """Remove every attachment and return them for bulk cleanup."""
        removed = self.snapshot()
        self._items.clear()
        if removed:
            self._notify()
        return removed

    def toggle_caption_edit(self, attachment_id: str) -> Attachment | None:
        """Flip the caption-editing flag of one attachment."""
        current = self._items.get(attachment_id)
        if current is None:
            return None
        return self.update(attachment_id, editing_caption=not current.editing_caption)

    def set_caption(self, attachment_id: str, caption: str) -> Attachment | None:
        """Replace the caption text of one attachment."""
        if not isinstance(caption, str):
            msg = f"caption must be a string; got {type(caption).__name__}."
            raise TypeError(msg)
        return self.update(attachment_id, caption=caption)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Attachment listener %r failed", listener)
