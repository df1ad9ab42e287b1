"""Input adapters: normalize file selection and clipboard paste into MediaBlobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from attachflow.kinds import guess_media_type
from attachflow.types import MediaBlob

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ClipboardItemKind = Literal["file", "string"]
_PASTE_MEDIA_PREFIXES = ("image", "video")


@dataclass(frozen=True, slots=True)
class ClipboardItem:
    """One entry of a clipboard payload."""

    kind: ClipboardItemKind
    media_type: str = ""
    data: bytes | None = field(default=None, repr=False)
    name: str | None = None

    def get_as_file(self) -> MediaBlob | None:
        """Return the entry as a MediaBlob, or ``None`` for non-file entries."""
        if self.kind != "file" or self.data is None:
            return None
        return MediaBlob(data=self.data, media_type=self.media_type or None, name=self.name)


@dataclass(slots=True)
class PasteGesture:
    """A paste event: clipboard entries plus a suppressible default action."""

    items: tuple[ClipboardItem, ...] = ()
    default_prevented: bool = False

    def __post_init__(self) -> None:
        """Normalize items container to tuple."""
        self.items = tuple(self.items)

    def prevent_default(self) -> None:
        """Mark the platform's own paste handling as suppressed."""
        self.default_prevented = True


def _blob_from_path(path: Path) -> MediaBlob:
    return MediaBlob(data=path.read_bytes(), media_type=guess_media_type(path.name), name=path.name)


def from_file_selection(files: Iterable[MediaBlob | str | Path]) -> tuple[MediaBlob, ...]:
    """Return the whole selection as candidates, without filtering by kind.

    Paths are read from disk and typed from their extension.
    """
    candidates: list[MediaBlob] = []
    for index, item in enumerate(files):
        if isinstance(item, MediaBlob):
            candidates.append(item)
        elif isinstance(item, (str, Path)):
            candidates.append(_blob_from_path(Path(item)))
        else:
            msg = f"file selection items must be MediaBlob or path; got {type(item).__name__} at index {index}."
            raise TypeError(msg)
    return tuple(candidates)


def is_pasteable(item: ClipboardItem) -> bool:
    """Return whether a clipboard entry is an image or video file."""
    return item.kind == "file" and item.data is not None and item.media_type.lower().startswith(_PASTE_MEDIA_PREFIXES)


def from_paste(gesture: PasteGesture) -> tuple[MediaBlob, ...]:
    """Extract image/video files from a paste gesture.

    When at least one entry qualifies the gesture is consumed, meaning its
    default action is prevented. Otherwise it is left untouched and nothing
    is returned.
    """
    candidates: list[MediaBlob] = []
    for item in gesture.items:
        if not is_pasteable(item):
            continue
        blob = item.get_as_file()
        if blob is not None:
            candidates.append(blob)
    if not candidates:
        logger.debug("Paste carried no image/video entries (%d item(s))", len(gesture.items))
        return ()
    gesture.prevent_default()
    return tuple(candidates)
