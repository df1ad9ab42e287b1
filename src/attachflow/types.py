"""Core data types: MediaBlob, Preview, Attachment, Submission, View."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

AttachmentKind = Literal["image", "video", "file"]
AttachmentStatus = Literal["queued", "reading", "uploading", "done", "failed"]

# Forward order of the pipeline; "failed" sits outside the sequence.
STATUS_ORDER: tuple[AttachmentStatus, ...] = ("queued", "reading", "uploading", "done")
TERMINAL_STATUSES: frozenset[AttachmentStatus] = frozenset({"done", "failed"})


@dataclass(frozen=True, slots=True)
class MediaBlob:
    """Raw, immutable payload offered by an input gesture."""

    data: bytes = field(repr=False)
    media_type: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        """Normalize the payload to bytes and blank media types to None."""
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            msg = f"MediaBlob.data must be bytes-like; got {type(self.data).__name__}."
            raise TypeError(msg)
        object.__setattr__(self, "data", bytes(self.data))
        media_type = (self.media_type or "").strip().lower()
        object.__setattr__(self, "media_type", media_type or None)

    @property
    def size(self) -> int:
        """Return the payload length in bytes."""
        return len(self.data)


@dataclass(frozen=True, slots=True)
class Preview:
    """Renderable representation of a blob.

    ``handle`` is set when the preview occupies an entry in a PreviewStore and
    must be released; inline previews such as data URLs leave it ``None``.
    """

    uri: str = field(repr=False)
    media_type: str | None = None
    handle: str | None = None

    @property
    def is_inert(self) -> bool:
        """Return whether the preview holds no releasable resource."""
        return self.handle is None


@dataclass(frozen=True, slots=True)
class Attachment:
    """One media unit under management, replaced wholesale on every change."""

    id: str
    blob: MediaBlob
    kind: AttachmentKind = "file"
    status: AttachmentStatus = "queued"
    preview: Preview | None = None
    caption: str = ""
    editing_caption: bool = False
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        """Return whether the pipeline has finished with this attachment."""
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True, slots=True)
class Submission:
    """Prompt text plus the attachments present when the user pressed send."""

    text: str
    attachments: tuple[Attachment, ...]

    def __post_init__(self) -> None:
        """Normalize attachments container to tuple."""
        object.__setattr__(self, "attachments", tuple(self.attachments))


@dataclass(frozen=True, slots=True)
class View:
    """Read-only state handed to the rendering layer."""

    attachments: tuple[Attachment, ...]
    text: str
    placeholder: str
    max_files: int

    @property
    def uploading(self) -> bool:
        """Return whether any attachment is still being processed."""
        return any(not item.is_terminal for item in self.attachments)
