"""Media kind inference from declared types, file names, and payload signatures."""

from __future__ import annotations

import mimetypes
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from attachflow.types import AttachmentKind

_GENERIC_MEDIA_TYPES = frozenset({"application/octet-stream", "binary/octet-stream"})

# (offset, magic, media_type); checked in order.
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"BM", "image/bmp"),
    (0, b"\x1aE\xdf\xa3", "video/webm"),
)


def _major(media_type: str | None) -> str | None:
    if not media_type:
        return None
    value = media_type.strip().lower()
    if value.startswith("data:"):
        value = value[len("data:") :]
    value = value.split(";", 1)[0].split(",", 1)[0]
    if not value or value in _GENERIC_MEDIA_TYPES:
        return None
    return value.split("/", 1)[0]


def is_generic_media_type(media_type: str | None) -> bool:
    """Return whether a media type is absent or says nothing about the payload."""
    return not media_type or media_type.split(";", 1)[0].strip().lower() in _GENERIC_MEDIA_TYPES


def kind_from_media_type(media_type: str | None) -> AttachmentKind | None:
    """Map a media type (or data URL prefix) to a kind, ``None`` when inconclusive."""
    major = _major(media_type)
    if major is None:
        return None
    if major == "image":
        return "image"
    if major == "video":
        return "video"
    return "file"


def infer_kind(declared_type: str | None, decoded_signature: str | None = None) -> AttachmentKind:
    """Infer an attachment kind.

    The declared media type wins whenever it is present and specific. An absent
    or generic declared type (``application/octet-stream``) falls back to the
    decoded signature, which may be a media type or a ``data:`` URL.
    """
    declared = kind_from_media_type(declared_type)
    if declared is not None:
        return declared
    decoded = kind_from_media_type(decoded_signature)
    if decoded in ("image", "video"):
        return decoded
    return "file"


def sniff_media_type(data: bytes) -> str | None:
    """Detect a media type from the leading bytes of a payload."""
    for offset, magic, media_type in _SIGNATURES:
        if data[offset : offset + len(magic)] == magic:
            return media_type
    if data[:4] == b"RIFF" and len(data) >= 12:
        form = data[8:12]
        if form == b"WEBP":
            return "image/webp"
        if form == b"AVI ":
            return "video/x-msvideo"
    if data[4:8] == b"ftyp":
        brand = data[8:12]
        if brand == b"qt  ":
            return "video/quicktime"
        if brand in (b"heic", b"heix", b"mif1"):
            return "image/heic"
        return "video/mp4"
    return None


def guess_media_type(name: str | None) -> str | None:
    """Guess a media type from a file name extension."""
    if not name:
        return None
    media_type, _ = mimetypes.guess_type(name)
    return media_type
