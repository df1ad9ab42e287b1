"""Decoders: turn a MediaBlob into a renderable Preview."""

from __future__ import annotations

import asyncio
import base64
from typing import TYPE_CHECKING, Protocol

from attachflow.errors import DecodeError
from attachflow.kinds import is_generic_media_type, sniff_media_type
from attachflow.types import Preview

if TYPE_CHECKING:
    from attachflow.previews import PreviewStore
    from attachflow.types import MediaBlob

_FALLBACK_MEDIA_TYPE = "application/octet-stream"


class Decoder(Protocol):
    """Async callable producing a Preview; raising marks the read as failed."""

    async def __call__(self, blob: MediaBlob) -> Preview: ...


def resolve_media_type(blob: MediaBlob) -> str:
    """Return the declared media type, else the sniffed one, else octet-stream.

    A generic declared type such as ``application/octet-stream`` is treated
    as missing so the payload signature can still decide.
    """
    if blob.media_type and not is_generic_media_type(blob.media_type):
        return blob.media_type
    return sniff_media_type(blob.data) or blob.media_type or _FALLBACK_MEDIA_TYPE


def to_data_url(data: bytes, media_type: str) -> str:
    """Encode bytes as a base64 ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


async def decode_data_url(blob: MediaBlob) -> Preview:
    """Decode a blob into an inline ``data:`` URL preview.

    Encoding runs in a worker thread so large videos do not stall the loop.
    The resulting preview is inert: there is nothing to release. An empty
    payload yields an empty data URL.
    """
    media_type = resolve_media_type(blob)
    uri = await asyncio.to_thread(to_data_url, blob.data, media_type)
    return Preview(uri=uri, media_type=media_type)


class StoredPreviewDecoder:
    """Decoder that places previews in a PreviewStore, like browser object URLs."""

    def __init__(self, store: PreviewStore) -> None:
        """Initialize with the store that will hold preview payloads."""
        self._store = store

    @property
    def store(self) -> PreviewStore:
        """Return the backing preview store."""
        return self._store

    async def __call__(self, blob: MediaBlob) -> Preview:
        """Store the blob's bytes and return a handle-backed preview.

        The write itself does not suspend, so a cancelled caller can never
        leave behind a handle nobody received.
        """
        await asyncio.sleep(0)
        media_type = resolve_media_type(blob)
        try:
            return self._store.put_preview(blob.data, media_type=media_type)
        except OSError as exc:
            msg = f"Could not write preview for {blob.name or '<unnamed>'}: {exc}"
            raise DecodeError(msg) from exc
