"""Shared fixtures: decoders and uploaders whose progress tests control."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from attachflow.errors import DecodeError, UploadError
from attachflow.types import MediaBlob, Preview

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16
MP4_BYTES = b"\x00\x00\x00\x18ftypisom" + b"\x00" * 16


class _Gates:
    """Per-payload gates; a payload without its own gate uses the shared one."""

    def __init__(self) -> None:
        self._shared: asyncio.Event | None = None
        self._by_payload: dict[bytes, asyncio.Event] = {}

    def hold(self, data: bytes | None = None) -> None:
        if data is None:
            self._shared = asyncio.Event()
        else:
            self._by_payload[data] = asyncio.Event()

    def release(self, data: bytes | None = None) -> None:
        if data is None:
            if self._shared is not None:
                self._shared.set()
            for gate in self._by_payload.values():
                gate.set()
            return
        gate = self._by_payload.get(data)
        if gate is not None:
            gate.set()

    async def wait(self, data: bytes) -> None:
        gate = self._by_payload.get(data, self._shared)
        if gate is not None:
            await gate.wait()


class ControlledDecoder(_Gates):
    """Decoder returning inline previews, optionally held or failing per payload."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[MediaBlob] = []
        self.completed: list[MediaBlob] = []
        self.failing: set[bytes] = set()

    async def __call__(self, blob: MediaBlob) -> Preview:
        self.calls.append(blob)
        await self.wait(blob.data)
        self.completed.append(blob)
        if blob.data in self.failing:
            msg = "unreadable payload"
            raise DecodeError(msg)
        media_type = blob.media_type or "application/octet-stream"
        return Preview(uri=f"data:{media_type};base64,AAAA", media_type=media_type)


class ControlledUploader(_Gates):
    """Uploader that records calls and can be held or made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[MediaBlob] = []
        self.completed: list[MediaBlob] = []
        self.failures_left: dict[bytes, int] = {}
        self.fatal: set[bytes] = set()

    async def __call__(self, blob: MediaBlob) -> object:
        self.calls.append(blob)
        await self.wait(blob.data)
        if blob.data in self.fatal:
            msg = "rejected by server"
            raise UploadError(msg, retryable=False)
        remaining = self.failures_left.get(blob.data, 0)
        if remaining:
            self.failures_left[blob.data] = remaining - 1
            msg = "connection reset"
            raise UploadError(msg)
        self.completed.append(blob)
        return True


class CompletionRecorder:
    """Record every on_upload_complete call."""

    def __init__(self) -> None:
        self.calls: list[tuple[MediaBlob, Preview]] = []

    def __call__(self, blob: MediaBlob, preview: Preview) -> None:
        self.calls.append((blob, preview))


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def decoder() -> ControlledDecoder:
    return ControlledDecoder()


@pytest.fixture
def uploader() -> ControlledUploader:
    return ControlledUploader()


@pytest.fixture
def completions() -> CompletionRecorder:
    return CompletionRecorder()


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    return _settle


@pytest.fixture
def png_blob() -> MediaBlob:
    return MediaBlob(data=PNG_BYTES, media_type="image/png", name="shot.png")
