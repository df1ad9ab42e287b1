"""Uploaders: the pluggable transport step of the pipeline."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from attachflow.types import MediaBlob


class Uploader(Protocol):
    """Async callable that sends a blob somewhere; raising marks the attempt failed."""

    async def __call__(self, blob: MediaBlob) -> object: ...


def simulated_upload(
    min_latency: float = 0.8,
    max_latency: float = 2.0,
    *,
    rng: random.Random | None = None,
) -> Uploader:
    """Build an uploader that only waits a random latency and succeeds.

    Replace with a real transport (HTTP, S3, tus, ...) in production.
    """
    if min_latency < 0 or max_latency < min_latency:
        msg = "Latency bounds must satisfy 0 <= min_latency <= max_latency."
        raise ValueError(msg)
    source = rng or random.Random()

    async def _upload(blob: MediaBlob) -> object:
        await asyncio.sleep(source.uniform(min_latency, max_latency))
        return True

    return _upload
