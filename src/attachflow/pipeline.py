"""IngestionPipeline: drive one attachment from queued to a terminal status."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from attachflow.errors import UploadError
from attachflow.kinds import infer_kind

if TYPE_CHECKING:
    from collections.abc import Callable

    from attachflow.decode import Decoder
    from attachflow.previews import ResourceRegistry
    from attachflow.store import AttachmentStore
    from attachflow.types import Attachment, MediaBlob, Preview
    from attachflow.upload import Uploader

    CompletionCallback = Callable[[MediaBlob, Preview], None]

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class IngestionPipeline:
    """Per-attachment state machine: queued -> reading -> uploading -> done.

    A failed read ends in ``done`` without a preview. A failed upload ends in
    ``failed`` with the preview kept. Each step re-reads the attachment from
    the store before writing, so an attachment deleted mid-flight is left
    alone and any preview decoded for it afterwards is released at once.
    """

    def __init__(
        self,
        store: AttachmentStore,
        registry: ResourceRegistry,
        decoder: Decoder,
        uploader: Uploader,
        on_upload_complete: CompletionCallback | None = None,
        *,
        upload_attempts: int = 1,
        upload_retry_delay: float = 0.0,
    ) -> None:
        """Initialize with the store to mutate and the external operations to await."""
        if upload_attempts < 1:
            msg = "upload_attempts must be >= 1."
            raise ValueError(msg)
        self._store = store
        self._registry = registry
        self._decoder = decoder
        self._uploader = uploader
        self._on_upload_complete = on_upload_complete
        self._upload_attempts = upload_attempts
        self._upload_retry_delay = upload_retry_delay

    async def run(self, attachment_id: str) -> Attachment | None:
        """Process one attachment. Return its terminal state, or ``None`` if it was deleted."""
        reading = self._store.transition(attachment_id, "reading")
        if reading is None:
            return None
        blob = reading.blob

        try:
            preview = await self._decoder(blob)
        except Exception as exc:
            logger.warning("Could not read %s (%s): %s", attachment_id, blob.name or "unnamed", _describe(exc))
            return self._store.transition(attachment_id, "done", preview=None, error=_describe(exc))

        kind = infer_kind(blob.media_type, preview.media_type or preview.uri)
        uploading = self._store.transition(attachment_id, "uploading", preview=preview, kind=kind)
        if uploading is None:
            self._registry.release_preview(preview)
            return None
        self._registry.register(attachment_id, preview)

        failure = await self._upload(attachment_id, blob)
        if failure is not None:
            if attachment_id not in self._store:
                return None
            logger.warning("Upload failed for %s: %s", attachment_id, _describe(failure))
            return self._store.transition(attachment_id, "failed", error=_describe(failure))

        done = self._store.transition(attachment_id, "done")
        if done is None:
            return None
        logger.info("Attachment %s uploaded (%s, %d bytes)", attachment_id, done.kind, blob.size)
        self._notify(attachment_id, blob, preview)
        return done

    async def _upload(self, attachment_id: str, blob: MediaBlob) -> Exception | None:
        """Run the uploader with bounded retries. Return the last error, if any."""
        last_error: Exception | None = None
        for attempt in range(1, self._upload_attempts + 1):
            try:
                await self._uploader(blob)
            except Exception as exc:
                last_error = exc
            else:
                return None

            if isinstance(last_error, UploadError) and not last_error.retryable:
                break
            if attempt == self._upload_attempts or attachment_id not in self._store:
                break
            logger.debug("Retrying upload for %s (attempt %d): %s", attachment_id, attempt + 1, last_error)
            if self._upload_retry_delay:
                await asyncio.sleep(self._upload_retry_delay)
        return last_error

    def _notify(self, attachment_id: str, blob: MediaBlob, preview: Preview) -> None:
        if self._on_upload_complete is None:
            return
        try:
            self._on_upload_complete(blob, preview)
        except Exception:
            logger.exception("Upload-complete callback failed for %s", attachment_id)
