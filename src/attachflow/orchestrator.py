"""Orchestrator: wire input gestures, the attachment store, and ingestion pipelines."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from attachflow.config import OrchestratorConfig
from attachflow.decode import StoredPreviewDecoder, decode_data_url
from attachflow.inputs import from_file_selection, from_paste
from attachflow.pipeline import IngestionPipeline
from attachflow.previews import ResourceRegistry
from attachflow.store import AttachmentStore
from attachflow.types import Submission, View
from attachflow.upload import simulated_upload

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path
    from types import TracebackType

    from attachflow.decode import Decoder
    from attachflow.inputs import PasteGesture
    from attachflow.pipeline import CompletionCallback
    from attachflow.previews import PreviewStore
    from attachflow.types import Attachment, MediaBlob
    from attachflow.upload import Uploader

logger = logging.getLogger(__name__)


class Orchestrator:
    """Composition root consumed by the rendering layer.

    Gesture methods are synchronous and must be called from inside a running
    event loop: each accepted attachment gets its own pipeline task, and
    pipelines run concurrently without ordering between them.
    """

    def __init__(
        self,
        *,
        decoder: Decoder | None = None,
        uploader: Uploader | None = None,
        on_upload_complete: CompletionCallback | None = None,
        config: OrchestratorConfig | None = None,
        preview_store: PreviewStore | None = None,
        on_send: Callable[[Submission], None] | None = None,
    ) -> None:
        """Initialize with external operations and static configuration.

        Without a decoder, previews are inline data URLs, or entries in
        ``preview_store`` when one is given.
        """
        self._config = config or OrchestratorConfig()
        if decoder is None:
            decoder = StoredPreviewDecoder(preview_store) if preview_store is not None else decode_data_url
        if preview_store is None and isinstance(decoder, StoredPreviewDecoder):
            preview_store = decoder.store

        self._store = AttachmentStore(self._config.max_files)
        self._registry = ResourceRegistry(preview_store)
        self._pipeline = IngestionPipeline(
            self._store,
            self._registry,
            decoder,
            uploader or simulated_upload(),
            on_upload_complete,
            upload_attempts=self._config.upload_attempts,
            upload_retry_delay=self._config.upload_retry_delay,
        )
        self._on_send = on_send
        self._tasks: dict[str, asyncio.Task[Attachment | None]] = {}
        self._text = ""
        self._closed = False

    @property
    def config(self) -> OrchestratorConfig:
        """Return the static configuration."""
        return self._config

    @property
    def store(self) -> AttachmentStore:
        """Return the attachment store."""
        return self._store

    @property
    def registry(self) -> ResourceRegistry:
        """Return the preview resource registry."""
        return self._registry

    @property
    def attachments(self) -> tuple[Attachment, ...]:
        """Return the current attachments in order."""
        return self._store.snapshot()

    @property
    def text(self) -> str:
        """Return the prompt text."""
        return self._text

    @property
    def pending(self) -> tuple[str, ...]:
        """Return IDs whose pipeline task is still running."""
        return tuple(self._tasks)

    @property
    def closed(self) -> bool:
        """Return whether aclose() has run."""
        return self._closed

    def view(self) -> View:
        """Return a read-only view for rendering."""
        return View(
            attachments=self._store.snapshot(),
            text=self._text,
            placeholder=self._config.placeholder,
            max_files=self._config.max_files,
        )

    def subscribe(self, listener: Callable[[tuple[Attachment, ...]], None]) -> Callable[[], None]:
        """Observe attachment changes; see AttachmentStore.subscribe."""
        return self._store.subscribe(listener)

    # Gestures

    def select_files(self, files: Iterable[MediaBlob | str | Path]) -> int:
        """Accept a file-picker selection. Return how many attachments were queued."""
        return self._enqueue(from_file_selection(files))

    def paste(self, gesture: PasteGesture) -> int:
        """Accept a paste gesture. Return how many attachments were queued."""
        return self._enqueue(from_paste(gesture))

    def delete(self, attachment_id: str) -> bool:
        """Remove one attachment and release its preview."""
        removed = self._store.remove(attachment_id)
        if removed is None:
            return False
        self._release(removed)
        logger.debug("Deleted attachment %s (status=%s)", attachment_id, removed.status)
        return True

    def toggle_caption_edit(self, attachment_id: str) -> bool:
        """Flip caption editing for one attachment. Return whether it exists."""
        return self._store.toggle_caption_edit(attachment_id) is not None

    def set_caption(self, attachment_id: str, caption: str) -> bool:
        """Set the caption of one attachment. Return whether it exists."""
        return self._store.set_caption(attachment_id, caption) is not None

    def set_text(self, text: str) -> None:
        """Replace the prompt text."""
        if not isinstance(text, str):
            msg = f"text must be a string; got {type(text).__name__}."
            raise TypeError(msg)
        self._text = text

    def clear(self) -> int:
        """Remove every attachment and release their previews."""
        removed = self._store.clear()
        for attachment in removed:
            self._release(attachment)
        return len(removed)

    def send(self) -> Submission:
        """Snapshot the prompt and attachments and hand them to ``on_send``."""
        submission = Submission(text=self._text, attachments=self._store.snapshot())
        logger.info("Sending prompt with %d attachment(s)", len(submission.attachments))
        if self._on_send is not None:
            self._on_send(submission)
        return submission

    # Lifecycle

    async def wait_idle(self) -> None:
        """Wait until no pipeline task is running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel running pipelines, release every preview, and empty the store."""
        if self._closed:
            return
        self._closed = True
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._store.clear()
        released = self._registry.release_all()
        logger.debug("Orchestrator closed (cancelled=%d, released=%d)", len(tasks), released)

    async def __aenter__(self) -> Orchestrator:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _enqueue(self, candidates: tuple[MediaBlob, ...]) -> int:
        if self._closed:
            logger.debug("Ignoring %d candidate(s): orchestrator is closed", len(candidates))
            return 0
        loop = asyncio.get_running_loop()
        accepted = self._store.append(candidates)
        for attachment in accepted:
            task = loop.create_task(self._pipeline.run(attachment.id), name=f"attachflow-{attachment.id}")
            self._tasks[attachment.id] = task
            task.add_done_callback(lambda done, attachment_id=attachment.id: self._forget(attachment_id, done))
        return len(accepted)

    def _forget(self, attachment_id: str, task: asyncio.Task[Attachment | None]) -> None:
        if self._tasks.get(attachment_id) is task:
            del self._tasks[attachment_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Pipeline for %s crashed", attachment_id, exc_info=exc)
            self._store.transition(attachment_id, "failed", error=str(exc) or type(exc).__name__)

    def _release(self, attachment: Attachment) -> None:
        self._registry.release(attachment.id)
        if self._config.cancel_on_delete:
            task = self._tasks.get(attachment.id)
            if task is not None:
                task.cancel()
