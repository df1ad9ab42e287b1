"""attachflow: concurrent ingestion and upload of media attachments."""

import importlib.metadata as importlib_metadata

from attachflow.config import OrchestratorConfig
from attachflow.decode import Decoder, StoredPreviewDecoder, decode_data_url
from attachflow.errors import AttachflowError, DecodeError, PreviewNotFoundError, UploadError
from attachflow.inputs import ClipboardItem, PasteGesture, from_file_selection, from_paste
from attachflow.kinds import infer_kind, is_generic_media_type, sniff_media_type
from attachflow.orchestrator import Orchestrator
from attachflow.pipeline import IngestionPipeline
from attachflow.previews import FilePreviewStore, InMemoryPreviewStore, PreviewStore, ResourceRegistry
from attachflow.store import AttachmentStore
from attachflow.types import Attachment, AttachmentKind, AttachmentStatus, MediaBlob, Preview, Submission, View
from attachflow.upload import Uploader, simulated_upload


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("attachflow")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "AttachflowError",
    "Attachment",
    "AttachmentKind",
    "AttachmentStatus",
    "AttachmentStore",
    "ClipboardItem",
    "DecodeError",
    "Decoder",
    "FilePreviewStore",
    "InMemoryPreviewStore",
    "IngestionPipeline",
    "MediaBlob",
    "Orchestrator",
    "OrchestratorConfig",
    "PasteGesture",
    "Preview",
    "PreviewNotFoundError",
    "PreviewStore",
    "ResourceRegistry",
    "Submission",
    "UploadError",
    "Uploader",
    "View",
    "decode_data_url",
    "from_file_selection",
    "from_paste",
    "infer_kind",
    "is_generic_media_type",
    "simulated_upload",
    "sniff_media_type",
]
