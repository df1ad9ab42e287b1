"""Preview stores and the registry that releases their resources."""

from attachflow.previews._file import FilePreviewStore
from attachflow.previews._memory import InMemoryPreviewStore
from attachflow.previews._registry import ResourceRegistry
from attachflow.previews._store import PreviewEntry, PreviewStore

__all__ = [
    "FilePreviewStore",
    "InMemoryPreviewStore",
    "PreviewEntry",
    "PreviewStore",
    "ResourceRegistry",
]
