"""FilePreviewStore: file-system-based preview storage."""

from __future__ import annotations

import mimetypes
import uuid
from pathlib import Path

from attachflow.errors import PreviewNotFoundError
from attachflow.previews._store import PreviewEntry, normalize_preview_id, utc_now
from attachflow.types import Preview

_DEFAULT_SUFFIX = ".bin"


class FilePreviewStore:
    """File-system-based preview store.

    Each preview is written as ``<id><ext>`` under a root directory and exposed
    through a ``file://`` URI, so renderers can load it like an object URL.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize with a root directory, creating it if needed."""
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._entries: dict[str, PreviewEntry] = {}
        self._paths: dict[str, Path] = {}

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _resolve_path(self, preview_id: str, suffix: str) -> Path | None:
        """Resolve a preview path and ensure it stays under the store root."""
        root = self._root.resolve()
        candidate = (self._root / f"{preview_id}{suffix}").resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            return None
        return candidate

    def put_preview(self, data: bytes, *, media_type: str | None = None) -> Preview:
        """Write bytes to a file and return a handle-backed Preview."""
        preview_id = uuid.uuid4().hex
        suffix = (mimetypes.guess_extension(media_type) if media_type else None) or _DEFAULT_SUFFIX
        path = self._resolve_path(preview_id, suffix)
        if path is None:
            msg = f"Generated preview ID {preview_id!r} resolves outside store root."
            raise ValueError(msg)
        path.write_bytes(data)

        uri = path.as_uri()
        self._paths[preview_id] = path
        self._entries[preview_id] = PreviewEntry(
            id=preview_id,
            uri=uri,
            media_type=media_type,
            size=len(data),
            created_at=utc_now(),
        )
        return Preview(uri=uri, media_type=media_type, handle=preview_id)

    def path_for(self, preview_or_id: Preview | str) -> Path | None:
        """Return the file backing a held preview."""
        preview_id = normalize_preview_id(preview_or_id)
        if preview_id is None:
            return None
        return self._paths.get(preview_id)

    def get_preview(self, preview_or_id: Preview | str) -> bytes:
        """Read preview bytes from disk."""
        path = self.path_for(preview_or_id)
        if path is None or not path.exists():
            raise PreviewNotFoundError(str(normalize_preview_id(preview_or_id)))
        return path.read_bytes()

    def has_preview(self, preview_or_id: Preview | str) -> bool:
        """Check whether the preview file still exists."""
        path = self.path_for(preview_or_id)
        return path is not None and path.exists()

    def delete_preview(self, preview_or_id: Preview | str) -> bool:
        """Delete a preview file by Preview or handle ID."""
        preview_id = normalize_preview_id(preview_or_id)
        if preview_id is None:
            return False
        path = self._paths.pop(preview_id, None)
        self._entries.pop(preview_id, None)
        if path is None or not path.exists():
            return False
        path.unlink()
        return True

    def list_previews(self) -> tuple[PreviewEntry, ...]:
        """List held previews whose files still exist, oldest first."""
        stale_ids = [preview_id for preview_id in self._entries if not self.has_preview(preview_id)]
        for preview_id in stale_ids:
            self._entries.pop(preview_id, None)
            self._paths.pop(preview_id, None)
        return tuple(sorted(self._entries.values(), key=lambda entry: (entry.created_at, entry.id)))
