"""Typed errors for attachflow."""


class AttachflowError(Exception):
    """Base exception for all attachflow errors."""


class PreviewNotFoundError(AttachflowError):
    """Raised when a PreviewHandle cannot be resolved in a PreviewStore."""

    def __init__(self, preview_id: str) -> None:
        """Initialize with the missing preview's ID."""
        self.preview_id = preview_id
        super().__init__(f"Preview not found: {preview_id}")


class DecodeError(AttachflowError):
    """Raised when a media payload cannot be turned into a preview."""


class UploadError(AttachflowError):
    """Raised by uploaders to signal that one upload attempt failed."""

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        """Initialize with a reason and whether another attempt may succeed."""
        self.retryable = retryable
        super().__init__(message)
