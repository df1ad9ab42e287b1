"""OrchestratorConfig: static settings supplied at construction."""

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_MAX_FILES = 5
DEFAULT_PLACEHOLDER = "Write a prompt or paste media..."


@dataclass(frozen=True, slots=True)
class OrchestratorConfig:
    """Capacity, prompt placeholder, and pipeline policy.

    Values are fixed for the lifetime of an Orchestrator.
    """

    max_files: int = DEFAULT_MAX_FILES
    placeholder: str = DEFAULT_PLACEHOLDER

    # Upload policy
    upload_attempts: int = 1
    upload_retry_delay: float = 0.0

    # Abort in-flight work on delete instead of discarding its result later
    cancel_on_delete: bool = False

    def __post_init__(self) -> None:
        """Validate numeric bounds."""
        if not isinstance(self.max_files, int) or isinstance(self.max_files, bool) or self.max_files < 0:
            msg = "OrchestratorConfig.max_files must be a non-negative int."
            raise ValueError(msg)
        if not isinstance(self.upload_attempts, int) or isinstance(self.upload_attempts, bool):
            msg = "OrchestratorConfig.upload_attempts must be an int."
            raise TypeError(msg)
        if self.upload_attempts < 1:
            msg = "OrchestratorConfig.upload_attempts must be >= 1."
            raise ValueError(msg)
        if self.upload_retry_delay < 0:
            msg = "OrchestratorConfig.upload_retry_delay must be >= 0."
            raise ValueError(msg)
        object.__setattr__(self, "upload_retry_delay", float(self.upload_retry_delay))

    def to_dict(self) -> dict[str, object]:
        """Serialize OrchestratorConfig to a plain dictionary."""
        return {
            "max_files": self.max_files,
            "placeholder": self.placeholder,
            "upload_attempts": self.upload_attempts,
            "upload_retry_delay": self.upload_retry_delay,
            "cancel_on_delete": self.cancel_on_delete,
        }

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> "OrchestratorConfig":
        """Deserialize OrchestratorConfig from a plain dictionary; missing keys keep defaults."""
        if not isinstance(value, Mapping):
            msg = "OrchestratorConfig payload must be a mapping."
            raise TypeError(msg)
        data = {str(key): item for key, item in value.items()}
        unknown = sorted(set(data) - _FIELD_NAMES)
        if unknown:
            msg = f"Unknown OrchestratorConfig field(s): {', '.join(unknown)}."
            raise ValueError(msg)

        kwargs: dict[str, object] = {}
        max_files = _optional_int(data.get("max_files"), field_name="max_files")
        if max_files is not None:
            kwargs["max_files"] = max_files
        placeholder = _optional_string(data.get("placeholder"), field_name="placeholder")
        if placeholder is not None:
            kwargs["placeholder"] = placeholder
        upload_attempts = _optional_int(data.get("upload_attempts"), field_name="upload_attempts")
        if upload_attempts is not None:
            kwargs["upload_attempts"] = upload_attempts
        retry_delay = _optional_float(data.get("upload_retry_delay"), field_name="upload_retry_delay")
        if retry_delay is not None:
            kwargs["upload_retry_delay"] = retry_delay
        cancel_on_delete = _optional_bool(data.get("cancel_on_delete"), field_name="cancel_on_delete")
        if cancel_on_delete is not None:
            kwargs["cancel_on_delete"] = cancel_on_delete
        return cls(**kwargs)  # type: ignore[arg-type]


_FIELD_NAMES = frozenset({"max_files", "placeholder", "upload_attempts", "upload_retry_delay", "cancel_on_delete"})


def _optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"OrchestratorConfig.{field_name} must be a string or None."
        raise TypeError(msg)
    return value


def _optional_int(value: object, *, field_name: str) -> int | None:
    """Validate an optional integer field (rejects booleans)."""
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"OrchestratorConfig.{field_name} must be an int or None."
        raise TypeError(msg)
    return value


def _optional_float(value: object, *, field_name: str) -> float | None:
    """Validate an optional float field (rejects booleans)."""
    if value is None:
        return None
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        msg = f"OrchestratorConfig.{field_name} must be a float or None."
        raise TypeError(msg)
    return float(value)


def _optional_bool(value: object, *, field_name: str) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"OrchestratorConfig.{field_name} must be a bool or None."
        raise TypeError(msg)
    return value
