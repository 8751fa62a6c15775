"""Environment-driven settings for the editor service."""

from __future__ import annotations

import os
from dataclasses import dataclass

from utils.media_validation import DEFAULT_MAX_UPLOAD_MB, max_upload_bytes

DEFAULT_SAFETY_MODEL = "gpt-4.1-mini"
DEFAULT_EDIT_MODEL = "gpt-image-1"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read once at startup.

    Attributes:
        safety_model: Responses API model used to screen uploads.
        edit_model: Images API model used to apply edits.
        max_upload_mb: Largest accepted upload, in MiB.
        log_level: Name of the root logging level.
        check_image_decode: Reject uploads Pillow cannot open before the safety check.
    """

    safety_model: str = DEFAULT_SAFETY_MODEL
    edit_model: str = DEFAULT_EDIT_MODEL
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB
    log_level: str = DEFAULT_LOG_LEVEL
    check_image_decode: bool = False

    @property
    def max_upload_bytes(self) -> int:
        return max_upload_bytes(self.max_upload_mb)


def _read_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be an integer.") from exc
    if value <= 0:
        raise RuntimeError(f"{name}={raw!r} must be greater than zero.")
    return value


def _read_flag(name: str) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in ("", "0", "false", "no", "off"):
        return False
    if raw in ("1", "true", "yes", "on"):
        return True
    raise RuntimeError(f"{name}={raw!r} must be a boolean.")


def load_settings() -> Settings:
    """Build `Settings` from environment variables, falling back to defaults."""
    return Settings(
        safety_model=os.getenv("SAFETY_MODEL") or DEFAULT_SAFETY_MODEL,
        edit_model=os.getenv("EDIT_MODEL") or DEFAULT_EDIT_MODEL,
        max_upload_mb=_read_positive_int("MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB),
        log_level=(os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        check_image_decode=_read_flag("CHECK_IMAGE_DECODE"),
    )
