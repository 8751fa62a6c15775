"""Validation helpers for uploaded images."""

from typing import Optional

from services.errors import ValidationError

DEFAULT_MAX_UPLOAD_MB = 5
BYTES_PER_MB = 1024 * 1024


def max_upload_bytes(max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB) -> int:
    """Return the upload limit in bytes for a limit given in MiB."""
    return max_upload_mb * BYTES_PER_MB


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a content type and drop any parameters (`; charset=...`)."""
    if not content_type:
        return ""
    return content_type.lower().split(";", 1)[0].strip()


def validate_image_upload(
    content_type: Optional[str],
    size: Optional[int],
    max_bytes: int = DEFAULT_MAX_UPLOAD_MB * BYTES_PER_MB,
) -> None:
    """Check that an upload declares an image type and fits the size limit.

    Args:
        content_type: MIME type declared by the client.
        size: Size of the upload in bytes.
        max_bytes: Largest accepted upload.

    Raises:
        ValidationError: If the type is not `image/*` or the file is too large.
    """
    if not normalize_content_type(content_type).startswith("image/"):
        raise ValidationError("Por favor, sube un archivo de imagen válido.")
    if size is not None and size > max_bytes:
        limit_mb = max_bytes // BYTES_PER_MB
        raise ValidationError(f"El archivo es demasiado grande. El tamaño máximo es de {limit_mb} MB.")
