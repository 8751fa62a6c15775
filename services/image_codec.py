"""Convert uploaded image files into the payloads used downstream.

`ImageCodec` turns an uploaded file into the two encodings the editor needs:
a data URL the page can render and the bare base64 payload sent to the
models. Both come from the same bytes, so the base64 section of the data URL
is always identical to the transfer payload.

Example:
    codec = ImageCodec()
    b64 = await codec.to_transfer_payload(upload)
    data_url = await codec.to_display_payload(upload)
"""
from __future__ import annotations

import asyncio
import base64
import io
import logging

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from services.errors import ReadError

LOGGER = logging.getLogger(__name__)


def encode_base64(raw: bytes) -> str:
    """Return the standard base64 text for `raw`, without a data URL header."""
    return base64.b64encode(raw).decode("ascii")


def to_data_url(b64_payload: str, mime_type: str) -> str:
    """Wrap a base64 payload into a `data:` URL."""
    return f"data:{mime_type};base64,{b64_payload}"


def split_data_url(data_url: str) -> str:
    """Return the payload after the first comma of a data URL."""
    _, sep, payload = data_url.partition(",")
    if not sep:
        raise ValueError("Not a data URL.")
    return payload


def _check_decodable(raw: bytes) -> None:
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ReadError("No se pudo leer el archivo de imagen.") from exc


class ImageCodec:
    """Read uploads and produce display and transfer payloads.

    Args:
        check_decodable: When True, bytes that Pillow cannot identify as an
            image are rejected with `ReadError`. Off by default: any `image/*`
            upload goes on to the safety check as-is.
    """

    def __init__(self, check_decodable: bool = False) -> None:
        self.check_decodable = check_decodable

    async def read_bytes(self, file: UploadFile) -> bytes:
        """Read the whole upload from the start.

        Raises:
            ReadError: If reading fails, yields no bytes, or (when checking) the bytes are not an image.
        """
        try:
            await file.seek(0)
            raw = await file.read()
        except Exception as exc:
            LOGGER.error("Failed to read upload %r: %s", file.filename, exc)
            raise ReadError("No se pudo leer el archivo de imagen.") from exc

        if not isinstance(raw, (bytes, bytearray)):
            raise ReadError("El contenido del archivo no es válido.")
        if not raw:
            raise ReadError("El archivo está vacío.")

        if self.check_decodable:
            # Pillow decoding is blocking -> run in thread
            await asyncio.to_thread(_check_decodable, bytes(raw))
        return bytes(raw)

    async def to_transfer_payload(self, file: UploadFile) -> str:
        """Return the upload's bytes as base64 text."""
        return encode_base64(await self.read_bytes(file))

    async def to_display_payload(self, file: UploadFile) -> str:
        """Return the upload as a data URL using its declared content type."""
        raw = await self.read_bytes(file)
        return to_data_url(encode_base64(raw), file.content_type or "application/octet-stream")
