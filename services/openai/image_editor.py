"""Instruction-driven image editing through OpenAI's Images API."""

import base64
import binascii
import logging
import time
from typing import Tuple

import openai
from openai import AsyncOpenAI

from services.errors import EmptyPromptError, GenerationError, NetworkError
from services.openai.response_parser import extract_image_b64
from utils.config import DEFAULT_EDIT_MODEL

LOGGER = logging.getLogger(__name__)

_EXTENSIONS = {"jpeg": "jpg", "jpg": "jpg", "png": "png", "webp": "webp", "gif": "gif", "bmp": "bmp"}


def upload_name(mime_type: str) -> str:
    """Pick a filename whose extension matches the MIME type."""
    ext = "png"
    if mime_type and "/" in mime_type:
        ext = _EXTENSIONS.get(mime_type.split("/")[-1].lower(), ext)
    return f"image.{ext}"


class ImageEditor:
    """Apply a natural-language edit to an image and return the result."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_EDIT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def edit(self, instruction: str, image_b64: str, mime_type: str) -> str:
        """Return the edited image as base64-encoded PNG.

        Args:
            instruction: Sanitised edit instruction, sent verbatim.
            image_b64: Base64 payload of the source image.
            mime_type: MIME type of the source image.

        Raises:
            GenerationError: If the service fails the edit or returns no image.
            NetworkError: If the service cannot be reached.
        """
        if not instruction.strip():
            raise EmptyPromptError("La instrucción no puede estar vacía.")
        image_file = self._image_file(image_b64, mime_type)

        start_time = time.time()
        try:
            response = await self.client.images.edit(
                model=self.model,
                image=image_file,
                prompt=instruction,
            )
        except openai.APIConnectionError as exc:
            logging.error("OpenAI image edit request did not complete: %s", exc)
            raise NetworkError(f"No se pudo contactar el servicio de edición: {exc}") from exc
        except openai.APIStatusError as exc:
            logging.error("OpenAI image edit request failed: %s", exc)
            raise GenerationError(f"No se pudo generar la imagen: {exc.message}") from exc
        except openai.APIError as exc:
            logging.error("OpenAI image edit request failed: %s", exc)
            raise NetworkError(f"Error de red al generar la imagen: {exc}") from exc

        result = extract_image_b64(response)
        if not result:
            raise GenerationError("El modelo no devolvió ninguna imagen. Intenta con otra instrucción.")
        LOGGER.info("Image edit finished in %.2fs", time.time() - start_time)
        return result

    def _image_file(self, image_b64: str, mime_type: str) -> Tuple[str, bytes, str]:
        try:
            raw = base64.b64decode(image_b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise GenerationError("La imagen original no es válida.") from exc
        return (upload_name(mime_type), raw, mime_type)
