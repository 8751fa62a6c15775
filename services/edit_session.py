"""State machine for one image editing session.

An `EditSession` owns a single `SessionState` and is the only thing that
mutates it. The page drives it through four actions (select a file, edit the
prompt, submit, reset) plus download, and observes it through `subscribe`.

Lifecycle: idle -> verifying -> ready -> generating -> done -> idle (reset).
A failed verification goes back to idle; a failed generation goes back to
ready with the uploaded image kept for another attempt.
"""

from __future__ import annotations

import base64
import logging
from typing import Callable, List, Optional, Protocol, Tuple

from fastapi import UploadFile

from models.session_models import EditRequest, SessionState, UploadedImage
from services.errors import EditorError, EmptyPromptError, ReadError, ValidationError
from services.image_codec import ImageCodec, split_data_url, to_data_url
from utils.media_validation import max_upload_bytes, validate_image_upload
from utils.sanitizer import sanitize_prompt

LOGGER = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "editado-por-estero.png"
RESULT_MIME_TYPE = "image/png"

MISSING_INPUT_MESSAGE = "Por favor, sube una imagen y escribe una instrucción."
EMPTY_AFTER_SANITIZE_MESSAGE = "La instrucción no puede estar vacía después de la sanitización."
BUSY_MESSAGE = "Espera a que termine la operación en curso."
UNKNOWN_IMAGE_ERROR = "Ocurrió un error desconocido al procesar la imagen."
UNKNOWN_ERROR = "Ocurrió un error desconocido."
NO_RESULT_MESSAGE = "No hay ninguna imagen generada para descargar."

Listener = Callable[[SessionState], None]


class Verifier(Protocol):
    async def verify(self, image_b64: str, mime_type: str) -> None: ...


class Editor(Protocol):
    async def edit(self, instruction: str, image_b64: str, mime_type: str) -> str: ...


class EditSession:
    """Drive one upload, verify, edit, download cycle.

    Args:
        verifier: Safety check run on every upload before it is accepted.
        editor: Edit client called on submit.
        codec: Converts uploads into display and transfer payloads.
        max_bytes: Largest accepted upload in bytes.
    """

    def __init__(
        self,
        verifier: Verifier,
        editor: Editor,
        codec: Optional[ImageCodec] = None,
        max_bytes: int = max_upload_bytes(),
    ) -> None:
        self.verifier = verifier
        self.editor = editor
        self.codec = codec or ImageCodec()
        self.max_bytes = max_bytes
        self.state = SessionState()
        # Bumped by select_file and reset; async work started under an older
        # version drops its outcome.
        self._version = 0
        self._listeners: List[Listener] = []

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener` for every state change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:
                LOGGER.exception("Session listener failed")

    def _refuse(self, message: str) -> SessionState:
        self.state.last_error = message
        self.state.result_image = None
        self._notify()
        return self.state

    # -- transitions -------------------------------------------------------

    async def select_file(self, file: UploadFile) -> SessionState:
        """Validate, verify, and accept a newly selected image.

        Any previous image, result, prompt, and error are cleared first. On
        failure the error message is stored and no image is kept.
        """
        if self.state.busy:
            return self._refuse(BUSY_MESSAGE)

        # Measure before touching state: another selection may run while this awaits.
        size: Optional[int] = None
        rejection: Optional[EditorError] = None
        try:
            size = await self._upload_size(file)
        except ReadError as exc:
            rejection = exc
        if self.state.busy:
            return self._refuse(BUSY_MESSAGE)

        self._version += 1
        version = self._version
        self.state = SessionState()

        mime_type = file.content_type or ""
        if rejection is None:
            try:
                validate_image_upload(mime_type, size, self.max_bytes)
            except ValidationError as exc:
                rejection = exc
        if rejection is not None:
            LOGGER.info("Rejected upload %r: %s", file.filename, rejection)
            self.state.last_error = str(rejection)
            self._notify()
            return self.state

        self.state.verifying = True
        self._notify()

        image: Optional[UploadedImage] = None
        error: Optional[str] = None
        try:
            transfer_payload = await self.codec.to_transfer_payload(file)
            await self.verifier.verify(transfer_payload, mime_type)
            display_payload = await self.codec.to_display_payload(file)
            image = UploadedImage(
                display_payload=display_payload,
                transfer_payload=transfer_payload,
                mime_type=mime_type,
                filename=file.filename,
            )
        except EditorError as exc:
            LOGGER.info("Upload %r not accepted: %s", file.filename, exc)
            error = str(exc)
        except Exception:
            LOGGER.exception("Unexpected failure while processing upload %r", file.filename)
            error = UNKNOWN_IMAGE_ERROR
        finally:
            if version == self._version:
                self.state.verifying = False

        if version != self._version:
            LOGGER.info("Discarding verification outcome for superseded upload %r", file.filename)
            return self.state

        self.state.uploaded_image = image
        self.state.last_error = error
        if image is not None:
            LOGGER.info("Accepted upload %r (%s)", file.filename, mime_type)
        self._notify()
        return self.state

    def set_prompt(self, text: str) -> SessionState:
        """Store the prompt text as typed."""
        self.state.prompt_text = text
        self._notify()
        return self.state

    async def submit(self) -> SessionState:
        """Sanitise the prompt and request an edit of the uploaded image."""
        if self.state.busy:
            return self._refuse(BUSY_MESSAGE)
        image = self.state.uploaded_image
        if image is None or not self.state.prompt_text.strip():
            return self._refuse(MISSING_INPUT_MESSAGE)

        version = self._version
        self.state.last_error = None
        self.state.result_image = None
        self.state.generating = True
        self._notify()

        result: Optional[str] = None
        error: Optional[str] = None
        try:
            instruction = sanitize_prompt(self.state.prompt_text)
            if not instruction.strip():
                raise EmptyPromptError(EMPTY_AFTER_SANITIZE_MESSAGE)
            request = EditRequest.for_image(instruction, image)
            result_b64 = await self.editor.edit(request.instruction, request.transfer_payload, request.mime_type)
            result = to_data_url(result_b64, RESULT_MIME_TYPE)
        except EditorError as exc:
            LOGGER.info("Edit request failed: %s", exc)
            error = str(exc)
        except Exception:
            LOGGER.exception("Unexpected failure while generating an edit")
            error = UNKNOWN_ERROR
        finally:
            if version == self._version:
                self.state.generating = False

        if version != self._version:
            LOGGER.info("Discarding edit result for a session that was reset")
            return self.state

        self.state.result_image = result
        self.state.last_error = error
        self._notify()
        return self.state

    def reset(self) -> SessionState:
        """Return to the initial empty state, whatever the current state is."""
        self._version += 1
        self.state = SessionState()
        self._notify()
        return self.state

    def download(self) -> Tuple[str, bytes]:
        """Return the generated PNG and its filename, then reset the session.

        Raises:
            ValidationError: If there is no generated image.
        """
        if self.state.result_image is None:
            raise ValidationError(NO_RESULT_MESSAGE)
        data = base64.b64decode(split_data_url(self.state.result_image))
        self.reset()
        return DOWNLOAD_FILENAME, data

    # -- helpers -----------------------------------------------------------

    async def _upload_size(self, file: UploadFile) -> int:
        if file.size is not None:
            return file.size
        try:
            raw = await file.read()
            await file.seek(0)
        except Exception as exc:
            raise ReadError("No se pudo leer el archivo de imagen.") from exc
        return len(raw)
