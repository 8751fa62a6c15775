"""Session domain models for the upload, verify, edit lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

IDLE = "idle"
VERIFYING = "verifying"
READY = "ready"
GENERATING = "generating"
DONE = "done"


@dataclass(frozen=True)
class UploadedImage:
	"""An image that passed validation and the safety check.

	Both payloads encode the same bytes: `display_payload` is the data URL
	rendered by the page, `transfer_payload` is the bare base64 sent to the
	edit model.
	"""

	display_payload: str
	transfer_payload: str
	mime_type: str
	filename: Optional[str] = None


@dataclass(frozen=True)
class EditRequest:
	"""Arguments of a single call to the edit client."""

	instruction: str
	transfer_payload: str
	mime_type: str

	@classmethod
	def for_image(cls, instruction: str, image: UploadedImage) -> "EditRequest":
		return cls(instruction=instruction, transfer_payload=image.transfer_payload, mime_type=image.mime_type)


@dataclass
class SessionState:
	"""Everything the page renders for one editing session."""

	uploaded_image: Optional[UploadedImage] = None
	prompt_text: str = ""
	result_image: Optional[str] = None
	verifying: bool = False
	generating: bool = False
	last_error: Optional[str] = None

	@property
	def phase(self) -> str:
		if self.verifying:
			return VERIFYING
		if self.generating:
			return GENERATING
		if self.result_image is not None:
			return DONE
		if self.uploaded_image is not None:
			return READY
		return IDLE

	@property
	def busy(self) -> bool:
		return self.verifying or self.generating

	@property
	def can_submit(self) -> bool:
		"""True when the submit control should be enabled."""
		return not self.busy and self.uploaded_image is not None and bool(self.prompt_text.strip())

	def snapshot(self) -> Dict[str, Any]:
		"""Return a JSON-ready view of the state without the transfer payload."""
		image = self.uploaded_image
		return {
			"phase": self.phase,
			"uploaded_image": (
				{"data_url": image.display_payload, "mime_type": image.mime_type, "filename": image.filename}
				if image
				else None
			),
			"prompt_text": self.prompt_text,
			"result_image": self.result_image,
			"verifying": self.verifying,
			"generating": self.generating,
			"last_error": self.last_error,
			"can_submit": self.can_submit,
		}

