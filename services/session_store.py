"""Simple in-memory store for editing sessions."""

from __future__ import annotations

from typing import Callable, Dict
from uuid import uuid4

from services.edit_session import EditSession
from services.image_codec import ImageCodec
from services.openai.image_editor import ImageEditor
from services.openai.safety_verifier import SafetyVerifier
from utils.config import Settings

SessionFactory = Callable[[], EditSession]


class SessionStore:
	"""Create, look up, and discard editing sessions by id."""

	def __init__(self, factory: SessionFactory) -> None:
		self._factory = factory
		self._sessions: Dict[str, EditSession] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	def create(self) -> tuple[str, EditSession]:
		"""Create a new session and return its id with the session."""
		session_id = uuid4().hex
		session = self._factory()
		self._sessions[session_id] = session
		return session_id, session

	def get(self, session_id: str) -> EditSession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	def discard(self, session_id: str) -> None:
		"""Forget a session; raise KeyError if missing."""
		if self._sessions.pop(session_id, None) is None:
			raise KeyError(f"Session {session_id} not found")


def openai_session_factory(client, settings: Settings) -> SessionFactory:
	"""Return a factory building sessions backed by the shared OpenAI client."""
	verifier = SafetyVerifier(client, model=settings.safety_model)
	editor = ImageEditor(client, model=settings.edit_model)

	def factory() -> EditSession:
		return EditSession(
			verifier,
			editor,
			codec=ImageCodec(check_decodable=settings.check_image_decode),
			max_bytes=settings.max_upload_bytes,
		)

	return factory
