"""Dispatch websocket events to an editing session."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Set

from models.session_models import SessionState
from services.edit_session import EditSession

LOGGER = logging.getLogger(__name__)

Outbox = Callable[[Dict[str, Any]], None]


def state_message(state: SessionState) -> Dict[str, Any]:
	return {"type": "state", "state": state.snapshot()}


class SessionSocketHandler:
	"""Route websocket messages for a single editing session.

	State changes reach the client through the session's subscription, so a
	successful message produces no direct reply; failures are answered with an
	`error` message carrying the request id.

	`edit.submit` runs as a background task so the connection keeps reading
	messages (a `session.reset` in particular) while the edit is generated.
	"""

	def __init__(self, session: EditSession, outbox: Outbox) -> None:
		self.session = session
		self.outbox = outbox
		self.pending: Set["asyncio.Task[None]"] = set()

	async def handle(self, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			if message_type == "prompt.update":
				text = payload.get("text")
				if text is not None and not isinstance(text, str):
					raise ValueError("Prompt text must be a string.")
				self.session.set_prompt(text or "")
			elif message_type == "edit.submit":
				task = asyncio.create_task(self._submit(request_id))
				self.pending.add(task)
				task.add_done_callback(self.pending.discard)
			elif message_type == "session.reset":
				self.session.reset()
			else:
				raise ValueError("Unsupported message type.")
		except Exception as exc:
			self._reply_error(request_id, exc)

	async def drain(self) -> None:
		"""Wait for submits started on this connection to finish."""
		if self.pending:
			await asyncio.gather(*list(self.pending), return_exceptions=True)

	async def _submit(self, request_id: Any) -> None:
		try:
			await self.session.submit()
		except Exception as exc:
			LOGGER.exception("Websocket submit failed")
			self._reply_error(request_id, exc)

	def _reply_error(self, request_id: Any, exc: Exception) -> None:
		self.outbox({"type": "error", "request_id": request_id, "detail": str(exc)})
