"""WebSocket endpoint streaming session state to the page."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.realtime.ws_session import SessionSocketHandler, state_message
from services.session_store import SessionStore

router = APIRouter()


def _require_session_store(websocket: WebSocket) -> SessionStore:
	store = getattr(websocket.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


async def _forward(websocket: WebSocket, outbox: "asyncio.Queue[Dict[str, Any]]") -> None:
	while True:
		message = await outbox.get()
		await websocket.send_text(json.dumps(message))


@router.websocket("/ws/{session_id}")
async def session_socket(websocket: WebSocket, session_id: str, store: SessionStore = Depends(_require_session_store)):
	"""Push a state snapshot after every transition and accept prompt, submit, and reset messages."""
	await websocket.accept()
	try:
		session = store.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return

	outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
	unsubscribe = session.subscribe(lambda state: outbox.put_nowait(state_message(state)))
	outbox.put_nowait(state_message(session.state))
	sender = asyncio.create_task(_forward(websocket, outbox))
	handler = SessionSocketHandler(session, outbox.put_nowait)
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			except Exception:
				outbox.put_nowait({"type": "error", "detail": "Invalid websocket frame"})
				continue
			try:
				payload = json.loads(raw)
			except Exception:
				outbox.put_nowait({"type": "error", "detail": "Payload must be JSON"})
				continue
			if not isinstance(payload, dict):
				outbox.put_nowait({"type": "error", "detail": "Payload must be a JSON object"})
				continue
			await handler.handle(payload)
	finally:
		unsubscribe()
		sender.cancel()
		try:
			await sender
		except (asyncio.CancelledError, Exception):
			pass
		# In-flight submits run to completion.
		await handler.drain()
	try:
		await websocket.close()
	except Exception:
		pass
