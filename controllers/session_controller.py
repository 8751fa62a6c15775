"""Session lifecycle helpers for the editing workflow."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.edit_session import EditSession
from services.errors import ValidationError
from services.session_store import SessionStore


def _store(request: Request) -> SessionStore:
	store = getattr(request.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


def _session(request: Request, session_id: str) -> EditSession:
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new editing session and return its id and initial state."""
	session_id, session = _store(request).create()
	return {"session_id": session_id, "state": session.state.snapshot()}


async def get_state(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the current state snapshot of a session."""
	return _session(request, session_id).state.snapshot()


async def select_image(request: Request, session_id: str, file: UploadFile) -> Dict[str, Any]:
	"""Run the upload through validation and the safety check."""
	state = await _session(request, session_id).select_file(file)
	return state.snapshot()


async def update_prompt(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	"""Store the prompt text typed by the user."""
	return _session(request, session_id).set_prompt(text).snapshot()


async def submit_edit(request: Request, session_id: str) -> Dict[str, Any]:
	"""Request an edit of the uploaded image with the current prompt."""
	state = await _session(request, session_id).submit()
	return state.snapshot()


async def reset_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Clear the session back to its initial state."""
	return _session(request, session_id).reset().snapshot()


async def download_result(request: Request, session_id: str) -> Response:
	"""Return the generated PNG as an attachment and reset the session.

	Raises:
		HTTPException(404) if the session is unknown or has no generated image.
	"""
	session = _session(request, session_id)
	try:
		filename, data = session.download()
	except ValidationError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return Response(
		content=data,
		media_type="image/png",
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)


async def close_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Forget a session."""
	try:
		_store(request).discard(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "closed": True}
