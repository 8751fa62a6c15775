"""FastAPI routes for editing sessions."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.session_controller import (
	close_session,
	download_result,
	get_state,
	reset_session,
	select_image,
	start_session,
	submit_edit,
	update_prompt,
)

router = APIRouter(prefix="/sessions")


class PromptPayload(BaseModel):
	text: str = ""


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_state_route(request: Request, session_id: str):
	try:
		return await get_state(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/image")
async def select_image_route(request: Request, session_id: str, file: UploadFile = File(...)):
	"""Upload an image; the response reports whether it was accepted."""
	try:
		return await select_image(request, session_id, file)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.put("/{session_id}/prompt")
async def update_prompt_route(request: Request, session_id: str, payload: PromptPayload):
	try:
		return await update_prompt(request, session_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/edit")
async def submit_edit_route(request: Request, session_id: str):
	"""Generate the edited image; errors are reported in `last_error`."""
	try:
		return await submit_edit(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/reset")
async def reset_session_route(request: Request, session_id: str):
	try:
		return await reset_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/download")
async def download_route(request: Request, session_id: str):
	"""Download the generated PNG; the session starts over afterwards."""
	try:
		return await download_result(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def close_session_route(request: Request, session_id: str):
	try:
		return await close_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
