import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.session_models import SessionState
from services.realtime.ws_session import SessionSocketHandler


async def ready_session(session, make_png, make_upload):
    await session.select_file(make_upload(make_png()))
    session.set_prompt("add a hat")
    return session


@pytest.mark.asyncio
async def test_reset_is_handled_while_an_edit_is_running(session, editor, make_png, make_upload):
    await ready_session(session, make_png, make_upload)
    started = asyncio.Event()
    release = asyncio.Event()

    async def edit(instruction, image_b64, mime_type):
        started.set()
        await release.wait()
        return "UkVTVUxU"

    editor.edit.side_effect = edit
    sent = []
    handler = SessionSocketHandler(session, sent.append)

    await handler.handle({"type": "edit.submit", "request_id": 1})
    await started.wait()
    assert session.state.generating is True

    await handler.handle({"type": "session.reset", "request_id": 2})
    assert session.state == SessionState()

    release.set()
    await handler.drain()

    assert session.state == SessionState()
    assert handler.pending == set()
    assert sent == []


@pytest.mark.asyncio
async def test_submit_completes_in_the_background(session, make_png, make_upload):
    await ready_session(session, make_png, make_upload)
    handler = SessionSocketHandler(session, MagicMock())

    await handler.handle({"type": "edit.submit"})
    await handler.drain()

    assert session.state.result_image == "data:image/png;base64,UkVTVUxU"
    assert session.state.generating is False


@pytest.mark.asyncio
async def test_submit_failure_is_answered_with_request_id():
    session = MagicMock()
    session.submit = AsyncMock(side_effect=RuntimeError("boom"))
    sent = []
    handler = SessionSocketHandler(session, sent.append)

    await handler.handle({"type": "edit.submit", "request_id": "r-9"})
    await handler.drain()

    assert sent == [{"type": "error", "request_id": "r-9", "detail": "boom"}]


@pytest.mark.asyncio
async def test_prompt_update_rejects_non_string_text(session):
    sent = []
    handler = SessionSocketHandler(session, sent.append)

    await handler.handle({"type": "prompt.update", "text": 5, "request_id": 3})

    assert sent == [{"type": "error", "request_id": 3, "detail": "Prompt text must be a string."}]
    assert session.state.prompt_text == ""
