"""
Pytest configuration and shared fixtures for the test suite.

The OpenAI-backed clients are replaced by `AsyncMock`s so no test talks to
the network; images are generated with Pillow.
"""

import io
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile
from PIL import Image
from starlette.datastructures import Headers

from services.edit_session import EditSession

RESULT_B64 = "UkVTVUxU"  # base64 of b"RESULT"


def png_bytes(size=(8, 8), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def upload_file(
    data: bytes,
    content_type: Optional[str] = "image/png",
    filename: str = "photo.png",
    size: Optional[int] = -1,
) -> UploadFile:
    """Build an in-memory `UploadFile`; `size=-1` means "use len(data)"."""
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(
        file=io.BytesIO(data),
        size=len(data) if size == -1 else size,
        filename=filename,
        headers=headers,
    )


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return png_bytes


@pytest.fixture
def make_upload() -> Callable[..., UploadFile]:
    return upload_file


@pytest.fixture
def verifier() -> MagicMock:
    mock = MagicMock()
    mock.verify = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def editor() -> MagicMock:
    mock = MagicMock()
    mock.edit = AsyncMock(return_value=RESULT_B64)
    return mock


@pytest.fixture
def session(verifier, editor) -> EditSession:
    return EditSession(verifier, editor)
