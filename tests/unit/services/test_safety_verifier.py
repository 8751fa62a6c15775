import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from services.errors import NetworkError, UnsafeContentError
from services.openai.safety_schema import FUNCTION_NAME
from services.openai.safety_verifier import DEFAULT_REJECTION, SafetyVerifier


def verdict_response(safe, reason=""):
    return SimpleNamespace(
        output=[
            SimpleNamespace(type="reasoning", name=None, arguments=None),
            SimpleNamespace(
                type="function_call",
                name=FUNCTION_NAME,
                arguments=json.dumps({"safe": safe, "reason": reason}),
            ),
        ],
        usage=SimpleNamespace(input_tokens=120, output_tokens=8),
    )


def make_client(response=None, error=None):
    client = MagicMock()
    client.responses.create = AsyncMock(return_value=response, side_effect=error)
    return client


@pytest.mark.asyncio
async def test_safe_image_passes_and_sends_data_url():
    client = make_client(verdict_response(True))
    verifier = SafetyVerifier(client, model="gpt-4.1-mini")

    assert await verifier.verify("QUJD", "image/png") is None

    kwargs = client.responses.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4.1-mini"
    assert kwargs["tool_choice"] == {"type": "function", "name": FUNCTION_NAME}
    user_content = kwargs["input"][1]["content"]
    assert {"type": "input_image", "image_url": "data:image/png;base64,QUJD"} in user_content


@pytest.mark.asyncio
async def test_unsafe_image_raises_with_model_reason():
    client = make_client(verdict_response(False, "Contenido violento."))
    with pytest.raises(UnsafeContentError, match="Contenido violento."):
        await SafetyVerifier(client).verify("QUJD", "image/png")


@pytest.mark.asyncio
async def test_unsafe_image_without_reason_uses_default_message():
    client = make_client(verdict_response(False, "   "))
    with pytest.raises(UnsafeContentError) as excinfo:
        await SafetyVerifier(client).verify("QUJD", "image/png")
    assert str(excinfo.value) == DEFAULT_REJECTION


@pytest.mark.asyncio
async def test_missing_verdict_fails_closed():
    client = make_client(SimpleNamespace(output=[], usage=None))
    with pytest.raises(UnsafeContentError):
        await SafetyVerifier(client).verify("QUJD", "image/png")


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", ["[]", "\"safe\"", "true", "{\"safe\": false, \"reason\": 3}"])
async def test_malformed_verdict_arguments_fail_closed(arguments):
    response = SimpleNamespace(
        output=[SimpleNamespace(type="function_call", name=FUNCTION_NAME, arguments=arguments)],
        usage=None,
    )
    with pytest.raises(UnsafeContentError) as excinfo:
        await SafetyVerifier(make_client(response)).verify("QUJD", "image/png")
    assert str(excinfo.value) == DEFAULT_REJECTION


@pytest.mark.asyncio
async def test_connection_failure_is_a_network_error():
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    client = make_client(error=openai.APIConnectionError(request=request))
    with pytest.raises(NetworkError):
        await SafetyVerifier(client).verify("QUJD", "image/png")


def test_client_is_required():
    with pytest.raises(ValueError):
        SafetyVerifier(None)
