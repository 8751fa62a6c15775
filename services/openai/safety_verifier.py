"""Image safety verification using OpenAI's Responses API."""

import logging
import time
from typing import Any, Dict, List

import openai
from openai import AsyncOpenAI

from services.errors import NetworkError, UnsafeContentError
from services.image_codec import to_data_url
from services.openai.prompts import build_safety_system_prompt, build_safety_user_prompt
from services.openai.response_parser import extract_usage, parse_safety_verdict
from services.openai.safety_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from utils.config import DEFAULT_SAFETY_MODEL

LOGGER = logging.getLogger(__name__)

DEFAULT_REJECTION = "La imagen no superó la verificación de seguridad. Por favor, sube otra imagen."


class SafetyVerifier:
    """Ask a vision model whether an uploaded image may be edited."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_SAFETY_MODEL) -> None:
        """Initialize the verifier with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_safety_system_prompt()

    async def verify(self, image_b64: str, mime_type: str) -> None:
        """Return normally when the image is acceptable.

        Raises:
            UnsafeContentError: If the model rejects the image or gives no usable verdict.
            NetworkError: If the API call does not complete.
        """
        start_time = time.time()
        response = await self._create_response(self._build_inputs(image_b64, mime_type))
        try:
            verdict = parse_safety_verdict(response, tool_name=FUNCTION_NAME)
        except (RuntimeError, ValueError) as exc:
            LOGGER.error("Unusable safety verdict from OpenAI: %s", exc)
            raise UnsafeContentError(DEFAULT_REJECTION) from exc

        usage = extract_usage(response)
        LOGGER.info(
            "Safety check finished in %.2fs (safe=%s, input_tokens=%s, output_tokens=%s)",
            time.time() - start_time,
            verdict["safe"],
            usage["input_tokens"],
            usage["output_tokens"],
        )
        if not verdict["safe"]:
            raise UnsafeContentError(verdict["reason"] or DEFAULT_REJECTION)

    def _build_inputs(self, image_b64: str, mime_type: str) -> List[Dict[str, Any]]:
        return [
            {
                "type": "message",
                "role": "system",
                "content": [{"type": "input_text", "text": self.system_prompt}],
            },
            {
                "type": "message",
                "role": "user",
                "content": [
                    {"type": "input_text", "text": build_safety_user_prompt(mime_type)},
                    {"type": "input_image", "image_url": to_data_url(image_b64, mime_type)},
                ],
            },
        ]

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the verification request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except openai.APIError as exc:
            logging.error("Error during OpenAI Responses API call: %s", exc)
            raise NetworkError(f"No se pudo verificar la imagen: {exc}") from exc
