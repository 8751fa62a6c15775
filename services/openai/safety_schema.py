"""Schema definitions for the image safety verdict tool."""

from typing import Any, Dict

FUNCTION_NAME = "report_image_safety"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Report whether the image is safe to edit and why.",
    "parameters": {
        "type": "object",
        "properties": {
            "safe": {
                "type": "boolean",
                "description": "True when the image may be edited.",
            },
            "reason": {
                "type": "string",
                "description": "Short user-facing explanation, required when the image is rejected.",
            },
        },
        "required": ["safe", "reason"],
        "additionalProperties": False,
    },
    "strict": True,
}
