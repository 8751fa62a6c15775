"""Helpers to parse OpenAI API outputs."""

import json
from typing import Any, Dict, Optional


def parse_safety_verdict(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Extract the safety verdict from the named function call."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            args = json.loads(getattr(item, "arguments", "{}") or "{}")
            if not isinstance(args, dict):
                raise ValueError(f"Arguments for '{tool_name}' must be a JSON object.")
            reason = args.get("reason")
            return {
                "safe": args.get("safe") is True,
                "reason": reason.strip() if isinstance(reason, str) else "",
            }
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }


def extract_image_b64(response: Any) -> Optional[str]:
    """Return the first base64 image from an Images API response."""
    data = getattr(response, "data", None) or []
    if not data:
        return None
    return getattr(data[0], "b64_json", None) or None
