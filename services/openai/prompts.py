"""Prompt builders for the image safety check."""


def build_safety_system_prompt() -> str:
    """Return the system prompt for the safety classifier."""
    return (
        "You are a content moderator for a public photo editing tool. "
        "Decide whether the uploaded image is acceptable to edit. "
        "Reject sexual content, graphic violence or gore, content that sexualises or endangers minors, "
        "hate symbols, and images that promote self-harm or illegal activity. "
        "Ordinary photos of people, pets, places, objects, and artwork are acceptable. "
    )


def build_safety_user_prompt(mime_type: str) -> str:
    """Return the user prompt that accompanies the image."""
    return (
        f"Review the attached {mime_type} image and report your verdict with the tool. "
        "When rejecting, give a short reason in Spanish that can be shown to the user."
    )
