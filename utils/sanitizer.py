"""Prompt sanitisation applied before instructions reach the edit model."""

import re

# A "<", anything up to the next ">", and the ">" itself when present.
TAG_PATTERN = re.compile(r"<[^>]*>?", re.MULTILINE)


def sanitize_prompt(text: str) -> str:
    """Remove HTML-like tags from a free-text prompt.

    This is plain removal: nothing is escaped and entities are left as they
    are. An unterminated tag at the end of the text is dropped as well, so the
    result never contains a "<".
    """
    return TAG_PATTERN.sub("", text)
