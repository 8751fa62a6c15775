"""Error taxonomy for the image editing session.

Every error carries a user-facing message. The session state machine stores
`str(error)` as the session's `last_error`; nothing else reaches the page.
"""


class EditorError(Exception):
    """Base class for failures surfaced to the user."""


class ValidationError(EditorError):
    """Local validation failed (bad file type or size, unusable prompt)."""


class EmptyPromptError(ValidationError):
    """The prompt is blank once markup has been stripped."""


class UnsafeContentError(EditorError):
    """The safety classifier rejected the uploaded image."""


class NetworkError(EditorError):
    """A remote call could not be completed."""


class GenerationError(EditorError):
    """The edit service failed or refused to produce an image."""


class ReadError(EditorError):
    """The uploaded file could not be read or decoded."""
