"""Tree capture errors."""


class CaptureError(Exception):
    """Raised when a source tree cannot be captured at all."""
