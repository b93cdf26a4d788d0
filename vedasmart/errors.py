"""Exceptions raised by the deck generation and export pipeline."""


class VedaSmartError(Exception):
    """Base class for VedaSmart errors."""


class PreconditionFailure(VedaSmartError, ValueError):
    """A required input is missing or of the wrong kind. Never retried."""


class InvalidResponseFormat(VedaSmartError):
    """The content provider returned something that does not parse into a deck."""

    def __init__(self, message: str = "Invalid response format from AI"):
        super().__init__(message)


class NoImageGenerated(VedaSmartError):
    """The image provider answered without any inline image."""

    def __init__(self, message: str = "No image generated"):
        super().__init__(message)


class ExportFailure(VedaSmartError):
    """Serializing a deck into a presentation file failed."""


class GenerationError(VedaSmartError):
    """Deck generation ended back in IDLE. Carries the user-facing message."""
