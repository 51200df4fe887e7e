"""
Error taxonomy for the document processor.
"""
from typing import Optional


class DocProcessorError(Exception):
    """Base class for all document processor errors."""


class ValidationError(DocProcessorError):
    """Raised when the selected mode's preconditions are not met."""


class FormatError(DocProcessorError):
    """Raised when an encoded image string or image payload is malformed."""


class GatewayError(DocProcessorError):
    """Raised when a call to the Gemini API fails or returns an unusable response."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NoImageReturnedError(GatewayError):
    """Raised when an image-cleaning response contains no image part."""


class SchemaError(GatewayError):
    """Raised when a structured response does not have the expected shape."""


class PersistenceError(DocProcessorError):
    """Raised when the session could not be written to storage."""


class CorruptSessionError(DocProcessorError):
    """Raised when a persisted session cannot be read back."""
