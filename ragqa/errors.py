"""
Service error types.
Each carries the HTTP status it maps to; main.py renders them as
{"success": false, "error": <message>}.
"""


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(ServiceError):
    """Missing or malformed request fields."""

    status_code = 400


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

    status_code = 404


class PdfExtractionError(InvalidRequestError):
    """Uploaded file could not be read as a PDF or holds too little text."""


class UpstreamError(ServiceError):
    """An external AI provider call failed or returned something unusable."""

    status_code = 500


class EmbeddingError(UpstreamError):
    pass


class SynthesisError(UpstreamError):
    pass


class ParseError(UpstreamError):
    """LLM output was not valid JSON of the expected shape."""
