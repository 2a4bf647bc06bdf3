"""
Error Types
===========

Exception hierarchy shared by the parser, translator and pipeline.

Every error carries the status code a caller would surface to its own
client (the envelope helpers below use it), so that model-side failures,
bad input and configuration problems stay distinguishable.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from document_translation.schema import DocumentParserResponse

# HTTP 429 at the start of a message, after a colon or in parentheses
_RATE_LIMIT_STATUS_RE = re.compile(r"(?:^|:\s*|\()429\b")


class DocumentTranslationError(Exception):
    """Base error for document extraction and translation."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class DocumentValidationError(DocumentTranslationError):
    """Input document rejected before any model call."""

    status_code = 400


class ConfigurationError(DocumentTranslationError):
    """Backend or settings are missing or invalid."""

    status_code = 500


class EmptyExtractionError(DocumentTranslationError):
    """The model returned no meaningful text for the document."""

    status_code = 422


class SchemaValidationError(DocumentTranslationError):
    """Model response does not match the expected schema, even after repair."""

    status_code = 502

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ModelAPIError(DocumentTranslationError):
    """Remote model call failed."""

    status_code = 500


def classify_api_error(exc: BaseException) -> DocumentTranslationError:
    """
    Map a raw exception from a model SDK or HTTP client to a typed error.

    Matching is done on the exception message since the SDKs do not share
    an exception hierarchy.

    Args:
        exc: Exception raised while talking to the model endpoint

    Returns:
        DocumentTranslationError with a user-facing message and status code
    """
    if isinstance(exc, DocumentTranslationError):
        return exc

    message = str(exc)
    lowered = message.lower()

    if "api key" in lowered:
        return ModelAPIError("API authentication failed", status_code=401)

    if (
        "quota" in lowered
        or "rate limit" in lowered
        or "resource_exhausted" in lowered
        or "too many requests" in lowered
        or _RATE_LIMIT_STATUS_RE.search(message)
    ):
        return ModelAPIError(
            "Service temporarily unavailable. Please try again later.",
            status_code=503,
        )

    if "timeout" in lowered or "timed out" in lowered:
        return ModelAPIError(
            "Document processing timed out. Please try with a smaller file.",
            status_code=408,
        )

    return ModelAPIError(f"Processing failed: {message}", status_code=500)


def error_response(exc: BaseException) -> tuple[DocumentParserResponse, int]:
    """Build a failure envelope and status code for any exception."""
    from document_translation.schema import DocumentParserResponse

    error = classify_api_error(exc)
    return DocumentParserResponse(success=False, error=error.message), error.status_code
