"""
Input Document Validation
=========================

Checks applied to a document before it is sent to any model endpoint:
name present, size limit, PDF mime type and ``.pdf`` extension.
"""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from document_translation.errors import DocumentValidationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_MIME_TYPES = ["application/pdf"]
SUPPORTED_FILE_EXTENSIONS = [".pdf"]


class FileValidation(BaseModel):
    """Shape of an acceptable input file."""

    name: str = Field(min_length=1)
    size: int = Field(le=MAX_FILE_SIZE)
    type: str

    @field_validator("type")
    @classmethod
    def _check_mime_type(cls, value: str) -> str:
        if value not in ALLOWED_MIME_TYPES:
            raise ValueError("Only PDF files are supported")
        return value


_FIELD_MESSAGES = {
    "name": "Filename is required",
    "size": f"File size must be less than {MAX_FILE_SIZE // 1024 // 1024}MB",
    "type": "Only PDF files are supported",
}


@dataclass
class DocumentInput:
    """A validated document ready for the parser."""

    name: str
    data: bytes
    mime_type: str = "application/pdf"

    @property
    def size(self) -> int:
        return len(self.data)


def validate_document(name: str, size: int, mime_type: str) -> None:
    """
    Validate file name, size and type.

    Args:
        name: Original filename
        size: File size in bytes
        mime_type: Declared mime type

    Raises:
        DocumentValidationError: With the first failing check's message
    """
    try:
        FileValidation(name=name, size=size, type=mime_type)
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else ""
        raise DocumentValidationError(
            _FIELD_MESSAGES.get(field, "File validation failed")
        ) from e

    if not any(name.lower().endswith(ext) for ext in SUPPORTED_FILE_EXTENSIONS):
        raise DocumentValidationError("File must have a .pdf extension")


def load_document(path: Path | str, mime_type: str | None = None) -> DocumentInput:
    """
    Read and validate a document from disk.

    Args:
        path: Path to the PDF
        mime_type: Declared mime type; guessed from the extension when omitted

    Returns:
        DocumentInput with the file bytes

    Raises:
        DocumentValidationError: If the file is missing or fails validation
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentValidationError(f"File not found: {path}")

    if mime_type is None:
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    size = path.stat().st_size
    validate_document(path.name, size, mime_type)

    logger.debug("Loaded %s (%d bytes)", path.name, size)
    return DocumentInput(name=path.name, data=path.read_bytes(), mime_type=mime_type)
