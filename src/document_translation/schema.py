"""
Structured Response Schemas
===========================

Pydantic models for every JSON contract between the application and the
model endpoint:

- DocumentParserResult: text, structure, formatting and metadata of a PDF
- TranslationPayload: translated text and sections
- QualityAssessment: judge score for a translation

The wire format uses camelCase keys (``extractedText``, ``pageBreaks``);
attributes are snake_case and either spelling is accepted on input.

Model output is validated with ``parse_model_payload``, which runs the
schema-driven repair in ``normalize_payload`` when the first validation
fails.

Usage:
    from document_translation.schema import DocumentParserResult, parse_model_payload

    result = parse_model_payload(DocumentParserResult, data)
    print(result.metadata.text_quality)
"""

from __future__ import annotations

import logging
import types
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from document_translation.errors import SchemaValidationError

logger = logging.getLogger(__name__)

SectionType = Literal[
    "heading", "paragraph", "list", "table", "image", "footer", "header", "caption"
]
FontWeight = Literal["normal", "bold", "light"]
FontStyle = Literal["normal", "italic", "oblique"]
Orientation = Literal["portrait", "landscape"]
TextQuality = Literal["excellent", "good", "fair", "poor"]


class SchemaModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire (camelCase) keys, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Document structure
# =============================================================================


class SectionPosition(SchemaModel):
    page: int = Field(description="Page number where this section appears")
    order: int = Field(description="Order within the page")


class Section(SchemaModel):
    type: SectionType
    level: int | None = Field(default=None, description="Heading level for headings (1-6)")
    content: str = Field(description="Text content of this section")
    position: SectionPosition


class TableOfContentsEntry(SchemaModel):
    title: str
    level: int
    page: int | None = None


class Footnote(SchemaModel):
    number: int
    content: str
    page: int


class DocumentStructure(SchemaModel):
    """Document structure and layout information for translation preservation."""

    sections: list[Section] = Field(
        description="Structured sections of the document with hierarchical information"
    )
    page_breaks: list[int] = Field(description="Page numbers where page breaks occur")
    total_pages: int = Field(description="Total number of pages in the document")
    table_of_contents: list[TableOfContentsEntry] | None = Field(
        default=None, description="Table of contents if detected"
    )
    footnotes: list[Footnote] | None = Field(
        default=None, description="Footnotes detected in the document"
    )


# =============================================================================
# Formatting
# =============================================================================


class FontInfo(SchemaModel):
    name: str = Field(description="Font family name")
    size: float = Field(description="Font size in points")
    is_used_for_headings: bool = Field(description="Whether this font is used for headings")
    is_used_for_body: bool = Field(description="Whether this font is used for body text")
    weight: FontWeight | None = None
    style: FontStyle | None = None


class TextStyles(SchemaModel):
    has_bold: bool = Field(description="Document contains bold text")
    has_italic: bool = Field(description="Document contains italic text")
    has_underline: bool = Field(description="Document contains underlined text")
    has_strikethrough: bool = Field(description="Document contains strikethrough text")
    has_highlight: bool = Field(description="Document contains highlighted text")
    has_superscript: bool = Field(description="Document contains superscript text")
    has_subscript: bool = Field(description="Document contains subscript text")


class PageMargins(SchemaModel):
    top: float | None = Field(default=None, description="Top margin in points")
    bottom: float | None = Field(default=None, description="Bottom margin in points")
    left: float | None = Field(default=None, description="Left margin in points")
    right: float | None = Field(default=None, description="Right margin in points")


class PageLayout(SchemaModel):
    columns: int = Field(description="Number of columns detected")
    has_headers: bool = Field(description="Document has header sections")
    has_footers: bool = Field(description="Document has footer sections")
    has_watermarks: bool = Field(description="Document contains watermarks")
    orientation: Orientation = Field(description="Page orientation")
    margins: PageMargins | None = Field(default=None, description="Page margin information")


class DocumentFormatting(SchemaModel):
    """Document formatting and style information essential for translation output."""

    fonts: list[FontInfo] = Field(
        description="Fonts detected in the document for format preservation"
    )
    styles: TextStyles
    layout: PageLayout


# =============================================================================
# Metadata
# =============================================================================


class DocumentMetadata(SchemaModel):
    """Comprehensive document metadata for translation workflow."""

    filename: str = Field(description="Original filename")
    file_size: int = Field(description="File size in bytes")
    extracted_at: str = Field(description="ISO timestamp when extraction was performed")
    page_count: int = Field(description="Total number of pages")

    language: str | None = Field(
        default=None,
        description="Detected primary language of the document (ISO 639-1 code)",
    )
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: list[str] | None = None

    creation_date: str | None = Field(
        default=None, description="Document creation date (ISO format) if available"
    )
    last_modified: str | None = Field(
        default=None, description="Last modification date (ISO format) if available"
    )
    pdf_version: str | None = None
    producer: str | None = None

    word_count: int | None = Field(default=None, description="Approximate word count")
    character_count: int | None = Field(default=None, description="Total character count")
    has_images: bool
    has_charts: bool
    has_tables: bool
    has_form_fields: bool

    is_scanned: bool = Field(
        description="Whether document appears to be scanned (OCR needed)"
    )
    text_quality: TextQuality
    extraction_confidence: float = Field(
        ge=0, le=1, description="Confidence score for text extraction (0-1)"
    )


class DocumentParserResult(SchemaModel):
    """Full extraction result returned by the document parser."""

    extracted_text: str = Field(
        description="Complete text content extracted from the document"
    )
    structure: DocumentStructure
    formatting: DocumentFormatting
    metadata: DocumentMetadata


class DocumentParserResponse(SchemaModel):
    """Success/error envelope around a parser or pipeline result."""

    success: bool
    data: Any | None = None
    error: str | None = None


# =============================================================================
# Translation and quality contracts
# =============================================================================


class TranslationPayload(SchemaModel):
    translated_text: str = Field(description="Complete translated text of the document")
    source_language: str = Field(description="ISO 639-1 code of the source text")
    target_language: str = Field(description="ISO 639-1 code of the translation")
    sections: list[Section] = Field(
        description="Translated sections in source order, structure unchanged"
    )
    notes: str | None = Field(default=None, description="Translator notes, if any")


class QualityAssessment(SchemaModel):
    score: float = Field(ge=0, le=1, description="Overall translation quality (0-1)")
    accuracy: float = Field(ge=0, le=1, description="Meaning preserved (0-1)")
    fluency: float = Field(ge=0, le=1, description="Natural target-language phrasing (0-1)")
    formatting_preservation: float = Field(
        ge=0, le=1, description="Structure and formatting kept intact (0-1)"
    )
    issues: list[str] = Field(description="Concrete problems found in the translation")
    summary: str | None = None


def response_schema(model_cls: type[BaseModel]) -> dict[str, Any]:
    """JSON schema (wire names) sent to the model as the response contract."""
    return model_cls.model_json_schema(by_alias=True)


# =============================================================================
# Validation / repair
# =============================================================================

M = TypeVar("M", bound=BaseModel)

_MISSING = object()

# Preferred fallbacks when a model returns an enum value outside the schema
_SAFE_ENUM_DEFAULTS = ("paragraph", "fair", "portrait", "normal")

_ENUM_SYNONYMS = {
    "title": "heading",
    "subheading": "heading",
    "subtitle": "heading",
    "text": "paragraph",
    "body": "paragraph",
    "bullet": "list",
    "list_item": "list",
    "figure": "image",
    "picture": "image",
    "regular": "normal",
    "medium": "normal",
    "semibold": "bold",
    "heavy": "bold",
    "thin": "light",
    "very good": "excellent",
    "average": "fair",
    "bad": "poor",
}


def parse_model_payload(model_cls: type[M], data: Any) -> M:
    """
    Validate decoded model output against a schema model.

    Validation is attempted as-is first. If it fails, the payload is
    normalized (see ``normalize_payload``) and validated again.

    Args:
        model_cls: Schema model to validate against
        data: Decoded JSON payload

    Returns:
        Validated model instance

    Raises:
        SchemaValidationError: If the payload is invalid even after repair
    """
    try:
        return model_cls.model_validate(data)
    except ValidationError as first_error:
        logger.info(
            "%s validation failed (%d errors), attempting repair",
            model_cls.__name__,
            first_error.error_count(),
        )

    repaired = normalize_payload(model_cls, data)
    try:
        result = model_cls.model_validate(repaired)
    except ValidationError as e:
        errors = format_validation_errors(e)
        logger.warning(
            "%s repair failed: %s", model_cls.__name__, "; ".join(errors[:5])
        )
        raise SchemaValidationError(
            f"Model response does not match {model_cls.__name__} schema",
            errors=errors,
        ) from e

    logger.info("%s payload repaired", model_cls.__name__)
    return result


def format_validation_errors(error: ValidationError) -> list[str]:
    """Flatten pydantic errors to ``path: message`` strings."""
    return [
        "{}: {}".format(".".join(str(p) for p in err["loc"]) or "<root>", err["msg"])
        for err in error.errors()
    ]


def normalize_payload(model_cls: type[BaseModel], data: Any) -> Any:
    """
    Conservatively reshape a payload towards ``model_cls``.

    - numeric strings become numbers, bool strings become bools
    - bounded numbers (e.g. confidences) are clamped into range
    - enum values are lowercased, synonyms mapped, unknown ones replaced
      by a safe default (or dropped when optional)
    - missing required booleans become False, numbers 0, strings "",
      lists [] and objects are filled recursively

    Unknown keys are left in place; pydantic ignores them.
    """
    if not isinstance(data, dict):
        return data

    out = dict(data)
    for name, field in model_cls.model_fields.items():
        key = field.alias or name
        if key not in out and name in out:
            key = name
        value = out.get(key, _MISSING)

        if value is _MISSING and not field.is_required():
            continue

        normalized = _normalize_value(field.annotation, value, field.metadata)
        if normalized is _MISSING:
            out.pop(key, None)
        else:
            out[key] = normalized
    return out


def _normalize_value(annotation: Any, value: Any, metadata: list[Any]) -> Any:
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Union or origin is types.UnionType:
        inner = [a for a in args if a is not type(None)]
        if value is _MISSING or value is None or len(inner) != 1:
            return value
        if get_origin(inner[0]) is Literal:
            candidate = _enum_candidate(value)
            return candidate if candidate in get_args(inner[0]) else None
        return _normalize_value(inner[0], value, metadata)

    if origin is Literal:
        return _normalize_enum(args, value)

    if origin is list:
        if value is _MISSING or value is None:
            return []
        if not isinstance(value, list):
            value = [value]
        item_type = args[0] if args else Any
        return [_normalize_value(item_type, item, []) for item in value]

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        if value is _MISSING or value is None:
            value = {}
        return normalize_payload(annotation, value)

    if annotation is bool:
        if value is _MISSING or value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1")
        return value

    if annotation in (int, float):
        return _normalize_number(annotation, value, metadata)

    if annotation is str:
        if value is _MISSING or value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    return value


def _enum_candidate(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    candidate = value.strip().lower()
    return _ENUM_SYNONYMS.get(candidate, candidate)


def _normalize_enum(allowed: tuple[Any, ...], value: Any) -> Any:
    candidate = _enum_candidate(value)
    if candidate in allowed:
        return candidate
    for default in _SAFE_ENUM_DEFAULTS:
        if default in allowed:
            return default
    return allowed[0]


def _normalize_number(annotation: type, value: Any, metadata: list[Any]) -> Any:
    if value is _MISSING or value is None:
        value = 0
    percent = False
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, str):
        cleaned = value.strip()
        percent = cleaned.endswith("%")
        try:
            value = float(cleaned.rstrip("%").replace(",", ""))
        except ValueError:
            return value
    if not isinstance(value, (int, float)):
        return value

    for constraint in metadata:
        lower = getattr(constraint, "ge", None)
        upper = getattr(constraint, "le", None)
        if upper is not None and value > upper:
            # Percent-style scores ("85%" or 85) on a 0-1 scale
            if upper == 1 and (percent or 2 < value <= 100):
                value = value / 100
            value = min(value, upper)
        if lower is not None and value < lower:
            value = lower

    if annotation is int:
        return int(value)
    return float(value)
