"""
Document Parser
===============

First model call of the pipeline: extract text, structure, formatting and
metadata from a PDF in one schema-constrained request.

The model's description is merged with what the application knows for
certain (file name and size, extraction time, page count and the PDF info
dictionary from the local inspector); application facts always win.

Usage:
    parser = DocumentParser(backend=GeminiBackend())
    result = parser.parse(load_document("report.pdf"))
    print(result.metadata.language, len(result.structure.sections))
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from document_translation.backends.base import BaseLLMBackend
from document_translation.errors import ConfigurationError, EmptyExtractionError
from document_translation.inspector import PDFInspection, PDFInspector
from document_translation.models import ParserConfig
from document_translation.prompts import EXTRACTION_PROMPT
from document_translation.schema import DocumentParserResult
from document_translation.structured import request_structured
from document_translation.validation import DocumentInput, load_document

logger = logging.getLogger(__name__)


class DocumentParser:
    """Structured PDF extraction through a model backend."""

    def __init__(
        self,
        backend: BaseLLMBackend,
        config: ParserConfig | None = None,
        inspector: PDFInspector | None = None,
    ):
        self.backend = backend
        self.config = config or ParserConfig()
        self.inspector = inspector or PDFInspector()

    def parse_file(self, path: Path | str) -> DocumentParserResult:
        """Load, validate and parse a PDF from disk."""
        return self.parse(load_document(path))

    def parse(self, document: DocumentInput) -> DocumentParserResult:
        """
        Extract a structured description of the document.

        Args:
            document: Validated input document

        Returns:
            DocumentParserResult with application-owned metadata applied

        Raises:
            ConfigurationError: If the backend is not configured
            DocumentValidationError: If the PDF cannot be opened
            SchemaValidationError: If the model reply cannot be validated
            EmptyExtractionError: If no meaningful text was extracted
        """
        if not self.backend.is_available():
            raise ConfigurationError(f"{self.backend.name} API key not configured")

        inspection = self.inspector.inspect(document.data)

        result, response = request_structured(
            self.backend,
            EXTRACTION_PROMPT,
            DocumentParserResult,
            document=document,
            repair_attempts=self.config.schema_repair_attempts,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
        )

        result = self._apply_document_facts(result, document, inspection)

        if len(result.extracted_text) < self.config.min_text_length:
            raise EmptyExtractionError(
                "Could not extract meaningful text from the PDF. The document "
                "may be empty, corrupted, or contain only images."
            )

        logger.info(
            "Parsed %s: model=%s, pages=%d, sections=%d, language=%s, time=%.0fms",
            document.name,
            response.model,
            result.metadata.page_count,
            len(result.structure.sections),
            result.metadata.language,
            response.processing_time_ms,
        )
        return result

    def _apply_document_facts(
        self,
        result: DocumentParserResult,
        document: DocumentInput,
        inspection: PDFInspection,
    ) -> DocumentParserResult:
        """Overwrite model guesses with facts read from the file itself."""
        text = result.extracted_text.strip()
        metadata = result.metadata

        metadata_updates = {
            "filename": document.name,
            "file_size": document.size,
            "extracted_at": datetime.now(timezone.utc).isoformat(),
            "page_count": inspection.page_count,
            "has_form_fields": inspection.has_form_fields,
            "has_images": metadata.has_images or inspection.has_images,
            "is_scanned": inspection.is_scanned,
            "pdf_version": inspection.pdf_version or metadata.pdf_version,
            "producer": inspection.producer or metadata.producer,
            "title": metadata.title or inspection.title,
            "author": metadata.author or inspection.author,
            "subject": metadata.subject or inspection.subject,
            "keywords": metadata.keywords or inspection.keywords or None,
            "creation_date": inspection.creation_date or metadata.creation_date,
            "last_modified": inspection.last_modified or metadata.last_modified,
            "word_count": metadata.word_count or len(text.split()),
            "character_count": metadata.character_count or len(text),
        }
        if metadata.language:
            metadata_updates["language"] = metadata.language.strip().lower()

        structure = result.structure.model_copy(
            update={"total_pages": inspection.page_count}
        )
        layout = result.formatting.layout
        if inspection.page_count and layout.orientation != inspection.orientation:
            logger.debug(
                "Orientation corrected from %s to %s",
                layout.orientation,
                inspection.orientation,
            )
            formatting = result.formatting.model_copy(
                update={
                    "layout": layout.model_copy(
                        update={"orientation": inspection.orientation}
                    )
                }
            )
        else:
            formatting = result.formatting

        return result.model_copy(
            update={
                "extracted_text": text,
                "structure": structure,
                "formatting": formatting,
                "metadata": metadata.model_copy(update=metadata_updates),
            }
        )
