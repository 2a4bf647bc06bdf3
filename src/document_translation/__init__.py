"""
Document Translation
====================

Structured PDF extraction and translation on top of hosted language models.

Features:
- Schema-validated extraction of text, sections, formatting and metadata
- JSON and schema repair for imperfect model replies
- Section-preserving translation
- Model-judged quality score with a re-translation loop

Basic Usage:
    from document_translation import (
        Settings, TranslationPipeline, configure_logging, load_document,
    )

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    pipeline = TranslationPipeline.from_settings(settings)
    result = pipeline.run(load_document("report.pdf"), target_language="de")
    print(result.translation.translated_text)

Extraction Only:
    from document_translation import DocumentParser
    from document_translation.backends import GeminiBackend

    parser = DocumentParser(backend=GeminiBackend(api_key="..."))
    parsed = parser.parse_file("report.pdf")
    print(parsed.metadata.language, parsed.structure.total_pages)
"""

__version__ = "0.1.0"

from .config import Settings, configure_logging
from .errors import (
    ConfigurationError,
    DocumentTranslationError,
    DocumentValidationError,
    EmptyExtractionError,
    ModelAPIError,
    SchemaValidationError,
    classify_api_error,
    error_response,
)
from .inspector import PDFInspection, PDFInspector, PDFType
from .models import ParserConfig, PipelineConfig, PipelineResult, TranslationAttempt
from .parser import DocumentParser
from .pipeline import TranslationPipeline
from .quality import QualityScorer
from .schema import (
    DocumentParserResponse,
    DocumentParserResult,
    QualityAssessment,
    TranslationPayload,
)
from .translator import Translator
from .validation import DocumentInput, load_document, validate_document

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "configure_logging",
    "ParserConfig",
    "PipelineConfig",
    # Errors
    "DocumentTranslationError",
    "DocumentValidationError",
    "ConfigurationError",
    "EmptyExtractionError",
    "SchemaValidationError",
    "ModelAPIError",
    "classify_api_error",
    "error_response",
    # Input
    "DocumentInput",
    "load_document",
    "validate_document",
    "PDFInspector",
    "PDFInspection",
    "PDFType",
    # Schemas
    "DocumentParserResult",
    "DocumentParserResponse",
    "TranslationPayload",
    "QualityAssessment",
    # Pipeline
    "DocumentParser",
    "Translator",
    "QualityScorer",
    "TranslationPipeline",
    "PipelineResult",
    "TranslationAttempt",
]
