"""
Data Models for the Translation Pipeline
========================================

Configuration and result types shared by the parser, translator and
pipeline. Model-facing contracts live in ``schema``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from document_translation.config import Settings
from document_translation.schema import (
    DocumentParserResponse,
    DocumentParserResult,
    QualityAssessment,
    TranslationPayload,
)


@dataclass
class ParserConfig:
    """Configuration for DocumentParser."""

    max_output_tokens: int = 8192
    schema_repair_attempts: int = 1
    min_text_length: int = 10
    temperature: float = 0.0


@dataclass
class PipelineConfig:
    """Configuration for TranslationPipeline."""

    quality_threshold: float = 0.8
    max_translation_attempts: int = 3
    max_output_tokens: int = 8192
    translation_temperature: float = 0.2
    target_language: str = "en"
    parser: ParserConfig = field(default_factory=ParserConfig)

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            quality_threshold=settings.quality_threshold,
            max_translation_attempts=settings.max_translation_attempts,
            max_output_tokens=settings.max_output_tokens,
            target_language=settings.target_language,
            parser=ParserConfig(
                max_output_tokens=settings.max_output_tokens,
                schema_repair_attempts=settings.schema_repair_attempts,
            ),
        )


@dataclass
class TranslationAttempt:
    """One translate-and-score round."""

    attempt: int  # 1-indexed
    score: float
    issues: list[str] = field(default_factory=list)
    processing_time_ms: float = 0.0


@dataclass
class PipelineResult:
    """Result from TranslationPipeline.run()."""

    success: bool
    file_name: str
    target_language: str
    document: DocumentParserResult | None = None
    translation: TranslationPayload | None = None
    quality: QualityAssessment | None = None
    attempts: list[TranslationAttempt] = field(default_factory=list)
    passed_threshold: bool = False
    processing_time_ms: float = 0.0
    error: str | None = None
    status_code: int = 200

    @property
    def score(self) -> float:
        return self.quality.score if self.quality else 0.0

    def to_response(self) -> DocumentParserResponse:
        """Wrap the result in the success/data/error envelope."""
        if not self.success:
            return DocumentParserResponse(success=False, error=self.error)

        data: dict[str, Any] = {
            "fileName": self.file_name,
            "targetLanguage": self.target_language,
            "document": self.document.to_wire() if self.document else None,
            "translation": self.translation.to_wire() if self.translation else None,
            "quality": self.quality.to_wire() if self.quality else None,
            "attempts": [
                {
                    "attempt": a.attempt,
                    "score": a.score,
                    "issues": a.issues,
                    "processingTimeMs": a.processing_time_ms,
                }
                for a in self.attempts
            ],
            "passedThreshold": self.passed_threshold,
            "processingTimeMs": self.processing_time_ms,
        }
        return DocumentParserResponse(success=True, data=data)
