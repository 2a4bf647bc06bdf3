"""
Translation Pipeline
====================

Extract → translate → score, re-translating with the reviewer's issues as
feedback while the score stays below the threshold.

Usage:
    pipeline = TranslationPipeline(backend=GeminiBackend())
    result = pipeline.run(load_document("report.pdf"), target_language="de")
    print(result.score, result.translation.translated_text)
"""

import logging
import time
from pathlib import Path

from document_translation.backends import create_backend
from document_translation.backends.base import BaseLLMBackend
from document_translation.config import Settings
from document_translation.errors import (
    DocumentTranslationError,
    SchemaValidationError,
    classify_api_error,
)
from document_translation.languages import get_language
from document_translation.models import PipelineConfig, PipelineResult, TranslationAttempt
from document_translation.parser import DocumentParser
from document_translation.quality import QualityScorer
from document_translation.schema import (
    DocumentParserResult,
    QualityAssessment,
    TranslationPayload,
)
from document_translation.translator import Translator
from document_translation.validation import DocumentInput, load_document

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """Three-call extraction and translation pipeline with a quality retry loop."""

    def __init__(
        self,
        backend: BaseLLMBackend,
        config: PipelineConfig | None = None,
        parser: DocumentParser | None = None,
        translator: Translator | None = None,
        scorer: QualityScorer | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            backend: Model backend shared by all three steps
            config: Pipeline configuration
            parser: Optional parser override
            translator: Optional translator override
            scorer: Optional quality scorer override
        """
        self.backend = backend
        self.config = config or PipelineConfig()
        repair_attempts = self.config.parser.schema_repair_attempts
        self.parser = parser or DocumentParser(backend, config=self.config.parser)
        self.translator = translator or Translator(
            backend,
            temperature=self.config.translation_temperature,
            max_output_tokens=self.config.max_output_tokens,
            schema_repair_attempts=repair_attempts,
        )
        self.scorer = scorer or QualityScorer(
            backend, schema_repair_attempts=repair_attempts
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TranslationPipeline":
        """Build a pipeline from environment settings."""
        settings = settings or Settings.from_env()
        backend = create_backend(settings.backend, model=settings.model)
        return cls(backend, config=PipelineConfig.from_settings(settings))

    def run_file(
        self, path: Path | str, target_language: str | None = None
    ) -> PipelineResult:
        return self.run(load_document(path), target_language)

    def run(
        self, document: DocumentInput, target_language: str | None = None
    ) -> PipelineResult:
        """
        Parse, translate and score a document.

        Args:
            document: Validated input document
            target_language: ISO 639-1 target code; defaults to the configured one

        Returns:
            PipelineResult holding the best-scoring translation attempt

        Raises:
            DocumentTranslationError: On any failure of the three steps
        """
        start_time = time.time()
        target_code = get_language(target_language or self.config.target_language).code

        parsed = self.parser.parse(document)

        best_translation, best_quality, attempts = self._translate_until_accepted(
            parsed, target_code
        )

        processing_time = (time.time() - start_time) * 1000
        passed = best_quality.score >= self.config.quality_threshold

        if not passed:
            logger.warning(
                "%s: best score %.2f below threshold %.2f after %d attempts",
                document.name,
                best_quality.score,
                self.config.quality_threshold,
                len(attempts),
            )

        return PipelineResult(
            success=True,
            file_name=document.name,
            target_language=target_code,
            document=parsed,
            translation=best_translation,
            quality=best_quality,
            attempts=attempts,
            passed_threshold=passed,
            processing_time_ms=processing_time,
        )

    def run_safe(
        self, document: DocumentInput, target_language: str | None = None
    ) -> PipelineResult:
        """Like ``run``, but failures are returned as an unsuccessful result."""
        try:
            return self.run(document, target_language)
        except Exception as e:
            error = classify_api_error(e)
            if isinstance(e, DocumentTranslationError):
                logger.warning("Pipeline failed for %s: %s", document.name, error.message)
            else:
                logger.exception("Pipeline failed for %s", document.name)
            return PipelineResult(
                success=False,
                file_name=document.name,
                target_language=target_language or self.config.target_language,
                error=error.message,
                status_code=error.status_code,
            )

    def _translate_until_accepted(
        self, parsed: DocumentParserResult, target_code: str
    ) -> tuple[TranslationPayload, QualityAssessment, list[TranslationAttempt]]:
        """
        Translate and score until the threshold is met or attempts run out.

        Returns:
            Tuple of (best translation, its assessment, all attempts).
            Ties keep the earlier attempt. A failed call after an attempt
            was scored ends the loop and keeps that attempt.

        Raises:
            SchemaValidationError: If no attempt produced a usable translation
            DocumentTranslationError: If a call fails before any attempt was scored
        """
        attempts: list[TranslationAttempt] = []
        best: tuple[TranslationPayload, QualityAssessment] | None = None
        feedback: list[str] | None = None

        last_error: SchemaValidationError | None = None

        for attempt in range(1, self.config.max_translation_attempts + 1):
            attempt_start = time.time()

            try:
                translation = self.translator.translate(
                    parsed, target_code, feedback=feedback
                )
            except SchemaValidationError as e:
                # An unusable reply counts as a failed attempt, not a failed run
                last_error = e
                issues = e.errors or [e.message]
                attempts.append(
                    TranslationAttempt(
                        attempt=attempt,
                        score=0.0,
                        issues=issues,
                        processing_time_ms=(time.time() - attempt_start) * 1000,
                    )
                )
                logger.warning(
                    "Translation attempt %d/%d rejected: %s",
                    attempt,
                    self.config.max_translation_attempts,
                    e.message,
                )
                feedback = issues
                continue
            except DocumentTranslationError as e:
                if best is None:
                    raise
                self._record_interrupted(attempts, attempt, attempt_start, e)
                break

            try:
                quality = self.scorer.score(parsed, translation)
            except DocumentTranslationError as e:
                if best is None:
                    raise
                self._record_interrupted(attempts, attempt, attempt_start, e)
                break

            attempts.append(
                TranslationAttempt(
                    attempt=attempt,
                    score=quality.score,
                    issues=list(quality.issues),
                    processing_time_ms=(time.time() - attempt_start) * 1000,
                )
            )
            logger.info(
                "Translation attempt %d/%d scored %.2f (threshold %.2f)",
                attempt,
                self.config.max_translation_attempts,
                quality.score,
                self.config.quality_threshold,
            )

            if best is None or quality.score > best[1].score:
                best = (translation, quality)

            if quality.score >= self.config.quality_threshold:
                break

            feedback = list(quality.issues) or [
                f"Overall quality score {quality.score:.2f} is too low; "
                "translate more accurately and fluently."
            ]

        if best is None:
            raise last_error or SchemaValidationError(
                "No translation attempt produced a usable result"
            )
        return best[0], best[1], attempts

    def _record_interrupted(
        self,
        attempts: list[TranslationAttempt],
        attempt: int,
        attempt_start: float,
        error: DocumentTranslationError,
    ) -> None:
        """Record a retry round that failed after a scored attempt exists."""
        attempts.append(
            TranslationAttempt(
                attempt=attempt,
                score=0.0,
                issues=[error.message],
                processing_time_ms=(time.time() - attempt_start) * 1000,
            )
        )
        logger.warning(
            "Translation attempt %d/%d failed, keeping best scored attempt: %s",
            attempt,
            self.config.max_translation_attempts,
            error.message,
        )
