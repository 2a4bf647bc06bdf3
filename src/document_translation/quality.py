"""
Quality Scorer
==============

Third model call of the pipeline: a reviewer model scores the translation.
Its judgment is combined with cheap local checks that catch failures the
model tends to overlook (untranslated text, dropped numbers or URLs).
"""

import json
import logging
import re

from document_translation.backends.base import BaseLLMBackend
from document_translation.languages import language_name
from document_translation.prompts import QUALITY_PROMPT, sections_json
from document_translation.schema import (
    DocumentParserResult,
    QualityAssessment,
    TranslationPayload,
)
from document_translation.structured import request_structured

logger = logging.getLogger(__name__)

CRITICAL_PENALTY = 0.3
WARNING_PENALTY = 0.1

_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)*")
_URL_RE = re.compile(r"https?://\S+|www\.\S+")


def check_translation(
    parsed: DocumentParserResult, translation: TranslationPayload
) -> list[tuple[str, str]]:
    """
    Local structural checks.

    Returns:
        List of (severity, message) with severity "critical" or "warning"
    """
    issues: list[tuple[str, str]] = []
    source_text = parsed.extracted_text
    translated_text = translation.translated_text

    if not translated_text.strip():
        return [("critical", "Translation is empty")]

    source_count = len(parsed.structure.sections) or 1
    if len(translation.sections) != source_count:
        issues.append((
            "critical",
            f"Section count changed: {source_count} in source, "
            f"{len(translation.sections)} in translation",
        ))

    if (
        translation.source_language
        and translation.source_language != translation.target_language
        and _normalize_ws(translated_text) == _normalize_ws(source_text)
    ):
        issues.append(("critical", "Text was returned untranslated"))

    missing_numbers = _digits(source_text) - _digits(translated_text)
    if missing_numbers:
        sample = ", ".join(sorted(missing_numbers)[:5])
        issues.append(("warning", f"Numbers missing from translation: {sample}"))

    missing_urls = set(_URL_RE.findall(source_text)) - set(_URL_RE.findall(translated_text))
    if missing_urls:
        sample = ", ".join(sorted(missing_urls)[:3])
        issues.append(("warning", f"URLs missing from translation: {sample}"))

    return issues


def _normalize_ws(text: str) -> str:
    return " ".join(text.split())


def _digits(text: str) -> set[str]:
    # Separator style may legitimately change between languages
    return {re.sub(r"[.,]", "", n) for n in _NUMBER_RE.findall(text)}


class QualityScorer:
    """Model-judged translation quality with local structural checks."""

    def __init__(
        self,
        backend: BaseLLMBackend,
        max_output_tokens: int | None = 2048,
        schema_repair_attempts: int = 1,
    ):
        self.backend = backend
        self.max_output_tokens = max_output_tokens
        self.schema_repair_attempts = schema_repair_attempts

    def score(
        self, parsed: DocumentParserResult, translation: TranslationPayload
    ) -> QualityAssessment:
        """
        Score a translation of a parsed document.

        The model assessment is lowered by a fixed penalty per local finding
        (critical 0.3, warning 0.1); findings are appended to ``issues``.
        An empty translation scores 0 without a model call.
        """
        local_issues = check_translation(parsed, translation)

        if any(msg == "Translation is empty" for _, msg in local_issues):
            return QualityAssessment(
                score=0.0,
                accuracy=0.0,
                fluency=0.0,
                formatting_preservation=0.0,
                issues=[msg for _, msg in local_issues],
                summary="Empty translation",
            )

        prompt = QUALITY_PROMPT.format(
            source=language_name(translation.source_language),
            target=language_name(translation.target_language),
            source_sections=(
                sections_json(parsed.structure.sections)
                if parsed.structure.sections
                else json.dumps(parsed.extracted_text, ensure_ascii=False)
            ),
            translated_sections=sections_json(translation.sections),
        )

        assessment, response = request_structured(
            self.backend,
            prompt,
            QualityAssessment,
            repair_attempts=self.schema_repair_attempts,
            temperature=0.0,
            max_output_tokens=self.max_output_tokens,
        )

        penalty = sum(
            CRITICAL_PENALTY if severity == "critical" else WARNING_PENALTY
            for severity, _ in local_issues
        )
        final_score = min(1.0, max(0.0, assessment.score - penalty))

        logger.info(
            "Quality scored: model=%.2f, local_findings=%d, final=%.2f, model=%s",
            assessment.score,
            len(local_issues),
            final_score,
            response.model,
        )

        return assessment.model_copy(
            update={
                "score": final_score,
                "issues": list(assessment.issues) + [msg for _, msg in local_issues],
            }
        )
