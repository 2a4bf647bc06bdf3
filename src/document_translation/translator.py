"""
Translator
==========

Second model call of the pipeline: translate the parsed sections while
keeping their structure, so the formatting metadata from the parser still
applies to the translated text.
"""

import logging

from document_translation.backends.base import BaseLLMBackend
from document_translation.errors import SchemaValidationError
from document_translation.languages import get_language, language_name, normalize_language_code
from document_translation.prompts import (
    TRANSLATION_FEEDBACK,
    TRANSLATION_PROMPT,
    bullet_list,
    sections_json,
)
from document_translation.schema import DocumentParserResult, Section, TranslationPayload
from document_translation.structured import request_structured

logger = logging.getLogger(__name__)


class Translator:
    """Section-preserving document translation through a model backend."""

    def __init__(
        self,
        backend: BaseLLMBackend,
        temperature: float = 0.2,
        max_output_tokens: int | None = 8192,
        schema_repair_attempts: int = 1,
    ):
        self.backend = backend
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.schema_repair_attempts = schema_repair_attempts

    def translate(
        self,
        parsed: DocumentParserResult,
        target_language: str,
        source_language: str | None = None,
        feedback: list[str] | None = None,
    ) -> TranslationPayload:
        """
        Translate a parsed document.

        Args:
            parsed: Parser result to translate
            target_language: ISO 639-1 target code
            source_language: Source code; defaults to the detected document language
            feedback: Reviewer issues from a rejected previous attempt

        Returns:
            TranslationPayload whose sections mirror the source structure

        Raises:
            DocumentValidationError: If the target language is unsupported
            SchemaValidationError: If the reply is invalid or drops sections
        """
        target = get_language(target_language)
        source_code = source_language or parsed.metadata.language
        source_code = normalize_language_code(source_code) if source_code else None

        if source_code == target.code:
            logger.info("Source and target language are both %s", target.code)

        if source_code:
            source_instruction = f'"{source_code}"'
        else:
            source_instruction = "ISO 639-1 code of the language you detected in the source"

        sections = self._source_sections(parsed)
        prompt = TRANSLATION_PROMPT.format(
            source=language_name(source_code) if source_code else "its original language",
            target=target.name,
            target_code=target.code,
            source_instruction=source_instruction,
            feedback=(
                TRANSLATION_FEEDBACK.format(issues=bullet_list(feedback))
                if feedback
                else ""
            ),
            sections=sections_json(sections),
        )

        payload, response = request_structured(
            self.backend,
            prompt,
            TranslationPayload,
            repair_attempts=self.schema_repair_attempts,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

        payload = self._restore_structure(payload, sections, target.code, source_code)

        logger.info(
            "Translated %d sections %s -> %s: model=%s, time=%.0fms",
            len(payload.sections),
            payload.source_language,
            payload.target_language,
            response.model,
            response.processing_time_ms,
        )
        return payload

    def _source_sections(self, parsed: DocumentParserResult) -> list[Section]:
        """Sections to translate; the whole text as one paragraph if none were found."""
        if parsed.structure.sections:
            return list(parsed.structure.sections)
        return [
            Section(
                type="paragraph",
                content=parsed.extracted_text,
                position={"page": 1, "order": 1},
            )
        ]

    def _restore_structure(
        self,
        payload: TranslationPayload,
        sections: list[Section],
        target_code: str,
        source_code: str | None,
    ) -> TranslationPayload:
        """Re-apply source type/level/position onto the translated sections."""
        if len(payload.sections) != len(sections):
            raise SchemaValidationError(
                "Translation changed the number of sections",
                errors=[
                    f"sections: expected {len(sections)} items, got {len(payload.sections)}"
                ],
            )

        restored = [
            source.model_copy(update={"content": translated.content})
            for source, translated in zip(sections, payload.sections)
        ]

        translated_text = payload.translated_text.strip() or "\n\n".join(
            s.content for s in restored
        )

        return payload.model_copy(
            update={
                "sections": restored,
                "translated_text": translated_text,
                "target_language": target_code,
                "source_language": source_code
                or normalize_language_code(payload.source_language),
            }
        )
