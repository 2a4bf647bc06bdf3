"""
Prompt Templates
================

Prompts for the three model calls (extract, translate, score) and the
schema-repair re-ask. All replies are constrained by a JSON schema, so the
prompts describe intent and rules only, never the output shape.
"""

import json
from typing import Any, Iterable

EXTRACTION_PROMPT = """Extract all text content from this PDF document and describe its structure.

Rules:
- extractedText: the complete text, all pages in reading order, clean and readable
- structure.sections: one entry per heading, paragraph, list, table, image,
  header, footer or caption, with its page number and order within the page
- Heading levels go from 1 (top) to 6
- formatting: fonts, text styles and page layout as they appear, for later
  reconstruction of the translated document
- metadata.language: primary language as an ISO 639-1 code
- metadata.isScanned: true if the pages look like scanned images
- metadata.textQuality and metadata.extractionConfidence: your honest assessment
- Do not translate, summarize or correct the text"""

SCHEMA_REPAIR_PROMPT = """Your previous reply did not match the required JSON schema.

Validation errors:
{errors}

Previous reply:
{previous}

Return the corrected JSON object only. Keep all content that was valid."""

TRANSLATION_PROMPT = """Translate the following document from {source} into {target}.

Rules:
- Translate every section; return the sections in the same order
- Keep each section's type, level and position unchanged
- Keep numbers, dates, URLs, email addresses, code and proper names as they are
- Keep list markers and table cell separators (|) in place
- translatedText is the full translation in reading order
- sourceLanguage: {source_instruction}
- targetLanguage: "{target_code}"
{feedback}
Document sections (JSON):
{sections}"""

TRANSLATION_FEEDBACK = """
A previous translation was rejected by the reviewer. Fix these issues:
{issues}
"""

QUALITY_PROMPT = """You are reviewing a translation from {source} into {target}.

Score each aspect between 0 and 1:
- accuracy: meaning of the source fully preserved, nothing added or omitted
- fluency: natural, grammatical {target}
- formattingPreservation: sections, lists, tables, numbers and names kept intact
- score: overall quality

List concrete issues (one sentence each) that a translator could fix.
Return an empty issues list if there is nothing to fix.

Source sections (JSON):
{source_sections}

Translated sections (JSON):
{translated_sections}"""


def sections_json(sections: Iterable[Any]) -> str:
    """Serialize schema sections with wire names for a prompt."""
    return json.dumps(
        [s.to_wire() for s in sections],
        ensure_ascii=False,
        indent=1,
    )


def bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)
