#!/usr/bin/env python3
"""
JSON Repair Module - Fix common LLM JSON generation errors

Model replies are supposed to be bare JSON, but in practice they arrive
wrapped in markdown fences, preceded by a sentence of prose, or with small
syntax slips. This module attempts to recover them before parsing:
1. Markdown code fences and surrounding prose
2. Missing commas between object properties
3. Trailing commas before closing braces
"""

import json
import re
import logging
from typing import Dict, Any, Tuple, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence.

    Example: ```json\\n{"a": 1}\\n``` → {"a": 1}
    """
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def extract_json_object(text: str) -> str:
    """
    Cut the outermost {...} span out of a reply that has prose around it.

    Returns the text unchanged when no object delimiters are found.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return text
    return text[start:end + 1]


def repair_json_text(text: str, error: Optional[json.JSONDecodeError] = None) -> str:
    """
    Attempt to repair JSON text with common LLM generation errors

    Args:
        text: Raw JSON text that failed to parse
        error: Optional JSONDecodeError with line/column information

    Returns:
        Repaired JSON text (or original if repair not possible)
    """
    original_text = text

    # Strategy 1: Fix missing commas based on error position
    if error and "Expecting ',' delimiter" in str(error):
        text = _fix_missing_comma_at_position(text, error)
        try:
            json.loads(text)
            logger.info("JSON repaired: missing comma fixed at error position")
            return text
        except json.JSONDecodeError:
            text = original_text

    # Strategy 2: Fix missing commas between object properties (pattern matching)
    text = _fix_missing_commas_pattern(text)
    try:
        json.loads(text)
        logger.info("JSON repaired: missing commas fixed via pattern matching")
        return text
    except json.JSONDecodeError:
        text = original_text

    # Strategy 3: Remove trailing commas
    text = _remove_trailing_commas(text)
    try:
        json.loads(text)
        logger.info("JSON repaired: trailing commas removed")
        return text
    except json.JSONDecodeError:
        text = original_text

    # Strategy 4: Both pattern fixes together
    text = _remove_trailing_commas(_fix_missing_commas_pattern(text))
    try:
        json.loads(text)
        logger.info("JSON repaired: missing and trailing commas fixed")
        return text
    except json.JSONDecodeError:
        pass

    logger.warning("JSON repair failed: all strategies exhausted")
    return original_text


def _fix_missing_comma_at_position(text: str, error: json.JSONDecodeError) -> str:
    """
    Fix missing comma at the specific line/column from JSONDecodeError

    Example error: Expecting ',' delimiter: line 38 column 168 (char 1298)
    """
    line_num = error.lineno
    col_num = error.colno

    lines = text.split('\n')

    if line_num < 1 or line_num > len(lines):
        logger.warning("Invalid line number %d for text with %d lines", line_num, len(lines))
        return text

    line_idx = line_num - 1
    problem_line = lines[line_idx]

    # The error points to where the comma SHOULD be; insert after the
    # previous non-whitespace character on the same line
    insert_pos = col_num - 1

    for i in range(insert_pos - 1, -1, -1):
        if i < len(problem_line) and problem_line[i] not in (' ', '\t'):
            lines[line_idx] = problem_line[:i + 1] + ',' + problem_line[i + 1:]
            logger.debug("Inserted comma at line %d, position %d", line_num, i + 1)
            return '\n'.join(lines)

    # Value starts a new line: comma goes at the end of the previous line
    if line_idx > 0:
        lines[line_idx - 1] = lines[line_idx - 1].rstrip() + ','
        logger.debug("Inserted comma at end of line %d", line_num - 1)
        return '\n'.join(lines)

    return text


def _fix_missing_commas_pattern(text: str) -> str:
    """
    Fix missing commas between object properties using pattern matching

    Pattern: }\\n\\s*"property" (missing comma after })
    Fix: },\\n\\s*"property"
    """
    # After closing brace or bracket
    text = re.sub(
        r'([\}\]])\s*\n(\s*)("[\w]+"\s*:)',
        r'\1,\n\2\3',
        text
    )

    # After string value
    text = re.sub(
        r'(")\s*\n(\s*)("[\w]+"\s*:)',
        r'\1,\n\2\3',
        text
    )

    # After number value
    text = re.sub(
        r'(\d)\s*\n(\s*)("[\w]+"\s*:)',
        r'\1,\n\2\3',
        text
    )

    # After boolean / null value
    text = re.sub(
        r'\b(true|false|null)\b\s*\n(\s*)("[\w]+"\s*:)',
        r'\1,\n\2\3',
        text
    )

    # Adjacent objects inside an array: }\n{
    text = re.sub(
        r'(\})\s*\n(\s*)(\{)',
        r'\1,\n\2\3',
        text
    )

    return text


def _remove_trailing_commas(text: str) -> str:
    """
    Remove trailing commas before closing braces/brackets

    Example: {"key": "value",} → {"key": "value"}
    """
    return re.sub(r',(\s*[\}\]])', r'\1', text)


def safe_json_parse(text: str, attempt_repair: bool = True) -> Tuple[Dict[str, Any], bool]:
    """
    Safely parse a model reply as JSON with optional repair attempt

    Args:
        text: Model reply text
        attempt_repair: If True, attempt repair on parse failure

    Returns:
        Tuple of (parsed_dict, was_repaired). Stripping fences alone
        does not count as a repair.

    Raises:
        json.JSONDecodeError: If parsing fails after all repair attempts
    """
    cleaned = strip_code_fences(text)

    try:
        return json.loads(cleaned), False
    except json.JSONDecodeError as e:
        if not attempt_repair:
            raise

        logger.info("JSON parse failed: %s", str(e)[:100])
        logger.info("Attempting JSON repair...")

        candidate = extract_json_object(cleaned)
        if candidate != cleaned:
            try:
                return json.loads(candidate), True
            except json.JSONDecodeError as inner:
                repaired_text = repair_json_text(candidate, inner)
        else:
            repaired_text = repair_json_text(cleaned, e)

        try:
            data = json.loads(repaired_text)
            return data, True
        except json.JSONDecodeError as repair_error:
            logger.error("JSON repair failed: %s", str(repair_error)[:100])
            raise e


def validate_parser_json_structure(data: Dict[str, Any]) -> bool:
    """
    Validate that parsed JSON has the document parser's top-level shape

    Expected structure:
    {
        "extractedText": "...",
        "structure": {...},
        "formatting": {...},
        "metadata": {...}
    }

    Returns:
        True if structure is valid, False otherwise
    """
    if not isinstance(data, dict):
        logger.warning("Invalid JSON structure: top level must be an object")
        return False

    required_keys = ['extractedText', 'structure', 'formatting', 'metadata']

    for key in required_keys:
        if key not in data:
            logger.warning("Invalid JSON structure: Missing required key '%s'", key)
            return False

    if not isinstance(data['structure'], dict):
        logger.warning("Invalid JSON structure: 'structure' must be an object")
        return False

    return True
