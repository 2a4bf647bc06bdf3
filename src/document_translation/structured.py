"""
Structured Model Calls
======================

One helper for every schema-constrained call: send the prompt with the
response schema, decode the reply (fences, JSON repair), validate it
(schema repair), and re-ask the model with the validation errors when the
reply is still unusable.
"""

import json
import logging
from typing import TypeVar

from pydantic import BaseModel

from document_translation.backends.base import BaseLLMBackend, LLMResponse
from document_translation.errors import (
    DocumentTranslationError,
    SchemaValidationError,
    classify_api_error,
)
from document_translation.json_repair import safe_json_parse
from document_translation.prompts import SCHEMA_REPAIR_PROMPT, bullet_list
from document_translation.schema import parse_model_payload, response_schema
from document_translation.validation import DocumentInput

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Previous reply is truncated in the re-ask prompt
_MAX_ECHO_CHARS = 20000


def request_structured(
    backend: BaseLLMBackend,
    prompt: str,
    model_cls: type[M],
    *,
    document: DocumentInput | None = None,
    repair_attempts: int = 1,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    model: str | None = None,
) -> tuple[M, LLMResponse]:
    """
    Run a model call whose reply must validate against ``model_cls``.

    Args:
        backend: Model backend
        prompt: Instruction text
        model_cls: Schema model for the reply
        document: Optional PDF attached to the first request
        repair_attempts: Re-asks allowed after an invalid reply
        temperature: Temperature override
        max_output_tokens: Output token limit
        model: Model override

    Returns:
        Tuple of (validated model, last raw response)

    Raises:
        SchemaValidationError: If no reply validates
        DocumentTranslationError: If the backend call fails
    """
    schema = response_schema(model_cls)
    current_prompt = prompt
    attempts = repair_attempts + 1
    errors: list[str] = []

    for attempt in range(1, attempts + 1):
        response = _call(
            backend,
            current_prompt,
            document=document if attempt == 1 else None,
            response_schema=schema,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            model=model,
        )

        try:
            data, was_repaired = safe_json_parse(response.text)
            if was_repaired:
                logger.info("%s reply needed JSON repair", model_cls.__name__)
            return parse_model_payload(model_cls, data), response
        except json.JSONDecodeError as e:
            errors = [f"Invalid JSON: {e}"]
        except SchemaValidationError as e:
            errors = e.errors

        if attempt == attempts:
            break

        logger.warning(
            "%s reply invalid (attempt %d/%d), asking model to repair: %s",
            model_cls.__name__,
            attempt,
            attempts,
            "; ".join(errors[:3]),
        )
        current_prompt = SCHEMA_REPAIR_PROMPT.format(
            errors=bullet_list(errors[:20]),
            previous=response.text[:_MAX_ECHO_CHARS],
        )

    raise SchemaValidationError(
        f"Model response does not match {model_cls.__name__} schema",
        errors=errors,
    )


def _call(backend: BaseLLMBackend, prompt: str, **kwargs) -> LLMResponse:
    try:
        return backend.generate(prompt, **kwargs)
    except DocumentTranslationError:
        raise
    except Exception as e:
        error = classify_api_error(e)
        logger.error("%s call failed: %s", backend.name, e)
        raise error from e
