"""
Gemini Backend
==============

Model calls via the Google Gemini API with native PDF input and
JSON-schema constrained output. The PDF is sent inline as an
``application/pdf`` part; no page rendering is needed.
"""

import logging
import os
import time
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from document_translation.validation import DocumentInput

from .base import BaseLLMBackend, LLMResponse

logger = logging.getLogger(__name__)


class GeminiRetryableError(RuntimeError):
    """Raised for Gemini API errors that are worth retrying (429, RESOURCE_EXHAUSTED)."""


class GeminiBackend(BaseLLMBackend):
    """
    Backend using the google-genai SDK.

    Environment variables:
        GEMINI_API_KEY: API key for Google Gemini
            (GOOGLE_GENERATIVE_AI_API_KEY is accepted as well)
        GEMINI_MODEL: Model to use (default: gemini-2.5-flash)
    """

    DEFAULT_MODEL = "gemini-2.5-flash"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float = 0.0,
        timeout: int = 120,
    ):
        """
        Initialize Gemini backend.

        Args:
            api_key: Gemini API key (or GEMINI_API_KEY env var)
            model: Model to use (or GEMINI_MODEL env var)
            temperature: Default temperature (0.0 for deterministic)
            timeout: Request timeout in seconds
        """
        super().__init__(name="Gemini")

        if api_key is None:
            api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GENERATIVE_AI_API_KEY")
        self.api_key = api_key
        self.model = model or os.getenv("GEMINI_MODEL", self.DEFAULT_MODEL)
        self.temperature = temperature
        self.timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the genai client."""
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def is_available(self) -> bool:
        """Check if Gemini API is configured."""
        return bool(self.api_key)

    def generate(
        self,
        prompt: str,
        *,
        document: DocumentInput | None = None,
        response_schema: dict[str, Any] | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Run one Gemini call.

        Args:
            prompt: Instruction text
            document: Optional PDF sent inline before the prompt
            response_schema: JSON schema; switches the call to JSON mode
            model: Per-call model override
            temperature: Per-call temperature override
            max_output_tokens: Output token limit

        Returns:
            LLMResponse with the reply text
        """
        if not self.is_available():
            raise RuntimeError("Gemini API key not configured")

        from google.genai import types

        start_time = time.time()
        model = model or self.model

        contents: list[Any] = []
        if document is not None:
            contents.append(
                types.Part.from_bytes(data=document.data, mime_type=document.mime_type)
            )
        contents.append(prompt)

        config_kwargs: dict[str, Any] = {
            "temperature": self.temperature if temperature is None else temperature,
            "http_options": types.HttpOptions(timeout=self.timeout * 1000),
        }
        if max_output_tokens:
            config_kwargs["max_output_tokens"] = max_output_tokens
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_json_schema"] = response_schema

        response = self._call_api(model, contents, types.GenerateContentConfig(**config_kwargs))

        text = response.text or ""
        processing_time = (time.time() - start_time) * 1000

        logger.info(
            "Gemini call completed: model=%s, document=%s, chars=%d, time=%.0fms",
            model,
            document.name if document else None,
            len(text),
            processing_time,
        )

        return LLMResponse(
            text=text,
            model=model,
            backend="gemini",
            processing_time_ms=processing_time,
            metadata={"structured": response_schema is not None},
        )

    @retry(
        retry=retry_if_exception_type(GeminiRetryableError),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, min=5, max=60),
        before_sleep=lambda retry_state: logger.warning(
            "Gemini API rate limited, retrying in %.0fs (attempt %d/5)",
            retry_state.next_action.sleep,  # type: ignore[union-attr]
            retry_state.attempt_number,
        ),
        reraise=True,
    )
    def _call_api(self, model: str, contents: list[Any], config: Any) -> Any:
        """Call Gemini API with retry logic for rate limits."""
        from google.genai import errors as genai_errors

        client = self._get_client()
        try:
            return client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except genai_errors.ClientError as exc:
            if getattr(exc, "code", None) == 429 or "RESOURCE_EXHAUSTED" in str(exc):
                raise GeminiRetryableError(str(exc)) from exc
            raise
