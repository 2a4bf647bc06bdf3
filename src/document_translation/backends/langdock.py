"""
Langdock Backend
================

Model calls via the Langdock assistant API (Claude, GPT, Gemini hosted in
the EU). Documents are uploaded as attachments first. Langdock has no
structured-output switch, so the JSON schema is embedded in the prompt and
the reply goes through the JSON repair path like any other.
"""

import json
import logging
import os
import time
from typing import Optional, Dict, Any

import requests

from document_translation.validation import DocumentInput

from .base import BaseLLMBackend, LLMResponse

logger = logging.getLogger(__name__)


class LangdockBackend(BaseLLMBackend):
    """
    Backend using the Langdock assistant completions API.

    Environment variables:
        LANGDOCK_API_KEY: API key for Langdock
        LANGDOCK_UPLOAD_URL: Upload endpoint (default: https://api.langdock.com/attachment/v1/upload)
        LANGDOCK_ASSISTANT_URL: Chat completions endpoint
        LANGDOCK_MODEL: Model to use (default: claude-sonnet-4-5)
    """

    DEFAULT_UPLOAD_URL = "https://api.langdock.com/attachment/v1/upload"
    DEFAULT_ASSISTANT_URL = "https://api.langdock.com/assistant/v1/chat/completions"
    DEFAULT_MODEL = "claude-sonnet-4-5@20250929"

    INSTRUCTIONS = (
        "You are a precise document processing assistant. "
        "When a JSON schema is given, reply with a single JSON object that "
        "follows it and nothing else."
    )

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        upload_url: Optional[str] = None,
        assistant_url: Optional[str] = None,
        temperature: float = 0.0,
        timeout: int = 120,
    ):
        """
        Initialize Langdock backend.

        Args:
            api_key: Langdock API key (or LANGDOCK_API_KEY env var)
            model: Model to use (or LANGDOCK_MODEL env var)
            upload_url: Upload endpoint URL
            assistant_url: Chat completions endpoint URL
            temperature: Default temperature (0.0 for deterministic)
            timeout: Request timeout in seconds
        """
        super().__init__(name="Langdock")

        self.api_key = api_key or os.getenv("LANGDOCK_API_KEY")
        self.model = model or os.getenv("LANGDOCK_MODEL", self.DEFAULT_MODEL)
        self.upload_url = upload_url or os.getenv("LANGDOCK_UPLOAD_URL", self.DEFAULT_UPLOAD_URL)
        self.assistant_url = assistant_url or os.getenv("LANGDOCK_ASSISTANT_URL", self.DEFAULT_ASSISTANT_URL)
        self.temperature = temperature
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if Langdock API is configured."""
        return bool(self.api_key)

    def generate(
        self,
        prompt: str,
        *,
        document: Optional[DocumentInput] = None,
        response_schema: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Run one Langdock call.

        Args:
            prompt: Instruction text
            document: Optional PDF uploaded as an attachment
            response_schema: JSON schema appended to the prompt
            model: Per-call model override
            temperature: Per-call temperature override
            max_output_tokens: Output token limit

        Returns:
            LLMResponse with the reply text
        """
        if not self.is_available():
            raise RuntimeError("Langdock API key not configured")

        start_time = time.time()
        model = model or self.model

        attachment_ids = []
        if document is not None:
            attachment_ids.append(self._upload(document))

        if response_schema is not None:
            prompt = (
                f"{prompt}\n\nRespond with JSON matching this schema:\n"
                f"{json.dumps(response_schema, ensure_ascii=False)}"
            )

        assistant: Dict[str, Any] = {
            "name": "Document-Assistant",
            "model": model,
            "temperature": self.temperature if temperature is None else temperature,
            "instructions": self.INSTRUCTIONS,
        }
        if max_output_tokens:
            assistant["maxTokens"] = max_output_tokens

        message: Dict[str, Any] = {"role": "user", "content": prompt}
        if attachment_ids:
            message["attachmentIds"] = attachment_ids

        response = requests.post(
            self.assistant_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"assistant": assistant, "messages": [message]},
            timeout=self.timeout,
        )

        if response.status_code != 200:
            raise RuntimeError(
                f"Langdock request failed: {response.status_code} - {response.text}"
            )

        text = self._extract_text_from_response(response.json())
        processing_time = (time.time() - start_time) * 1000

        logger.info(
            "Langdock call completed: model=%s, document=%s, chars=%d, time=%.0fms",
            model,
            document.name if document else None,
            len(text),
            processing_time,
        )

        return LLMResponse(
            text=text,
            model=model,
            backend="langdock",
            processing_time_ms=processing_time,
            metadata={"attachments": attachment_ids},
        )

    def _upload(self, document: DocumentInput) -> str:
        """Upload a document and return its attachment id."""
        files = {"file": (document.name, document.data, document.mime_type)}
        upload_response = requests.post(
            self.upload_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            files=files,
            timeout=self.timeout,
        )

        if upload_response.status_code != 200:
            raise RuntimeError(
                f"Upload failed: {upload_response.status_code} - {upload_response.text}"
            )

        return upload_response.json()["attachmentId"]

    def _extract_text_from_response(self, response: Dict[str, Any]) -> str:
        """Extract text content from Langdock API response."""
        if "result" not in response:
            raise ValueError("No 'result' in response")

        for message in reversed(response["result"]):
            if message.get("role") == "assistant":
                content = message.get("content", [])

                if isinstance(content, str):
                    return content.strip()
                elif isinstance(content, list):
                    for item in content:
                        if isinstance(item, dict) and item.get("type") == "text":
                            return item.get("text", "").strip()
                        elif isinstance(item, str):
                            return item.strip()

        raise ValueError("No text content found in response")
