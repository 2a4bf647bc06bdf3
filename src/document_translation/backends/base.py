"""
Base Model Backend
==================

Abstract base class for model endpoint implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from document_translation.validation import DocumentInput


@dataclass
class LLMResponse:
    """Raw reply from a model endpoint."""
    text: str
    model: str
    backend: str
    processing_time_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


class BaseLLMBackend(ABC):
    """
    Abstract base class for model backends.

    All backends must implement:
    - generate(): Send a prompt (optionally with a document) and return the reply
    - is_available(): Check if the backend is configured

    A ``response_schema`` is a JSON schema dict. Backends with native
    structured output pass it to the endpoint; others embed it in the prompt.
    """

    DEFAULT_MODEL = ""

    def __init__(self, name: str = "BaseLLM"):
        """
        Initialize backend.

        Args:
            name: Human-readable name for the backend
        """
        self.name = name
        self.model = self.DEFAULT_MODEL

    @abstractmethod
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
        Run one model call.

        Args:
            prompt: Instruction text
            document: Optional PDF attached to the request
            response_schema: Optional JSON schema the reply must follow
            model: Per-call model override
            temperature: Per-call temperature override
            max_output_tokens: Output token limit

        Returns:
            LLMResponse with the reply text
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this backend is available and configured.

        Returns:
            True if backend can be used, False otherwise
        """
        pass

    def __repr__(self) -> str:
        available = "available" if self.is_available() else "unavailable"
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.model}', {available})"
