"""
Model Backends
==============

Endpoints that run the extraction, translation and scoring prompts.

Available Backends:
- GeminiBackend: Google Gemini API, native PDF input and JSON-schema output
- LangdockBackend: Langdock assistant API (Claude, GPT), schema in the prompt

Usage:
    from document_translation.backends import create_backend

    backend = create_backend("gemini")
    if backend.is_available():
        reply = backend.generate("Summarize this PDF", document=doc)
"""

from .base import BaseLLMBackend, LLMResponse
from .gemini import GeminiBackend, GeminiRetryableError
from .langdock import LangdockBackend

__all__ = [
    "BaseLLMBackend",
    "LLMResponse",
    "GeminiBackend",
    "GeminiRetryableError",
    "LangdockBackend",
    "create_backend",
    "is_gemini_model",
]


def is_gemini_model(model: str | None) -> bool:
    """Check if the requested model should be routed to the Gemini backend."""
    return bool(model and model.startswith("gemini-"))


def create_backend(name: str = "gemini", model: str | None = None) -> BaseLLMBackend:
    """
    Build a backend by name.

    A ``gemini-*`` model always routes to Gemini, whatever the name says.
    The Gemini backend only accepts ``gemini-*`` model overrides.

    Raises:
        ValueError: If the backend name is unknown, or a non-Gemini model
            is requested from the Gemini backend
    """
    if is_gemini_model(model):
        return GeminiBackend(model=model)
    if name == "gemini":
        if model:
            raise ValueError(f"Model {model!r} is not served by the gemini backend")
        return GeminiBackend()
    if name == "langdock":
        return LangdockBackend(model=model)
    raise ValueError(f"Unknown backend: {name}")
