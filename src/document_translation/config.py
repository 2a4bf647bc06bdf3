"""
Settings
========

Environment-driven settings. A ``.env`` file in the working directory is
loaded first, so local development does not need exported variables.

Environment variables:
    DOCTRANS_BACKEND: Model backend, "gemini" or "langdock" (default: gemini)
    DOCTRANS_MODEL: Model override for the backend (default: backend default)
    DOCTRANS_TARGET_LANGUAGE: Default target language (default: en)
    DOCTRANS_QUALITY_THRESHOLD: Minimum acceptable quality score (default: 0.8)
    DOCTRANS_MAX_TRANSLATION_ATTEMPTS: Translation attempts incl. the first (default: 3)
    DOCTRANS_SCHEMA_REPAIR_ATTEMPTS: Re-asks for schema-invalid replies (default: 1)
    DOCTRANS_MAX_OUTPUT_TOKENS: Output token limit per model call (default: 8192)
    DOCTRANS_LOG_LEVEL: Logging level (default: INFO)
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from document_translation.errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    backend: str = "gemini"
    model: str | None = None
    target_language: str = "en"
    quality_threshold: float = 0.8
    max_translation_attempts: int = 3
    schema_repair_attempts: int = 1
    max_output_tokens: int = 8192
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables."""
        if load_env_file:
            load_dotenv()

        settings = cls(
            backend=os.getenv("DOCTRANS_BACKEND", cls.backend).lower(),
            model=os.getenv("DOCTRANS_MODEL") or None,
            target_language=os.getenv("DOCTRANS_TARGET_LANGUAGE", cls.target_language),
            quality_threshold=_env_number(
                "DOCTRANS_QUALITY_THRESHOLD", cls.quality_threshold, float
            ),
            max_translation_attempts=_env_number(
                "DOCTRANS_MAX_TRANSLATION_ATTEMPTS", cls.max_translation_attempts, int
            ),
            schema_repair_attempts=_env_number(
                "DOCTRANS_SCHEMA_REPAIR_ATTEMPTS", cls.schema_repair_attempts, int
            ),
            max_output_tokens=_env_number(
                "DOCTRANS_MAX_OUTPUT_TOKENS", cls.max_output_tokens, int
            ),
            log_level=os.getenv("DOCTRANS_LOG_LEVEL", cls.log_level).upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.backend not in ("gemini", "langdock"):
            raise ConfigurationError(f"Unknown backend: {self.backend}")
        if not 0.0 <= self.quality_threshold <= 1.0:
            raise ConfigurationError("Quality threshold must be between 0 and 1")
        if self.max_translation_attempts < 1:
            raise ConfigurationError("At least one translation attempt is required")
        if self.schema_repair_attempts < 0:
            raise ConfigurationError("Schema repair attempts cannot be negative")
        if self.max_output_tokens < 1:
            raise ConfigurationError("Max output tokens must be positive")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e


def configure_logging(level: str = "INFO") -> None:
    """Apply the service log format to the root logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
