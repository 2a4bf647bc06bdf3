"""
Tests for GeminiBackend
=======================

Unit tests for the Google Gemini backend.
"""

import os
from unittest.mock import MagicMock, patch

import pytest
from google.genai import types

from document_translation.backends.gemini import GeminiBackend, GeminiRetryableError
from document_translation.validation import DocumentInput


@pytest.fixture
def pdf_document(create_text_pdf) -> DocumentInput:
    path = create_text_pdf()
    return DocumentInput(name=path.name, data=path.read_bytes())


def _mock_client(text="{}"):
    mock_response = MagicMock()
    mock_response.text = text

    mock_client = MagicMock()
    mock_client.models.generate_content.return_value = mock_response
    return mock_client


# =============================================================================
# TestGeminiBackendInit
# =============================================================================


@pytest.mark.unit
class TestGeminiBackendInit:
    """Test GeminiBackend initialization."""

    def test_default_config(self):
        """Backend uses defaults when no args provided."""
        with patch.dict(os.environ, {}, clear=True):
            backend = GeminiBackend(api_key="test-key")
        assert backend.api_key == "test-key"
        assert backend.model == "gemini-2.5-flash"
        assert backend.temperature == 0.0
        assert backend.timeout == 120
        assert backend.name == "Gemini"

    def test_custom_config(self):
        """Backend uses provided arguments."""
        backend = GeminiBackend(
            api_key="custom-key",
            model="gemini-2.5-pro",
            temperature=0.5,
            timeout=60,
        )
        assert backend.model == "gemini-2.5-pro"
        assert backend.temperature == 0.5
        assert backend.timeout == 60

    def test_env_var_api_key(self):
        """Backend reads API key from environment."""
        with patch.dict(os.environ, {"GEMINI_API_KEY": "env-key"}, clear=True):
            backend = GeminiBackend()
        assert backend.api_key == "env-key"

    def test_alternate_env_var_api_key(self):
        """GOOGLE_GENERATIVE_AI_API_KEY is accepted as a fallback."""
        with patch.dict(os.environ, {"GOOGLE_GENERATIVE_AI_API_KEY": "alt-key"}, clear=True):
            backend = GeminiBackend()
        assert backend.api_key == "alt-key"

    def test_env_var_model(self):
        """Backend reads model from environment."""
        with patch.dict(os.environ, {"GEMINI_MODEL": "gemini-2.5-pro"}):
            backend = GeminiBackend(api_key="test")
        assert backend.model == "gemini-2.5-pro"

    def test_param_overrides_env(self):
        """Explicit parameter overrides environment variable."""
        with patch.dict(os.environ, {"GEMINI_API_KEY": "env-key"}):
            backend = GeminiBackend(api_key="param-key")
        assert backend.api_key == "param-key"


# =============================================================================
# TestGeminiBackendAvailability
# =============================================================================


@pytest.mark.unit
class TestGeminiBackendAvailability:
    """Test GeminiBackend availability checks."""

    def test_available_with_key(self):
        assert GeminiBackend(api_key="test-key").is_available() is True

    def test_unavailable_without_key(self):
        with patch.dict(os.environ, {}, clear=True):
            backend = GeminiBackend(api_key=None)
        assert backend.is_available() is False

    def test_unavailable_with_empty_key(self):
        assert GeminiBackend(api_key="").is_available() is False


# =============================================================================
# TestGeminiBackendGenerate
# =============================================================================


@pytest.mark.unit
class TestGeminiBackendGenerate:
    """Test GeminiBackend.generate()."""

    def test_generate_raises_without_key(self):
        backend = GeminiBackend(api_key="")
        with pytest.raises(RuntimeError, match="Gemini API key not configured"):
            backend.generate("hello")

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_generate_returns_response(self, mock_get_client, pdf_document):
        mock_get_client.return_value = _mock_client('{"ok": true}')

        backend = GeminiBackend(api_key="test-key", model="gemini-2.5-flash")
        result = backend.generate("Extract", document=pdf_document)

        assert result.text == '{"ok": true}'
        assert result.backend == "gemini"
        assert result.model == "gemini-2.5-flash"
        assert result.metadata["structured"] is False

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_document_sent_before_prompt(self, mock_get_client, pdf_document):
        mock_client = _mock_client()
        mock_get_client.return_value = mock_client

        GeminiBackend(api_key="test-key").generate("Extract", document=pdf_document)

        contents = mock_client.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 2
        assert isinstance(contents[0], types.Part)
        assert contents[0].inline_data.mime_type == "application/pdf"
        assert contents[0].inline_data.data == pdf_document.data
        assert contents[1] == "Extract"

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_prompt_only_without_document(self, mock_get_client):
        mock_client = _mock_client()
        mock_get_client.return_value = mock_client

        GeminiBackend(api_key="test-key").generate("Score this")

        contents = mock_client.models.generate_content.call_args.kwargs["contents"]
        assert contents == ["Score this"]

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_schema_switches_to_json_mode(self, mock_get_client):
        mock_client = _mock_client()
        mock_get_client.return_value = mock_client
        schema = {"type": "object", "properties": {"a": {"type": "string"}}}

        result = GeminiBackend(api_key="test-key").generate(
            "Reply", response_schema=schema, max_output_tokens=512, temperature=0.3
        )

        config = mock_client.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.response_json_schema == schema
        assert config.max_output_tokens == 512
        assert config.temperature == 0.3
        assert result.metadata["structured"] is True

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_default_temperature_used(self, mock_get_client):
        mock_client = _mock_client()
        mock_get_client.return_value = mock_client

        GeminiBackend(api_key="test-key", temperature=0.1).generate("Reply")

        config = mock_client.models.generate_content.call_args.kwargs["config"]
        assert config.temperature == 0.1
        assert config.response_mime_type is None

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_model_override(self, mock_get_client):
        mock_client = _mock_client()
        mock_get_client.return_value = mock_client

        backend = GeminiBackend(api_key="test-key", model="gemini-2.5-flash")
        result = backend.generate("Reply", model="gemini-2.5-pro")

        assert mock_client.models.generate_content.call_args.kwargs["model"] == "gemini-2.5-pro"
        assert result.model == "gemini-2.5-pro"

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_empty_response(self, mock_get_client):
        mock_get_client.return_value = _mock_client(None)

        result = GeminiBackend(api_key="test-key").generate("Reply")

        assert result.text == ""


# =============================================================================
# TestGeminiRetryBehavior
# =============================================================================


@pytest.mark.unit
class TestGeminiRetryBehavior:
    """Test retry logic only retries rate-limit errors."""

    def test_rate_limit_raises_retryable_error(self):
        """429 errors surface as GeminiRetryableError once retries are exhausted."""
        with patch("document_translation.backends.gemini.GeminiBackend._call_api") as mock_call:
            mock_call.side_effect = GeminiRetryableError("429 Too Many Requests")

            backend = GeminiBackend(api_key="test-key")

            with pytest.raises(GeminiRetryableError, match="429"):
                backend.generate("Reply")

    @patch("document_translation.backends.gemini.GeminiBackend._get_client")
    def test_auth_error_not_retried(self, mock_get_client):
        """Non-rate-limit errors (401) propagate immediately without retry."""
        mock_client = MagicMock()

        auth_error = type("ClientError", (Exception,), {
            "__str__": lambda self: "401 Unauthorized: Invalid API key",
        })()
        mock_client.models.generate_content.side_effect = auth_error
        mock_get_client.return_value = mock_client

        mock_errors_module = MagicMock()
        mock_errors_module.ClientError = type(auth_error)

        backend = GeminiBackend(api_key="test-key")

        with patch.dict("sys.modules", {"google.genai.errors": mock_errors_module}):
            with pytest.raises(type(auth_error)):
                backend.generate("Reply")

        assert mock_client.models.generate_content.call_count == 1
