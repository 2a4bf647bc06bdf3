"""
Test Configuration and Fixtures for document-translation

This module provides shared fixtures, markers, and configuration for all tests.
"""

import copy
import json
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import pytest

from document_translation.backends.base import BaseLLMBackend, LLMResponse
from document_translation.validation import DocumentInput


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: Integration tests (may need APIs)")
    config.addinivalue_line("markers", "slow: Slow tests (skip with -m 'not slow')")


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory(prefix="document_translation_test_") as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Sample PDF Creation Fixtures
# =============================================================================

@pytest.fixture
def create_text_pdf(temp_dir: Path):
    """Factory fixture to create a text PDF with sufficient text blocks."""
    def _create(
        filename: str = "text.pdf",
        content: str = "Sample text content",
        metadata: Optional[Dict[str, str]] = None,
        pages: int = 1,
    ) -> Path:
        import fitz
        pdf_path = temp_dir / filename
        doc = fitz.open()
        for page_index in range(pages):
            page = doc.new_page()
            # One block per line, plus two trailing blocks
            y_pos = 72
            for line in content.split('\n'):
                page.insert_text((72, y_pos), line, fontsize=12)
                y_pos += 20
            page.insert_text((72, y_pos), f"Additional text block {page_index + 1}", fontsize=12)
            page.insert_text((72, y_pos + 20), "Another text block", fontsize=12)
        if metadata:
            doc.set_metadata(metadata)
        doc.save(str(pdf_path))
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def create_image_pdf(temp_dir: Path):
    """Factory fixture to create a PDF with only images (simulates scanned)."""
    def _create(filename: str = "image.pdf") -> Path:
        import io

        import fitz
        from PIL import Image

        pdf_path = temp_dir / filename

        img = Image.new('RGB', (200, 100), color='white')
        img_bytes = io.BytesIO()
        img.save(img_bytes, format='PNG')

        doc = fitz.open()
        page = doc.new_page()
        page.insert_image(fitz.Rect(72, 72, 300, 200), stream=img_bytes.getvalue())
        doc.save(str(pdf_path))
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def text_document(create_text_pdf) -> DocumentInput:
    """A validated two-page text document."""
    path = create_text_pdf(
        "report.pdf",
        "Quarterly Report\nRevenue grew by 12 percent in 2024.",
        pages=2,
    )
    return DocumentInput(name=path.name, data=path.read_bytes())


# =============================================================================
# Scripted Backend
# =============================================================================

class ScriptedBackend(BaseLLMBackend):
    """
    Backend that replays canned replies in order.

    Each reply is a str (returned as the response text), a dict (JSON-encoded)
    or an Exception (raised).
    """

    def __init__(self, replies: List[Any], available: bool = True, name: str = "Scripted"):
        super().__init__(name=name)
        self.model = "scripted-model"
        self._replies = list(replies)
        self._available = available
        self.calls: List[Dict[str, Any]] = []

    def is_available(self) -> bool:
        return self._available

    def generate(self, prompt: str, **kwargs) -> LLMResponse:
        self.calls.append({"prompt": prompt, **kwargs})
        if not self._replies:
            raise AssertionError("ScriptedBackend ran out of replies")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return LLMResponse(text=reply, model=self.model, backend="scripted")


@pytest.fixture
def scripted_backend():
    """Factory for ScriptedBackend instances."""
    def _create(*replies: Any, available: bool = True) -> ScriptedBackend:
        return ScriptedBackend(list(replies), available=available)
    return _create


# =============================================================================
# Sample Response Fixtures
# =============================================================================

_PARSER_PAYLOAD: Dict[str, Any] = {
    "extractedText": "Quarterly Report\n\nRevenue grew by 12 percent in 2024.",
    "structure": {
        "sections": [
            {
                "type": "heading",
                "level": 1,
                "content": "Quarterly Report",
                "position": {"page": 1, "order": 1},
            },
            {
                "type": "paragraph",
                "content": "Revenue grew by 12 percent in 2024.",
                "position": {"page": 1, "order": 2},
            },
        ],
        "pageBreaks": [1],
        "totalPages": 1,
    },
    "formatting": {
        "fonts": [
            {
                "name": "Helvetica",
                "size": 12,
                "isUsedForHeadings": True,
                "isUsedForBody": True,
                "weight": "normal",
            }
        ],
        "styles": {
            "hasBold": False,
            "hasItalic": False,
            "hasUnderline": False,
            "hasStrikethrough": False,
            "hasHighlight": False,
            "hasSuperscript": False,
            "hasSubscript": False,
        },
        "layout": {
            "columns": 1,
            "hasHeaders": False,
            "hasFooters": False,
            "hasWatermarks": False,
            "orientation": "portrait",
        },
    },
    "metadata": {
        "filename": "model-guess.pdf",
        "fileSize": 1,
        "extractedAt": "2020-01-01T00:00:00Z",
        "pageCount": 1,
        "language": "EN",
        "hasImages": False,
        "hasCharts": False,
        "hasTables": False,
        "hasFormFields": False,
        "isScanned": False,
        "textQuality": "excellent",
        "extractionConfidence": 0.97,
    },
}

_TRANSLATION_PAYLOAD: Dict[str, Any] = {
    "translatedText": "Quartalsbericht\n\nDer Umsatz stieg 2024 um 12 Prozent.",
    "sourceLanguage": "en",
    "targetLanguage": "de",
    "sections": [
        {
            "type": "heading",
            "level": 1,
            "content": "Quartalsbericht",
            "position": {"page": 1, "order": 1},
        },
        {
            "type": "paragraph",
            "content": "Der Umsatz stieg 2024 um 12 Prozent.",
            "position": {"page": 1, "order": 2},
        },
    ],
}

_QUALITY_PAYLOAD: Dict[str, Any] = {
    "score": 0.92,
    "accuracy": 0.95,
    "fluency": 0.9,
    "formattingPreservation": 1.0,
    "issues": [],
    "summary": "Accurate and fluent.",
}


@pytest.fixture
def parser_payload() -> Dict[str, Any]:
    """Valid document parser reply (wire format)."""
    return copy.deepcopy(_PARSER_PAYLOAD)


@pytest.fixture
def translation_payload() -> Dict[str, Any]:
    """Valid translation reply for parser_payload into German."""
    return copy.deepcopy(_TRANSLATION_PAYLOAD)


@pytest.fixture
def quality_payload() -> Dict[str, Any]:
    """Passing quality assessment reply."""
    return copy.deepcopy(_QUALITY_PAYLOAD)


@pytest.fixture
def parsed_document(parser_payload):
    """Validated DocumentParserResult built from parser_payload."""
    from document_translation.schema import DocumentParserResult
    return DocumentParserResult.model_validate(parser_payload)


@pytest.fixture
def sample_broken_json() -> str:
    """Sample broken JSON for repair testing."""
    return '''{
        "extractedText": "Hello",
        "structure": {
            "totalPages": 1
        }
        "metadata": {
            "pageCount": 1
        }
    }'''
