"""
Unit Tests for PDFInspector

Test Coverage:
- PDF classification (pure text, pure image, hybrid)
- Page analysis with block detection
- Document info dictionary and PDF dates
- Orientation and encryption
- Error handling (corrupted input)
"""

import io

import fitz
import pytest

from document_translation.errors import DocumentValidationError
from document_translation.inspector import (
    PageAnalysis,
    PDFInspection,
    PDFInspector,
    PDFType,
    parse_pdf_date,
    _pdf_version,
)


@pytest.fixture
def inspector() -> PDFInspector:
    return PDFInspector()


# =============================================================================
# Test: Classification
# =============================================================================

class TestClassification:
    """Tests for PDF type classification."""

    @pytest.mark.unit
    def test_text_pdf_is_pure_text(self, inspector, create_text_pdf):
        pdf_path = create_text_pdf("text_only.pdf", "Sample invoice text content here", pages=3)

        result = inspector.inspect(pdf_path)

        assert result.pdf_type == PDFType.PURE_TEXT
        assert result.page_count == 3
        assert result.text_pages == [1, 2, 3]
        assert result.image_pages == []
        assert result.is_scanned is False

    @pytest.mark.unit
    def test_image_pdf_is_scanned(self, inspector, create_image_pdf):
        pdf_path = create_image_pdf("scan.pdf")

        result = inspector.inspect(pdf_path)

        assert result.pdf_type == PDFType.PURE_IMAGE
        assert result.image_pages == [1]
        assert result.has_images is True
        assert result.is_scanned is True

    @pytest.mark.unit
    def test_mixed_pages_are_hybrid(self, inspector, temp_dir):
        from PIL import Image

        img_bytes = io.BytesIO()
        Image.new("RGB", (100, 100), color="white").save(img_bytes, format="PNG")

        doc = fitz.open()
        text_page = doc.new_page()
        text_page.insert_text((72, 72), "First block", fontsize=12)
        text_page.insert_text((72, 200), "Second block", fontsize=12)
        image_page = doc.new_page()
        image_page.insert_image(fitz.Rect(72, 72, 300, 300), stream=img_bytes.getvalue())
        data = doc.tobytes()
        doc.close()

        result = inspector.inspect(data)

        assert result.pdf_type == PDFType.HYBRID
        assert result.text_pages == [1]
        assert result.image_pages == [2]

    @pytest.mark.unit
    def test_bytes_and_path_agree(self, inspector, create_text_pdf):
        pdf_path = create_text_pdf("same.pdf")

        from_path = inspector.inspect(pdf_path)
        from_bytes = inspector.inspect(pdf_path.read_bytes())

        assert from_path.page_count == from_bytes.page_count
        assert from_path.pdf_type == from_bytes.pdf_type

    @pytest.mark.unit
    def test_single_text_line_is_not_scanned(self, inspector):
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), "One short paragraph.", fontsize=12)
        data = doc.tobytes()
        doc.close()

        result = inspector.inspect(data)

        assert result.pdf_type == PDFType.PURE_TEXT
        assert result.text_pages == [1]
        assert result.is_scanned is False

    @pytest.mark.unit
    def test_blank_pages_are_ignored(self, inspector):
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), "Cover", fontsize=12)
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        result = inspector.inspect(data)

        assert result.page_count == 2
        assert result.pdf_type == PDFType.PURE_TEXT
        assert result.text_pages == [1]
        assert result.image_pages == []

    @pytest.mark.unit
    def test_empty_page_is_unknown(self, inspector):
        doc = fitz.open()
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        result = inspector.inspect(data)

        assert result.pdf_type == PDFType.UNKNOWN
        assert result.is_scanned is False


# =============================================================================
# Test: Page Analysis
# =============================================================================

class TestPageAnalysis:
    """Tests for individual page analysis."""

    @pytest.mark.unit
    def test_counts_text_blocks(self, inspector, create_text_pdf):
        pdf_path = create_text_pdf("blocks.pdf", "Line 1\nLine 2\nLine 3")
        doc = fitz.open(pdf_path)
        try:
            analysis = inspector.analyze_page(doc[0], 1)
        finally:
            doc.close()

        assert analysis.page_number == 1
        assert analysis.text_blocks >= 2
        assert analysis.has_text is True
        assert analysis.has_mixed_content is False

    @pytest.mark.unit
    def test_mixed_content_property(self):
        analysis = PageAnalysis(
            page_number=1,
            text_blocks=4,
            image_blocks=1,
            is_image_dominant=True,
        )

        assert analysis.has_mixed_content is True


# =============================================================================
# Test: Document Info
# =============================================================================

class TestDocumentInfo:
    """Tests for facts read from the document info dictionary."""

    @pytest.mark.unit
    def test_metadata_read_from_file(self, inspector, create_text_pdf):
        pdf_path = create_text_pdf(
            "info.pdf",
            metadata={
                "title": "Annual Report",
                "author": "Finance Team",
                "subject": "Results",
                "keywords": "finance, annual; report",
                "creationDate": "D:20240115103000+01'00'",
            },
        )

        result = inspector.inspect(pdf_path)

        assert result.title == "Annual Report"
        assert result.author == "Finance Team"
        assert result.subject == "Results"
        assert result.keywords == ["finance", "annual", "report"]
        assert result.creation_date == "2024-01-15T10:30:00+01:00"
        assert result.pdf_version

    @pytest.mark.unit
    def test_missing_metadata_is_none(self, inspector, create_text_pdf):
        result = inspector.inspect(create_text_pdf("bare.pdf"))

        assert result.title is None
        assert result.author is None
        assert result.keywords == []
        assert result.has_form_fields is False

    @pytest.mark.unit
    def test_landscape_orientation(self, inspector):
        doc = fitz.open()
        page = doc.new_page(width=842, height=595)
        page.insert_text((72, 72), "Wide", fontsize=12)
        data = doc.tobytes()
        doc.close()

        assert inspector.inspect(data).orientation == "landscape"

    @pytest.mark.unit
    def test_portrait_orientation(self, inspector, create_text_pdf):
        assert inspector.inspect(create_text_pdf("tall.pdf")).orientation == "portrait"

    @pytest.mark.unit
    def test_pdf_version_helper(self):
        assert _pdf_version("PDF 1.7") == "1.7"
        assert _pdf_version("") is None
        assert _pdf_version(None) is None


# =============================================================================
# Test: PDF Dates
# =============================================================================

class TestParsePdfDate:
    """Tests for parse_pdf_date."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("D:20240115103000+01'00'", "2024-01-15T10:30:00+01:00"),
            ("D:20240115103000-05'30'", "2024-01-15T10:30:00-05:30"),
            ("D:20240115103000Z", "2024-01-15T10:30:00+00:00"),
            ("D:20240115", "2024-01-15T00:00:00"),
            ("D:2024", "2024-01-01T00:00:00"),
        ],
    )
    def test_valid_dates(self, value, expected):
        assert parse_pdf_date(value) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", "yesterday", "D:20241399"])
    def test_invalid_dates(self, value):
        assert parse_pdf_date(value) is None


# =============================================================================
# Test: Error Handling
# =============================================================================

class TestErrorHandling:
    """Tests for unreadable input."""

    @pytest.mark.unit
    def test_garbage_bytes_raise_validation_error(self, inspector):
        with pytest.raises(DocumentValidationError, match="Could not open PDF"):
            inspector.inspect(b"This is not a valid PDF content")

    @pytest.mark.unit
    def test_missing_file_raises_validation_error(self, inspector, temp_dir):
        with pytest.raises(DocumentValidationError):
            inspector.inspect(temp_dir / "missing.pdf")

    @pytest.mark.unit
    def test_encrypted_pdf_rejected(self, inspector, temp_dir):
        path = temp_dir / "locked.pdf"
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), "Secret", fontsize=12)
        doc.save(
            str(path),
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner",
            user_pw="user",
        )
        doc.close()

        with pytest.raises(DocumentValidationError, match="Encrypted"):
            inspector.inspect(path)

    @pytest.mark.unit
    def test_inspection_defaults(self):
        inspection = PDFInspection(page_count=0, pdf_type=PDFType.UNKNOWN)

        assert inspection.orientation == "portrait"
        assert inspection.is_scanned is False
