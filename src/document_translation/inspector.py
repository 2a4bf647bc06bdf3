"""
PDF Inspector
=============

Local, model-free inspection of a PDF with PyMuPDF.

The model is asked to describe the whole document, but some facts are
owned by the application and must not depend on a model guess: page
count, document info dictionary, form fields, and whether the pages carry
a text layer at all. Scanned detection uses PyMuPDF's block ``type``
(0 = text, 1 = image) per page.

Usage:
    from document_translation.inspector import PDFInspector

    inspection = PDFInspector().inspect(document.data)
    print(inspection.page_count, inspection.pdf_type)
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path

import fitz  # PyMuPDF

from document_translation.errors import DocumentValidationError

logger = logging.getLogger(__name__)


class PDFType(Enum):
    """PDF classification based on content structure."""
    PURE_TEXT = "pure_text"    # All pages have readable text blocks
    PURE_IMAGE = "pure_image"  # All pages are scanned/image-based
    HYBRID = "hybrid"          # Mixed: some text pages, some image pages
    UNKNOWN = "unknown"        # Classification failed or empty PDF


@dataclass
class PageAnalysis:
    """Block counts for a single page."""
    page_number: int  # 1-indexed
    text_blocks: int
    image_blocks: int
    is_image_dominant: bool

    @property
    def has_text(self) -> bool:
        return self.text_blocks > 0

    @property
    def has_mixed_content(self) -> bool:
        return self.has_text and self.is_image_dominant


@dataclass
class PDFInspection:
    """Facts about a PDF read directly from the file."""
    page_count: int
    pdf_type: PDFType
    pdf_version: str | None = None
    producer: str | None = None
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: list[str] = field(default_factory=list)
    creation_date: str | None = None
    last_modified: str | None = None
    orientation: str = "portrait"
    has_images: bool = False
    has_form_fields: bool = False
    text_pages: list[int] = field(default_factory=list)
    image_pages: list[int] = field(default_factory=list)
    hybrid_pages: list[int] = field(default_factory=list)

    @property
    def is_scanned(self) -> bool:
        return self.pdf_type == PDFType.PURE_IMAGE


_PDF_DATE_RE = re.compile(
    r"^D:(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?"
    r"(?:([Zz+\-])(\d{2})?'?(\d{2})?'?)?"
)


def parse_pdf_date(value: str | None) -> str | None:
    """
    Convert a PDF date string (``D:YYYYMMDDHHmmSS+HH'mm'``) to ISO 8601.

    Returns None for empty or unparseable values.
    """
    if not value:
        return None

    match = _PDF_DATE_RE.match(value.strip())
    if not match:
        return None

    year, month, day, hour, minute, second, tz_sign, tz_hour, tz_minute = match.groups()
    try:
        parsed = datetime(
            int(year),
            int(month or 1),
            int(day or 1),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None

    if tz_sign in ("+", "-"):
        offset = timedelta(hours=int(tz_hour or 0), minutes=int(tz_minute or 0))
        if tz_sign == "-":
            offset = -offset
        parsed = parsed.replace(tzinfo=timezone(offset))
    elif tz_sign in ("Z", "z"):
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.isoformat()


class PDFInspector:
    """
    PDF inspector using PyMuPDF.

    A page with any text block has a text layer and is never counted as
    scanned; it is "hybrid" when it also reaches the image threshold. Pages
    without text are "image" pages when they carry images and blank
    otherwise. Blank pages do not take part in the classification.

    Thresholds:
    - image_block_threshold: Minimum image blocks to consider page "image"
    """

    def __init__(self, image_block_threshold: int = 1):
        self.image_block_threshold = image_block_threshold

    def analyze_page(self, page: fitz.Page, page_number: int) -> PageAnalysis:
        """
        Count text and image blocks on a page.

        Args:
            page: PyMuPDF page object
            page_number: Page number (1-indexed)
        """
        text_blocks = 0
        image_blocks = 0

        for block in page.get_text("dict")["blocks"]:
            block_type = block.get("type", -1)
            if block_type == 0:
                text_blocks += 1
            elif block_type == 1:
                image_blocks += 1

        return PageAnalysis(
            page_number=page_number,
            text_blocks=text_blocks,
            image_blocks=image_blocks,
            is_image_dominant=image_blocks >= self.image_block_threshold,
        )

    def inspect(self, source: bytes | Path | str) -> PDFInspection:
        """
        Inspect a PDF given as bytes or a path.

        Raises:
            DocumentValidationError: If the data is not a readable PDF
        """
        try:
            if isinstance(source, (bytes, bytearray)):
                doc = fitz.open(stream=bytes(source), filetype="pdf")
            else:
                doc = fitz.open(Path(source))
        except Exception as e:
            raise DocumentValidationError(f"Could not open PDF: {e}") from e

        try:
            if doc.needs_pass:
                raise DocumentValidationError("Encrypted PDFs are not supported")
            return self._inspect_document(doc)
        finally:
            doc.close()

    def _inspect_document(self, doc: fitz.Document) -> PDFInspection:
        page_count = len(doc)
        info = doc.metadata or {}

        text_pages: list[int] = []
        image_pages: list[int] = []
        hybrid_pages: list[int] = []
        has_images = False
        has_form_fields = False

        for index in range(page_count):
            page = doc[index]
            analysis = self.analyze_page(page, index + 1)

            if analysis.image_blocks or page.get_images():
                has_images = True
            if page.first_widget is not None:
                has_form_fields = True

            if analysis.has_mixed_content:
                hybrid_pages.append(index + 1)
            elif analysis.has_text:
                text_pages.append(index + 1)
            elif analysis.image_blocks:
                image_pages.append(index + 1)

        orientation = "portrait"
        if page_count:
            rect = doc[0].rect
            if rect.width > rect.height:
                orientation = "landscape"

        keywords = [
            k.strip()
            for k in re.split(r"[,;]", info.get("keywords") or "")
            if k.strip()
        ]

        inspection = PDFInspection(
            page_count=page_count,
            pdf_type=self._classify(text_pages, image_pages, hybrid_pages),
            pdf_version=_pdf_version(info.get("format")),
            producer=info.get("producer") or None,
            title=info.get("title") or None,
            author=info.get("author") or None,
            subject=info.get("subject") or None,
            keywords=keywords,
            creation_date=parse_pdf_date(info.get("creationDate")),
            last_modified=parse_pdf_date(info.get("modDate")),
            orientation=orientation,
            has_images=has_images,
            has_form_fields=has_form_fields,
            text_pages=text_pages,
            image_pages=image_pages,
            hybrid_pages=hybrid_pages,
        )

        logger.info(
            "PDF inspected: %d pages, type=%s (%d text, %d image, %d hybrid)",
            page_count,
            inspection.pdf_type.value,
            len(text_pages),
            len(image_pages),
            len(hybrid_pages),
        )
        return inspection

    @staticmethod
    def _classify(
        text_pages: list[int], image_pages: list[int], hybrid_pages: list[int]
    ) -> PDFType:
        content_pages = len(text_pages) + len(image_pages) + len(hybrid_pages)
        if content_pages == 0:
            return PDFType.UNKNOWN
        if len(text_pages) == content_pages:
            return PDFType.PURE_TEXT
        if len(image_pages) == content_pages:
            return PDFType.PURE_IMAGE
        return PDFType.HYBRID


def _pdf_version(fmt: str | None) -> str | None:
    """'PDF 1.7' → '1.7'"""
    if not fmt:
        return None
    return fmt.replace("PDF", "").strip() or None
