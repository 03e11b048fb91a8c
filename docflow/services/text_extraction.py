"""Plain-text extraction from PDF byte buffers.

No layout, table, or OCR handling: scanned PDFs simply yield little or no text.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from .extractors.fitz_extractor import extract_pages_fitz
from .extractors.pdfium_extractor import extract_pages_pdfium

LOGGER = logging.getLogger(__name__)


class TextExtractionError(RuntimeError):
    """Raised when a PDF cannot be parsed."""


def _extract_pages(pdf_bytes: bytes, engine: str) -> list[str]:
    if engine == "fitz":
        return extract_pages_fitz(pdf_bytes)
    if engine == "pdfium":
        return extract_pages_pdfium(pdf_bytes)

    try:
        return extract_pages_fitz(pdf_bytes)
    except Exception as exc:
        LOGGER.warning("PyMuPDF failed (%s); retrying with pdfium", exc)
        return extract_pages_pdfium(pdf_bytes)


def extract_text(pdf_bytes: bytes, *, engine: str | None = None) -> str:
    """Return the concatenated plain text of every page in ``pdf_bytes``."""

    selected = (engine or get_settings().parser_engine or "auto").lower()
    try:
        pages = _extract_pages(pdf_bytes, selected)
    except Exception as exc:
        LOGGER.error("PDF text extraction failed with engine=%s: %s", selected, exc)
        raise TextExtractionError(f"Failed to extract text from PDF: {exc}") from exc
    return "\n".join(pages)


__all__ = ["TextExtractionError", "extract_text"]
