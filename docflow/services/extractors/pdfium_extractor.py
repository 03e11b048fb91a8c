from __future__ import annotations

from typing import List

import pypdfium2 as pdfium


def extract_pages_pdfium(pdf_bytes: bytes) -> List[str]:
    document = pdfium.PdfDocument(pdf_bytes)
    pages: List[str] = []
    try:
        for page_index in range(len(document)):
            page = document.get_page(page_index)
            text_page = page.get_textpage()
            try:
                pages.append(text_page.get_text_range() or "")
            finally:
                text_page.close()
                page.close()
    finally:
        document.close()
    return pages


__all__ = ["extract_pages_pdfium"]
