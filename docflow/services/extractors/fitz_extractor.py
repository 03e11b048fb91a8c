from __future__ import annotations

from typing import List

import fitz


def extract_pages_fitz(pdf_bytes: bytes) -> List[str]:
    pages: List[str] = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
        for page in document:
            pages.append(page.get_text("text") or "")
    return pages


__all__ = ["extract_pages_fitz"]
