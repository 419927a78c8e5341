from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

import fitz  # PyMuPDF

from smartstudy.models.document import DocumentKind

_EXTENSION_KINDS = {
    ".pdf": DocumentKind.PDF,
    ".txt": DocumentKind.TEXT,
}


class UnsupportedFileType(Exception):
    """Raised for uploads that are neither PDF nor plain text."""


@dataclass
class ExtractedText:
    kind: DocumentKind
    text: str
    page_count: int


def detect_kind(filename: str) -> DocumentKind:
    kind = _EXTENSION_KINDS.get(PurePath(filename).suffix.lower())
    if kind is None:
        raise UnsupportedFileType(f"Unsupported file type: {filename}")
    return kind


def extract_pdf_text(content: bytes) -> tuple[str, int]:
    """Concatenate the text of every page, pages separated by a blank line.

    This is a synchronous CPU-bound function; call via asyncio.to_thread().
    """
    doc = fitz.open(stream=content, filetype="pdf")
    try:
        text = "".join(page.get_text("text") + "\n\n" for page in doc)
        return text, len(doc)
    finally:
        doc.close()


def extract_text(filename: str, content: bytes) -> ExtractedText:
    kind = detect_kind(filename)
    if kind is DocumentKind.PDF:
        text, page_count = extract_pdf_text(content)
        return ExtractedText(kind=kind, text=text, page_count=page_count)
    return ExtractedText(
        kind=kind,
        text=content.decode("utf-8", errors="replace"),
        page_count=1,
    )
