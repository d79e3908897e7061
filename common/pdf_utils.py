"""
PDF utility functions for per-page text extraction and page export.
"""
import io
from typing import List, Sequence

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PyPdfError


class PDFProcessingError(Exception):
    """Raised when a PDF cannot be read or written."""


def open_pdf(data: bytes) -> PdfReader:
    """Open a PDF from raw bytes."""
    try:
        return PdfReader(io.BytesIO(data))
    except (PyPdfError, ValueError, OSError) as e:
        raise PDFProcessingError(f"Failed to open PDF: {str(e)}") from e


def extract_text_by_page(data: bytes, max_pages: int = None) -> List[str]:
    """Extract text from each page separately, in page order."""
    reader = open_pdf(data)
    pages = []
    for i, page in enumerate(reader.pages):
        if max_pages is not None and i >= max_pages:
            break
        try:
            pages.append(page.extract_text() or "")
        except (PyPdfError, ValueError, KeyError):
            # A page with a broken content stream still counts as a page
            pages.append("")
    return pages


def export_pages(reader: PdfReader, page_indexes: Sequence[int]) -> bytes:
    """Write the given pages of an open PDF into a new PDF and return its bytes."""
    writer = PdfWriter()
    try:
        for index in page_indexes:
            writer.add_page(reader.pages[index])
        buf = io.BytesIO()
        writer.write(buf)
    except (PyPdfError, IndexError, ValueError) as e:
        raise PDFProcessingError(f"Failed to export pages {list(page_indexes)}: {str(e)}") from e
    return buf.getvalue()
