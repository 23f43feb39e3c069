"""
PDF intake for uploaded reports.

This module handles:
1. Recognizing PDF uploads by content type or file name
2. Checking that the bytes open as a PDF (pdfplumber) before any API call
3. Encoding the file for the extraction request
"""

import base64
from io import BytesIO

import pdfplumber

from finextract.logger import get_logger

logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


class PDFReadError(ValueError):
    """Raised when an upload is empty, too large, or not a readable PDF."""


def is_pdf(filename: str | None, content_type: str | None = None) -> bool:
    """Check whether an upload should be treated as a PDF."""
    if content_type and content_type.split(";")[0].strip().lower() == PDF_MIME_TYPE:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def load_pdf(pdf_bytes: bytes, max_bytes: int | None = None) -> int:
    """
    Validate raw PDF bytes.

    Args:
        pdf_bytes: Raw PDF file bytes
        max_bytes: Optional upper bound on file size

    Returns:
        Number of pages in the document

    Raises:
        PDFReadError: If the file is empty, too large, or cannot be parsed
    """
    if not pdf_bytes:
        raise PDFReadError("File is empty")

    if max_bytes is not None and len(pdf_bytes) > max_bytes:
        raise PDFReadError(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    try:
        with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
            page_count = len(pdf.pages)
    except Exception as e:
        raise PDFReadError(f"Unable to read PDF: {e}") from e

    if page_count == 0:
        raise PDFReadError("PDF has no pages")

    logger.debug(f"[PDF] Opened document with {page_count} page(s), {len(pdf_bytes):,} bytes")
    return page_count


def encode_pdf(pdf_bytes: bytes) -> str:
    """Base64-encode PDF bytes for a document content block."""
    return base64.standard_b64encode(pdf_bytes).decode("ascii")
