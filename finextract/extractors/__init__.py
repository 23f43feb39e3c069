"""Income statement extraction modules."""

from finextract.extractors.llm_extractor import (
    extract_financial_data,
    is_authentication_error,
    ExtractionError,
    EmptyResponseError,
    UnrecognizedResponseError,
)
from finextract.extractors.normalizer import transform_raw_response
from finextract.extractors.pdf_reader import (
    is_pdf,
    load_pdf,
    encode_pdf,
    PDFReadError,
)

__all__ = [
    "extract_financial_data",
    "is_authentication_error",
    "ExtractionError",
    "EmptyResponseError",
    "UnrecognizedResponseError",
    "transform_raw_response",
    "is_pdf",
    "load_pdf",
    "encode_pdf",
    "PDFReadError",
]
