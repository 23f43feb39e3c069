"""Data models for the income statement extractor."""

from finextract.models.financials import (
    AppStatus,
    LineItem,
    FinancialData,
    ExtractionResult,
    FileState,
)

__all__ = [
    "AppStatus",
    "LineItem",
    "FinancialData",
    "ExtractionResult",
    "FileState",
]
