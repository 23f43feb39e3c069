"""FinExtract - income statement extraction from PDF financial reports."""

__version__ = "0.1.0"
