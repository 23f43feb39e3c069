"""Data models for income statement extraction results and batch state."""

from dataclasses import dataclass, field
from enum import Enum


# Completeness flags reported by the extraction model
COMPLETENESS_COMPLETE = "Complete"
COMPLETENESS_PARTIAL = "Partial"
COMPLETENESS_NOT_FOUND = "Not Found"
COMPLETENESS_VALUES = (COMPLETENESS_COMPLETE, COMPLETENESS_PARTIAL, COMPLETENESS_NOT_FOUND)

# Per-file processing status
FILE_UPLOADING = "uploading"
FILE_PROCESSING = "processing"
FILE_DONE = "done"
FILE_ERROR = "error"


class AppStatus(str, Enum):
    """Overall state of the extraction workspace."""
    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass
class LineItem:
    """
    A single income statement row.
    Values are keyed by the year label exactly as it appears in the report.
    """
    name: str                # Label as printed in the report
    standardized_name: str   # Mapped finance term (e.g., "Revenue from Operations")
    values: dict[str, float | None] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "standardized_name": self.standardized_name,
            "values": dict(self.values),
        }


@dataclass
class FinancialData:
    """Income statement extracted from one document."""
    company_name: str
    currency: str | None = None
    units: str | None = None     # e.g., "Lakhs", "millions"
    years: list[str] = field(default_factory=list)  # Column order as reported
    line_items: list[LineItem] = field(default_factory=list)
    missing_line_items: list[str] = field(default_factory=list)
    completeness: str = COMPLETENESS_NOT_FOUND

    @property
    def has_data(self) -> bool:
        """False when there is nothing to tabulate."""
        return self.completeness != COMPLETENESS_NOT_FOUND and bool(self.line_items)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "company_name": self.company_name,
            "currency": self.currency,
            "units": self.units,
            "years": list(self.years),
            "line_items": [item.to_dict() for item in self.line_items],
            "missing_line_items": list(self.missing_line_items),
            "completeness": self.completeness,
        }


@dataclass
class ExtractionResult:
    """An uploaded file paired with the data extracted from it."""
    file_name: str
    data: FinancialData

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_name": self.file_name,
            "data": self.data.to_dict(),
        }


@dataclass
class FileState:
    """Progress of one file through the batch. Mutated in place."""
    name: str
    status: str = FILE_UPLOADING

    def to_dict(self) -> dict:
        return {"name": self.name, "status": self.status}
