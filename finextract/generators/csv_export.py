"""
CSV export of extracted income statements.

Two layouts:
- WIDE: one report, one row per line item, one column per year
- LONG: any number of reports, one row per (company, line item, year),
  ready for loading into a database
"""

import math
import re
from datetime import date, datetime, timezone

import pandas as pd

from finextract.models.financials import FinancialData

WIDE_HEADERS = ["Line Item (Original)", "Standardized Name"]
LONG_HEADERS = ["Source / Company", "Line Item (Original)", "Standardized Name", "Period", "Value"]


def format_value(value: float | int | None) -> str:
    """
    Render a cell value without thousands separators.

    Whole numbers drop the trailing ".0"; missing values become empty cells.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value).replace(",", "")


def _to_csv_text(rows: list[list[str]], headers: list[str]) -> str:
    """Serialize string rows; cells with commas, quotes or newlines get quoted."""
    df = pd.DataFrame(rows, columns=headers, dtype=object)
    text = df.to_csv(index=False, lineterminator="\n")
    # No trailing newline after the last row
    return text[:-1] if text.endswith("\n") else text


def to_wide_csv(data: FinancialData) -> str:
    """
    Convert one report into a WIDE CSV.

    Format: Line Item (Original), Standardized Name, Year1, Year2, ...
    Returns an empty string when the report has no line items.
    """
    if not data.line_items:
        return ""

    headers = WIDE_HEADERS + list(data.years)
    rows = [
        [item.name, item.standardized_name] + [format_value(item.values.get(year)) for year in data.years]
        for item in data.line_items
    ]
    return _to_csv_text(rows, headers)


def to_long_csv(data_list: list[FinancialData]) -> str:
    """
    Convert several reports into a single LONG CSV.

    Format: Source / Company, Line Item (Original), Standardized Name, Period, Value
    Returns an empty string when there are no reports.
    """
    if not data_list:
        return ""

    rows = []
    for data in data_list:
        for item in data.line_items:
            for year in data.years:
                rows.append([
                    data.company_name,
                    item.name,
                    item.standardized_name,
                    year,
                    format_value(item.values.get(year)),
                ])
    return _to_csv_text(rows, LONG_HEADERS)


def wide_csv_filename(company_name: str | None) -> str:
    """File name for a single report's export, e.g. "Acme_Ltd_Financials.csv"."""
    slug = re.sub(r"[^a-z0-9]", "_", company_name or "Report", flags=re.IGNORECASE)
    return f"{slug}_Financials.csv"


def unique_filename(filename: str, used: set[str]) -> str:
    """
    Suffix a file name with _2, _3, ... until it is not in `used`.

    Several reports from one company map to the same wide CSV name; the
    chosen name is added to `used`.
    """
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        stem, ext = filename, ""
    candidate = filename
    n = 2
    while candidate.lower() in used:
        candidate = f"{stem}_{n}{dot}{ext}"
        n += 1
    used.add(candidate.lower())
    return candidate


def consolidated_csv_filename(day: date | None = None) -> str:
    """File name for the consolidated export, stamped with the export date."""
    day = day or datetime.now(timezone.utc).date()
    return f"Consolidated_Financials_{day.isoformat()}.csv"
