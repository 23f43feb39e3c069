"""
Excel export of extracted income statements.

Generates a workbook with:
- Sheet "Consolidated": every report in LONG form
- One sheet per report in WIDE form, headed by company, currency and units
"""

import io
import re

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from finextract.generators.csv_export import LONG_HEADERS, WIDE_HEADERS
from finextract.models.financials import ExtractionResult

# Style constants
HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
TITLE_FONT = Font(bold=True, size=14)
MISSING_FONT = Font(italic=True, color="9C5700")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)
NUMBER_FORMAT = "#,##0"
DECIMAL_FORMAT = "#,##0.00"

MAX_SHEET_TITLE = 31
INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


def _apply_header_style(cell):
    """Apply header styling to a cell."""
    cell.fill = HEADER_FILL
    cell.font = HEADER_FONT
    cell.alignment = Alignment(horizontal="center", vertical="center")
    cell.border = THIN_BORDER


def _apply_data_style(cell, is_number=False):
    """Apply data cell styling."""
    cell.border = THIN_BORDER
    if is_number:
        cell.alignment = Alignment(horizontal="right")
        if isinstance(cell.value, float) and not cell.value.is_integer():
            cell.number_format = DECIMAL_FORMAT
        else:
            cell.number_format = NUMBER_FORMAT


def _sheet_title(company_name: str, used: set[str]) -> str:
    """Excel-safe, unique sheet title of at most 31 characters."""
    base = INVALID_TITLE_CHARS.sub("_", company_name or "Report").strip() or "Report"
    base = base[:MAX_SHEET_TITLE]
    title = base
    n = 2
    while title.lower() in used:
        suffix = f" ({n})"
        title = base[:MAX_SHEET_TITLE - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def _autosize(ws, widths: dict[int, int]):
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = min(max(width + 2, 10), 60)


def _write_header_row(ws, row: int, headers: list[str], widths: dict[int, int]):
    for col, header in enumerate(headers, 1):
        _apply_header_style(ws.cell(row=row, column=col, value=header))
        widths[col] = max(widths.get(col, 0), len(str(header)))


def _create_consolidated_sheet(wb: Workbook, results: list[ExtractionResult]):
    """Create the LONG-form sheet covering every report."""
    ws = wb.create_sheet("Consolidated")
    widths: dict[int, int] = {}
    _write_header_row(ws, 1, LONG_HEADERS, widths)

    row = 2
    for result in results:
        data = result.data
        for item in data.line_items:
            for year in data.years:
                value = item.values.get(year)
                cells = [data.company_name, item.name, item.standardized_name, year, value]
                for col, cell_value in enumerate(cells, 1):
                    cell = ws.cell(row=row, column=col, value=cell_value)
                    _apply_data_style(cell, is_number=(col == 5))
                    if col < 5:
                        widths[col] = max(widths.get(col, 0), len(str(cell_value or "")))
                row += 1

    ws.freeze_panes = "A2"
    _autosize(ws, widths)


def _create_report_sheet(wb: Workbook, result: ExtractionResult, title: str):
    """Create a WIDE-form sheet for one report."""
    data = result.data
    ws = wb.create_sheet(title)
    widths: dict[int, int] = {}

    ws.cell(row=1, column=1, value=data.company_name).font = TITLE_FONT
    ws.cell(row=2, column=1, value=(
        f"Income Statement - {data.currency or 'Currency N/A'} ({data.units or 'Standard Units'})"
        f" - {data.completeness} - source: {result.file_name}"
    ))

    header_row = 4
    _write_header_row(ws, header_row, WIDE_HEADERS + list(data.years), widths)

    row = header_row + 1
    for item in data.line_items:
        _apply_data_style(ws.cell(row=row, column=1, value=item.name))
        _apply_data_style(ws.cell(row=row, column=2, value=item.standardized_name))
        widths[1] = max(widths.get(1, 0), len(item.name))
        widths[2] = max(widths.get(2, 0), len(item.standardized_name))
        for offset, year in enumerate(data.years):
            _apply_data_style(ws.cell(row=row, column=3 + offset, value=item.values.get(year)), is_number=True)
        row += 1

    if data.missing_line_items:
        row += 1
        ws.cell(row=row, column=1, value="Missing required items:").font = MISSING_FONT
        for name in data.missing_line_items:
            row += 1
            ws.cell(row=row, column=1, value=name).font = MISSING_FONT

    ws.freeze_panes = ws.cell(row=header_row + 1, column=3)
    _autosize(ws, widths)


def generate_excel_workbook(results: list[ExtractionResult]) -> io.BytesIO:
    """
    Generate an Excel workbook with all extracted reports.

    Args:
        results: Extraction results to include, in display order

    Returns:
        BytesIO buffer containing the Excel file
    """
    wb = Workbook()

    # Remove default sheet
    wb.remove(wb.active)

    _create_consolidated_sheet(wb, results)
    used_titles = {"consolidated"}
    for result in results:
        _create_report_sheet(wb, result, _sheet_title(result.data.company_name, used_titles))

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    return buffer
