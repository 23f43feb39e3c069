"""
Export API routes.

Handles:
- GET /api/export/csv - Consolidated LONG CSV of all results
- GET /api/export/csv/{index} - WIDE CSV of one result
- GET /api/export/excel - Excel workbook with all results
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse

from finextract.api.routes.extraction import get_workspace
from finextract.batch import ExtractionWorkspace
from finextract.generators.csv_export import (
    consolidated_csv_filename,
    to_long_csv,
    to_wide_csv,
    wide_csv_filename,
)
from finextract.generators.excel_export import generate_excel_workbook

router = APIRouter()

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _require_results(workspace: ExtractionWorkspace):
    if not workspace.results:
        raise HTTPException(status_code=404, detail="No extraction results to export")


def _csv_response(csv_text: str, filename: str) -> Response:
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/csv")
async def export_consolidated_csv(workspace: ExtractionWorkspace = Depends(get_workspace)):
    """Export every result as one LONG CSV (one row per company, line item and year)."""
    _require_results(workspace)
    csv_text = to_long_csv([result.data for result in workspace.results])
    return _csv_response(csv_text, consolidated_csv_filename())


@router.get("/export/csv/{index}")
async def export_single_csv(index: int, workspace: ExtractionWorkspace = Depends(get_workspace)):
    """Export one result as a WIDE CSV (one row per line item, one column per year)."""
    if index < 0 or index >= len(workspace.results):
        raise HTTPException(status_code=404, detail=f"Result not found: {index}")

    data = workspace.results[index].data
    return _csv_response(to_wide_csv(data), wide_csv_filename(data.company_name))


@router.get("/export/excel")
async def export_excel(workspace: ExtractionWorkspace = Depends(get_workspace)):
    """
    Export all results to an Excel workbook.

    The workbook includes:
    - Sheet "Consolidated": LONG form across all reports
    - One WIDE sheet per report
    """
    _require_results(workspace)
    excel_buffer = generate_excel_workbook(workspace.results)

    filename = consolidated_csv_filename().replace(".csv", ".xlsx")
    return StreamingResponse(
        excel_buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
