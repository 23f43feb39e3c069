"""
Extraction API routes.

Handles:
- POST /api/extract - Extract income statements from uploaded PDFs
- GET /api/workspace - Current queue, results and status
- DELETE /api/results - Clear all results
- DELETE /api/results/{index} - Remove one result
- POST /api/key - Configure the API key used for extraction
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from finextract.batch import NO_PDF_MESSAGE, ExtractionWorkspace, UploadedFile

router = APIRouter()

# In-memory workspace (single user; results are not persisted)
_workspace: ExtractionWorkspace | None = None


def get_workspace() -> ExtractionWorkspace:
    """Return the process-wide workspace, creating it on first use."""
    global _workspace
    if _workspace is None:
        _workspace = ExtractionWorkspace()
    return _workspace


# ============== Request/Response Models ==============

class FileStateResponse(BaseModel):
    """Progress of one uploaded file."""
    name: str
    status: str  # uploading | processing | done | error


class LineItemResponse(BaseModel):
    """One income statement row."""
    name: str
    standardized_name: str
    values: dict[str, float | None]


class FinancialDataResponse(BaseModel):
    """Extracted income statement."""
    company_name: str
    currency: str | None = None
    units: str | None = None
    years: list[str]
    line_items: list[LineItemResponse]
    missing_line_items: list[str]
    completeness: str


class ExtractionResultResponse(BaseModel):
    """A file and the data extracted from it."""
    file_name: str
    data: FinancialDataResponse


class WorkspaceResponse(BaseModel):
    """Snapshot of the workspace."""
    status: str
    error: str | None = None
    processing_message: str
    is_key_configured: bool
    queue: list[FileStateResponse]
    results: list[ExtractionResultResponse]


class SelectKeyRequest(BaseModel):
    """Request to configure the API key."""
    api_key: str


def _workspace_response(workspace: ExtractionWorkspace) -> WorkspaceResponse:
    return WorkspaceResponse(**workspace.to_dict())


# ============== API Endpoints ==============

@router.post("/extract", response_model=WorkspaceResponse)
async def extract(
    files: list[UploadFile] = File(...),
    workspace: ExtractionWorkspace = Depends(get_workspace),
) -> WorkspaceResponse:
    """
    Extract income statements from one or more uploaded PDFs.

    All files are processed concurrently. Files that fail are marked as
    "error" in the queue; the rest are added to the results. Non-PDF
    uploads are ignored.
    """
    uploads = []
    for file in files:
        uploads.append(UploadedFile(
            name=file.filename or "upload.pdf",
            content_type=file.content_type,
            data=await file.read(),
        ))

    await workspace.process_files(uploads)

    if workspace.error == NO_PDF_MESSAGE:
        raise HTTPException(status_code=400, detail=NO_PDF_MESSAGE)

    return _workspace_response(workspace)


@router.get("/workspace", response_model=WorkspaceResponse)
async def get_workspace_state(workspace: ExtractionWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    """Get the current queue, results and status."""
    return _workspace_response(workspace)


@router.delete("/results", response_model=WorkspaceResponse)
async def clear_results(workspace: ExtractionWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    """Clear all results, the queue and any error."""
    workspace.clear_all()
    return _workspace_response(workspace)


@router.delete("/results/{index}", response_model=WorkspaceResponse)
async def remove_result(index: int, workspace: ExtractionWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    """Remove a single result by position."""
    try:
        workspace.remove_result(index)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"Result not found: {index}")
    return _workspace_response(workspace)


@router.post("/key", response_model=WorkspaceResponse)
async def select_key(request: SelectKeyRequest, workspace: ExtractionWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    """Configure the API key used for subsequent extractions."""
    api_key = request.api_key.strip()
    if not api_key:
        raise HTTPException(status_code=400, detail="API key must not be empty")
    workspace.select_key(api_key)
    return _workspace_response(workspace)
