"""
FastAPI application for the income statement extractor.

The browser frontend uploads PDFs to /api/extract, polls /api/workspace for
per-file status and downloads CSV or Excel exports from /api/export.
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from finextract import __version__
from finextract.api.routes import extraction, export
from finextract.config import Settings
from finextract.logger import setup_logger

setup_logger(Settings.from_env().log_level)

# Create FastAPI app
app = FastAPI(
    title="FinExtract API",
    description="Extract multi-year income statements from PDF financial reports and export them as CSV",
    version=__version__,
)

# The frontend dev server runs on its own port and reads Content-Disposition
# to name downloaded exports
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative React port
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(extraction.router, prefix="/api", tags=["extraction"])
app.include_router(export.router, prefix="/api", tags=["export"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# A built frontend (frontend/dist) is served from the same origin as the API;
# unknown paths fall back to index.html for client-side routing
FRONTEND_DIR = Path(__file__).resolve().parent.parent.parent / "frontend" / "dist"

if FRONTEND_DIR.exists():
    app.mount("/assets", StaticFiles(directory=FRONTEND_DIR / "assets"), name="static-assets")

    @app.get("/{full_path:path}")
    async def serve_frontend(full_path: str):
        """Serve a built asset, or the upload page for any other path."""
        file_path = (FRONTEND_DIR / full_path).resolve()
        if file_path.is_file() and file_path.is_relative_to(FRONTEND_DIR):
            return FileResponse(file_path)
        return FileResponse(FRONTEND_DIR / "index.html")
else:
    @app.get("/")
    async def root():
        """API banner when no frontend build is present."""
        return {"status": "ok", "message": "FinExtract API"}
