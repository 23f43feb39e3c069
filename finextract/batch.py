"""
Batch orchestration for uploaded reports.

A batch starts one extraction per PDF, waits for all of them, and folds the
outcome into the workspace state that the API and CLI present:
per-file status, accumulated results, an error message, and whether the
API key still looks usable.
"""

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Callable

from anthropic import AsyncAnthropic

from finextract.config import Settings
from finextract.extractors.llm_extractor import (
    ExtractionError,
    extract_financial_data,
    is_authentication_error,
)
from finextract.extractors.pdf_reader import (
    PDF_MIME_TYPE,
    PDFReadError,
    encode_pdf,
    is_pdf,
    load_pdf,
)
from finextract.logger import get_logger
from finextract.models.financials import (
    FILE_DONE,
    FILE_ERROR,
    FILE_PROCESSING,
    AppStatus,
    ExtractionResult,
    FileState,
)

logger = get_logger(__name__)

NO_PDF_MESSAGE = "Please select one or more PDF documents."
AUTH_FAILURE_MESSAGE = "Authentication failed. Please re-configure your API key."
BATCH_FAILURE_MESSAGE = "The documents could not be processed."
DEFAULT_PROCESSING_MESSAGE = "Processing..."
SLOW_PROCESSING_MESSAGE = "Still processing… this is taking longer than expected."

# Rough per-file duration range used for the progress estimate
SECONDS_PER_FILE_LOW = 15
SECONDS_PER_FILE_HIGH = 30


class MissingAPIKeyError(ExtractionError):
    def __init__(self, message: str = "API key not valid: no ANTHROPIC_API_KEY configured."):
        super().__init__(message)


@dataclass
class UploadedFile:
    """A file received from the user, held in memory."""
    name: str
    content_type: str | None
    data: bytes


ClientFactory = Callable[[Settings], AsyncAnthropic]


def default_client_factory(settings: Settings) -> AsyncAnthropic:
    """Create an API client from the current settings."""
    if not settings.anthropic_api_key:
        raise MissingAPIKeyError()
    return AsyncAnthropic(api_key=settings.anthropic_api_key, timeout=settings.api_timeout)


def estimate_message(file_count: int) -> str:
    """Progress hint shown while a batch runs."""
    low = file_count * SECONDS_PER_FILE_LOW
    high = file_count * SECONDS_PER_FILE_HIGH
    return f"Estimated time: ~{low}–{high} seconds"


class ExtractionWorkspace:
    """
    In-memory state for one user's extraction work.

    Results and the file queue accumulate across batches until cleared.
    """

    def __init__(self, settings: Settings | None = None, client_factory: ClientFactory | None = None):
        self.settings = settings or Settings.from_env()
        self._client_factory = client_factory or default_client_factory
        self.status = AppStatus.IDLE
        self.results: list[ExtractionResult] = []
        self.error: str | None = None
        self.queue: list[FileState] = []
        self.processing_message = DEFAULT_PROCESSING_MESSAGE
        self.is_key_configured = bool(self.settings.anthropic_api_key)

    async def process_files(self, files: list[UploadedFile]) -> list[ExtractionResult]:
        """
        Run one batch over the uploaded files.

        Non-PDF files are ignored. Every PDF gets a queue entry whose status is
        updated as it moves through intake, extraction and completion.

        Returns:
            Results for the files that succeeded in this batch
        """
        if not files:
            return []

        pdfs = [f for f in files if is_pdf(f.name, f.content_type)]
        if not pdfs:
            self.error = NO_PDF_MESSAGE
            return []

        self.status = AppStatus.PROCESSING
        self.error = None

        states = [FileState(name=f.name) for f in pdfs]
        self.queue.extend(states)
        self.processing_message = estimate_message(len(pdfs))
        logger.info(f"[BATCH] Processing {len(pdfs)} file(s), skipped {len(files) - len(pdfs)} non-PDF upload(s)")

        try:
            client = self._client_factory(self.settings)
        except MissingAPIKeyError as e:
            logger.error(f"[BATCH] {e}")
            self.is_key_configured = False
            self.error = AUTH_FAILURE_MESSAGE
            for state in states:
                state.status = FILE_ERROR
            self.status = AppStatus.ERROR
            return []

        slow_timer = asyncio.create_task(self._flag_slow_batch())
        try:
            settled = await asyncio.gather(*(
                self.process_single_file(f, state, client) for f, state in zip(pdfs, states)
            ))
        finally:
            slow_timer.cancel()

        valid = [r for r in settled if r is not None]
        if valid:
            self.results.extend(valid)
            self.status = AppStatus.SUCCESS
        else:
            self.status = AppStatus.ERROR
            if not self.error:
                self.error = BATCH_FAILURE_MESSAGE

        logger.info(f"[BATCH] Finished: {len(valid)} succeeded, {len(pdfs) - len(valid)} failed")
        return valid

    async def process_single_file(
        self,
        file: UploadedFile,
        state: FileState,
        client: AsyncAnthropic,
    ) -> ExtractionResult | None:
        """
        Extract one file, recording progress on its queue entry.

        Returns None on any failure; the failure is reflected in the entry's status.
        """
        loop = asyncio.get_running_loop()

        # pdfplumber parsing is synchronous; keep it off the event loop
        try:
            await loop.run_in_executor(
                None,
                partial(load_pdf, file.data, max_bytes=self.settings.max_upload_bytes),
            )
            file_base64 = await loop.run_in_executor(None, encode_pdf, file.data)
        except PDFReadError as e:
            logger.warning(f"[BATCH] Could not read {file.name}: {e}")
            state.status = FILE_ERROR
            return None

        state.status = FILE_PROCESSING

        try:
            data = await extract_financial_data(
                file_base64,
                PDF_MIME_TYPE,
                client=client,
                settings=self.settings,
            )
        except Exception as e:
            logger.error(f"[BATCH] Error in {file.name}: {e}")
            if is_authentication_error(e):
                self.is_key_configured = False
                self.error = AUTH_FAILURE_MESSAGE
            state.status = FILE_ERROR
            return None

        state.status = FILE_DONE
        logger.info(f"[BATCH] {file.name}: {data.company_name}, {len(data.line_items)} line items ({data.completeness})")
        return ExtractionResult(file_name=file.name, data=data)

    async def _flag_slow_batch(self) -> None:
        await asyncio.sleep(self.settings.slow_threshold_seconds)
        self.processing_message = SLOW_PROCESSING_MESSAGE

    def remove_result(self, index: int) -> ExtractionResult:
        """Remove one result; the workspace goes idle when none remain."""
        if index < 0 or index >= len(self.results):
            raise IndexError(f"No result at index {index}")
        removed = self.results.pop(index)
        if not self.results:
            self.status = AppStatus.IDLE
        return removed

    def clear_all(self) -> None:
        """Reset the workspace."""
        self.status = AppStatus.IDLE
        self.results = []
        self.error = None
        self.queue = []

    def select_key(self, api_key: str) -> None:
        """Use a new API key for subsequent batches."""
        self.settings.anthropic_api_key = api_key
        self.is_key_configured = True
        if self.error == AUTH_FAILURE_MESSAGE:
            self.error = None

    def to_dict(self) -> dict:
        """Snapshot of the workspace for JSON serialization."""
        return {
            "status": self.status.value,
            "error": self.error,
            "processing_message": self.processing_message,
            "is_key_configured": self.is_key_configured,
            "queue": [state.to_dict() for state in self.queue],
            "results": [result.to_dict() for result in self.results],
        }
