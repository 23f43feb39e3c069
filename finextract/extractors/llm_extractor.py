"""LLM-based income statement extraction from PDF documents."""

import json
import re
from typing import Any

import anthropic
from anthropic import AsyncAnthropic
from pydantic import ValidationError

from finextract.config import Settings
from finextract.extractors.normalizer import transform_raw_response
from finextract.extractors.pdf_reader import PDF_MIME_TYPE
from finextract.extractors.prompts import (
    EXTRACTION_TOOL,
    EXTRACTION_TOOL_NAME,
    SYSTEM_INSTRUCTION,
    USER_PROMPT,
)
from finextract.logger import get_logger
from finextract.models.financials import FinancialData

logger = get_logger(__name__)

# Substrings of provider error messages that mean the key is unusable
AUTH_ERROR_MARKERS = ("API key not valid", "Requested entity was not found")


class ExtractionError(Exception):
    """Base class for extraction failures."""


class EmptyResponseError(ExtractionError):
    def __init__(self, message: str = "The extraction engine returned an empty response."):
        super().__init__(message)


class UnrecognizedResponseError(ExtractionError):
    def __init__(self, message: str = "The document was processed, but the data structure was unrecognizable."):
        super().__init__(message)


def is_authentication_error(exc: BaseException) -> bool:
    """
    Check whether an exception means the API key is missing, invalid, or
    lacks access to the requested model.
    """
    if isinstance(exc, (
        anthropic.AuthenticationError,
        anthropic.PermissionDeniedError,
        anthropic.NotFoundError,
    )):
        return True
    message = str(exc)
    return any(marker in message for marker in AUTH_ERROR_MARKERS)


def build_messages(file_base64: str, mime_type: str = PDF_MIME_TYPE) -> list[dict]:
    """Build the user message carrying the document and the instruction."""
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "document",
                    "source": {
                        "type": "base64",
                        "media_type": mime_type,
                        "data": file_base64,
                    },
                },
                {"type": "text", "text": USER_PROMPT},
            ],
        }
    ]


def parse_json_response(text: str) -> Any:
    """Parse JSON from a text reply, tolerating markdown code fences."""
    text = text.strip()
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if fenced:
        text = fenced.group(1).strip()
    return json.loads(text)


def _response_payload(message: Any) -> Any:
    """
    Pull the extraction payload out of a Messages API response.

    Prefers the forced tool call's input; falls back to JSON in text blocks.

    Raises:
        EmptyResponseError: If the response carries no usable content
    """
    content = getattr(message, "content", None) or []

    for block in content:
        if getattr(block, "type", None) == "tool_use" and getattr(block, "name", EXTRACTION_TOOL_NAME) == EXTRACTION_TOOL_NAME:
            return block.input

    text = "".join(
        getattr(block, "text", "") or ""
        for block in content
        if getattr(block, "type", None) == "text"
    )
    if not text.strip():
        raise EmptyResponseError()
    return parse_json_response(text)


async def extract_financial_data(
    file_base64: str,
    mime_type: str = PDF_MIME_TYPE,
    client: AsyncAnthropic | None = None,
    settings: Settings | None = None,
) -> FinancialData:
    """
    Extract the income statement from a document.

    Args:
        file_base64: Base64-encoded file contents
        mime_type: MIME type of the file
        client: Anthropic client to use (created from settings when omitted)
        settings: Model, token and timeout settings

    Returns:
        FinancialData normalized for rendering and export

    Raises:
        EmptyResponseError: If the model returned nothing
        UnrecognizedResponseError: If the reply could not be parsed or validated
        anthropic.APIError: On API failures (authentication, rate limits, ...)
    """
    settings = settings or Settings.from_env()
    if client is None:
        # Created per call so a key changed at runtime is always picked up
        client = AsyncAnthropic(api_key=settings.anthropic_api_key, timeout=settings.api_timeout)

    message = await client.messages.create(
        model=settings.model,
        max_tokens=settings.max_tokens,
        system=SYSTEM_INSTRUCTION,
        temperature=0,
        tools=[EXTRACTION_TOOL],
        tool_choice={"type": "tool", "name": EXTRACTION_TOOL_NAME},
        messages=build_messages(file_base64, mime_type),
    )

    try:
        payload = _response_payload(message)
        return transform_raw_response(payload)
    except EmptyResponseError:
        raise
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.error(f"[EXTRACT] Failed to parse or transform API response: {e}")
        raise UnrecognizedResponseError() from e
