"""Shared fixtures and fakes for the test suite."""

import asyncio
from types import SimpleNamespace

import httpx
import pytest

from finextract.config import Settings
from finextract.extractors.prompts import EXTRACTION_TOOL_NAME
from finextract.models.financials import FinancialData, LineItem


def make_pdf_bytes(pages: int = 1) -> bytes:
    """Build a small but well-formed PDF with blank pages."""
    objects = [b"<< /Type /Catalog /Pages 2 0 R >>"]
    kids = " ".join(f"{3 + i} 0 R" for i in range(pages))
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {pages} >>".encode())
    for _ in range(pages):
        objects.append(b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode()
    return bytes(out)


def tool_message(payload):
    """A Messages API response carrying a forced tool call."""
    return SimpleNamespace(content=[
        SimpleNamespace(type="tool_use", name=EXTRACTION_TOOL_NAME, input=payload),
    ])


def text_message(text: str):
    """A Messages API response carrying plain text."""
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


def api_status_error(cls, status_code: int, message: str):
    """Build an SDK status error without touching the network."""
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(status_code, request=request)
    return cls(message, response=response, body=None)


class FakeMessages:
    """Stands in for client.messages; records calls and replays a handler."""

    def __init__(self, handler, delay: float = 0.0):
        self.handler = handler
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            result = self.handler(kwargs)
        finally:
            self.in_flight -= 1
        if isinstance(result, Exception):
            raise result
        return result


class FakeAnthropic:
    def __init__(self, handler, delay: float = 0.0):
        self.messages = FakeMessages(handler, delay=delay)


def document_data(kwargs) -> str:
    """Base64 document payload from a recorded create() call."""
    return kwargs["messages"][0]["content"][0]["source"]["data"]


ACME_PAYLOAD = {
    "company_name": "Acme Industries Ltd",
    "currency": "INR",
    "units": "Lakhs",
    "years": ["FY2024", "FY2023"],
    "line_items": [
        {
            "name": "Revenue from ops",
            "standardized_name": "Revenue from Operations",
            "yearly_values": [
                {"year": "FY2024", "value": 1500.5},
                {"year": "FY2023", "value": 1200},
            ],
        },
        {
            "name": "Profit after tax",
            "standardized_name": "Profit After Tax",
            "yearly_values": [
                {"year": "FY2024", "value": 210},
                {"year": "FY2023", "value": None},
            ],
        },
    ],
    "missing_line_items": ["Total Expenses"],
    "completeness": "Partial",
}


@pytest.fixture
def acme_payload():
    import copy
    return copy.deepcopy(ACME_PAYLOAD)


@pytest.fixture
def settings():
    return Settings(anthropic_api_key="test-key", slow_threshold_seconds=30)


@pytest.fixture
def pdf_bytes():
    return make_pdf_bytes()


@pytest.fixture
def acme_data():
    return FinancialData(
        company_name="Acme Industries Ltd",
        currency="INR",
        units="Lakhs",
        years=["FY2024", "FY2023"],
        line_items=[
            LineItem(
                name="Revenue from ops",
                standardized_name="Revenue from Operations",
                values={"FY2024": 1500.5, "FY2023": 1200.0},
            ),
            LineItem(
                name="Profit after tax",
                standardized_name="Profit After Tax",
                values={"FY2024": 210.0, "FY2023": None},
            ),
        ],
        missing_line_items=["Total Expenses"],
        completeness="Partial",
    )
