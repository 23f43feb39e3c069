"""Tests for batch orchestration and workspace state."""

import asyncio
import threading
import time

import anthropic
import pytest

from conftest import (
    FakeAnthropic,
    api_status_error,
    document_data,
    make_pdf_bytes,
    text_message,
    tool_message,
)
from finextract import batch
from finextract.batch import (
    AUTH_FAILURE_MESSAGE,
    BATCH_FAILURE_MESSAGE,
    NO_PDF_MESSAGE,
    SLOW_PROCESSING_MESSAGE,
    ExtractionWorkspace,
    UploadedFile,
    estimate_message,
)
from finextract.config import Settings
from finextract.extractors.pdf_reader import encode_pdf
from finextract.models.financials import AppStatus


def _pdf(name, pages=1):
    return UploadedFile(name=name, content_type="application/pdf", data=make_pdf_bytes(pages))


def _workspace(settings, client):
    return ExtractionWorkspace(settings=settings, client_factory=lambda s: client)


def _by_document(responses: dict):
    """Handler answering per uploaded document (keyed by raw PDF bytes)."""
    encoded = {encode_pdf(data): reply for data, reply in responses.items()}
    return lambda kwargs: encoded[document_data(kwargs)]


def test_all_files_succeed(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    results = asyncio.run(workspace.process_files([_pdf("a.pdf"), _pdf("b.pdf", pages=2)]))

    assert [r.file_name for r in results] == ["a.pdf", "b.pdf"]
    assert workspace.status == AppStatus.SUCCESS
    assert workspace.error is None
    assert [s.status for s in workspace.queue] == ["done", "done"]
    assert len(workspace.results) == 2


def test_files_are_extracted_concurrently(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload), delay=0.3)
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([_pdf(f"{i}.pdf", pages=i + 1) for i in range(4)]))

    assert client.messages.max_in_flight == 4


def test_partial_failure_keeps_successes(settings, acme_payload):
    good, bad = make_pdf_bytes(1), make_pdf_bytes(2)
    client = FakeAnthropic(_by_document({
        good: tool_message(acme_payload),
        bad: text_message("{broken"),
    }))
    workspace = _workspace(settings, client)

    results = asyncio.run(workspace.process_files([
        UploadedFile("good.pdf", "application/pdf", good),
        UploadedFile("bad.pdf", "application/pdf", bad),
    ]))

    assert [r.file_name for r in results] == ["good.pdf"]
    assert workspace.status == AppStatus.SUCCESS
    assert [(s.name, s.status) for s in workspace.queue] == [("good.pdf", "done"), ("bad.pdf", "error")]


def test_all_failures_set_generic_error(settings):
    client = FakeAnthropic(lambda kwargs: text_message(""))
    workspace = _workspace(settings, client)

    results = asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    assert results == []
    assert workspace.status == AppStatus.ERROR
    assert workspace.error == BATCH_FAILURE_MESSAGE
    assert workspace.queue[0].status == "error"
    assert workspace.is_key_configured


def test_unreadable_pdf_never_reaches_the_api(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([UploadedFile("broken.pdf", "application/pdf", b"garbage")]))

    assert client.messages.calls == []
    assert workspace.queue[0].status == "error"
    assert workspace.status == AppStatus.ERROR


def test_authentication_failure_flags_key(settings):
    error = api_status_error(anthropic.AuthenticationError, 401, "invalid x-api-key")
    client = FakeAnthropic(lambda kwargs: error)
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    assert workspace.is_key_configured is False
    assert workspace.error == AUTH_FAILURE_MESSAGE
    assert workspace.status == AppStatus.ERROR


def test_missing_api_key_fails_batch_without_calls():
    workspace = ExtractionWorkspace(settings=Settings(anthropic_api_key=None))
    assert workspace.is_key_configured is False

    asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    assert workspace.error == AUTH_FAILURE_MESSAGE
    assert workspace.status == AppStatus.ERROR
    assert workspace.queue[0].status == "error"


def test_non_pdf_uploads_only(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    results = asyncio.run(workspace.process_files([UploadedFile("notes.txt", "text/plain", b"hello")]))

    assert results == []
    assert workspace.error == NO_PDF_MESSAGE
    assert workspace.status == AppStatus.IDLE
    assert workspace.queue == []


def test_non_pdf_uploads_are_skipped(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([
        UploadedFile("notes.txt", "text/plain", b"hello"),
        _pdf("a.pdf"),
    ]))

    assert [s.name for s in workspace.queue] == ["a.pdf"]
    assert len(client.messages.calls) == 1


def test_empty_upload_is_a_no_op(settings):
    workspace = _workspace(settings, FakeAnthropic(lambda kwargs: None))

    assert asyncio.run(workspace.process_files([])) == []
    assert workspace.status == AppStatus.IDLE
    assert workspace.error is None


def test_results_and_queue_accumulate_across_batches(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([_pdf("a.pdf")]))
    asyncio.run(workspace.process_files([_pdf("b.pdf")]))

    assert [r.file_name for r in workspace.results] == ["a.pdf", "b.pdf"]
    assert len(workspace.queue) == 2


def test_processing_message_estimate_and_slow_notice(acme_payload):
    assert estimate_message(3) == "Estimated time: ~45–90 seconds"

    settings = Settings(anthropic_api_key="test-key", slow_threshold_seconds=0)
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload), delay=0.05)
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    assert workspace.processing_message == SLOW_PROCESSING_MESSAGE


def test_fast_batch_keeps_estimate(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)

    asyncio.run(workspace.process_files([_pdf("a.pdf"), _pdf("b.pdf", pages=2)]))

    assert workspace.processing_message == estimate_message(2)


def test_remove_result_and_clear_all(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)
    asyncio.run(workspace.process_files([_pdf("a.pdf"), _pdf("b.pdf", pages=2)]))

    removed = workspace.remove_result(0)
    assert removed.file_name == "a.pdf"
    assert workspace.status == AppStatus.SUCCESS

    workspace.remove_result(0)
    assert workspace.results == []
    assert workspace.status == AppStatus.IDLE

    with pytest.raises(IndexError):
        workspace.remove_result(0)

    workspace.clear_all()
    assert workspace.queue == []
    assert workspace.error is None


def test_select_key_restores_configuration(settings):
    error = api_status_error(anthropic.AuthenticationError, 401, "invalid x-api-key")
    workspace = _workspace(settings, FakeAnthropic(lambda kwargs: error))
    asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    workspace.select_key("new-key")

    assert workspace.is_key_configured is True
    assert workspace.settings.anthropic_api_key == "new-key"
    assert workspace.error is None


def test_snapshot_is_json_ready(settings, acme_payload):
    client = FakeAnthropic(lambda kwargs: tool_message(acme_payload))
    workspace = _workspace(settings, client)
    asyncio.run(workspace.process_files([_pdf("a.pdf")]))

    snapshot = workspace.to_dict()

    assert snapshot["status"] == "SUCCESS"
    assert snapshot["queue"] == [{"name": "a.pdf", "status": "done"}]
    assert snapshot["results"][0]["data"]["line_items"][1]["values"] == {"FY2024": 210.0, "FY2023": None}


def test_queue_entries_move_through_uploading_and_processing(settings, acme_payload, monkeypatch):
    fast, slow = make_pdf_bytes(1), make_pdf_bytes(2)
    release = threading.Event()
    real_load = batch.load_pdf

    def gated_load(data, max_bytes=None):
        if data == slow:
            release.wait(timeout=5)
        return real_load(data, max_bytes=max_bytes)

    seen = []

    def handler(kwargs):
        seen.append([(s.name, s.status) for s in workspace.queue])
        release.set()
        return tool_message(acme_payload)

    monkeypatch.setattr(batch, "load_pdf", gated_load)
    workspace = _workspace(settings, FakeAnthropic(handler))

    asyncio.run(workspace.process_files([
        UploadedFile("fast.pdf", "application/pdf", fast),
        UploadedFile("slow.pdf", "application/pdf", slow),
    ]))

    assert seen[0] == [("fast.pdf", "processing"), ("slow.pdf", "uploading")]
    assert [s.status for s in workspace.queue] == ["done", "done"]


def test_pdf_intake_keeps_event_loop_responsive(settings, acme_payload, monkeypatch):
    real_load = batch.load_pdf

    def slow_load(data, max_bytes=None):
        time.sleep(0.2)
        return real_load(data, max_bytes=max_bytes)

    monkeypatch.setattr(batch, "load_pdf", slow_load)
    workspace = _workspace(settings, FakeAnthropic(lambda kwargs: tool_message(acme_payload)))

    async def run():
        gaps = []
        finished = asyncio.Event()

        async def ticker():
            last = time.monotonic()
            while not finished.is_set():
                await asyncio.sleep(0.01)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        task = asyncio.create_task(ticker())
        await workspace.process_files([_pdf(f"{i}.pdf", pages=i + 1) for i in range(3)])
        finished.set()
        await task
        return max(gaps)

    assert asyncio.run(run()) < 0.15
