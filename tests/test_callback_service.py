import asyncio

import pytest

from app.core.exceptions import CallbackProcessingError
from app.services.callback_service import CallbackService, json_preview
from app.services.correlation_service import RequestCorrelator
from utils.constants import FALLBACK_PDF_FILENAME, JSON_PREVIEW_LIMIT, RESULT_PDF_FILENAME

from conftest import FakeBot, make_pdf_base64


def make_service(bot, ttl_seconds=3600, clock=None):
    kwargs = {"clock": clock} if clock else {}
    correlator = RequestCorrelator(default_chat_id="default", ttl_seconds=ttl_seconds, **kwargs)
    return CallbackService(bot, correlator), correlator


def test_embedded_document_is_delivered_verbatim(fake_bot):
    pdf, encoded = make_pdf_base64()
    service, correlator = make_service(fake_bot)
    correlator.register("U-9", "123")

    chat_id = asyncio.run(service.deliver({"data": {"UUID": "U-9", "base64_pdf": encoded}}))

    assert chat_id == "123"
    assert len(fake_bot.messages) == 1
    assert fake_bot.messages[0]["chat_id"] == "123"
    assert len(fake_bot.documents) == 1
    document = fake_bot.documents[0]
    assert document["filename"] == RESULT_PDF_FILENAME
    assert document["data"] == pdf


def test_missing_document_triggers_single_fallback(fake_bot):
    service, correlator = make_service(fake_bot)
    correlator.register("U-9", "123")
    payload = {"datos": {"uuid": "U-9", "empleos": [{"patron": "ACME"}]}}

    asyncio.run(service.deliver(payload))

    assert len(fake_bot.messages) == 1
    assert len(fake_bot.documents) == 1
    document = fake_bot.documents[0]
    assert document["chat_id"] == "123"
    assert document["filename"] == FALLBACK_PDF_FILENAME
    assert document["data"].startswith(b"%PDF")
    assert document["caption"]


def test_placeholder_document_is_replaced_by_fallback(fake_bot):
    service, _ = make_service(fake_bot)

    asyncio.run(service.deliver({"data": {"base64_pdf": "AAAA"}}))

    assert fake_bot.documents[0]["filename"] == FALLBACK_PDF_FILENAME


def test_invalid_base64_falls_back(fake_bot):
    service, _ = make_service(fake_bot)
    broken = "A" * 301  # length not a multiple of 4

    asyncio.run(service.deliver({"base64": broken}))

    assert fake_bot.documents[0]["filename"] == FALLBACK_PDF_FILENAME


def test_uncorrelated_callback_goes_to_default_chat(fake_bot):
    service, _ = make_service(fake_bot)

    chat_id = asyncio.run(service.deliver({"something": "else"}))

    assert chat_id == "default"
    assert fake_bot.messages[0]["chat_id"] == "default"


def test_correlation_released_after_delivery(fake_bot):
    service, correlator = make_service(fake_bot)
    correlator.register("U-9", "123")

    asyncio.run(service.deliver({"UUID": "U-9"}))

    assert correlator.resolve("U-9") == "default"


def test_delivery_failure_raises_and_still_releases():
    bot = FakeBot(fail_on="send_document")
    service, correlator = make_service(bot)
    correlator.register("U-9", "123")

    with pytest.raises(CallbackProcessingError):
        asyncio.run(service.deliver({"UUID": "U-9"}))

    assert correlator.pending_count() == 0


def test_json_preview_is_truncated():
    payload = {"blob": "x" * (JSON_PREVIEW_LIMIT * 2)}
    assert len(json_preview(payload)) == JSON_PREVIEW_LIMIT

    preview = FakeBot()
    service, _ = make_service(preview)
    asyncio.run(service.deliver(payload))
    assert len(preview.messages[0]["text"]) < JSON_PREVIEW_LIMIT + 100


def test_expired_requests_are_notified(fake_bot):
    now = [0.0]
    service, correlator = make_service(fake_bot, ttl_seconds=120, clock=lambda: now[0])
    correlator.register("U-1", "111")
    now[0] = 121.0

    expired = asyncio.run(service.expire_pending())

    assert expired == 1
    assert fake_bot.messages[0]["chat_id"] == "111"
    assert "U-1" in fake_bot.messages[0]["text"]
    assert correlator.pending_count() == 0
