import asyncio

import httpx
import pytest

from app.schemas.nufi import ProviderResponse
from app.services.callback_service import CallbackService
from app.services.correlation_service import RequestCorrelator
from app.services.historial_service import HistorialService, SubmissionStatus
from app.services.ledger_service import LedgerStore
from utils.constants import DENY_MESSAGE, JSON_PREVIEW_LIMIT

from conftest import FakeBot, StubNufi

ADMIN = "1000"
USER = "2000"


async def build(ledger_path, nufi, balance=0, allowed=(USER, ADMIN)):
    ledger = LedgerStore(ledger_path)
    for chat_id in allowed:
        await ledger.grant(chat_id)
    await ledger.set_credits(USER, balance)
    correlator = RequestCorrelator(default_chat_id="default")
    service = HistorialService(ledger, correlator, nufi, admin_id=ADMIN, cost=1)
    return service, ledger, correlator


def test_not_allowed_is_denied_without_call(ledger_path):
    nufi = StubNufi()

    async def scenario():
        service, ledger, _ = await build(ledger_path, nufi, balance=5, allowed=())
        return await service.submit(USER, "A", "B"), ledger

    result, ledger = asyncio.run(scenario())
    assert result.status == SubmissionStatus.DENIED
    assert result.reply == DENY_MESSAGE
    assert nufi.calls == []
    assert ledger.get_credits(USER) == 5


def test_zero_balance_is_denied_without_call(ledger_path):
    nufi = StubNufi()

    async def scenario():
        service, ledger, _ = await build(ledger_path, nufi, balance=0)
        return await service.submit(USER, "A", "B"), ledger

    result, ledger = asyncio.run(scenario())
    assert result.status == SubmissionStatus.INSUFFICIENT_CREDITS
    assert nufi.calls == []
    assert ledger.get_credits(USER) == 0


def test_successful_submission_charges_and_registers(ledger_path):
    nufi = StubNufi(ProviderResponse(ok=True, status_code=200, body={"UUID": "U-5"}, request_id="U-5"))
    progress = []

    async def notify(text):
        progress.append(text)

    async def scenario():
        service, ledger, correlator = await build(ledger_path, nufi, balance=3)
        result = await service.submit(USER, "CURP1", "NSS1", notify=notify)
        return result, ledger, correlator

    result, ledger, correlator = asyncio.run(scenario())
    assert result.status == SubmissionStatus.SUBMITTED
    assert result.request_id == "U-5"
    assert "U-5" in result.reply
    assert ledger.get_credits(USER) == 2
    assert correlator.resolve("U-5") == USER
    assert nufi.calls == [("CURP1", "NSS1")]
    assert any("2" in text for text in progress)


@pytest.mark.parametrize("balance", [0, 1, 7])
def test_admin_is_never_charged(ledger_path, balance):
    async def scenario():
        nufi = StubNufi()
        service, ledger, _ = await build(ledger_path, nufi, balance=0)
        await ledger.set_credits(ADMIN, balance)
        result = await service.submit(ADMIN, "A", "B")
        return result, ledger

    result, ledger = asyncio.run(scenario())
    assert result.status == SubmissionStatus.SUBMITTED
    assert not result.charged
    assert ledger.get_credits(ADMIN) == balance


@pytest.mark.parametrize("balance", [0, 4])
def test_admin_provider_failure_needs_no_refund(ledger_path, balance):
    async def scenario():
        nufi = StubNufi(ProviderResponse(ok=False, status_code=500, body={"error": "x"}))
        service, ledger, _ = await build(ledger_path, nufi)
        await ledger.set_credits(ADMIN, balance)
        result = await service.submit(ADMIN, "A", "B")
        return result, ledger

    result, ledger = asyncio.run(scenario())
    assert result.status == SubmissionStatus.PROVIDER_ERROR
    assert not result.refunded
    assert ledger.get_credits(ADMIN) == balance


def test_provider_error_refunds_and_echoes_body(ledger_path):
    nufi = StubNufi(ProviderResponse(
        ok=False, status_code=401, body={"message": "Access denied due to invalid subscription key"}
    ))

    async def scenario():
        service, ledger, correlator = await build(ledger_path, nufi, balance=5)
        return await service.submit(USER, "A", "B"), ledger, correlator

    result, ledger, correlator = asyncio.run(scenario())
    assert result.status == SubmissionStatus.PROVIDER_ERROR
    assert result.refunded
    assert result.markdown
    assert "invalid subscription key" in result.reply
    assert ledger.get_credits(USER) == 5
    assert correlator.pending_count() == 0


def test_success_without_uuid_refunds(ledger_path):
    nufi = StubNufi(ProviderResponse(ok=True, status_code=200, body={"status": "ok"}))

    async def scenario():
        service, ledger, correlator = await build(ledger_path, nufi, balance=2)
        return await service.submit(USER, "A", "B"), ledger, correlator

    result, ledger, correlator = asyncio.run(scenario())
    assert result.status == SubmissionStatus.MISSING_REQUEST_ID
    assert '"status": "ok"' in result.reply
    assert ledger.get_credits(USER) == 2
    assert correlator.pending_count() == 0


def test_unexpected_error_refunds_then_propagates(ledger_path):
    nufi = StubNufi(error=RuntimeError("boom"))

    async def scenario():
        service, ledger, _ = await build(ledger_path, nufi, balance=2)
        with pytest.raises(RuntimeError):
            await service.submit(USER, "A", "B")
        return ledger

    ledger = asyncio.run(scenario())
    assert ledger.get_credits(USER) == 2


def test_end_to_end_submission_and_fallback_delivery(ledger_path):
    nufi = StubNufi(ProviderResponse(ok=True, status_code=200, body={"data": {"UUID": "U-123"}}, request_id="U-123"))
    bot = FakeBot()

    async def scenario():
        service, ledger, correlator = await build(ledger_path, nufi, balance=3)
        callbacks = CallbackService(bot, correlator)

        result = await service.submit(USER, "A1", "B2")
        balance_after_submit = ledger.get_credits(USER)

        await callbacks.deliver({"data": {"UUID": "U-123", "empleos": [{"patron": "ACME"}]}})
        return result, balance_after_submit, correlator

    result, balance, correlator = asyncio.run(scenario())
    assert result.status == SubmissionStatus.SUBMITTED
    assert balance == 2
    assert nufi.calls == [("A1", "B2")]
    assert [m["chat_id"] for m in bot.messages] == [USER]
    assert [d["chat_id"] for d in bot.documents] == [USER]
    assert correlator.resolve("U-123") == "default"


def test_nufi_service_builds_request_and_reads_uuid():
    from app.services.nufi_service import NufiService

    seen = {}

    def handler(request: httpx.Request):
        seen["headers"] = request.headers
        seen["body"] = request.read()
        return httpx.Response(200, json={"status": "success", "data": {"uuid": "abc-1"}})

    nufi = NufiService(
        api_key="KEY",
        api_url="https://nufi.test/historial",
        webhook_url="https://bot.test/webhook/s3cret",
        transport=httpx.MockTransport(handler)
    )
    response = asyncio.run(nufi.submit_historial("CURP", "NSS"))

    assert response.ok
    assert response.request_id == "abc-1"
    assert seen["headers"]["NUFI-API-KEY"] == "KEY"
    assert b'"webhook":"https://bot.test/webhook/s3cret"' in seen["body"].replace(b" ", b"")
    assert b'"curp":"CURP"' in seen["body"].replace(b" ", b"")


def test_nufi_service_keeps_non_json_error_body_as_text():
    from app.services.nufi_service import NufiService

    def handler(request):
        return httpx.Response(500, text="<html>oops</html>")

    nufi = NufiService("KEY", "https://nufi.test", "https://bot.test/w", transport=httpx.MockTransport(handler))
    response = asyncio.run(nufi.submit_historial("C", "N"))

    assert not response.ok
    assert response.status_code == 500
    assert response.body == "<html>oops</html>"
    assert response.request_id is None


def test_plain_text_gateway_error_is_echoed_and_refunded(ledger_path):
    from app.services.nufi_service import NufiService

    def handler(request):
        return httpx.Response(502, text="Bad Gateway: upstream NUFI unavailable")

    nufi = NufiService("KEY", "https://nufi.test", "https://bot.test/w", transport=httpx.MockTransport(handler))

    async def scenario():
        service, ledger, _ = await build(ledger_path, nufi, balance=5)
        return await service.submit(USER, "A", "B"), ledger

    result, ledger = asyncio.run(scenario())
    assert result.status == SubmissionStatus.PROVIDER_ERROR
    assert "Bad Gateway: upstream NUFI unavailable" in result.reply
    assert result.refunded
    assert ledger.get_credits(USER) == 5


def test_long_provider_error_is_truncated(ledger_path):
    nufi = StubNufi(ProviderResponse(ok=False, status_code=500, body="x" * 10000))

    async def scenario():
        service, _, _ = await build(ledger_path, nufi, balance=1)
        return await service.submit(USER, "A", "B")

    result = asyncio.run(scenario())
    assert result.reply.count("x") == JSON_PREVIEW_LIMIT
    assert len(result.reply) < 4096


def test_nufi_service_transport_failure_is_a_failed_response():
    from app.services.nufi_service import NufiService

    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    nufi = NufiService("KEY", "https://nufi.test", "https://bot.test/w", transport=httpx.MockTransport(handler))
    response = asyncio.run(nufi.submit_historial("C", "N"))

    assert not response.ok
    assert "refused" in response.body["error"]
