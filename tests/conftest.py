"""
Shared fakes for Telegram and NUFI.
"""

import base64
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from app.schemas.nufi import ProviderResponse


class FakeBot:
    """Records send_message / send_document calls instead of hitting Telegram."""

    def __init__(self, fail_on: Optional[str] = None):
        self.messages: List[dict] = []
        self.documents: List[dict] = []
        self.fail_on = fail_on

    async def send_message(self, chat_id, text, **kwargs):
        if self.fail_on == "send_message":
            raise RuntimeError("telegram down")
        self.messages.append({"chat_id": str(chat_id), "text": text, **kwargs})

    async def send_document(self, chat_id, document, **kwargs):
        if self.fail_on == "send_document":
            raise RuntimeError("telegram down")
        self.documents.append({
            "chat_id": str(chat_id),
            "filename": document.filename,
            "data": document.data,
            **kwargs
        })


class StubNufi:
    """Returns a canned ProviderResponse and counts calls."""

    def __init__(self, response: Optional[ProviderResponse] = None, error: Optional[Exception] = None):
        self.response = response or ProviderResponse(
            ok=True, status_code=200, body={"data": {"UUID": "U-1"}}, request_id="U-1"
        )
        self.error = error
        self.calls: List[tuple] = []

    async def submit_historial(self, curp: str, nss: str) -> ProviderResponse:
        self.calls.append((curp, nss))
        if self.error:
            raise self.error
        return self.response


class FakeMessage:
    """Minimal stand-in for aiogram's Message."""

    def __init__(self, chat_id, text: str = ""):
        self.chat = SimpleNamespace(id=chat_id)
        self.text = text
        self.answers: List[dict] = []

    async def answer(self, text, **kwargs):
        self.answers.append({"text": text, **kwargs})

    @property
    def texts(self) -> List[str]:
        return [a["text"] for a in self.answers]


def command(args: Optional[str] = None) -> Any:
    """Stand-in for aiogram's CommandObject."""
    return SimpleNamespace(args=args)


def make_pdf_base64(size: int = 600) -> tuple:
    pdf = b"%PDF-1.4\n" + b"x" * size + b"\n%%EOF\n"
    return pdf, base64.b64encode(pdf).decode()


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def fake_bot():
    return FakeBot()
