"""
app/services/callback_service.py

Purpose: Delivers NUFI callback results to Telegram

- Finds the requesting chat through the correlator
- Always sends a (truncated) JSON preview
- Sends the embedded base64 PDF when present, otherwise a generated one
  captioned as auto-generated
- Releases the correlation whatever happens
- Notifies chats whose request expired without a callback
"""

import base64
import binascii
import json
from typing import Any, Optional

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.types import BufferedInputFile

from app.core.exceptions import CallbackProcessingError
from app.core.logging import get_logger
from app.services.correlation_service import RequestCorrelator
from app.services.report_service import generate_fallback_pdf
from utils.constants import (
    FALLBACK_NOTICE_MESSAGE,
    FALLBACK_PDF_FILENAME,
    JSON_PREVIEW_LIMIT,
    RESULT_JSON_MESSAGE,
    RESULT_PDF_FILENAME,
    TIMED_OUT_MESSAGE,
)
from utils.payload_utils import extract_request_id, find_base64_document, pick_result_data

logger = get_logger(__name__)


def json_preview(payload: Any, limit: int = JSON_PREVIEW_LIMIT) -> str:
    """Pretty-printed payload cut to fit in one chat message."""
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)[:limit]


def decode_document(encoded: str) -> Optional[bytes]:
    """Decodes a base64 document; None when it is not valid base64."""
    try:
        return base64.b64decode(encoded)
    except (binascii.Error, ValueError):
        return None


class CallbackService:
    """
    Handles one NUFI callback at a time; no internal retries.
    """

    def __init__(self, bot: Bot, correlator: RequestCorrelator):
        self.bot = bot
        self.correlator = correlator

    async def deliver(self, payload: Any) -> str:
        """
        Sends the callback result to its chat.

        Args:
            payload: Decoded JSON body posted by NUFI

        Returns:
            Chat id the result was delivered to

        Raises:
            CallbackProcessingError: If any Telegram call fails
        """
        request_id = extract_request_id(payload)
        chat_id = self.correlator.resolve(request_id)

        logger.info(f"📩 Delivering NUFI result {request_id} to chat {chat_id}")

        try:
            await self.bot.send_message(
                chat_id,
                RESULT_JSON_MESSAGE.format(preview=json_preview(payload)),
                parse_mode=ParseMode.MARKDOWN
            )

            encoded = find_base64_document(payload)
            document = decode_document(encoded) if encoded else None
            if encoded and document is None:
                logger.warning(f"Embedded document of {request_id} is not valid base64")

            if document:
                await self.bot.send_document(
                    chat_id,
                    BufferedInputFile(document, filename=RESULT_PDF_FILENAME)
                )
                logger.info(f"✅ NUFI PDF delivered ({len(document)} bytes)")
            else:
                fallback = generate_fallback_pdf(pick_result_data(payload))
                await self.bot.send_document(
                    chat_id,
                    BufferedInputFile(fallback, filename=FALLBACK_PDF_FILENAME),
                    caption=FALLBACK_NOTICE_MESSAGE
                )
                logger.info("✅ Fallback PDF delivered")

        except Exception as e:
            logger.error(f"❌ Could not deliver NUFI result {request_id}: {e}", exc_info=True)
            raise CallbackProcessingError(
                f"Delivery of {request_id} failed",
                details=str(e)
            ) from e

        finally:
            self.correlator.release(request_id)

        return chat_id

    async def expire_pending(self) -> int:
        """
        Sweeps requests that never got a callback and tells their chats.

        Returns:
            Number of expired requests
        """
        expired = self.correlator.sweep_expired()
        minutes = int(self.correlator.ttl_seconds // 60)
        for entry in expired:
            try:
                await self.bot.send_message(
                    entry.chat_id,
                    TIMED_OUT_MESSAGE.format(request_id=entry.request_id, minutes=minutes)
                )
            except Exception as e:
                logger.error(f"Could not notify chat {entry.chat_id} of timeout: {e}")
        return len(expired)
