"""
app/flow/handlers/historial.py

Handles: /historial CURP NSS

- Validates arguments before any credit is charged
- Delegates authorization, charging and submission to HistorialService
- Relays progress messages and the final outcome to the chat
"""

from aiogram import Router
from aiogram.enums import ParseMode
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from app.core.logging import get_logger, LogContext
from app.services.historial_service import HistorialService
from app.services.ledger_service import LedgerStore
from utils.constants import DENY_MESSAGE, INTERNAL_ERROR_MESSAGE, USAGE_HISTORIAL
from utils.validation_utils import parse_historial_args

logger = get_logger(__name__)
router = Router(name="historial")


@router.message(Command("historial"))
async def cmd_historial(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    chat_id = str(message.chat.id)

    with LogContext(chat_id=chat_id, command="historial"):
        logger.info("Processing /historial")
        try:
            if not ledger.is_allowed(chat_id):
                await message.answer(DENY_MESSAGE)
                return

            parsed = parse_historial_args(command.args if command else None)
            if parsed is None:
                await message.answer(USAGE_HISTORIAL)
                return
            curp, nss = parsed

            result = await historial.submit(chat_id, curp, nss, notify=message.answer)

            logger.info(f"/historial for {chat_id} finished: {result.status.value}")
            if result.markdown:
                await message.answer(result.reply, parse_mode=ParseMode.MARKDOWN)
            else:
                await message.answer(result.reply)

        except Exception as e:
            logger.error(f"/historial failed for {chat_id}: {e}", exc_info=True)
            await message.answer(INTERNAL_ERROR_MESSAGE)
