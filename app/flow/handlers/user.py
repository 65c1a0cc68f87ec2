"""
app/flow/handlers/user.py

Handles: commands open to everyone

- /start: greeting and authorization status
- /id: shows the chat id to send to the administrator
- /saldo: credit balance (allow-listed chats only)
"""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from app.core.logging import get_logger
from app.services.historial_service import HistorialService
from app.services.ledger_service import LedgerStore
from utils.constants import (
    BALANCE_MESSAGE,
    CHAT_ID_MESSAGE,
    DENY_MESSAGE,
    START_AUTHORIZED,
    START_MESSAGE,
    START_UNAUTHORIZED,
)

logger = get_logger(__name__)
router = Router(name="user")


@router.message(CommandStart())
async def cmd_start(message: Message, ledger: LedgerStore):
    chat_id = str(message.chat.id)
    status = START_AUTHORIZED if ledger.is_allowed(chat_id) else START_UNAUTHORIZED
    await message.answer(START_MESSAGE + status)


@router.message(Command("id"))
async def cmd_id(message: Message):
    await message.answer(CHAT_ID_MESSAGE.format(chat_id=message.chat.id))


@router.message(Command("saldo"))
async def cmd_saldo(message: Message, ledger: LedgerStore, historial: HistorialService):
    chat_id = str(message.chat.id)
    if not ledger.is_allowed(chat_id):
        await message.answer(DENY_MESSAGE)
        return
    await message.answer(
        BALANCE_MESSAGE.format(credits=ledger.get_credits(chat_id), cost=historial.cost)
    )
