"""
app/flow/handlers/admin.py

Handles: administrator commands

- /admin: command list
- /grant, /revoke: allow-list management
- /addcredits, /setcredits, /credits: balance management
- /users: allow-listed chats with balances

Every command answers "admin only" to anyone but ADMIN_ID.
"""

from typing import List, Optional, Tuple

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from app.core.logging import get_logger
from app.services.historial_service import HistorialService
from app.services.ledger_service import LedgerStore
from utils.constants import (
    ADMIN_HELP_MESSAGE,
    ADMIN_ONLY_MESSAGE,
    CREDITS_ADDED_MESSAGE,
    CREDITS_OF_MESSAGE,
    CREDITS_SET_MESSAGE,
    GRANTED_MESSAGE,
    NO_USERS_MESSAGE,
    REVOKED_MESSAGE,
    USAGE_ADDCREDITS,
    USAGE_CREDITS,
    USAGE_GRANT,
    USAGE_REVOKE,
    USAGE_SETCREDITS,
    USER_LINE,
    USERS_HEADER,
)
from utils.validation_utils import parse_amount

logger = get_logger(__name__)
router = Router(name="admin")


def split_args(command: Optional[CommandObject]) -> List[str]:
    if command is None or not command.args:
        return []
    return command.args.split()


def parse_target_amount(command: Optional[CommandObject]) -> Optional[Tuple[str, int]]:
    """CHAT_ID MONTO arguments, or None when either is missing/invalid."""
    args = split_args(command)
    if len(args) < 2:
        return None
    amount = parse_amount(args[1])
    if amount is None:
        return None
    return args[0], amount


async def _reject_non_admin(message: Message, historial: HistorialService) -> bool:
    if historial.is_admin(message.chat.id):
        return False
    logger.warning(f"Admin command from non-admin chat {message.chat.id}")
    await message.answer(ADMIN_ONLY_MESSAGE)
    return True


@router.message(Command("admin"))
async def cmd_admin(message: Message, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    await message.answer(ADMIN_HELP_MESSAGE)


@router.message(Command("grant"))
async def cmd_grant(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    args = split_args(command)
    if not args:
        await message.answer(USAGE_GRANT)
        return
    await ledger.grant(args[0])
    await message.answer(GRANTED_MESSAGE.format(user_id=args[0]))


@router.message(Command("revoke"))
async def cmd_revoke(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    args = split_args(command)
    if not args:
        await message.answer(USAGE_REVOKE)
        return
    await ledger.revoke(args[0])
    await message.answer(REVOKED_MESSAGE.format(user_id=args[0]))


@router.message(Command("addcredits"))
async def cmd_addcredits(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    parsed = parse_target_amount(command)
    if parsed is None:
        await message.answer(USAGE_ADDCREDITS)
        return
    target, amount = parsed
    balance = await ledger.add_credits(target, amount)
    await message.answer(CREDITS_ADDED_MESSAGE.format(user_id=target, credits=balance))


@router.message(Command("setcredits"))
async def cmd_setcredits(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    parsed = parse_target_amount(command)
    if parsed is None:
        await message.answer(USAGE_SETCREDITS)
        return
    target, amount = parsed
    balance = await ledger.set_credits(target, amount)
    await message.answer(CREDITS_SET_MESSAGE.format(user_id=target, credits=balance))


@router.message(Command("credits"))
async def cmd_credits(message: Message, command: CommandObject, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    args = split_args(command)
    if not args:
        await message.answer(USAGE_CREDITS)
        return
    await message.answer(CREDITS_OF_MESSAGE.format(user_id=args[0], credits=ledger.get_credits(args[0])))


@router.message(Command("users"))
async def cmd_users(message: Message, ledger: LedgerStore, historial: HistorialService):
    if await _reject_non_admin(message, historial):
        return
    users = ledger.allowed_users()
    if not users:
        await message.answer(NO_USERS_MESSAGE)
        return
    lines = [USER_LINE.format(user_id=user_id, credits=credits) for user_id, credits in users]
    await message.answer(USERS_HEADER + "\n".join(lines))
