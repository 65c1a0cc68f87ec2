"""
app/flow/dispatcher.py

Purpose: Telegram bot and dispatcher setup

- Creates the aiogram Bot
- Registers the command routers
- Injects the ledger and the historial service into every handler
- Runs long polling on the application's event loop
"""

import asyncio
from typing import Optional

from aiogram import Bot, Dispatcher

from app.core.logging import get_logger
from app.flow.handlers import admin, historial, user
from app.services.historial_service import HistorialService
from app.services.ledger_service import LedgerStore

logger = get_logger(__name__)


def create_bot(token: str) -> Bot:
    return Bot(token)


def create_dispatcher(ledger: LedgerStore, historial_service: HistorialService) -> Dispatcher:
    """
    Builds the dispatcher with all routers.

    Handlers receive `ledger` and `historial` as keyword arguments.
    """
    dp = Dispatcher(ledger=ledger, historial=historial_service)
    dp.include_routers(user.router, admin.router, historial.router)
    return dp


async def start_polling(bot: Bot, dp: Dispatcher) -> asyncio.Task:
    """
    Starts long polling in a background task.
    Signal handling is left to uvicorn.
    """
    logger.info("Starting Telegram polling...")
    return asyncio.create_task(
        dp.start_polling(bot, handle_signals=False),
        name="telegram-polling"
    )


async def stop_polling(dp: Dispatcher, task: Optional[asyncio.Task]):
    if task is None:
        return
    try:
        await dp.stop_polling()
    except RuntimeError:
        # polling never started
        task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    logger.info("Telegram polling stopped")
