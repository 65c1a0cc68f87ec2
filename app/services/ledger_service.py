"""
app/services/ledger_service.py

Purpose: Authorization and credit ledger

- Loads the JSON ledger file at startup (reinitializes on missing/corrupt file)
- Rewrites the whole file on every mutation
- Credit balances never go below zero
- Mutations are serialized by a single lock (no lost updates)
"""

import asyncio
import json
import math
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from pydantic import ValidationError

from app.core.exceptions import LedgerError
from app.core.logging import get_logger
from app.schemas.ledger import ConsumeResult, LedgerData

logger = get_logger(__name__)


def _section(parsed: dict, name: str) -> dict:
    value = parsed.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Ledger section \"{name}\" is not an object, ignoring it")
        return {}
    return value


def repair_ledger(parsed: dict) -> LedgerData:
    """
    Builds LedgerData from a parsed file, one entry at a time.

    Any truthy allowed flag counts as granted. Credit values are coerced
    to non-negative whole numbers and non-numeric ones are dropped, so one
    bad value does not discard every other balance.
    """
    allowed = {}
    for user_id, flag in _section(parsed, "allowed").items():
        if flag:
            allowed[str(user_id)] = True

    credits = {}
    for user_id, amount in _section(parsed, "credits").items():
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            logger.warning(f"Ledger: dropping credit entry {user_id}={amount!r}")
            continue
        if amount != int(amount) or amount < 0:
            logger.warning(f"Ledger: credit entry {user_id}={amount!r} coerced")
        credits[str(user_id)] = max(0, int(amount))

    return LedgerData(allowed=allowed, credits=credits)


class LedgerStore:
    """
    Flat-file store of allowed chats and their credit balances.

    Reads are served from memory; every write goes through save(),
    which replaces the file contents.
    """

    def __init__(self, path: Union[str, Path], initial_allowed: Iterable[str] = ()):
        self.path = Path(path)
        self.initial_allowed = [str(user_id) for user_id in initial_allowed]
        self.data = LedgerData()
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load(self) -> LedgerData:
        """
        Reads the ledger file.

        A missing, unreadable or malformed file is replaced by an empty
        ledger in which the initial allow-list is granted. Never raises.
        """
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                raise ValueError("ledger root is not an object")
            self.data = repair_ledger(parsed)
            logger.info(
                f"Ledger loaded from {self.path}: "
                f"{len(self.data.allowed)} allowed, {len(self.data.credits)} balances"
            )
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ledger unavailable ({e}), starting with an empty ledger")
            self.data = LedgerData(allowed={user_id: True for user_id in self.initial_allowed})
            try:
                await self.save()
            except LedgerError:
                logger.error("Could not write initial ledger", exc_info=True)

        return self.data

    async def save(self):
        """
        Serializes the full ledger back to disk.

        Raises:
            LedgerError: If the file cannot be written
        """
        content = json.dumps(self.data.model_dump(), indent=2, ensure_ascii=False)
        try:
            await asyncio.to_thread(self.path.write_text, content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write ledger {self.path}: {e}")
            raise LedgerError(f"Could not write {self.path}", details=str(e)) from e

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def is_allowed(self, user_id) -> bool:
        return self.data.allowed.get(str(user_id)) is True

    async def grant(self, user_id):
        async with self._lock:
            self.data.allowed[str(user_id)] = True
            await self.save()
        logger.info(f"Granted access to {user_id}")

    async def revoke(self, user_id):
        """Clears the allowed flag. The balance is kept."""
        async with self._lock:
            self.data.allowed.pop(str(user_id), None)
            await self.save()
        logger.info(f"Revoked access for {user_id}")

    def allowed_users(self) -> List[Tuple[str, int]]:
        """Allow-listed chat ids with their balances, in insertion order."""
        return [(user_id, self.get_credits(user_id)) for user_id in self.data.allowed]

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def get_credits(self, user_id) -> int:
        return int(self.data.credits.get(str(user_id), 0))

    async def add_credits(self, user_id, delta: int) -> int:
        """
        Adds delta (may be negative) to the balance, clamped at zero.

        Returns:
            New balance
        """
        user_id = str(user_id)
        async with self._lock:
            balance = max(0, self.get_credits(user_id) + int(delta))
            self.data.credits[user_id] = balance
            await self.save()
        logger.info(f"Credits for {user_id} changed by {delta}: now {balance}")
        return balance

    async def set_credits(self, user_id, amount: int) -> int:
        """
        Sets the balance, clamped at zero.

        Returns:
            New balance
        """
        user_id = str(user_id)
        async with self._lock:
            balance = max(0, int(amount))
            self.data.credits[user_id] = balance
            await self.save()
        logger.info(f"Credits for {user_id} set to {balance}")
        return balance

    async def consume_credits(self, user_id, cost: int) -> ConsumeResult:
        """
        Debits cost if the balance covers it.

        Returns:
            ConsumeResult(ok=False) without touching the ledger when the
            balance is short, otherwise ok=True and the remaining balance
        """
        user_id = str(user_id)
        async with self._lock:
            current = self.get_credits(user_id)
            if current < cost:
                return ConsumeResult(ok=False, remaining=current)
            self.data.credits[user_id] = current - cost
            await self.save()
            remaining = self.data.credits[user_id]
        logger.info(f"Consumed {cost} credit(s) from {user_id}, {remaining} left")
        return ConsumeResult(ok=True, remaining=remaining)
