"""
app/services/historial_service.py

Purpose: /historial submission workflow

- Authorization check (allow-list)
- Credit check and pessimistic debit (administrator is never charged)
- NUFI submission
- Refund on NUFI failure or missing UUID
- Registers the UUID so the callback finds its chat

States:
    Idle -> AwaitingAuthorization -> AwaitingCredit -> Submitted
         -> AwaitingCallback | Refunded-and-Reported
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from app.core.logging import get_logger
from app.services.correlation_service import RequestCorrelator
from app.services.ledger_service import LedgerStore
from app.services.nufi_service import NufiService
from utils.constants import (
    CREDIT_USED_MESSAGE,
    DENY_MESSAGE,
    JSON_PREVIEW_LIMIT,
    MISSING_UUID_MESSAGE,
    NO_CREDITS_MESSAGE,
    PROVIDER_ERROR_MESSAGE,
    SENDING_MESSAGE,
    SUBMITTED_MESSAGE,
)

logger = get_logger(__name__)

Notify = Callable[[str], Awaitable[Any]]


class SubmissionStatus(str, Enum):
    DENIED = "DENIED"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    MISSING_REQUEST_ID = "MISSING_REQUEST_ID"
    SUBMITTED = "SUBMITTED"


@dataclass
class SubmissionResult:
    status: SubmissionStatus
    reply: str
    markdown: bool = False
    request_id: Optional[str] = None
    charged: bool = False
    refunded: bool = False


def format_json(body: Any, limit: int = JSON_PREVIEW_LIMIT) -> str:
    """Provider body for the error reply, cut to fit in one chat message."""
    if isinstance(body, str):
        text = body
    else:
        text = json.dumps(body, indent=2, ensure_ascii=False, default=str)
    return text[:limit]


async def _silent(text: str):
    return None


class HistorialService:
    """
    Orchestrates one lookup from command to pending callback.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        correlator: RequestCorrelator,
        nufi: NufiService,
        admin_id: str,
        cost: int = 1
    ):
        self.ledger = ledger
        self.correlator = correlator
        self.nufi = nufi
        self.admin_id = str(admin_id)
        self.cost = cost

    def is_admin(self, chat_id) -> bool:
        return bool(self.admin_id) and str(chat_id) == self.admin_id

    async def submit(self, chat_id, curp: str, nss: str, notify: Optional[Notify] = None) -> SubmissionResult:
        """
        Runs the submission flow for one /historial command.

        Args:
            chat_id: Requesting chat
            curp: CURP argument
            nss: NSS argument
            notify: Sends intermediate messages (credit used, sending...)

        Returns:
            SubmissionResult whose reply is the final message for the chat
        """
        chat_id = str(chat_id)
        notify = notify or _silent

        if not self.ledger.is_allowed(chat_id):
            logger.info(f"Historial denied for {chat_id}: not allowed")
            return SubmissionResult(SubmissionStatus.DENIED, DENY_MESSAGE)

        charged = not self.is_admin(chat_id)
        if charged:
            check = await self.ledger.consume_credits(chat_id, self.cost)
            if not check.ok:
                logger.info(f"Historial denied for {chat_id}: {check.remaining} credit(s)")
                return SubmissionResult(
                    SubmissionStatus.INSUFFICIENT_CREDITS,
                    NO_CREDITS_MESSAGE.format(remaining=check.remaining, cost=self.cost)
                )
            await notify(CREDIT_USED_MESSAGE.format(remaining=check.remaining))

        await notify(SENDING_MESSAGE)

        try:
            response = await self.nufi.submit_historial(curp, nss)
        except Exception:
            if charged:
                await self.ledger.add_credits(chat_id, self.cost)
            raise

        if not response.ok or not response.request_id:
            refunded = False
            if charged:
                await self.ledger.add_credits(chat_id, self.cost)
                refunded = True
                logger.info(f"Refunded {self.cost} credit(s) to {chat_id}")

            if not response.ok:
                return SubmissionResult(
                    SubmissionStatus.PROVIDER_ERROR,
                    PROVIDER_ERROR_MESSAGE.format(body=format_json(response.body)),
                    markdown=True,
                    charged=charged,
                    refunded=refunded
                )
            return SubmissionResult(
                SubmissionStatus.MISSING_REQUEST_ID,
                MISSING_UUID_MESSAGE.format(body=format_json(response.body)),
                markdown=True,
                charged=charged,
                refunded=refunded
            )

        self.correlator.register(response.request_id, chat_id)
        return SubmissionResult(
            SubmissionStatus.SUBMITTED,
            SUBMITTED_MESSAGE.format(request_id=response.request_id),
            request_id=response.request_id,
            charged=charged
        )
