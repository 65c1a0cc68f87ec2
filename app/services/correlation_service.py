"""
app/services/correlation_service.py

Purpose: Maps NUFI request UUIDs to the chat that asked for them

- register() when a lookup is accepted by NUFI
- resolve() when the callback arrives (falls back to a default chat)
- release() once the callback has been handled
- Entries older than the TTL are swept and reported as timed out

State is process-local; a restart forgets every pending request.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PendingRequest:
    request_id: str
    chat_id: str
    registered_at: float


class RequestCorrelator:
    """
    In-memory request_id -> chat_id map with per-entry expiry.
    """

    def __init__(
        self,
        default_chat_id: str,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic
    ):
        self.default_chat_id = str(default_chat_id)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._pending: Dict[str, PendingRequest] = {}

    def register(self, request_id: str, chat_id: str):
        """Associates a request with its chat, replacing any previous entry."""
        request_id = str(request_id)
        if request_id in self._pending:
            logger.warning(f"Request {request_id} re-registered, previous chat replaced")
        self._pending[request_id] = PendingRequest(
            request_id=request_id,
            chat_id=str(chat_id),
            registered_at=self._clock()
        )
        logger.info(f"Awaiting callback for {request_id} (chat {chat_id})")

    def resolve(self, request_id: Optional[str]) -> str:
        """
        Returns the chat that submitted request_id.

        Unknown or missing ids resolve to the default chat so a result is
        never dropped.
        """
        entry = self._pending.get(str(request_id)) if request_id else None
        if entry is None:
            logger.warning(
                f"No pending request for {request_id!r}, delivering to default chat {self.default_chat_id}"
            )
            return self.default_chat_id
        return entry.chat_id

    def release(self, request_id: Optional[str]):
        if request_id:
            self._pending.pop(str(request_id), None)

    def sweep_expired(self) -> List[PendingRequest]:
        """Removes and returns every entry older than the TTL."""
        cutoff = self._clock() - self.ttl_seconds
        expired = [entry for entry in self._pending.values() if entry.registered_at <= cutoff]
        for entry in expired:
            del self._pending[entry.request_id]
        if expired:
            logger.info(f"{len(expired)} pending request(s) timed out")
        return expired

    def pending_count(self) -> int:
        return len(self._pending)
