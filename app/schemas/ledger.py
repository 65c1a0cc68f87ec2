"""
app/schemas/ledger.py

Purpose: Ledger file schema

- Authorization flags and credit balances keyed by chat id
- Result of a credit consumption attempt

Example file:
    {
      "allowed": {"8071178317": true},
      "credits": {"8071178317": 10}
    }
"""

from pydantic import BaseModel, Field
from typing import Dict


class LedgerData(BaseModel):
    """In-memory and on-disk shape of the ledger."""
    allowed: Dict[str, bool] = Field(default_factory=dict)
    credits: Dict[str, int] = Field(default_factory=dict)


class ConsumeResult(BaseModel):
    """Outcome of LedgerStore.consume_credits()."""
    ok: bool
    remaining: int
