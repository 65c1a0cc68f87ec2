"""
app/schemas/nufi.py

Purpose: NUFI consultar_historial request/response shapes

- Outbound body: CURP, NSS and the callback URL
- Normalized synchronous response (status, raw body, UUID)
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class HistorialRequest(BaseModel):
    """
    Body POSTed to NUFI.

    NUFI answers synchronously with a UUID and later POSTs the result to
    `webhook`.
    """
    curp: str = Field(..., description="CURP of the worker")
    nss: str = Field(..., description="NSS (social security number)")
    webhook: str = Field(..., description="Callback URL of this deployment")

    class Config:
        json_schema_extra = {
            "example": {
                "curp": "RIGJ030913HOCSRLA1",
                "nss": "50170318179",
                "webhook": "https://example.onrender.com/webhook/webhook_secret"
            }
        }


class ProviderResponse(BaseModel):
    """Synchronous NUFI answer, normalized."""
    ok: bool
    status_code: int = 0
    body: Any = Field(default_factory=dict)
    request_id: Optional[str] = None
