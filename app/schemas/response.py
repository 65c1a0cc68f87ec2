"""
app/schemas/response.py

Purpose: HTTP response bodies shared by the API routes
"""

from pydantic import BaseModel
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None


class AckResponse(BaseModel):
    """Body returned to NUFI and to health probes."""
    ok: bool = True
