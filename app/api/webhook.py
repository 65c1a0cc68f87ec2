"""
app/api/webhook.py

Purpose: NUFI callback endpoint

- Receives the asynchronous historial result at /webhook/{secret}
- Unknown secrets get a 404
- Hands the payload to CallbackService
- 200 when delivered, 500 otherwise (NUFI may retry on non-200)
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.response import AckResponse
from app.services.callback_service import CallbackService
from utils.constants import WEBHOOK_GET_MESSAGE

logger = get_logger(__name__)
router = APIRouter()


def _check_secret(secret: str):
    if secret != settings.WEBHOOK_SECRET:
        logger.warning("Callback received on an unknown webhook path")
        raise HTTPException(status_code=404, detail="Not Found")


def get_callback_service(request: Request) -> CallbackService:
    return request.app.state.callback_service


@router.post("/webhook/{secret}")
async def nufi_callback(secret: str, request: Request):
    """
    NUFI posts the historial result here.

    The body is arbitrary JSON; fields are located by CallbackService.
    """
    _check_secret(secret)

    try:
        payload = await request.json()
        logger.info(f"📩 Webhook recibido: {str(payload)[:2000]}")

        await get_callback_service(request).deliver(payload or {})

    except Exception as e:
        logger.error(f"❌ Error en webhook: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"ok": False})

    return AckResponse().model_dump()


@router.get("/webhook/{secret}")
async def webhook_probe(secret: str):
    """Browsers and uptime checks hit this with GET."""
    _check_secret(secret)
    return PlainTextResponse(WEBHOOK_GET_MESSAGE, status_code=405)
