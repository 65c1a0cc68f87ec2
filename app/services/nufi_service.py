"""
app/services/nufi_service.py

Purpose: NUFI labor-history API client

- Submits consultar_historial requests (CURP + NSS + callback URL)
- Normalizes the synchronous answer into a ProviderResponse
  (non-JSON bodies are kept as text)
- Transport failures are reported as a failed response, never raised
"""

import httpx
from typing import Optional

from app.core.logging import get_logger
from app.schemas.nufi import HistorialRequest, ProviderResponse
from utils.payload_utils import extract_request_id

logger = get_logger(__name__)


class NufiService:
    """
    Service for calling the NUFI consultar_historial endpoint.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        webhook_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.webhook_url = webhook_url
        self._timeout = timeout
        self._transport = transport

    def build_request(self, curp: str, nss: str) -> HistorialRequest:
        return HistorialRequest(curp=str(curp), nss=str(nss), webhook=self.webhook_url)

    async def submit_historial(self, curp: str, nss: str) -> ProviderResponse:
        """
        Sends a lookup to NUFI.

        Args:
            curp: CURP
            nss: NSS

        Returns:
            ProviderResponse with ok=True only for a 2xx answer. The UUID
            (if any) is extracted with the same tolerant rules used for
            callbacks.
        """
        payload = self.build_request(curp, nss)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "NUFI-API-KEY": self.api_key,
        }

        logger.info(f"📤 Sending historial request to NUFI (curp={curp})")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    json=payload.model_dump(),
                    headers=headers
                )
        except httpx.TimeoutException:
            logger.error("NUFI API timeout")
            return ProviderResponse(ok=False, body={"error": "NUFI API timeout"})
        except httpx.HTTPError as e:
            logger.error(f"NUFI request failed: {e}")
            return ProviderResponse(ok=False, body={"error": str(e)})

        try:
            body = response.json()
        except ValueError:
            # HTML error pages and plain-text answers are echoed as-is
            body = response.text

        request_id = extract_request_id(body)

        if response.is_success:
            logger.info(f"✅ NUFI accepted request: status={response.status_code} uuid={request_id}")
        else:
            logger.error(f"❌ NUFI API error: {response.status_code} - {response.text[:500]}")

        return ProviderResponse(
            ok=response.is_success,
            status_code=response.status_code,
            body=body,
            request_id=request_id
        )
