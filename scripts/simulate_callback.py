"""
Simulate a NUFI callback

Posts a sample historial result to a running instance so the JSON preview
and PDF delivery can be checked in Telegram without calling NUFI.

Usage: python scripts/simulate_callback.py [UUID] [--with-pdf]
"""

import asyncio
import base64
import os
import sys

import httpx
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def build_payload(request_id: str, with_pdf: bool) -> dict:
    data = {
        "UUID": request_id,
        "nombre": "JUAN PEREZ LOPEZ",
        "curp": "PELJ800101HDFRPN09",
        "nss": "12345678901",
        "semanas_cotizadas": 812,
        "semanas_descontadas": 0,
        "semanas_reintegradas": 12,
        "empleos": [
            {
                "patron": "EMPRESA EJEMPLO SA DE CV",
                "registro_patronal": "Y1234567890",
                "entidad_federativa": "CIUDAD DE MEXICO",
                "fecha_alta": "01/02/2015",
                "fecha_baja": "Vigente",
                "salario_base": "512.30",
            }
        ],
    }
    if with_pdf:
        # Minimal but valid PDF, padded past the placeholder threshold
        pdf = b"%PDF-1.4\n" + b"%" + b"0" * 400 + b"\n%%EOF\n"
        data["base64_pdf"] = base64.b64encode(pdf).decode()
    return {"status": "success", "data": data}


async def send_callback():
    """Simulate what NUFI sends to our webhook"""
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    request_id = args[0] if args else "00000000-0000-0000-0000-000000000000"
    with_pdf = "--with-pdf" in sys.argv

    port = os.getenv("PORT", "3000")
    secret = os.getenv("WEBHOOK_SECRET", "webhook_secret")
    url = f"http://localhost:{port}/webhook/{secret}"

    print(f"🧪 Posting callback for {request_id} to {url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=build_payload(request_id, with_pdf), timeout=30.0)

        print(f"✅ Status: {response.status_code}")
        print(f"📥 Response: {response.text[:200]}")

    except httpx.HTTPError as e:
        print(f"❌ Error: {e}")


if __name__ == "__main__":
    asyncio.run(send_callback())
