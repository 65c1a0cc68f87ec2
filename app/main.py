"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Wires ledger, correlator, NUFI client and Telegram bot
- Registers API routes (NUFI webhook, health)
- Runs Telegram polling and the pending-request sweep alongside the HTTP server
"""

from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
import asyncio
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.flow.dispatcher import create_bot, create_dispatcher, start_polling, stop_polling
from app.services.callback_service import CallbackService
from app.services.correlation_service import RequestCorrelator
from app.services.historial_service import HistorialService
from app.services.ledger_service import LedgerStore
from app.services.nufi_service import NufiService
from app.api import webhook

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


async def sweep_pending_requests(callback_service: CallbackService, interval: float):
    """Periodically expires requests NUFI never called back for."""
    while True:
        await asyncio.sleep(interval)
        try:
            await callback_service.expire_pending()
        except Exception as e:
            logger.error(f"Pending request sweep failed: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting historial bot...")

    try:
        validate_settings()
        logger.info("✅ Configuration validated")
    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    ledger = LedgerStore(settings.DATA_FILE, initial_allowed=settings.allowed_ids)
    await ledger.load()

    correlator = RequestCorrelator(
        default_chat_id=settings.default_chat_id,
        ttl_seconds=settings.PENDING_TTL_MINUTES * 60
    )
    nufi = NufiService(
        api_key=settings.NUFI_API_KEY,
        api_url=settings.NUFI_API_URL,
        webhook_url=settings.public_webhook_url,
        timeout=settings.NUFI_TIMEOUT
    )
    historial_service = HistorialService(
        ledger=ledger,
        correlator=correlator,
        nufi=nufi,
        admin_id=settings.ADMIN_ID,
        cost=settings.COST_PER_HISTORIAL
    )

    bot = create_bot(settings.BOT_TOKEN)
    dp = create_dispatcher(ledger, historial_service)
    callback_service = CallbackService(bot, correlator)

    app.state.ledger = ledger
    app.state.correlator = correlator
    app.state.callback_service = callback_service

    polling_task = await start_polling(bot, dp)
    sweep_task = asyncio.create_task(
        sweep_pending_requests(callback_service, settings.PENDING_SWEEP_SECONDS),
        name="pending-sweep"
    )

    logger.info(f"✅ Server ready on 0.0.0.0:{settings.PORT}")
    logger.info(f"🌍 Webhook público: {settings.public_webhook_url}")

    yield  # Application runs here

    logger.info("🛑 Shutting down historial bot...")

    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass

    try:
        await stop_polling(dp, polling_task)
        await bot.session.close()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)

    if correlator.pending_count():
        logger.warning(f"{correlator.pending_count()} pending request(s) lost on shutdown")
    logger.info("👋 Historial bot shut down")


app = FastAPI(
    title="Historial Bot",
    description="Telegram front end for NUFI labor-history lookups",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
)

add_exception_handlers(app)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log slow requests (PDF generation and Telegram uploads happen in-request)
    if process_time > 5.0:
        logger.warning(f"Slow request detected: {request.method} {request.url.path} ({process_time:.1f}s)")

    return response


app.include_router(webhook.router, tags=["Webhook"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "Historial Bot",
        "version": "1.0.0",
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
