"""
FastAPI Application Entry Point

Integrates:
  - Fonnte chat webhook
  - Tokopay payment webhook
  - Diagnostics and health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Config
from infra.bootstrap import RelayBootstrap
from payments.scheduler import AsyncioScheduler
from webhook.chat import router as chat_router
from webhook.diagnostics import router as diagnostics_router
from webhook.payment import router as payment_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("WhatsApp payment relay starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    missing = Config.missing()
    if missing:
        logger.warning(f"Missing required environment variables: {', '.join(missing)}")
    logger.info("=" * 60)

    yield

    # Shutdown: let already-scheduled notification stages finish
    relay = RelayBootstrap._instance
    if relay is not None and isinstance(relay.scheduler, AsyncioScheduler):
        if relay.scheduler.pending:
            logger.info(f"Waiting for {relay.scheduler.pending} notification sequence(s)...")
        await relay.scheduler.drain()
    logger.info("WhatsApp payment relay shutting down...")


# Create FastAPI app
app = FastAPI(
    title="WhatsApp Payment Relay",
    description="Fonnte chat bot with Tokopay payments and status notifications",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )


# Include routers
app.include_router(chat_router)
app.include_router(payment_router)
app.include_router(diagnostics_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    missing = Config.missing()
    if missing:
        return {"status": "not_ready", "reason": f"missing {', '.join(missing)}"}
    return {"status": "ready"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "WhatsApp Payment Relay",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "chat_webhook": "POST /api/webhook",
            "device_status": "GET /api/webhook/device",
            "payment_webhook": "POST /api/tokopay-webhook",
            "payment_status": "GET /api/payments/{reference_id}/status",
            "check_ip": "GET /api/check-ip",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.APP_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
