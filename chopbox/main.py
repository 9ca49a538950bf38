"""
ChopBox API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Create tables if not present
  3. Connect to Redis (short-link cache)
  4. Start the bit.ly HTTP client
  5. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from chopbox.config import settings
from chopbox.database import init_db
from chopbox.errors import ChopBoxError
from chopbox.telemetry import setup_tracing, instrument_app
from chopbox.clients.redis_client import init_redis, close_redis
from chopbox.clients.bitly_client import bitly_client
from chopbox.routers import chops, home, links, users

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of all external connections."""
    logger.info("Starting ChopBox API (env=%s)", settings.environment)

    await init_db()
    await init_redis()
    await bitly_client.start()

    logger.info("All services connected. API ready.")
    yield

    logger.info("Shutting down...")
    await bitly_client.stop()
    await close_redis()


app = FastAPI(
    title="ChopBox API",
    description=(
        "Microblogging feed: chops from the people you follow, "
        "favourites, comments and a chop-count leaderboard."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ChopBoxError)
async def chopbox_error_handler(request: Request, exc: ChopBoxError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(home.router, tags=["Home"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(chops.router, prefix="/chops", tags=["Chops"])
app.include_router(links.router, prefix="/links", tags=["Links"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
# Mounted at /metrics — scraped by Prometheus
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
