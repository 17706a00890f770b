"""FastAPI application entrypoint."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.api.deps import Session
from app.api.v1 import v1_router
from app.core.config import get_settings
from app.core.database import init_db
from app.core.errors import AppError
from app.core.logging import configure_logging

_settings = get_settings()
configure_logging(_settings.log_level, _settings.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure public tables exist (use Alembic in production)
    await init_db()
    logger.info("Mechanic Empire API started (%s)", _settings.environment)
    yield


app = FastAPI(
    title="Mechanic Empire API",
    version="0.1.0",
    description="Multi-tenant field service management for mobile mechanics",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Errors ───────────────────────────────────────────────────
@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)


# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check(session: Session) -> dict:
    start = time.monotonic()
    await session.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "environment": _settings.environment,
        "database_latency_ms": int((time.monotonic() - start) * 1000),
    }
