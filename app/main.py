# app/main.py
"""
Hospital bed tracker API.
Wires middleware, maps core errors to HTTP responses and mounts every router
under /api/v1. Tables and the status catalog are created on startup.
"""

import secrets
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import settings
from app.database import create_tables
from app.errors import BedTrackerError
from app.routers import beds, dashboard, health, history, sectors, services, statuses, tasks
from app.routers import settings as settings_router
from app.utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/v1"
OPEN_PATHS = {f"{API_PREFIX}/health", "/docs", "/redoc", "/openapi.json"}

ROUTERS = [
    (beds.router, "Beds"),
    (history.router, "History"),
    (tasks.router, "Tasks"),
    (services.router, "Services"),
    (sectors.router, "Sectors"),
    (statuses.router, "Statuses"),
    (settings_router.router, "Settings"),
    (dashboard.router, "Dashboard"),
    (health.router, "Health"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Bed tracker starting up...")
    create_tables()
    logger.info(f"Tables and status catalog ready | transition policy: {settings.TRANSITION_POLICY}")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT} (docs at /docs)")
    yield
    logger.info("Bed tracker shutting down...")


app = FastAPI(
    title="Hospital Bed Tracker API",
    description="Bed status lifecycle, history, tasks and live capacity per service and sector.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Gateway API key ──────────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """Shared secret between the gateway and this service. Disabled when API_KEY is empty."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in OPEN_PATHS:
            return await call_next(request)
        supplied = request.headers.get("X-API-Key", "")
        if not secrets.compare_digest(supplied, settings.API_KEY):
            logger.warning(f"Rejected request to {request.url.path}: bad API key")
            return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED,
                                content={"detail": "Invalid or missing API key"})
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request timing ───────────────────────────────────────────────────────────
@app.middleware("http")
async def time_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
    user = request.headers.get("X-User", "-")
    logger.debug(f"{request.method} {request.url.path} by {user} → {response.status_code} ({elapsed_ms}ms)")
    return response


# ── Error mapping ────────────────────────────────────────────────────────────
@app.exception_handler(BedTrackerError)
async def core_error_handler(request: Request, exc: BedTrackerError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"detail": "Internal server error"})


# ── Routers ──────────────────────────────────────────────────────────────────
for router, tag in ROUTERS:
    app.include_router(router, prefix=API_PREFIX, tags=[tag])
