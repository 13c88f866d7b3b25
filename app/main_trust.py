"""
Steam Trust Check - API Service
Resolve a Steam profile, gather public signals, return a trust score.

Start with:
    uvicorn app.main_trust:app --host 0.0.0.0 --port 8000
or:
    python -m app.main_trust
"""
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from app.api.check import router as check_router, bad_request_response
from app.compute.pipeline import ProfileChecker
from app.config import get_settings

settings = get_settings()

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    ),
)
logger = structlog.get_logger()

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("service_starting", version=VERSION, environment=settings.ENVIRONMENT)
    if not settings.steam_enabled:
        logger.warning("steam_api_key_missing")

    app.state.checker = ProfileChecker.from_settings(settings)
    logger.info(
        "checker_initialized",
        cache_ttl=settings.CACHE_TTL_SECONDS,
        cache_max_entries=settings.CACHE_MAX_ENTRIES,
        upstream_timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )

    yield

    await app.state.checker.close()
    logger.info("service_stopped")


app = FastAPI(
    title="Steam Trust Check",
    description=(
        "Paste a Steam profile and get a quick trust snapshot built from public "
        "signals: account age, bans, library, friends, level and game hours."
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id", "X-Response-Time"],
)


@app.middleware("http")
async def request_middleware(request: Request, call_next):
    request_id = str(uuid.uuid4())[:8]
    start = time.time()
    request.state.request_id = request_id
    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.unbind_contextvars("request_id")
    duration_ms = round((time.time() - start) * 1000, 2)
    response.headers["X-Request-Id"] = request_id
    response.headers["X-Response-Time"] = f"{duration_ms}ms"
    if request.url.path != "/health":
        logger.info("request",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=duration_ms,
                    request_id=request_id)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request body.")
    return bad_request_response(f"{where}: {message}" if where else message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception",
                 path=request.url.path,
                 error=str(exc),
                 type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "Something went wrong. Please retry shortly.",
            "request_id": getattr(request.state, "request_id", "unknown"),
        },
    )


app.include_router(check_router)


# === Core endpoints ===

@app.get("/health")
async def health(request: Request):
    return {
        "status": "healthy",
        "service": "steam-trust-check",
        "version": VERSION,
        "checker": request.app.state.checker.status(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/")
async def root():
    return {
        "name": "Steam Trust Check",
        "version": VERSION,
        "endpoints": {
            "check": "POST /api/check {input, selected_title_id?, selected_title_name?}",
            "titles": "GET /api/titles",
            "health": "GET /health",
            "docs": "GET /docs",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main_trust:app",
        host=settings.CHECK_HOST,
        port=settings.CHECK_PORT,
        log_level=settings.LOG_LEVEL,
    )
