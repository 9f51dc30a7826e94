# app/main.py

import logging
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.exceptions import RetrievalFailedError, ServiceError, ValidationError
from app.logging_config import configure_logging, trace_id_var
from app.routers import public_router, services_router
from app.storage.factory import get_storage_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)
    logger.info(f"[STARTUP] Starting service-review-api (environment={settings.ENVIRONMENT})")

    # Fail before serving traffic if storage credentials are missing
    provider = get_storage_provider(settings)
    logger.info(f"[STARTUP] Storage provider ready: {provider.name}")

    app.state.http_client = httpx.AsyncClient(timeout=settings.FETCH_TIMEOUT_SECONDS)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("[SHUTDOWN] Upstream HTTP client closed")


app = FastAPI(title="Service Review API", lifespan=lifespan)

_cors_origins = get_settings().cors_origins
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(services_router)
app.include_router(public_router)


# ---------------------------------------------------------------------------
# Request tracing
# ---------------------------------------------------------------------------

@app.middleware("http")
async def trace_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    token = trace_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        trace_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    body: dict = {"detail": exc.message}

    if isinstance(exc, RetrievalFailedError):
        body["trail"] = exc.trail
        logger.warning(
            f"[ERROR] {exc.message}",
            extra={"event": "retrieval_failed", "attempts": exc.attempts, "status_code": exc.status_code},
        )
    elif isinstance(exc, ValidationError):
        if exc.details:
            body["errors"] = exc.details
    elif exc.status_code >= 500:
        logger.error(f"[ERROR] {type(exc).__name__}: {exc.message}", extra={"status_code": exc.status_code})

    return JSONResponse(status_code=exc.status_code, content=body)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "service-review-api"}
