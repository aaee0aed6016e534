"""
api/main.py -- FastAPI application factory for Skillfolio.

Run with:      uvicorn asgi:app --reload
               python main.py --reload

create_app(settings) builds the app. Everything that needs configuration --
the token service, both stores, the CORS origin -- gets it from the Settings
object handed in here, so tests can build an app against a throwaway database
without touching the environment.

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- lets the configured frontend origin call the API
  3. log_requests          -- one log line per request with latency

Lifespan handles startup (token service, stores) and shutdown (dispose engine
pools) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.experience import router as experience_router
from api.routes.profile import router as profile_router
from api.routes.public import router as public_router
from api.routes.skills import router as skills_router
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings
from core.errors import AppError
from profiles.store import ProfileStore

API_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("skillfolio.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared services on startup and release them on shutdown.

    Settings were attached by create_app(). Everything built here lives on
    app.state and is read-only or pool-managed, so concurrent requests can
    share it.
    """
    settings: Settings = app.state.settings
    logger.info("Skillfolio API starting up")
    app.state.tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
    app.state.user_store = UserStore(settings.database_url)
    app.state.profile_store = ProfileStore(settings.database_url)
    logger.info("Stores initialized")

    yield

    app.state.profile_store.close()
    app.state.user_store.close()
    logger.info("Skillfolio API shutdown complete")


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors (duplicate email, bad credentials, not found, ...)."""
    return _error(exc.status_code, exc.code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or path params fail validation."""
    return _error(422, "validation_error", "Request validation failed.", str(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Registered for Starlette's base class so router-level 404/405 responses
    use the same envelope as errors raised by the access guard.

    When detail is already a structured dict, use it directly as the error
    field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail))).model_dump(),
        headers=exc.headers,
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures: log the real error, tell the client nothing about it."""
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return _error(500, "storage_error", "A storage error occurred.")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


def health(request: Request) -> HealthResponse:
    """Return API liveness, version and whether the database answers."""
    try:
        request.app.state.user_store.ping()
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        return HealthResponse(status="degraded", version=API_VERSION, database="error")
    return HealthResponse(version=API_VERSION)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the Skillfolio FastAPI app.

    settings defaults to the process-wide get_settings() singleton.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Skillfolio API",
        description="Personal profiles with skills, endorsements and work experience.",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # add_middleware() inserts at the outside of the stack, so the last call
    # here is the first layer a request meets.
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(auth_router, prefix="/api", tags=["Auth"])
    app.include_router(profile_router, prefix="/api", tags=["Profile"])
    app.include_router(skills_router, prefix="/api", tags=["Skills"])
    app.include_router(experience_router, prefix="/api", tags=["Experience"])
    app.include_router(public_router, prefix="/api", tags=["Public"])
    app.add_api_route("/api/health", health, methods=["GET"], response_model=HealthResponse, tags=["Health"])

    return app
