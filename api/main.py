"""
api/main.py -- FastAPI application factory for DevConnector.

Run with:      uvicorn asgi:app --reload
               python main.py --reload

create_app(settings) builds a fully wired app from an explicit Settings
object. Nothing in the request path reads configuration from module-level
state: the token issuer, the stores and the auth header name all come from
the Settings passed here and live on app.state.

Middleware stack (outermost to innermost):
  1. CORSMiddleware        -- adds CORS headers for allowed browser origins
  2. log_requests          -- one access-log line per request with latency

Lifespan handles startup (stores, token issuer) and shutdown (dispose DB
engines) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.posts import router as posts_router
from api.routes.v1.profile import router as profile_router
from api.routes.v1.users import router as users_router
from auth.store import IdentityStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings
from core.errors import AppError, InternalFailure
from social.store import SocialStore

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("devconnector.api")


# ---------------------------------------------------------------------------
# Error body helpers
# ---------------------------------------------------------------------------


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into [{msg, param, location}] items.

    loc is ("body", "email") for body fields, ("path", "post_id") for path
    params; the first element is the location, the rest the parameter path.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append(
            {
                "msg": err.get("msg", "Invalid value."),
                "param": ".".join(loc[1:]),
                "location": loc[0] if loc else "body",
            }
        )
    return errors


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the DevConnector ASGI app.

    Args:
        settings: Configuration to wire in. Defaults to get_settings(), which
                  reads the environment; tests pass their own instance.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create shared resources before the first request, dispose after the last.

        Everything before yield runs on startup; everything after yield runs
        on shutdown.
        """
        logger.info("DevConnector API starting up")
        app.state.token_issuer = TokenIssuer(settings)
        app.state.identity_store = IdentityStore(settings.database_url)
        app.state.social_store = SocialStore(settings.database_url)
        logger.info("Stores initialized")

        yield

        app.state.social_store.close()
        app.state.identity_store.close()
        logger.info("DevConnector API shutdown complete")

    app = FastAPI(
        title="DevConnector API",
        description="Developer profiles and posts with likes and comments.",
        version=__version__,
        lifespan=lifespan,
    )
    # Settings are needed by dependencies (auth header name, bcrypt cost)
    # and must exist before lifespan runs.
    app.state.settings = settings

    # -----------------------------------------------------------------------
    # Middleware stack
    # -----------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", settings.auth_header],
        max_age=3600,
    )

    @app.middleware("http")
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

    # -----------------------------------------------------------------------
    # Router registration
    # -----------------------------------------------------------------------

    app.include_router(users_router, prefix="/api/v1", tags=["Users"])
    app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
    app.include_router(profile_router, prefix="/api/v1", tags=["Profile"])
    app.include_router(posts_router, prefix="/api/v1", tags=["Posts"])

    # -----------------------------------------------------------------------
    # Exception handlers
    #
    # Every failure renders as {"msg": ...}, or {"errors": [...]} for input
    # validation, so clients parse one shape regardless of status code.
    # -----------------------------------------------------------------------

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, InternalFailure):
            logger.error("Internal failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 400 with field-level messages when the body or params fail validation."""
        return JSONResponse(status_code=400, content={"errors": _validation_errors(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unknown routes (404) and wrong methods (405) get the same {"msg"} envelope."""
        return JSONResponse(status_code=exc.status_code, content={"msg": str(exc.detail)})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalFailure().to_body())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected server errors.

        The traceback goes to the log only; the client gets a generic message
        so internal detail never leaks into responses.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalFailure().to_body())

    # -----------------------------------------------------------------------
    # Health endpoint
    #
    # Registered on the app (not a router) so it is reachable regardless of
    # router registration state. No authentication.
    # -----------------------------------------------------------------------

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
    def health(request: Request) -> HealthResponse:
        """Return liveness, version and a database round-trip check."""
        try:
            db_ok = request.app.state.identity_store.ping() and request.app.state.social_store.ping()
        except SQLAlchemyError:
            logger.exception("Health check database ping failed")
            db_ok = False
        return HealthResponse(
            status="healthy" if db_ok else "degraded",
            version=__version__,
            components={"app": "ok", "database": "ok" if db_ok else "error"},
        )

    return app
