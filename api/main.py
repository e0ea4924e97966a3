"""FastAPI application for the Draftmons league API."""

import asyncio
import logging
import re
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from core.auth import init_oauth
from core.config import get_settings
from core.csrf import HEADER_NAME as CSRF_HEADER
from core.csrf import CSRFMiddleware
from core.database import (
    create_engine,
    create_session_maker,
    create_tables,
    dispose_engine,
    init_db,
)
from core.errors import AppError, error_body
from core.logger import configure_logging
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from routes import (
    auth_router,
    build_crud_routers,
    health_router,
    pokemon_router,
    users_router,
)

configure_logging()
logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Typed application errors carry their own status and message."""
    if not isinstance(exc, AppError):
        return await global_exception_handler(request, exc)

    logger.info(
        "request.app_error",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", 500),
    )


def _format_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(
            str(part) for part in error["loc"] if part not in ("body", "query", "path")
        )
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts) or "Invalid request"


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Request body or parameter validation failures become a 400."""
    if not isinstance(exc, RequestValidationError):
        return await global_exception_handler(request, exc)

    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(exc.errors()),
        },
    )
    return JSONResponse(
        status_code=400,
        content=error_body(_format_request_errors(exc), 400),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Framework errors (unknown route, wrong method, 503) in the uniform shape."""
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine at startup, dispose on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    app.state.init_done = False
    app.state.init_error = None

    try:
        async with asyncio.timeout(60):
            oauth_task = asyncio.to_thread(init_oauth)
            db_task = init_db(app.state.engine)
            await asyncio.gather(oauth_task, db_task)

            if settings.auto_create_tables:
                await create_tables(app.state.engine)

        app.state.init_done = True
        logger.info("init.complete")
    except TimeoutError:
        logger.error(
            "init.timeout",
            extra={
                "init_done": app.state.init_done,
                "hint": "Startup hung, check DB connectivity",
            },
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error(
            "init.failed",
            extra={"error": str(e)},
            exc_info=True,
        )
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Draftmons API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Added before SessionMiddleware so the session wraps it and is already
# loaded when the token is checked.
app.add_middleware(
    CSRFMiddleware,
    exempt_urls=[re.compile(r"^/api/auth/callback$")],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.session_secret_key,
    session_cookie="session",
    max_age=_settings.session_max_age_seconds,
    same_site="lax",
    https_only=_settings.require_https,
)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-Id", CSRF_HEADER],
    expose_headers=["X-Request-Id"],
    max_age=600,
)

# Outermost, so every log line of the request carries its request_id.
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(auth_router)
# Before the generic /api/user/{id} routes so "me" is not read as an id.
app.include_router(users_router)
app.include_router(pokemon_router)
for router in build_crud_routers():
    app.include_router(router)
