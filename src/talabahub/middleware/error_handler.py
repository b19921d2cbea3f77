"""Global error handlers: consistent JSON error responses.

Backend 4xx failures keep their status and message; anything else (5xx, or
a 2xx whose body could not be read) becomes a 502. A backend 401 clears the
request's session and points the UI at the login page; a 403 points it back
to the dashboard.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from talabahub.upstream.errors import UpstreamError, UpstreamUnavailable

logger = structlog.get_logger()

LOGIN_REDIRECT = "/login"
FORBIDDEN_REDIRECT = "/dashboard"


def upstream_error_response(request: Request, exc: UpstreamError) -> JSONResponse:
    """Map a backend error onto the gateway response."""
    if exc.is_auth_failure:
        session = getattr(request.state, "session", None)
        if session is not None:
            session.clear()
        logger.info("session_cleared", path=request.url.path, reason="upstream_401")
        return JSONResponse(
            status_code=401,
            content={"detail": exc.message, "redirect": LOGIN_REDIRECT},
            headers={"WWW-Authenticate": "Bearer"},
        )

    if exc.is_forbidden:
        return JSONResponse(
            status_code=403,
            content={"detail": exc.message, "redirect": FORBIDDEN_REDIRECT},
        )

    if not 400 <= exc.status < 500:
        logger.error("upstream_server_error", path=request.url.path, status=exc.status, error=exc.message)
        return JSONResponse(status_code=502, content={"detail": exc.message, "upstream_status": exc.status})

    return JSONResponse(status_code=exc.status, content={"detail": exc.message})


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle validation errors with consistent JSON format."""
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(UpstreamError)
    async def upstream_exception_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        return upstream_error_response(request, exc)

    @app.exception_handler(UpstreamUnavailable)
    async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
        logger.error("upstream_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=502, content={"detail": "Backend unavailable"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; always returns JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    """Validation errors without the raw ``ctx`` objects (exceptions are not JSON)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
