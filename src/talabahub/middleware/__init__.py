"""Gateway middleware stack.

Outermost first: CORS, request id, rate limit (only with Redis configured),
then the routers. Starlette wraps in reverse order of ``add_middleware``.
"""

from fastapi import FastAPI

from talabahub.config import Settings
from talabahub.middleware.cors import setup_cors
from talabahub.middleware.error_handler import setup_error_handlers
from talabahub.middleware.logging import setup_logging
from talabahub.middleware.rate_limit import RateLimitMiddleware
from talabahub.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.redis_url:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
