"""CORS for the TalabaHub web UI."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talabahub.config import Settings

# Response headers the UI reads
EXPOSED_HEADERS = (
    "Content-Disposition",
    "X-Request-Id",
    "X-RateLimit-Remaining",
    "X-RateLimit-Limit",
    "Retry-After",
)

# Every method a gateway route answers, plus preflight
ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


def setup_cors(app: FastAPI, settings: Settings) -> None:
    # Browsers reject credentialed responses for a wildcard origin
    wildcard = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=list(ALLOWED_METHODS),
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=list(EXPOSED_HEADERS),
    )
