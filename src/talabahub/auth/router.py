"""Session endpoints: whoami and logout."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from talabahub.auth.dependencies import get_session_context, require_session
from talabahub.auth.session import SessionContext
from talabahub.upstream.client import UpstreamClient, get_upstream

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.get("/session")
async def current_session(
    session: SessionContext = Depends(get_session_context),  # noqa: B008
) -> dict[str, object]:
    """What the gateway reads from the bearer token."""
    return {
        "authenticated": session.is_authenticated,
        "user_id": session.user_id,
        "role": session.role,
    }


@router.post("/logout")
async def logout(
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, str]:
    """Log out on the backend; the session is cleared even if the backend call fails."""
    token = session.token
    try:
        await upstream.logout(token)  # type: ignore[arg-type]
    finally:
        session.clear()
        logger.info("session_cleared")
    return {"detail": "Logged out"}
