"""FastAPI session dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from talabahub.auth.session import SessionContext

_bearer = HTTPBearer(auto_error=False)


async def get_session_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),  # noqa: B008
) -> SessionContext:
    """Session for the current request; anonymous when no bearer token is sent.

    Kept on ``request.state`` so the error handlers can clear it on a backend 401.
    """
    if credentials is None:
        session = SessionContext.anonymous()
    else:
        session = SessionContext.from_token(credentials.credentials)
    request.state.session = session
    return session


async def require_session(
    session: SessionContext = Depends(get_session_context),  # noqa: B008
) -> SessionContext:
    """Raise 401 unless the caller carries a usable token."""
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail="Authentication required")
    return session


def require_role(*roles: str) -> Callable[..., Awaitable[SessionContext]]:
    """Dependency factory: 403 when the token's role is known and not in ``roles``."""

    async def _dependency(
        session: SessionContext = Depends(require_session),  # noqa: B008
    ) -> SessionContext:
        if not session.has_role(*roles):
            raise HTTPException(status_code=403, detail="Insufficient role")
        return session

    return _dependency
