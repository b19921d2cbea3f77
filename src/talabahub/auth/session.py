"""Explicit per-request session context.

The bearer token is issued and verified by the backend. The gateway only reads
its claims (role, subject) to decide which actions to offer; the backend stays
authoritative and rejects anything the token does not allow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import jwt
import structlog

logger = structlog.get_logger()

ROLES = ("student", "partner", "admin")


def read_claims(token: str) -> dict[str, Any]:
    """Decode JWT claims without signature verification.

    Expired tokens raise ``jwt.ExpiredSignatureError``; opaque (non-JWT) tokens
    yield an empty claim set.
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True},
            algorithms=["HS256", "RS256"],
        )
    except jwt.ExpiredSignatureError:
        raise
    except jwt.InvalidTokenError:
        return {}


@dataclass
class SessionContext:
    """Who is calling: token plus the claims the gateway cares about."""

    token: str | None = None
    user_id: str | None = None
    role: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def anonymous(cls) -> SessionContext:
        return cls()

    @classmethod
    def from_token(cls, token: str) -> SessionContext:
        """Build a session from a bearer token; an expired token gives an anonymous session."""
        try:
            claims = read_claims(token)
        except jwt.ExpiredSignatureError:
            logger.info("session_token_expired")
            return cls.anonymous()
        user_id = claims.get("sub") or claims.get("id")
        role = claims.get("role")
        return cls(
            token=token,
            user_id=str(user_id) if user_id is not None else None,
            role=role if role in ROLES else None,
            claims=claims,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def has_role(self, *roles: str) -> bool:
        """True when the role is one of ``roles``; an unknown role defers to the backend."""
        return self.role is None or self.role in roles

    def clear(self) -> None:
        """Forget the token (logout or backend 401)."""
        self.token = None
        self.user_id = None
        self.role = None
        self.claims = {}
