"""Errors raised when talking to the TalabaHub REST backend."""

from __future__ import annotations

from typing import Any

DEFAULT_ERROR_MESSAGE = "An error occurred"


class UpstreamError(Exception):
    """The backend answered with a non-2xx status.

    ``message`` comes from the backend JSON body when it has one.
    """

    def __init__(self, status: int, message: str = DEFAULT_ERROR_MESSAGE, payload: Any = None) -> None:  # noqa: ANN401
        super().__init__(message)
        self.status = status
        self.message = message
        self.payload = payload

    @property
    def is_auth_failure(self) -> bool:
        return self.status == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403

    def __repr__(self) -> str:
        return f"UpstreamError(status={self.status}, message={self.message!r})"


class UpstreamUnavailable(Exception):
    """The backend could not be reached at all (connect error, timeout)."""
