"""Discount claim lifecycle: status table, countdown and copy acknowledgement.

State progression: pending -> active -> {used, expired, cancelled}
Every transition is made by the backend; this module only reads status.
Expiry shown to the user is derived from (status, expires_at, now) and is
never written back as a status.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import quote


class ClaimStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


STATUS_LABELS: dict[ClaimStatus, str] = {
    ClaimStatus.PENDING: "Kutilmoqda",
    ClaimStatus.ACTIVE: "Faol",
    ClaimStatus.USED: "Ishlatilgan",
    ClaimStatus.EXPIRED: "Muddati tugagan",
    ClaimStatus.CANCELLED: "Bekor qilingan",
}

STATUS_VARIANTS: dict[ClaimStatus, str] = {
    ClaimStatus.PENDING: "warning",
    ClaimStatus.ACTIVE: "primary",
    ClaimStatus.USED: "success",
    ClaimStatus.EXPIRED: "danger",
    ClaimStatus.CANCELLED: "danger",
}

VALID_TRANSITIONS: dict[ClaimStatus, list[ClaimStatus]] = {
    ClaimStatus.PENDING: [ClaimStatus.ACTIVE, ClaimStatus.USED, ClaimStatus.EXPIRED, ClaimStatus.CANCELLED],
    ClaimStatus.ACTIVE: [ClaimStatus.USED, ClaimStatus.EXPIRED, ClaimStatus.CANCELLED],
    ClaimStatus.USED: [],
    ClaimStatus.EXPIRED: [],
    ClaimStatus.CANCELLED: [],
}

TERMINAL_STATUSES = frozenset(s for s, targets in VALID_TRANSITIONS.items() if not targets)

# Filter buttons in display order; "all" is the non-filtering sentinel
STATUS_FILTERS: tuple[str, ...] = ("all", "active", "pending", "used", "expired", "cancelled")

EXPIRED_LABEL = "Muddati tugagan"
ALL_FILTER_LABEL = "Barchasi"


def filter_label(status_filter: str) -> str:
    if status_filter == "all":
        return ALL_FILTER_LABEL
    return STATUS_LABELS[ClaimStatus(status_filter)]


def validate_transition(current: ClaimStatus, target: ClaimStatus) -> None:
    """Validate an observed status change. Raises ValueError if it is not allowed."""
    valid = VALID_TRANSITIONS.get(current, [])
    if target not in valid:
        raise ValueError(
            f"Invalid transition: {current.value} -> {target.value}. "
            f"Valid transitions: {[s.value for s in valid]}"
        )


def is_regression(previous: ClaimStatus, observed: ClaimStatus) -> bool:
    """True when a fresh read contradicts monotonic progress (e.g. used -> active)."""
    if previous == observed:
        return False
    try:
        validate_transition(previous, observed)
    except ValueError:
        return True
    return False


def status_filter_param(status_filter: str) -> str | None:
    """Backend ``status`` query value for a filter; ``all`` means no filter."""
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter}")
    return None if status_filter == "all" else status_filter


def can_cancel(status: ClaimStatus) -> bool:
    return status == ClaimStatus.ACTIVE


def can_copy(status: ClaimStatus) -> bool:
    return status == ClaimStatus.ACTIVE


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes from the backend as UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


@dataclass(frozen=True)
class Countdown:
    """Remaining time until ``expires_at``, split for display."""

    days: int
    hours: int
    minutes: int
    seconds: int
    total_seconds: int
    expired: bool

    def compact(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"

    def display(self) -> str:
        if self.expired:
            return EXPIRED_LABEL
        if self.days == 0:
            return f"{self.compact()} qoldi"
        return f"{self.days} kun {self.hours:02d} soat {self.minutes:02d} daq {self.seconds:02d} son"


def compute_countdown(expires_at: datetime, now: datetime) -> Countdown:
    """Countdown from ``now`` to ``expires_at``.

    Partial seconds round up, so the display only reads zero once ``now``
    reaches ``expires_at``.
    """
    remaining = (as_utc(expires_at) - as_utc(now)).total_seconds()
    if remaining <= 0:
        return Countdown(days=0, hours=0, minutes=0, seconds=0, total_seconds=0, expired=True)

    total = math.ceil(remaining)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(
        days=days, hours=hours, minutes=minutes, seconds=seconds,
        total_seconds=total, expired=False,
    )


def claim_countdown(status: ClaimStatus, expires_at: datetime, now: datetime) -> Countdown | None:
    """Countdown for active claims only; every other status shows a static date."""
    if status != ClaimStatus.ACTIVE:
        return None
    return compute_countdown(expires_at, now)


def qr_code_url(code: str, base_url: str, size: str = "150x150") -> str:
    """External QR image URL for a claim code (rendered by the QR service, not locally)."""
    data = quote(code, safe="-_.!~*'()")
    return f"{base_url}?size={size}&data={data}"


class CopyAcknowledgements:
    """Short-lived "copied" indicator, one slot per owner.

    Copying a second code replaces the first indicator. The indicator reverts
    on its own once ``window_seconds`` have passed.
    """

    def __init__(self, window_seconds: float = 2.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._slots: dict[str, tuple[str, float]] = {}

    def mark(self, owner: str, claim_id: str) -> float:
        """Open the window for ``claim_id``; returns seconds until it closes.

        Slots whose window has already closed are dropped here.
        """
        now = self._clock()
        self._slots = {o: slot for o, slot in self._slots.items() if slot[1] > now}
        self._slots[owner] = (claim_id, now + self.window_seconds)
        return self.window_seconds

    def __len__(self) -> int:
        return len(self._slots)

    def is_copied(self, owner: str, claim_id: str) -> bool:
        slot = self._slots.get(owner)
        if slot is None:
            return False
        copied_id, deadline = slot
        if self._clock() >= deadline:
            del self._slots[owner]
            return False
        return copied_id == claim_id
