"""Fraud alert status table and labels.

new -> investigating -> {resolved, dismissed}
new -> {resolved, dismissed}
Resolved and dismissed alerts offer no further actions.
"""

from __future__ import annotations

from enum import Enum


class AlertStatus(str, Enum):
    NEW = "new"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertType(str, Enum):
    MULTIPLE_ACCOUNTS = "multiple_accounts"
    UNUSUAL_PATTERN = "unusual_pattern"
    LOCATION_MISMATCH = "location_mismatch"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"


VALID_TRANSITIONS: dict[AlertStatus, list[AlertStatus]] = {
    AlertStatus.NEW: [AlertStatus.INVESTIGATING, AlertStatus.RESOLVED, AlertStatus.DISMISSED],
    AlertStatus.INVESTIGATING: [AlertStatus.RESOLVED, AlertStatus.DISMISSED],
    AlertStatus.RESOLVED: [],
    AlertStatus.DISMISSED: [],
}

SEVERITY_LABELS: dict[AlertSeverity, str] = {
    AlertSeverity.LOW: "Past",
    AlertSeverity.MEDIUM: "O'rta",
    AlertSeverity.HIGH: "Yuqori",
    AlertSeverity.CRITICAL: "Kritik",
}

SEVERITY_VARIANTS: dict[AlertSeverity, str] = {
    AlertSeverity.LOW: "info",
    AlertSeverity.MEDIUM: "warning",
    AlertSeverity.HIGH: "danger",
    AlertSeverity.CRITICAL: "danger",
}

STATUS_LABELS: dict[AlertStatus, str] = {
    AlertStatus.NEW: "Yangi",
    AlertStatus.INVESTIGATING: "Tekshirilmoqda",
    AlertStatus.RESOLVED: "Hal qilingan",
    AlertStatus.DISMISSED: "Bekor qilingan",
}

STATUS_VARIANTS: dict[AlertStatus, str] = {
    AlertStatus.NEW: "warning",
    AlertStatus.INVESTIGATING: "info",
    AlertStatus.RESOLVED: "success",
    AlertStatus.DISMISSED: "info",
}

TYPE_LABELS: dict[str, str] = {
    AlertType.MULTIPLE_ACCOUNTS: "Ko'p akkauntlar",
    AlertType.UNUSUAL_PATTERN: "G'ayrioddiy harakat",
    AlertType.LOCATION_MISMATCH: "Joylashuv nomuvofiq",
    AlertType.SUSPICIOUS_ACTIVITY: "Shubhali faoliyat",
}

STATUS_FILTERS: tuple[str, ...] = ("all", "new", "investigating", "resolved", "dismissed")
SEVERITY_FILTERS: tuple[str, ...] = ("all", "critical", "high", "medium", "low")


def type_label(alert_type: str) -> str:
    """Localized label; types without one show the raw backend value."""
    return TYPE_LABELS.get(alert_type, alert_type)


def available_actions(status: AlertStatus) -> list[AlertStatus]:
    return list(VALID_TRANSITIONS.get(status, []))


def validate_transition(current: AlertStatus, target: AlertStatus) -> None:
    """Raises ValueError when ``target`` is not offered from ``current``."""
    valid = VALID_TRANSITIONS.get(current, [])
    if target not in valid:
        raise ValueError(
            f"Invalid transition: {current.value} -> {target.value}. "
            f"Valid transitions: {[s.value for s in valid]}"
        )


def filter_param(value: str) -> str | None:
    return None if value == "all" else value
