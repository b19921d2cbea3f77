"""Unit tests for the fraud alert status table."""

from __future__ import annotations

import pytest

from talabahub.fraud.alerts import (
    SEVERITY_LABELS,
    STATUS_LABELS,
    VALID_TRANSITIONS,
    AlertSeverity,
    AlertStatus,
    available_actions,
    filter_param,
    type_label,
    validate_transition,
)


class TestAlertStateMachine:
    def test_all_statuses_defined(self):
        assert set(VALID_TRANSITIONS) == set(AlertStatus)

    def test_new_offers_all_actions(self):
        assert available_actions(AlertStatus.NEW) == [
            AlertStatus.INVESTIGATING, AlertStatus.RESOLVED, AlertStatus.DISMISSED,
        ]

    def test_investigating_can_close(self):
        validate_transition(AlertStatus.INVESTIGATING, AlertStatus.RESOLVED)
        validate_transition(AlertStatus.INVESTIGATING, AlertStatus.DISMISSED)

    def test_closed_alerts_are_terminal(self):
        assert available_actions(AlertStatus.RESOLVED) == []
        assert available_actions(AlertStatus.DISMISSED) == []

    def test_cannot_reopen(self):
        with pytest.raises(ValueError, match="Invalid transition"):
            validate_transition(AlertStatus.RESOLVED, AlertStatus.INVESTIGATING)

    def test_cannot_go_back_to_new(self):
        with pytest.raises(ValueError, match="Invalid transition"):
            validate_transition(AlertStatus.INVESTIGATING, AlertStatus.NEW)


class TestLabels:
    def test_severity_labels(self):
        assert SEVERITY_LABELS[AlertSeverity.CRITICAL] == "Kritik"
        assert SEVERITY_LABELS[AlertSeverity.LOW] == "Past"

    def test_status_labels(self):
        assert STATUS_LABELS[AlertStatus.NEW] == "Yangi"
        assert STATUS_LABELS[AlertStatus.DISMISSED] == "Bekor qilingan"

    def test_type_labels(self):
        assert type_label("multiple_accounts") == "Ko'p akkauntlar"
        assert type_label("card_testing") == "card_testing"

    def test_filter_param(self):
        assert filter_param("all") is None
        assert filter_param("high") == "high"
