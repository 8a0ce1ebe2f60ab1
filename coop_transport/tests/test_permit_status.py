"""
Unit tests for permit status evaluation and compliance alert severity.
"""

import pytest
from datetime import date, datetime, timedelta

from coop_transport.app.core.exceptions import CalculationInputError
from coop_transport.app.domain.compliance.permit_status import alert_severity, parse_date, permit_status
from coop_transport.app.models.compliance_enums import AlertSeverity, PermitStatus


def test_expiring_soon(today):
    result = permit_status(True, today + timedelta(days=5), today)

    assert result.status == PermitStatus.EXPIRING
    assert result.days_until_expiry == 5
    assert result.label == "5 days left"


def test_expired_yesterday(today):
    result = permit_status(True, today - timedelta(days=1), today)

    assert result.status == PermitStatus.EXPIRED
    assert result.days_until_expiry == -1
    assert result.label == "Expired 1 days ago"


@pytest.mark.parametrize("days,expected", [
    (0, PermitStatus.EXPIRING),
    (30, PermitStatus.EXPIRING),
    (31, PermitStatus.VALID),
    (365, PermitStatus.VALID),
    (-30, PermitStatus.EXPIRED),
])
def test_window_boundaries(today, days, expected):
    assert permit_status(True, today + timedelta(days=days), today).status == expected


def test_valid_label(today):
    assert permit_status(True, today + timedelta(days=90), today).label == "Valid"


@pytest.mark.parametrize("has_permit,expiry", [
    (False, date(2026, 6, 1)),
    (True, None),
    (True, ""),
    (False, None),
])
def test_missing_permit(today, has_permit, expiry):
    result = permit_status(has_permit, expiry, today)

    assert result.status == PermitStatus.MISSING
    assert result.days_until_expiry is None
    assert result.label == "Not Provided"
    assert result.severity is None


def test_iso_strings_accepted():
    result = permit_status(True, "2026-01-25", "2026-01-15")
    assert result.days_until_expiry == 10


def test_iso_datetime_string_uses_calendar_date():
    result = permit_status(True, "2026-01-25T23:59:00", date(2026, 1, 15))
    assert result.days_until_expiry == 10


def test_datetime_values_accepted():
    result = permit_status(True, datetime(2026, 2, 14, 8, 0), datetime(2026, 1, 15, 18, 0))
    assert result.days_until_expiry == 30


@pytest.mark.parametrize("value", ["25/01/2026", "not a date", 20260125])
def test_malformed_dates_rejected(value):
    with pytest.raises(CalculationInputError):
        parse_date(value, "expiry_date")


def test_status_never_improves_as_days_pass():
    order = [PermitStatus.VALID, PermitStatus.EXPIRING, PermitStatus.EXPIRED]
    expiry = date(2026, 3, 1)
    previous = 0
    for offset in range(0, 120):
        status = permit_status(True, expiry, expiry - timedelta(days=60) + timedelta(days=offset)).status
        assert order.index(status) >= previous
        previous = order.index(status)


@pytest.mark.parametrize("days,expected", [
    (-3, AlertSeverity.CRITICAL),
    (0, AlertSeverity.CRITICAL),
    (7, AlertSeverity.CRITICAL),
    (8, AlertSeverity.HIGH),
    (14, AlertSeverity.HIGH),
    (15, AlertSeverity.MEDIUM),
    (30, AlertSeverity.MEDIUM),
    (31, None),
    (None, None),
])
def test_alert_severity(days, expected):
    assert alert_severity(days) == expected


@pytest.mark.parametrize("value", ["2026-02-01T00:00:00Z", "2026-02-01T00:00:00+00:00", "2026-02-01T09:15:00z"])
def test_utc_timestamps_accepted(value):
    assert parse_date(value, "expiry_date") == date(2026, 2, 1)
    assert permit_status(True, value, "2026-01-15").days_until_expiry == 17
