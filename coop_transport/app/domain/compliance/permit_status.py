"""
Permit Status Evaluator.

Classifies a permit (DBS, Section 19/22, MOT, organisational permits) from its
expiry date:

    no permit / no expiry date  -> missing
    expiry before today         -> expired   (days negative)
    0 to 30 days left           -> expiring
    more than 30 days left      -> valid
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from coop_transport.app.core.exceptions import CalculationInputError
from coop_transport.app.models.compliance_enums import AlertSeverity, PermitStatus

EXPIRING_WINDOW_DAYS = 30
CRITICAL_WINDOW_DAYS = 7
HIGH_WINDOW_DAYS = 14


@dataclass(frozen=True)
class PermitStatusResult:
    status: PermitStatus
    days_until_expiry: Optional[int] = None

    @property
    def label(self) -> str:
        """Human readable summary for the compliance table."""
        if self.status == PermitStatus.MISSING:
            return "Not Provided"
        if self.status == PermitStatus.EXPIRED:
            return f"Expired {abs(self.days_until_expiry)} days ago"
        if self.status == PermitStatus.EXPIRING:
            return f"{self.days_until_expiry} days left"
        return "Valid"

    @property
    def severity(self) -> Optional[AlertSeverity]:
        return alert_severity(self.days_until_expiry)


def parse_date(value: Any, field: str) -> Optional[date]:
    """
    Accept a date, a datetime or an ISO-8601 string.

    Empty values mean "no date on record" and return None.

    Raises:
        CalculationInputError: On a malformed string or unsupported type
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        # fromisoformat only understands a trailing Z from Python 3.11
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise CalculationInputError(f"{field} is not a valid ISO date", field=field, value=value)
    raise CalculationInputError(f"{field} must be a date", field=field, value=value)


def permit_status(has_permit: bool, expiry_date: Any, today: Any = None) -> PermitStatusResult:
    """
    Evaluate a permit against today's date.

    Args:
        has_permit: Whether the holder has the permit at all
        expiry_date: Permit expiry (date, datetime or ISO string)
        today: Reference date, defaults to the current date

    Returns:
        PermitStatusResult with the status and whole days until expiry
    """
    reference = parse_date(today, "today") or date.today()
    expiry = parse_date(expiry_date, "expiry_date")

    if not has_permit or expiry is None:
        return PermitStatusResult(status=PermitStatus.MISSING)

    days = (expiry - reference).days
    if days < 0:
        status = PermitStatus.EXPIRED
    elif days <= EXPIRING_WINDOW_DAYS:
        status = PermitStatus.EXPIRING
    else:
        status = PermitStatus.VALID

    return PermitStatusResult(status=status, days_until_expiry=days)


def alert_severity(days_until_expiry: Optional[int]) -> Optional[AlertSeverity]:
    """Severity of the compliance alert raised for a permit, or None when no alert is due."""
    if days_until_expiry is None:
        return None
    if days_until_expiry <= CRITICAL_WINDOW_DAYS:
        return AlertSeverity.CRITICAL
    if days_until_expiry <= HIGH_WINDOW_DAYS:
        return AlertSeverity.HIGH
    if days_until_expiry <= EXPIRING_WINDOW_DAYS:
        return AlertSeverity.MEDIUM
    return None
