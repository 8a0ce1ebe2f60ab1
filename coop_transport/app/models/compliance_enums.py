"""
Permit and compliance enumerations.
"""

import enum


class PermitStatus(str, enum.Enum):
    """Permit status enumeration, best first."""
    VALID = "valid"  # More than 30 days left
    EXPIRING = "expiring"  # 0 to 30 days left
    EXPIRED = "expired"  # Expiry date has passed
    MISSING = "missing"  # No permit or no expiry date on record


class PermitType(str, enum.Enum):
    """Driver permit type enumeration."""
    DBS = "dbs"  # Disclosure and Barring Service check
    SECTION19 = "section19"
    SECTION22 = "section22"
    MOT = "mot"


class AlertSeverity(str, enum.Enum):
    """Compliance alert severity enumeration."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class ComplianceStatus(str, enum.Enum):
    """Driver-level compliance roll-up enumeration."""
    COMPLIANT = "compliant"
    EXPIRING = "expiring"
    MISSING = "missing"
    EXPIRED = "expired"
    NO_REQUIREMENTS = "no_requirements"
