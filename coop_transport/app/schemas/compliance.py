"""
Compliance Schemas.

Request and response bodies for permit status and driver compliance.
Dates travel as ISO strings and are parsed by the domain layer.
"""

from pydantic import BaseModel
from typing import Dict, List, Optional

from coop_transport.app.models.compliance_enums import (
    AlertSeverity, ComplianceStatus, PermitStatus, PermitType
)


class PermitStatusRequest(BaseModel):
    """Schema for evaluating a single permit."""
    has_permit: bool
    expiry_date: Optional[str] = None
    today: Optional[str] = None


class PermitStatusResponse(BaseModel):
    status: PermitStatus
    days_until_expiry: Optional[int]
    label: str
    severity: Optional[AlertSeverity]

    @classmethod
    def from_domain(cls, result) -> "PermitStatusResponse":
        return cls(
            status=result.status,
            days_until_expiry=result.days_until_expiry,
            label=result.label,
            severity=result.severity
        )


class DriverPermitIn(BaseModel):
    has_permit: bool = False
    expiry_date: Optional[str] = None
    issue_date: Optional[str] = None


class DriverRoleIn(BaseModel):
    vulnerable_passengers: bool = False
    section19_driver: bool = False
    section22_driver: bool = False
    vehicle_owner: bool = False


class DriverComplianceIn(BaseModel):
    driver_id: int
    permits: Dict[PermitType, DriverPermitIn] = {}
    role: Optional[DriverRoleIn] = None


class DriversComplianceRequest(BaseModel):
    """Schema for evaluating a batch of drivers."""
    drivers: List[DriverComplianceIn]
    today: Optional[str] = None


class DriverComplianceResponse(BaseModel):
    driver_id: int
    status: ComplianceStatus
    required_permits: List[PermitType]
    permits: Dict[PermitType, PermitStatusResponse]


class PermitsStatsResponse(BaseModel):
    total: int
    compliant: int
    expiring: int
    expired: int
    missing: int
    no_requirements: int
    by_permit_type: Dict[str, Dict[str, int]]


class DriversComplianceResponse(BaseModel):
    drivers: List[DriverComplianceResponse]
    stats: PermitsStatsResponse
