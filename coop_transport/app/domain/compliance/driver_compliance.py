"""
Driver compliance roll-up.

A driver's roles decide which permits they must hold; their overall status is
the worst status among those permits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from coop_transport.app.domain.compliance.permit_status import PermitStatusResult, permit_status
from coop_transport.app.models.compliance_enums import ComplianceStatus, PermitStatus, PermitType

# Higher is worse. Missing ranks below expired: an expired permit is reported first.
COMPLIANCE_RANK = {
    ComplianceStatus.COMPLIANT: 0,
    ComplianceStatus.EXPIRING: 1,
    ComplianceStatus.MISSING: 2,
    ComplianceStatus.EXPIRED: 3,
}

PERMIT_TO_COMPLIANCE = {
    PermitStatus.VALID: ComplianceStatus.COMPLIANT,
    PermitStatus.EXPIRING: ComplianceStatus.EXPIRING,
    PermitStatus.MISSING: ComplianceStatus.MISSING,
    PermitStatus.EXPIRED: ComplianceStatus.EXPIRED,
}


@dataclass(frozen=True)
class DriverRole:
    vulnerable_passengers: bool = False
    section19_driver: bool = False
    section22_driver: bool = False
    vehicle_owner: bool = False


@dataclass(frozen=True)
class DriverPermit:
    has_permit: bool = False
    expiry_date: Any = None
    issue_date: Any = None


@dataclass(frozen=True)
class DriverCompliance:
    driver_id: int
    status: ComplianceStatus
    required_permits: List[PermitType]
    permit_statuses: Dict[PermitType, PermitStatusResult]


@dataclass
class PermitsStats:
    total: int = 0
    compliant: int = 0
    expiring: int = 0
    expired: int = 0
    missing: int = 0
    no_requirements: int = 0
    by_permit_type: Dict[str, Dict[str, int]] = field(default_factory=dict)


def required_permits(role: Optional[DriverRole]) -> List[PermitType]:
    if role is None:
        return []
    required = []
    if role.vulnerable_passengers:
        required.append(PermitType.DBS)
    if role.section19_driver:
        required.append(PermitType.SECTION19)
    if role.section22_driver:
        required.append(PermitType.SECTION22)
    if role.vehicle_owner:
        required.append(PermitType.MOT)
    return required


def driver_compliance(
    driver_id: int,
    permits: Mapping[PermitType, DriverPermit],
    role: Optional[DriverRole],
    today: Any = None
) -> DriverCompliance:
    """
    Evaluate one driver's compliance.

    Every permit on record is evaluated, but only the permits the driver's
    roles require count towards the overall status.
    """
    required = required_permits(role)
    statuses = {}
    for permit_type in PermitType:
        permit = permits.get(permit_type) or DriverPermit()
        statuses[permit_type] = permit_status(permit.has_permit, permit.expiry_date, today)

    if not required:
        overall = ComplianceStatus.NO_REQUIREMENTS
    else:
        overall = max(
            (PERMIT_TO_COMPLIANCE[statuses[p].status] for p in required),
            key=COMPLIANCE_RANK.__getitem__
        )

    return DriverCompliance(
        driver_id=driver_id,
        status=overall,
        required_permits=required,
        permit_statuses=statuses
    )


def summarize_permits(
    drivers: Sequence[DriverCompliance]
) -> PermitsStats:
    """Count drivers by overall status and permits by type and status."""
    stats = PermitsStats(total=len(drivers))
    for permit_type in PermitType:
        stats.by_permit_type[permit_type.value] = {s.value: 0 for s in PermitStatus}

    for driver in drivers:
        attr = driver.status.value
        setattr(stats, attr, getattr(stats, attr) + 1)
        for permit_type, result in driver.permit_statuses.items():
            stats.by_permit_type[permit_type.value][result.status.value] += 1

    return stats
