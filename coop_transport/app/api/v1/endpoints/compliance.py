"""
Compliance API Endpoints.

Permit status evaluation and driver compliance roll-ups.
"""

from fastapi import APIRouter

from coop_transport.app.domain.compliance.driver_compliance import (
    DriverPermit, DriverRole, driver_compliance, summarize_permits
)
from coop_transport.app.domain.compliance.permit_status import parse_date, permit_status
from coop_transport.app.schemas.compliance import (
    DriverComplianceResponse, DriversComplianceRequest, DriversComplianceResponse,
    PermitStatusRequest, PermitStatusResponse, PermitsStatsResponse
)

router = APIRouter(prefix="/compliance", tags=["Compliance"])


@router.post("/permit-status", response_model=PermitStatusResponse)
async def evaluate_permit(request: PermitStatusRequest):
    """
    Classify a permit as valid, expiring, expired or missing.
    """
    result = permit_status(request.has_permit, request.expiry_date, request.today)
    return PermitStatusResponse.from_domain(result)


@router.post("/drivers", response_model=DriversComplianceResponse)
async def evaluate_drivers(request: DriversComplianceRequest):
    """
    Evaluate each driver against the permits their roles require.
    """
    today = parse_date(request.today, "today")

    results = []
    for driver in request.drivers:
        permits = {
            permit_type: DriverPermit(
                has_permit=permit.has_permit,
                expiry_date=permit.expiry_date,
                issue_date=permit.issue_date
            )
            for permit_type, permit in driver.permits.items()
        }
        role = DriverRole(**driver.role.model_dump()) if driver.role else None
        results.append(driver_compliance(driver.driver_id, permits, role, today))

    stats = summarize_permits(results)
    return DriversComplianceResponse(
        drivers=[
            DriverComplianceResponse(
                driver_id=result.driver_id,
                status=result.status,
                required_permits=result.required_permits,
                permits={
                    permit_type: PermitStatusResponse.from_domain(status)
                    for permit_type, status in result.permit_statuses.items()
                }
            )
            for result in results
        ],
        stats=PermitsStatsResponse(
            total=stats.total,
            compliant=stats.compliant,
            expiring=stats.expiring,
            expired=stats.expired,
            missing=stats.missing,
            no_requirements=stats.no_requirements,
            by_permit_type=stats.by_permit_type
        )
    )
