"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from coop_transport.app.api.v1.endpoints import fares, surplus, compliance

router = APIRouter()

# Fare transparency and quotes
router.include_router(fares.router)

# Surplus allocation, smoothing and dividends
router.include_router(surplus.router)

# Permit and driver compliance
router.include_router(compliance.router)
