"""
Centralized Test Configuration.
"""

import pytest
from datetime import date
from httpx import AsyncClient, ASGITransport

from coop_transport.app.main import app
from coop_transport.app.domain.fares.cost_calculator import FareSettings, TripCostBreakdown


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def today():
    """Fixed reference date so expiry arithmetic is deterministic."""
    return date(2026, 1, 15)


@pytest.fixture
def fare_settings():
    return FareSettings()


@pytest.fixture
def hundred_pound_trip():
    """A 20-seat trip costing exactly 100.00."""
    return TripCostBreakdown.from_components(vehicle_capacity=20, driver_wages=100)
