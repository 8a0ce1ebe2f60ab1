"""
API tests for the calculation endpoints, exception handlers and middleware.
"""

import pytest


@pytest.mark.asyncio
async def test_health_returns_correlation_headers(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers


# --- Fares ---

@pytest.mark.asyncio
async def test_trip_cost_with_default_settings(client):
    response = await client.post("/v1/fares/trip-cost", json={
        "trip_distance_miles": 10,
        "trip_duration_hours": 1,
        "vehicle_capacity": 16,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["total_trip_cost"] == 22.75
    assert data["overhead_allocation"] == 2.5


@pytest.mark.asyncio
async def test_trip_cost_settings_override(client):
    response = await client.post("/v1/fares/trip-cost", json={
        "trip_distance_miles": 10,
        "trip_duration_hours": 1,
        "vehicle_capacity": 16,
        "settings": {"driver_hourly_rate": 20},
    })

    assert response.status_code == 200
    assert response.json()["driver_wages"] == 20.0


@pytest.mark.asyncio
async def test_dynamic_fare_with_surplus(client):
    response = await client.post("/v1/fares/dynamic", json={
        "costs": {"driver_wages": 100},
        "vehicle_capacity": 20,
        "current_passengers": 20,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["break_even_passengers"] == 12
    assert data["current_fare_per_person"] == 5.0
    assert data["surplus_amount"] == 66.67
    assert data["surplus_allocation"]["to_cooperative_commonwealth"] == 13.33


@pytest.mark.asyncio
async def test_dynamic_fare_without_passengers(client):
    response = await client.post("/v1/fares/dynamic", json={
        "costs": {"driver_wages": 100},
        "vehicle_capacity": 20,
        "current_passengers": 0,
    })

    data = response.json()
    assert data["current_fare_per_person"] is None
    assert data["surplus_allocation"] is None
    assert data["break_even_fare_per_person"] == 8.33


@pytest.mark.asyncio
async def test_child_quote_for_first_booking(client):
    response = await client.post("/v1/fares/quote", json={
        "route_id": 9,
        "trip_distance_miles": 10,
        "trip_duration_hours": 1,
        "vehicle_capacity": 16,
        "current_passengers": 0,
        "passenger_tier": "child",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["route_id"] == 9
    assert data["dynamic_fare"]["break_even_passengers"] == 10
    assert data["dynamic_fare"]["break_even_fare_per_person"] == 2.28
    assert data["quoted_fare"] == 1.14
    assert data["fare_reduction_message"] is None


@pytest.mark.asyncio
async def test_negative_distance_is_schema_error(client):
    response = await client.post("/v1/fares/trip-cost", json={
        "trip_distance_miles": -5,
        "trip_duration_hours": 1,
        "vehicle_capacity": 16,
    })

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


# --- Surplus ---

@pytest.mark.asyncio
async def test_allocate_surplus(client):
    response = await client.post("/v1/surplus/allocate", json={"total_surplus": 50, "trip_id": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["to_business_reserve"] == 20.0
    assert data["to_dividends"] == 20.0
    assert data["to_cooperative_commonwealth"] == 10.0
    assert data["trip_id"] == 3


@pytest.mark.asyncio
async def test_allocate_surplus_bad_percentages(client):
    response = await client.post("/v1/surplus/allocate", json={
        "total_surplus": 50,
        "reserve_percent": 40,
        "dividend_percent": 40,
        "commonwealth_percent": 10,
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_002"
    assert body["details"]["field"] == "percentages"


@pytest.mark.asyncio
async def test_route_allocation(client):
    response = await client.post("/v1/surplus/route-allocate", json={
        "gross_surplus": 100,
        "dividend_percent": 30,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["to_pool"] == 20.0
    assert data["allocation_breakdown"][-1] == "Remainder to pool: £20.00"


@pytest.mark.asyncio
async def test_smoothing_threshold(client):
    response = await client.post("/v1/surplus/smoothing", json={
        "service_cost": 50,
        "pool_available": 100,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["available_subsidy"] == 15.0
    assert data["effective_cost"] == 35.0
    assert data["minimum_passengers_needed"] == 2
    assert data["break_even_fare"] == 17.5


@pytest.mark.asyncio
async def test_period_dividends(client):
    response = await client.post("/v1/surplus/dividends", json={
        "gross_surplus": 1000,
        "cooperative_model": "passenger",
        "members": [
            {"member_id": 1, "member_type": "customer", "patronage_value": 30},
            {"member_id": 2, "member_type": "customer", "patronage_value": 10},
            {"member_id": 3, "member_type": "driver", "patronage_value": 99},
        ],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["dividend_pool"] == 500.0
    assert data["eligible_members"] == 2
    assert [d["dividend_amount"] for d in data["member_dividends"]] == [375.0, 125.0]


# --- Compliance ---

@pytest.mark.asyncio
async def test_permit_status(client):
    response = await client.post("/v1/compliance/permit-status", json={
        "has_permit": True,
        "expiry_date": "2026-01-20",
        "today": "2026-01-15",
    })

    assert response.status_code == 200
    assert response.json() == {
        "status": "expiring",
        "days_until_expiry": 5,
        "label": "5 days left",
        "severity": "critical",
    }


@pytest.mark.asyncio
async def test_permit_status_malformed_date(client):
    response = await client.post("/v1/compliance/permit-status", json={
        "has_permit": True,
        "expiry_date": "next tuesday",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_002"
    assert body["details"]["field"] == "expiry_date"


@pytest.mark.asyncio
async def test_driver_compliance_batch(client):
    response = await client.post("/v1/compliance/drivers", json={
        "today": "2026-01-15",
        "drivers": [
            {
                "driver_id": 1,
                "role": {"vulnerable_passengers": True},
                "permits": {"dbs": {"has_permit": True, "expiry_date": "2027-01-01"}},
            },
            {
                "driver_id": 2,
                "role": {"section19_driver": True},
                "permits": {"section19": {"has_permit": True, "expiry_date": "2026-01-01"}},
            },
            {"driver_id": 3},
        ],
    })

    assert response.status_code == 200
    data = response.json()
    assert [d["status"] for d in data["drivers"]] == ["compliant", "expired", "no_requirements"]
    assert data["drivers"][1]["permits"]["section19"]["label"] == "Expired 14 days ago"
    assert data["stats"]["total"] == 3
    assert data["stats"]["expired"] == 1
    assert data["stats"]["by_permit_type"]["dbs"]["valid"] == 1


# --- Input checks independent of booking level ---

@pytest.mark.asyncio
@pytest.mark.parametrize("passengers", [5, 20])
async def test_dynamic_fare_bad_percentages_rejected_below_and_above_break_even(client, passengers):
    response = await client.post("/v1/fares/dynamic", json={
        "costs": {"driver_wages": 100},
        "vehicle_capacity": 20,
        "current_passengers": passengers,
        "reserve_percent": 90,
    })

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_002"


@pytest.mark.asyncio
async def test_oversized_surplus_is_validation_error(client):
    response = await client.post("/v1/surplus/allocate", json={"total_surplus": 1e27})

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_002"
    assert body["details"]["field"] == "total_surplus"


# --- Service price and pool ---

@pytest.mark.asyncio
async def test_service_price_with_pool_subsidy(client):
    # Subsidy min(50% of 200, 30% of 110) = 33, effective cost 77
    response = await client.post("/v1/surplus/service-price", json={
        "service_cost": 110,
        "pool_available": 200,
        "current_bookings": 1,
        "max_acceptable_fare": 50,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["subsidy"]["available_subsidy"] == 33.0
    assert data["subsidy"]["minimum_passengers_needed"] == 2
    assert data["passengers_saved"] == 1
    assert data["member_price"] == 77.0
    assert data["non_member_price"] == 92.4
    assert data["is_viable"] is False
    assert data["message"] == "Need 1 more passenger to reach break-even. Surplus saved 1 passengers!"


@pytest.mark.asyncio
async def test_apply_pool_subsidy(client):
    response = await client.post("/v1/surplus/pool/apply-subsidy", json={
        "route_id": 4,
        "pool_balance": 20,
        "amount": 15,
        "service_date": "2026-01-11",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["transaction_type"] == "subsidy_applied"
    assert data["pool_balance_before"] == 20.0
    assert data["pool_balance_after"] == 5.0
    assert data["service_date"] == "2026-01-11"


@pytest.mark.asyncio
async def test_apply_pool_subsidy_above_balance_conflicts(client):
    response = await client.post("/v1/surplus/pool/apply-subsidy", json={
        "route_id": 4,
        "pool_balance": 5,
        "amount": 10,
    })

    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ERR_SURPLUS_001"
    assert body["details"] == {"requested": "10.00", "available": "5.00"}


@pytest.mark.asyncio
async def test_permit_status_accepts_utc_timestamp(client):
    response = await client.post("/v1/compliance/permit-status", json={
        "has_permit": True,
        "expiry_date": "2026-02-01T00:00:00Z",
        "today": "2026-01-15",
    })

    assert response.status_code == 200
    assert response.json()["days_until_expiry"] == 17
