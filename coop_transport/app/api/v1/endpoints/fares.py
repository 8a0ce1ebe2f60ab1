"""
Fare Calculation API Endpoints.

Transparent cost breakdowns, cost-sharing fares and passenger fare quotes.
"""

from fastapi import APIRouter

from coop_transport.app.core.config import settings
from coop_transport.app.domain.fares.cost_calculator import (
    FareSettings, TripCostBreakdown, compute_trip_cost
)
from coop_transport.app.domain.fares.fare_calculator import compute_fare
from coop_transport.app.domain.fares.quote_service import build_fare_quote
from coop_transport.app.schemas.fare import (
    DynamicFareRequest, DynamicFareResponse,
    FareQuoteRequest, FareQuoteResponse,
    TripCostRequest, TripCostBreakdownResponse
)

router = APIRouter(prefix="/fares", tags=["Fares"])


def _pick(value, default):
    return default if value is None else value


@router.post("/trip-cost", response_model=TripCostBreakdownResponse)
async def calculate_trip_cost(request: TripCostRequest):
    """
    Calculate the cost breakdown of a trip from tenant fare settings.
    """
    fare_settings = FareSettings.from_config(settings, **request.settings.model_dump())
    breakdown = compute_trip_cost(
        request.trip_distance_miles,
        request.trip_duration_hours,
        request.vehicle_capacity,
        fare_settings
    )
    return TripCostBreakdownResponse.from_domain(breakdown)


@router.post("/dynamic", response_model=DynamicFareResponse)
async def calculate_dynamic_fare(request: DynamicFareRequest):
    """
    Calculate break-even point, current fare and surplus for known trip costs.
    """
    breakdown = TripCostBreakdown.from_components(
        vehicle_capacity=request.vehicle_capacity,
        **request.costs.model_dump()
    )
    fare = compute_fare(
        breakdown,
        request.current_passengers,
        request.vehicle_capacity,
        _pick(request.break_even_occupancy_percent, settings.default_break_even_occupancy),
        surplus_percentages=(
            _pick(request.reserve_percent, settings.business_reserve_percent),
            _pick(request.dividend_percent, settings.dividend_percent),
            _pick(request.commonwealth_percent, settings.cooperative_commonwealth_percent),
        )
    )
    return DynamicFareResponse.from_domain(fare)


@router.post("/quote", response_model=FareQuoteResponse)
async def quote_fare(request: FareQuoteRequest):
    """
    Quote a fare for one passenger, with incentive messaging.

    Quotes expire because fares fall as more passengers book.
    """
    fare_settings = FareSettings.from_config(settings, **request.settings.model_dump())
    breakdown = compute_trip_cost(
        request.trip_distance_miles,
        request.trip_duration_hours,
        request.vehicle_capacity,
        fare_settings
    )
    quote = build_fare_quote(
        breakdown,
        request.current_passengers,
        fare_settings,
        passenger_tier=request.passenger_tier,
        quote_validity_minutes=settings.quote_validity_minutes,
        currency_symbol=settings.currency_symbol
    )
    return FareQuoteResponse.from_domain(quote, route_id=request.route_id)
