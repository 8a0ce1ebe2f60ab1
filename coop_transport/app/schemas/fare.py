"""
Fare Schemas.

Request and response bodies for the fare calculation endpoints.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from coop_transport.app.models.fare_enums import FareTier
from coop_transport.app.schemas.surplus import SurplusAllocationResponse


def money(value) -> Optional[float]:
    """Decimal amount to a JSON number, keeping None."""
    return None if value is None else float(value)


class FareSettingsOverrides(BaseModel):
    """Per-request overrides of the tenant fare settings."""
    driver_hourly_rate: Optional[float] = Field(None, ge=0)
    fuel_price_per_mile: Optional[float] = Field(None, ge=0)
    vehicle_depreciation_per_mile: Optional[float] = Field(None, ge=0)
    annual_insurance_cost: Optional[float] = Field(None, ge=0)
    annual_maintenance_budget: Optional[float] = Field(None, ge=0)
    monthly_overhead_costs: Optional[float] = Field(None, ge=0)
    avg_trips_per_month: Optional[int] = Field(None, gt=0)
    default_break_even_occupancy: Optional[float] = Field(None, ge=0, le=1)
    business_reserve_percent: Optional[float] = Field(None, ge=0, le=100)
    dividend_percent: Optional[float] = Field(None, ge=0, le=100)
    cooperative_commonwealth_percent: Optional[float] = Field(None, ge=0, le=100)


class TripCostRequest(BaseModel):
    """Schema for calculating a trip's cost breakdown."""
    trip_distance_miles: float = Field(..., ge=0)
    trip_duration_hours: float = Field(..., ge=0)
    vehicle_capacity: int = Field(..., gt=0)
    settings: FareSettingsOverrides = FareSettingsOverrides()


class CostComponents(BaseModel):
    """Already-known cost components of a trip."""
    driver_wages: float = Field(0, ge=0)
    fuel_cost: float = Field(0, ge=0)
    vehicle_depreciation: float = Field(0, ge=0)
    insurance_allocation: float = Field(0, ge=0)
    maintenance_allocation: float = Field(0, ge=0)
    overhead_allocation: float = Field(0, ge=0)


class TripCostBreakdownResponse(BaseModel):
    """Schema for displaying a trip cost breakdown."""
    driver_wages: float
    fuel_cost: float
    vehicle_depreciation: float
    insurance_allocation: float
    maintenance_allocation: float
    overhead_allocation: float
    total_trip_cost: float
    trip_distance_miles: float
    trip_duration_hours: float
    vehicle_capacity: int
    calculated_at: datetime

    @classmethod
    def from_domain(cls, breakdown) -> "TripCostBreakdownResponse":
        return cls(
            driver_wages=money(breakdown.driver_wages),
            fuel_cost=money(breakdown.fuel_cost),
            vehicle_depreciation=money(breakdown.vehicle_depreciation),
            insurance_allocation=money(breakdown.insurance_allocation),
            maintenance_allocation=money(breakdown.maintenance_allocation),
            overhead_allocation=money(breakdown.overhead_allocation),
            total_trip_cost=money(breakdown.total_trip_cost),
            trip_distance_miles=float(breakdown.trip_distance_miles),
            trip_duration_hours=float(breakdown.trip_duration_hours),
            vehicle_capacity=breakdown.vehicle_capacity,
            calculated_at=breakdown.calculated_at
        )


class DynamicFareRequest(BaseModel):
    """Schema for calculating the dynamic fare of a trip from its costs."""
    costs: CostComponents
    vehicle_capacity: int = Field(..., gt=0)
    current_passengers: int = Field(..., ge=0)
    break_even_occupancy_percent: Optional[float] = Field(None, ge=0, le=1)
    reserve_percent: Optional[float] = Field(None, ge=0, le=100)
    dividend_percent: Optional[float] = Field(None, ge=0, le=100)
    commonwealth_percent: Optional[float] = Field(None, ge=0, le=100)


class DynamicFareResponse(BaseModel):
    """Schema for displaying a dynamic fare structure."""
    trip_cost_breakdown: TripCostBreakdownResponse
    current_passengers: int
    available_seats: int
    break_even_passengers: int
    break_even_fare_per_person: float
    current_fare_per_person: Optional[float]
    fare_at_capacity: float
    savings_vs_break_even: Optional[float]
    surplus_amount: Optional[float] = None
    surplus_allocation: Optional[SurplusAllocationResponse] = None

    @classmethod
    def from_domain(cls, fare) -> "DynamicFareResponse":
        allocation = None
        if fare.surplus_allocation is not None:
            allocation = SurplusAllocationResponse.from_domain(fare.surplus_allocation)
        return cls(
            trip_cost_breakdown=TripCostBreakdownResponse.from_domain(fare.trip_cost_breakdown),
            current_passengers=fare.current_passengers,
            available_seats=fare.available_seats,
            break_even_passengers=fare.break_even_passengers,
            break_even_fare_per_person=money(fare.break_even_fare_per_person),
            current_fare_per_person=money(fare.current_fare_per_person),
            fare_at_capacity=money(fare.fare_at_capacity),
            savings_vs_break_even=money(fare.savings_vs_break_even),
            surplus_amount=money(fare.surplus_amount),
            surplus_allocation=allocation
        )


class FareQuoteRequest(BaseModel):
    """Schema for quoting a fare to one passenger."""
    route_id: Optional[int] = None
    trip_distance_miles: float = Field(..., ge=0)
    trip_duration_hours: float = Field(..., ge=0)
    vehicle_capacity: int = Field(..., gt=0)
    current_passengers: int = Field(..., ge=0)
    passenger_tier: FareTier = FareTier.ADULT
    settings: FareSettingsOverrides = FareSettingsOverrides()


class FareQuoteResponse(BaseModel):
    """Schema for displaying a fare quote."""
    route_id: Optional[int]
    passenger_tier: FareTier
    quoted_fare: float
    valid_until: datetime
    fare_reduction_message: Optional[str]
    community_impact_message: Optional[str]
    dynamic_fare: DynamicFareResponse

    @classmethod
    def from_domain(cls, quote, route_id: Optional[int] = None) -> "FareQuoteResponse":
        return cls(
            route_id=route_id,
            passenger_tier=quote.passenger_tier,
            quoted_fare=money(quote.quoted_fare),
            valid_until=quote.valid_until,
            fare_reduction_message=quote.fare_reduction_message,
            community_impact_message=quote.community_impact_message,
            dynamic_fare=DynamicFareResponse.from_domain(quote.dynamic_fare)
        )
