"""
Surplus Schemas.

Request and response bodies for surplus allocation, smoothing and dividends.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from coop_transport.app.models.fare_enums import CooperativeModel, MemberType, SurplusTransactionType


class SurplusAllocationRequest(BaseModel):
    """Schema for splitting a trip surplus."""
    total_surplus: float = Field(..., ge=0)
    reserve_percent: Optional[float] = Field(None, ge=0, le=100)
    dividend_percent: Optional[float] = Field(None, ge=0, le=100)
    commonwealth_percent: Optional[float] = Field(None, ge=0, le=100)
    trip_id: Optional[int] = None
    route_id: Optional[int] = None


class SurplusAllocationResponse(BaseModel):
    """Schema for displaying a surplus allocation."""
    total_surplus: float
    business_reserve_percent: float
    dividend_percent: float
    cooperative_commonwealth_percent: float
    to_business_reserve: float
    to_dividends: float
    to_cooperative_commonwealth: float
    allocation_date: datetime
    trip_id: Optional[int] = None
    route_id: Optional[int] = None

    @classmethod
    def from_domain(cls, allocation) -> "SurplusAllocationResponse":
        return cls(
            total_surplus=float(allocation.total_surplus),
            business_reserve_percent=float(allocation.business_reserve_percent),
            dividend_percent=float(allocation.dividend_percent),
            cooperative_commonwealth_percent=float(allocation.cooperative_commonwealth_percent),
            to_business_reserve=float(allocation.to_business_reserve),
            to_dividends=float(allocation.to_dividends),
            to_cooperative_commonwealth=float(allocation.to_cooperative_commonwealth),
            allocation_date=allocation.allocation_date,
            trip_id=allocation.trip_id,
            route_id=allocation.route_id
        )


class RouteSurplusRequest(BaseModel):
    """Schema for allocating a profitable service's surplus on a route."""
    gross_surplus: float = Field(..., ge=0)
    reserves_percent: float = Field(20, ge=0, le=100)
    business_percent: float = Field(30, ge=0, le=100)
    dividend_percent: float = Field(50, ge=0, le=100)


class RouteSurplusResponse(BaseModel):
    gross_surplus: float
    to_reserves: float
    to_business: float
    to_dividends: float
    to_pool: float
    allocation_breakdown: List[str]


class SmoothingRequest(BaseModel):
    """Schema for the passenger threshold of a service with surplus smoothing."""
    service_cost: float = Field(..., ge=0)
    pool_available: float = Field(0, ge=0)
    smoothing_enabled: bool = True
    max_pool_percent: Optional[float] = Field(None, ge=0, le=100)
    max_service_percent: Optional[float] = Field(None, ge=0, le=100)
    max_acceptable_fare: Optional[float] = Field(None, gt=0)


class SubsidyResponse(BaseModel):
    raw_cost: float
    available_subsidy: float
    subsidy_applied: float
    effective_cost: float
    minimum_passengers_needed: int
    break_even_fare: Optional[float]
    subsidy_source: str


class ServicePriceRequest(BaseModel):
    """Schema for pricing a service at its current booking level."""
    service_cost: float = Field(..., ge=0)
    current_bookings: int = Field(..., ge=0)
    pool_available: float = Field(0, ge=0)
    smoothing_enabled: bool = True
    max_pool_percent: Optional[float] = Field(None, ge=0, le=100)
    max_service_percent: Optional[float] = Field(None, ge=0, le=100)
    max_acceptable_fare: Optional[float] = Field(None, gt=0)
    minimum_fare_floor: Optional[float] = Field(None, ge=0)
    non_member_surcharge_percent: Optional[float] = Field(None, ge=0)


class ServicePriceResponse(BaseModel):
    subsidy: SubsidyResponse
    current_bookings: int
    minimum_passengers_without_subsidy: int
    passengers_saved: int
    member_price: float
    non_member_price: float
    non_member_surcharge_percent: float
    floor_reached: bool
    is_viable: bool
    message: str


class SubsidyApplicationRequest(BaseModel):
    """Schema for drawing a subsidy from a route pool with a known balance."""
    route_id: int
    pool_balance: float = Field(..., ge=0)
    amount: float = Field(..., ge=0)
    service_date: Optional[date] = None


class SurplusTransactionResponse(BaseModel):
    route_id: int
    transaction_type: SurplusTransactionType
    amount: float
    pool_balance_before: float
    pool_balance_after: float
    service_date: Optional[date] = None
    description: str


class MemberPatronageIn(BaseModel):
    member_id: int
    member_type: MemberType
    patronage_value: float = Field(..., ge=0)
    member_name: str = ""
    membership_number: str = ""


class DividendRequest(BaseModel):
    """Schema for calculating member dividends for a period."""
    gross_surplus: float
    cooperative_model: CooperativeModel = CooperativeModel.PASSENGER
    members: List[MemberPatronageIn] = []
    reserves_percent: float = Field(20, ge=0, le=100)
    business_percent: float = Field(30, ge=0, le=100)
    dividend_percent: float = Field(50, ge=0, le=100)


class MemberDividendResponse(BaseModel):
    member_id: int
    member_type: MemberType
    member_name: str
    membership_number: str
    patronage_value: float
    patronage_percentage: float
    dividend_amount: float


class DividendResponse(BaseModel):
    """Schema for displaying a period dividend calculation."""
    cooperative_model: CooperativeModel
    gross_surplus: float
    reserves_amount: float
    business_costs_amount: float
    dividend_pool: float
    distributed: float
    undistributed: float
    eligible_members: int
    total_patronage: float
    average_dividend_per_member: float
    average_dividend_per_patronage: float
    member_dividends: List[MemberDividendResponse]
