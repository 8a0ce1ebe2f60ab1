"""
Surplus API Endpoints.

Surplus allocation, route surplus smoothing, service pricing and member dividends.
"""

from fastapi import APIRouter

from coop_transport.app.core.config import settings
from coop_transport.app.domain.surplus.allocator import allocate_surplus
from coop_transport.app.domain.surplus.dividends import MemberPatronage, calculate_period_dividends
from coop_transport.app.domain.money import quantize_money, to_decimal
from coop_transport.app.domain.surplus.smoothing import (
    RouteSurplusPool, allocate_route_surplus, available_subsidy,
    calculate_current_price, threshold_with_smoothing
)
from coop_transport.app.schemas.surplus import (
    DividendRequest, DividendResponse, MemberDividendResponse,
    RouteSurplusRequest, RouteSurplusResponse,
    ServicePriceRequest, ServicePriceResponse,
    SmoothingRequest, SubsidyApplicationRequest, SubsidyResponse,
    SurplusAllocationRequest, SurplusAllocationResponse, SurplusTransactionResponse
)

router = APIRouter(prefix="/surplus", tags=["Surplus"])


def _pick(value, default):
    return default if value is None else value


def _subsidy_response(calculation, subsidy) -> SubsidyResponse:
    return SubsidyResponse(
        raw_cost=float(calculation.raw_cost),
        available_subsidy=float(subsidy),
        subsidy_applied=float(calculation.subsidy_applied),
        effective_cost=float(calculation.effective_cost),
        minimum_passengers_needed=calculation.minimum_passengers_needed,
        break_even_fare=(
            None if calculation.break_even_fare is None else float(calculation.break_even_fare)
        ),
        subsidy_source=calculation.subsidy_source
    )


@router.post("/allocate", response_model=SurplusAllocationResponse)
async def allocate_trip_surplus(request: SurplusAllocationRequest):
    """
    Split a trip surplus into reserve, dividend and commonwealth buckets.

    Percentages left out fall back to the tenant defaults.
    """
    allocation = allocate_surplus(
        request.total_surplus,
        _pick(request.reserve_percent, settings.business_reserve_percent),
        _pick(request.dividend_percent, settings.dividend_percent),
        _pick(request.commonwealth_percent, settings.cooperative_commonwealth_percent),
        trip_id=request.trip_id,
        route_id=request.route_id
    )
    return SurplusAllocationResponse.from_domain(allocation)


@router.post("/route-allocate", response_model=RouteSurplusResponse)
async def allocate_service_surplus(request: RouteSurplusRequest):
    """
    Allocate a profitable service's surplus; the remainder funds the route pool.
    """
    allocation = allocate_route_surplus(
        request.gross_surplus,
        request.reserves_percent,
        request.business_percent,
        request.dividend_percent,
        currency_symbol=settings.currency_symbol
    )
    return RouteSurplusResponse(
        gross_surplus=float(allocation.gross_surplus),
        to_reserves=float(allocation.to_reserves),
        to_business=float(allocation.to_business),
        to_dividends=float(allocation.to_dividends),
        to_pool=float(allocation.to_pool),
        allocation_breakdown=allocation.allocation_breakdown
    )


@router.post("/smoothing", response_model=SubsidyResponse)
async def calculate_smoothed_threshold(request: SmoothingRequest):
    """
    Calculate the passenger threshold of a service after route pool subsidy.
    """
    subsidy = available_subsidy(
        request.pool_available,
        request.service_cost,
        _pick(request.max_pool_percent, settings.max_pool_subsidy_percent),
        _pick(request.max_service_percent, settings.max_service_subsidy_percent),
        smoothing_enabled=request.smoothing_enabled
    )
    calculation = threshold_with_smoothing(
        request.service_cost,
        subsidy,
        _pick(request.max_acceptable_fare, settings.max_acceptable_fare)
    )
    return _subsidy_response(calculation, subsidy)


@router.post("/service-price", response_model=ServicePriceResponse)
async def price_service(request: ServicePriceRequest):
    """
    Member and non-member price of a service for the bookings taken so far.

    The subsidy is drawn from the route pool under the same limits as /smoothing.
    """
    subsidy = available_subsidy(
        request.pool_available,
        request.service_cost,
        _pick(request.max_pool_percent, settings.max_pool_subsidy_percent),
        _pick(request.max_service_percent, settings.max_service_subsidy_percent),
        smoothing_enabled=request.smoothing_enabled
    )
    price = calculate_current_price(
        request.service_cost,
        subsidy,
        request.current_bookings,
        minimum_fare_floor=_pick(request.minimum_fare_floor, settings.minimum_fare_floor),
        max_acceptable_fare=_pick(request.max_acceptable_fare, settings.max_acceptable_fare),
        non_member_surcharge_percent=_pick(
            request.non_member_surcharge_percent, settings.non_member_surcharge_percent
        ),
        currency_symbol=settings.currency_symbol
    )
    return ServicePriceResponse(
        subsidy=_subsidy_response(price.threshold, subsidy),
        current_bookings=price.current_bookings,
        minimum_passengers_without_subsidy=price.minimum_passengers_without_subsidy,
        passengers_saved=price.passengers_saved,
        member_price=float(price.member_price),
        non_member_price=float(price.non_member_price),
        non_member_surcharge_percent=float(price.non_member_surcharge_percent),
        floor_reached=price.floor_reached,
        is_viable=price.is_viable,
        message=price.message
    )


@router.post("/pool/apply-subsidy", response_model=SurplusTransactionResponse)
async def apply_pool_subsidy(request: SubsidyApplicationRequest):
    """
    Draw a subsidy from a route pool whose balance the caller supplies.

    Responds 409 when the pool holds less than the amount.
    """
    balance = quantize_money(to_decimal(request.pool_balance, "pool_balance"), "pool_balance")
    pool = RouteSurplusPool(
        route_id=request.route_id,
        available_for_subsidy=balance,
        accumulated_surplus=balance
    )
    transaction = pool.apply_subsidy(request.amount, service_date=request.service_date)
    return SurplusTransactionResponse(
        route_id=pool.route_id,
        transaction_type=transaction.transaction_type,
        amount=float(transaction.amount),
        pool_balance_before=float(transaction.pool_balance_before),
        pool_balance_after=float(transaction.pool_balance_after),
        service_date=transaction.service_date,
        description=transaction.description
    )


@router.post("/dividends", response_model=DividendResponse)
async def calculate_dividends(request: DividendRequest):
    """
    Calculate member dividends for a period by patronage.
    """
    members = [
        MemberPatronage(
            member_id=m.member_id,
            member_type=m.member_type,
            patronage_value=m.patronage_value,
            member_name=m.member_name,
            membership_number=m.membership_number
        )
        for m in request.members
    ]
    result = calculate_period_dividends(
        request.gross_surplus,
        members,
        request.cooperative_model,
        request.reserves_percent,
        request.business_percent,
        request.dividend_percent,
        customer_share_percent=settings.hybrid_customer_share_percent
    )
    distribution = result.distribution
    return DividendResponse(
        cooperative_model=distribution.cooperative_model,
        gross_surplus=float(result.gross_surplus),
        reserves_amount=float(result.reserves_amount),
        business_costs_amount=float(result.business_costs_amount),
        dividend_pool=float(distribution.dividend_pool),
        distributed=float(distribution.distributed),
        undistributed=float(distribution.undistributed),
        eligible_members=distribution.eligible_members,
        total_patronage=float(distribution.total_patronage),
        average_dividend_per_member=float(distribution.average_dividend_per_member),
        average_dividend_per_patronage=float(distribution.average_dividend_per_patronage),
        member_dividends=[
            MemberDividendResponse(
                member_id=d.member_id,
                member_type=d.member_type,
                member_name=d.member_name,
                membership_number=d.membership_number,
                patronage_value=float(d.patronage_value),
                patronage_percentage=float(d.patronage_percentage),
                dividend_amount=float(d.dividend_amount)
            )
            for d in distribution.member_dividends
        ]
    )
