"""
Route Surplus Smoothing.

Profitable services on a route pay part of their surplus into a route pool;
the pool then subsidises less profitable services on the same route so that
fewer passengers are needed for them to run.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from coop_transport.app.core.exceptions import CalculationInputError, InsufficientSurplusError
from coop_transport.app.domain.money import (
    HUNDRED, ceil_int, check_percentages, non_negative, quantize_money, to_count
)
from coop_transport.app.models.fare_enums import SurplusTransactionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubsidyCalculation:
    """Passenger threshold for a service once any subsidy is applied."""
    raw_cost: Decimal
    subsidy_applied: Decimal
    effective_cost: Decimal
    minimum_passengers_needed: int
    break_even_fare: Optional[Decimal]
    subsidy_source: str = "route_surplus_pool"


@dataclass(frozen=True)
class ServicePrice:
    """Member and non-member price of a service for the bookings taken so far."""
    threshold: SubsidyCalculation
    current_bookings: int
    minimum_passengers_without_subsidy: int
    passengers_saved: int
    base_price_per_passenger: Decimal
    member_price: Decimal
    non_member_price: Decimal
    non_member_surcharge_percent: Decimal
    floor_reached: bool
    is_viable: bool
    message: str


@dataclass(frozen=True)
class RouteSurplusAllocation:
    """Gross surplus of one service split across reserves, business, dividends and pool."""
    gross_surplus: Decimal
    to_reserves: Decimal
    to_business: Decimal
    to_dividends: Decimal
    to_pool: Decimal
    allocation_breakdown: List[str]


@dataclass(frozen=True)
class SurplusTransaction:
    transaction_type: SurplusTransactionType
    amount: Decimal
    pool_balance_before: Decimal
    pool_balance_after: Decimal
    service_date: Optional[date] = None
    description: str = ""


def available_subsidy(
    pool_available: Any,
    service_cost: Any,
    max_pool_percent: Any = Decimal("50"),
    max_service_percent: Any = Decimal("30"),
    smoothing_enabled: bool = True
) -> Decimal:
    """
    Subsidy a service may draw from its route pool.

    The lesser of a share of the pool balance and a share of the service's
    own cost, and never negative. Zero when smoothing is switched off for the
    route.
    """
    pool = non_negative(pool_available, "pool_available")
    cost = non_negative(service_cost, "service_cost")
    pool_pct = non_negative(max_pool_percent, "max_pool_percent")
    service_pct = non_negative(max_service_percent, "max_service_percent")

    if not smoothing_enabled:
        return Decimal("0.00")

    max_from_pool = pool * pool_pct / HUNDRED
    max_for_service = cost * service_pct / HUNDRED
    return quantize_money(max(min(max_from_pool, max_for_service), Decimal(0)))


def threshold_with_smoothing(
    service_cost: Any,
    subsidy: Any,
    max_acceptable_fare: Any
) -> SubsidyCalculation:
    """
    Minimum passenger threshold for a service after subsidy.

    Raises:
        CalculationInputError: If max_acceptable_fare is not positive
    """
    cost = quantize_money(non_negative(service_cost, "service_cost"), "service_cost")
    subsidy_applied = quantize_money(non_negative(subsidy, "subsidy"), "subsidy")
    max_fare = non_negative(max_acceptable_fare, "max_acceptable_fare")
    if max_fare == 0:
        raise CalculationInputError(
            "max_acceptable_fare must be greater than zero",
            field="max_acceptable_fare",
            value=max_acceptable_fare
        )

    effective_cost = max(cost - subsidy_applied, Decimal("0.00"))
    minimum_passengers = ceil_int(effective_cost / max_fare)
    break_even_fare = None
    if minimum_passengers > 0:
        break_even_fare = quantize_money(effective_cost / minimum_passengers)

    return SubsidyCalculation(
        raw_cost=cost,
        subsidy_applied=min(subsidy_applied, cost),
        effective_cost=effective_cost,
        minimum_passengers_needed=minimum_passengers,
        break_even_fare=break_even_fare
    )


def calculate_current_price(
    service_cost: Any,
    subsidy: Any,
    current_bookings: int,
    minimum_fare_floor: Any = Decimal("1.00"),
    max_acceptable_fare: Any = Decimal("50.00"),
    non_member_surcharge_percent: Any = Decimal("20"),
    currency_symbol: str = "£"
) -> ServicePrice:
    """
    Live price of a service at its current booking level.

    The subsidised cost is shared between the passengers booked so far but
    never drops below the route's fare floor; once the floor is reached every
    further passenger adds surplus. Before anyone books the price shown is the
    maximum acceptable fare. Non-members pay the surcharge on top.

    Raises:
        CalculationInputError: On negative input or a non-positive max_acceptable_fare
    """
    bookings = to_count(current_bookings, "current_bookings")
    floor = quantize_money(non_negative(minimum_fare_floor, "minimum_fare_floor"), "minimum_fare_floor")
    surcharge = non_negative(non_member_surcharge_percent, "non_member_surcharge_percent")
    threshold = threshold_with_smoothing(service_cost, subsidy, max_acceptable_fare)
    max_fare = non_negative(max_acceptable_fare, "max_acceptable_fare")

    floor_reached = False
    if bookings > 0:
        base_price = threshold.effective_cost / bookings
        if base_price < floor:
            base_price = floor
            floor_reached = True
    else:
        base_price = max_fare

    member_price = quantize_money(base_price, "member_price")
    non_member_price = quantize_money(base_price * (1 + surcharge / HUNDRED), "non_member_price")

    minimum_without_subsidy = ceil_int(threshold.raw_cost / max_fare)
    minimum_with_subsidy = threshold.minimum_passengers_needed
    passengers_saved = max(minimum_without_subsidy - minimum_with_subsidy, 0)
    is_viable = bookings >= minimum_with_subsidy

    if is_viable and floor_reached:
        message = (
            f"Service is viable! Price has reached minimum floor of {currency_symbol}{member_price}. "
            f"Additional passengers generate surplus."
        )
    elif is_viable:
        message = f"Service is viable! Current price: {currency_symbol}{member_price} per passenger."
    else:
        needed = minimum_with_subsidy - bookings
        message = f"Need {needed} more {'passenger' if needed == 1 else 'passengers'} to reach break-even."
        if passengers_saved > 0:
            message += f" Surplus saved {passengers_saved} passengers!"

    return ServicePrice(
        threshold=threshold,
        current_bookings=bookings,
        minimum_passengers_without_subsidy=minimum_without_subsidy,
        passengers_saved=passengers_saved,
        base_price_per_passenger=base_price,
        member_price=member_price,
        non_member_price=non_member_price,
        non_member_surcharge_percent=surcharge,
        floor_reached=floor_reached,
        is_viable=is_viable,
        message=message
    )


def allocate_route_surplus(
    gross_surplus: Any,
    reserves_percent: Any = Decimal("20"),
    business_percent: Any = Decimal("30"),
    dividend_percent: Any = Decimal("50"),
    currency_symbol: str = "£"
) -> RouteSurplusAllocation:
    """
    Split a profitable service's surplus; whatever the percentages leave goes to the route pool.

    Raises:
        CalculationInputError: If the percentages exceed 100 in total
    """
    gross = quantize_money(non_negative(gross_surplus, "gross_surplus"), "gross_surplus")
    percents = [
        non_negative(reserves_percent, "reserves_percent"),
        non_negative(business_percent, "business_percent"),
        non_negative(dividend_percent, "dividend_percent"),
    ]
    check_percentages(percents, ["reserves_percent", "business_percent", "dividend_percent"], exact=False)
    reserves_pct, business_pct, dividend_pct = percents

    # Cumulative rounding keeps every bucket non-negative and the total exact
    through_reserves = min(gross, quantize_money(gross * reserves_pct / HUNDRED))
    through_business = min(gross, quantize_money(gross * (reserves_pct + business_pct) / HUNDRED))
    through_dividends = min(gross, quantize_money(gross * sum(percents) / HUNDRED))

    to_reserves = through_reserves
    to_business = through_business - through_reserves
    to_dividends = through_dividends - through_business
    to_pool = gross - through_dividends

    return RouteSurplusAllocation(
        gross_surplus=gross,
        to_reserves=to_reserves,
        to_business=to_business,
        to_dividends=to_dividends,
        to_pool=to_pool,
        allocation_breakdown=[
            f"{reserves_pct}% to reserves: {currency_symbol}{to_reserves}",
            f"{business_pct}% to business: {currency_symbol}{to_business}",
            f"{dividend_pct}% to dividends: {currency_symbol}{to_dividends}",
            f"Remainder to pool: {currency_symbol}{to_pool}",
        ]
    )


@dataclass
class RouteSurplusPool:
    """
    Running surplus pool of one route.

    Tracks the balance available for subsidy and the amounts set aside by
    every allocation. Each change appends a SurplusTransaction.
    """
    route_id: int
    available_for_subsidy: Decimal = Decimal("0.00")
    accumulated_surplus: Decimal = Decimal("0.00")
    reserved_for_reserves: Decimal = Decimal("0.00")
    reserved_for_business: Decimal = Decimal("0.00")
    total_distributed_dividends: Decimal = Decimal("0.00")
    total_profitable_services: int = 0
    total_subsidized_services: int = 0
    transactions: List[SurplusTransaction] = field(default_factory=list)

    def add_surplus(self, allocation: RouteSurplusAllocation, service_date: date = None) -> SurplusTransaction:
        balance_before = self.available_for_subsidy
        self.accumulated_surplus += allocation.gross_surplus
        self.available_for_subsidy += allocation.to_pool
        self.reserved_for_reserves += allocation.to_reserves
        self.reserved_for_business += allocation.to_business
        self.total_distributed_dividends += allocation.to_dividends
        self.total_profitable_services += 1

        transaction = SurplusTransaction(
            transaction_type=SurplusTransactionType.SURPLUS_ADDED,
            amount=allocation.gross_surplus,
            pool_balance_before=balance_before,
            pool_balance_after=self.available_for_subsidy,
            service_date=service_date,
            description="; ".join(allocation.allocation_breakdown)
        )
        self.transactions.append(transaction)
        logger.info(
            "Surplus added to route %s pool: %s (balance %s -> %s)",
            self.route_id, allocation.gross_surplus, balance_before, self.available_for_subsidy
        )
        return transaction

    def apply_subsidy(self, amount: Any, service_date: date = None) -> SurplusTransaction:
        """
        Draw a subsidy from the pool.

        Raises:
            InsufficientSurplusError: If the pool holds less than the amount
        """
        subsidy = quantize_money(non_negative(amount, "subsidy"), "subsidy")
        balance_before = self.available_for_subsidy
        if balance_before < subsidy:
            raise InsufficientSurplusError(requested=subsidy, available=balance_before)

        self.available_for_subsidy -= subsidy
        self.accumulated_surplus -= subsidy
        self.total_subsidized_services += 1

        transaction = SurplusTransaction(
            transaction_type=SurplusTransactionType.SUBSIDY_APPLIED,
            amount=subsidy,
            pool_balance_before=balance_before,
            pool_balance_after=self.available_for_subsidy,
            service_date=service_date,
            description=f"Subsidy of {subsidy} applied from route {self.route_id} pool"
        )
        self.transactions.append(transaction)
        logger.info(
            "Subsidy applied on route %s: %s (balance %s -> %s)",
            self.route_id, subsidy, balance_before, self.available_for_subsidy
        )
        return transaction
