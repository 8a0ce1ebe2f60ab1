"""
Unit tests for route surplus smoothing.
"""

import pytest
from datetime import date
from decimal import Decimal

from coop_transport.app.core.exceptions import CalculationInputError, InsufficientSurplusError
from coop_transport.app.domain.surplus.smoothing import (
    RouteSurplusPool, allocate_route_surplus, available_subsidy,
    calculate_current_price, threshold_with_smoothing
)
from coop_transport.app.models.fare_enums import SurplusTransactionType


# --- Available subsidy ---

def test_subsidy_capped_by_service_cost():
    # 50% of 100 = 50, 30% of 50 = 15
    assert available_subsidy(100, 50) == Decimal("15.00")


def test_subsidy_capped_by_pool():
    # 50% of 20 = 10, 30% of 50 = 15
    assert available_subsidy(20, 50) == Decimal("10.00")


def test_subsidy_zero_when_smoothing_disabled():
    assert available_subsidy(100, 50, smoothing_enabled=False) == Decimal("0.00")


def test_subsidy_from_empty_pool():
    assert available_subsidy(0, 50) == Decimal("0.00")


# --- Threshold with smoothing ---

def test_threshold_after_subsidy():
    result = threshold_with_smoothing(50, 15, 20)

    assert result.effective_cost == Decimal("35.00")
    assert result.minimum_passengers_needed == 2
    assert result.break_even_fare == Decimal("17.50")
    assert result.subsidy_applied == Decimal("15.00")


def test_subsidy_covering_whole_cost():
    result = threshold_with_smoothing(10, 15, 20)

    assert result.effective_cost == Decimal("0.00")
    assert result.minimum_passengers_needed == 0
    assert result.break_even_fare is None
    assert result.subsidy_applied == Decimal("10.00")


def test_threshold_rejects_zero_max_fare():
    with pytest.raises(CalculationInputError):
        threshold_with_smoothing(50, 15, 0)


# --- Route surplus allocation ---

def test_default_split_leaves_nothing_for_pool():
    allocation = allocate_route_surplus(100)

    assert allocation.to_reserves == Decimal("20.00")
    assert allocation.to_business == Decimal("30.00")
    assert allocation.to_dividends == Decimal("50.00")
    assert allocation.to_pool == Decimal("0.00")


def test_remainder_goes_to_pool():
    allocation = allocate_route_surplus(100, 20, 30, 30)

    assert allocation.to_dividends == Decimal("30.00")
    assert allocation.to_pool == Decimal("20.00")
    assert allocation.allocation_breakdown[-1] == "Remainder to pool: £20.00"


def test_route_allocation_rejects_percentages_over_100():
    with pytest.raises(CalculationInputError):
        allocate_route_surplus(100, 40, 40, 30)


@pytest.mark.parametrize("gross", ["0.01", "0.05", "1.99", "33.33", "1000.07"])
def test_route_allocation_sums_to_gross(gross):
    allocation = allocate_route_surplus(gross, "33.33", "33.33", "16.67")
    parts = (allocation.to_reserves, allocation.to_business, allocation.to_dividends, allocation.to_pool)

    assert sum(parts) == Decimal(gross)
    assert all(part >= 0 for part in parts)


# --- Route pool ---

def test_pool_add_then_subsidise():
    pool = RouteSurplusPool(route_id=4)
    pool.add_surplus(allocate_route_surplus(100, 20, 30, 30), service_date=date(2026, 1, 10))
    transaction = pool.apply_subsidy(15, service_date=date(2026, 1, 11))

    assert pool.available_for_subsidy == Decimal("5.00")
    assert pool.accumulated_surplus == Decimal("85.00")
    assert pool.total_profitable_services == 1
    assert pool.total_subsidized_services == 1
    assert transaction.transaction_type == SurplusTransactionType.SUBSIDY_APPLIED
    assert transaction.pool_balance_before == Decimal("20.00")
    assert transaction.pool_balance_after == Decimal("5.00")
    assert len(pool.transactions) == 2


def test_pool_rejects_subsidy_above_balance():
    pool = RouteSurplusPool(route_id=4)
    pool.add_surplus(allocate_route_surplus(100, 20, 30, 45))

    with pytest.raises(InsufficientSurplusError) as exc_info:
        pool.apply_subsidy(10)

    assert exc_info.value.status_code == 409
    assert pool.available_for_subsidy == Decimal("5.00")
    assert len(pool.transactions) == 1


# --- Service price ---

def test_price_before_first_booking_is_max_fare():
    price = calculate_current_price(100, 0, 0, max_acceptable_fare=50)

    assert price.member_price == Decimal("50.00")
    assert price.non_member_price == Decimal("60.00")
    assert price.is_viable is False
    assert price.passengers_saved == 0
    assert price.message == "Need 2 more passengers to reach break-even."


def test_subsidy_lowers_passengers_needed():
    # Without subsidy ceil(110 / 50) = 3, with it ceil(80 / 50) = 2
    price = calculate_current_price(110, 30, 1, max_acceptable_fare=50)

    assert price.minimum_passengers_without_subsidy == 3
    assert price.threshold.minimum_passengers_needed == 2
    assert price.passengers_saved == 1
    assert price.member_price == Decimal("80.00")
    assert price.non_member_price == Decimal("96.00")
    assert price.message == "Need 1 more passenger to reach break-even. Surplus saved 1 passengers!"


def test_price_stops_at_fare_floor():
    price = calculate_current_price(10, 0, 15, minimum_fare_floor=1, max_acceptable_fare=50)

    assert price.floor_reached is True
    assert price.is_viable is True
    assert price.member_price == Decimal("1.00")
    assert price.non_member_price == Decimal("1.20")
    assert price.message == (
        "Service is viable! Price has reached minimum floor of £1.00. "
        "Additional passengers generate surplus."
    )


def test_non_member_price_rounded_from_unrounded_base():
    # 10 / 3 * 1.175 = 3.9166..., while 3.33 * 1.175 would round to 3.91
    price = calculate_current_price(10, 0, 3, max_acceptable_fare=50, non_member_surcharge_percent="17.5")

    assert price.floor_reached is False
    assert price.member_price == Decimal("3.33")
    assert price.non_member_price == Decimal("3.92")
    assert price.message == "Service is viable! Current price: £3.33 per passenger."


def test_service_price_rejects_negative_bookings():
    with pytest.raises(CalculationInputError):
        calculate_current_price(10, 0, -1)
