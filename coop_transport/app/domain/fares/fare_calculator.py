"""
Dynamic Fare Calculator.

Cost-sharing ("solidarity") pricing: the trip cost is shared between the
passengers on board, so each fare falls as more people book.

Surplus convention: once bookings pass the break-even passenger count, the
surplus is the revenue the trip would collect if every passenger paid the
exact break-even fare, minus the trip cost:

    surplus = total_trip_cost / break_even_passengers * current_passengers - total_trip_cost
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from coop_transport.app.core.exceptions import CalculationInputError
from coop_transport.app.domain.fares.cost_calculator import TripCostBreakdown
from coop_transport.app.domain.money import (
    ceil_int, check_percentages, non_negative, quantize_money, to_count, to_decimal
)
from coop_transport.app.domain.surplus.allocator import SurplusAllocation, allocate_surplus

logger = logging.getLogger(__name__)

SURPLUS_PERCENT_FIELDS = ("reserve_percent", "dividend_percent", "commonwealth_percent")


@dataclass(frozen=True)
class DynamicFareStructure:
    """Fare position of a trip at its current booking level."""
    trip_cost_breakdown: TripCostBreakdown
    current_passengers: int
    available_seats: int
    break_even_passengers: int
    break_even_fare_per_person: Decimal
    current_fare_per_person: Optional[Decimal]  # None until someone books
    fare_at_capacity: Decimal
    savings_vs_break_even: Optional[Decimal]
    surplus_amount: Optional[Decimal] = None
    surplus_allocation: Optional[SurplusAllocation] = None

    @property
    def has_fare(self) -> bool:
        return self.current_fare_per_person is not None


def break_even_passenger_count(vehicle_capacity: int, occupancy: Decimal) -> int:
    """Seats that must be filled to cover cost, never fewer than one."""
    return max(1, ceil_int(Decimal(vehicle_capacity) * occupancy))


def compute_fare(
    cost_breakdown: TripCostBreakdown,
    current_passengers: int,
    vehicle_capacity: int,
    break_even_occupancy_percent: Any,
    surplus_percentages: Optional[Sequence[Any]] = None,
    now: Optional[datetime] = None
) -> DynamicFareStructure:
    """
    Calculate the dynamic fare structure for a trip.

    Args:
        cost_breakdown: Trip cost breakdown
        current_passengers: Passengers booked so far (>= 0)
        vehicle_capacity: Seats on the vehicle (> 0)
        break_even_occupancy_percent: Fraction of seats needed to break even (0..1)
        surplus_percentages: Optional (reserve, dividend, commonwealth) split
            applied to any surplus
        now: Timestamp for the surplus allocation

    Returns:
        DynamicFareStructure

    Raises:
        CalculationInputError: On negative or out-of-range input, a capacity
            that disagrees with the breakdown, or surplus percentages not
            summing to 100 (checked whether or not the trip has a surplus)
    """
    passengers = to_count(current_passengers, "current_passengers")
    capacity = to_count(vehicle_capacity, "vehicle_capacity", minimum=1)
    occupancy = to_decimal(break_even_occupancy_percent, "break_even_occupancy_percent")
    if occupancy < 0 or occupancy > 1:
        raise CalculationInputError(
            "break_even_occupancy_percent must be between 0 and 1",
            field="break_even_occupancy_percent",
            value=break_even_occupancy_percent
        )
    if capacity != cost_breakdown.vehicle_capacity:
        raise CalculationInputError(
            "vehicle_capacity does not match the cost breakdown",
            field="vehicle_capacity",
            value=vehicle_capacity
        )
    cost_breakdown.validate()

    percentages = None
    if surplus_percentages is not None:
        if len(surplus_percentages) != len(SURPLUS_PERCENT_FIELDS):
            raise CalculationInputError(
                "surplus_percentages needs reserve, dividend and commonwealth shares",
                field="surplus_percentages",
                value=surplus_percentages
            )
        percentages = [
            non_negative(percent, name)
            for name, percent in zip(SURPLUS_PERCENT_FIELDS, surplus_percentages)
        ]
        check_percentages(percentages, SURPLUS_PERCENT_FIELDS)

    total_cost = cost_breakdown.total_trip_cost
    break_even_passengers = break_even_passenger_count(capacity, occupancy)
    exact_break_even_fare = total_cost / break_even_passengers
    break_even_fare = quantize_money(exact_break_even_fare)

    current_fare = None
    savings = None
    if passengers > 0:
        current_fare = quantize_money(total_cost / passengers)
        savings = break_even_fare - current_fare

    surplus_amount = None
    surplus_allocation = None
    if passengers > break_even_passengers:
        surplus_amount = quantize_money(exact_break_even_fare * passengers - total_cost)
        if percentages is not None:
            reserve, dividend, commonwealth = percentages
            surplus_allocation = allocate_surplus(
                surplus_amount, reserve, dividend, commonwealth, allocation_date=now
            )

    logger.debug(
        "Fare computed: cost=%s passengers=%s break_even=%s fare=%s surplus=%s",
        total_cost, passengers, break_even_passengers, current_fare, surplus_amount
    )

    return DynamicFareStructure(
        trip_cost_breakdown=cost_breakdown,
        current_passengers=passengers,
        available_seats=max(capacity - passengers, 0),
        break_even_passengers=break_even_passengers,
        break_even_fare_per_person=break_even_fare,
        current_fare_per_person=current_fare,
        fare_at_capacity=quantize_money(total_cost / capacity),
        savings_vs_break_even=savings,
        surplus_amount=surplus_amount,
        surplus_allocation=surplus_allocation
    )
