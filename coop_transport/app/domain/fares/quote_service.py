"""
Fare Quote Service.

Builds the passenger-facing fare quote: tier-adjusted fare plus the incentive
and community-impact messages shown at booking time.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from coop_transport.app.domain.fares.cost_calculator import FareSettings, TripCostBreakdown
from coop_transport.app.domain.fares.fare_calculator import DynamicFareStructure, compute_fare
from coop_transport.app.domain.money import quantize_money
from coop_transport.app.models.fare_enums import FareTier

# Fare reduction messages are shown until bookings pass break-even by this many
FARE_REDUCTION_WINDOW = 5


@dataclass(frozen=True)
class FareQuote:
    """Quote for one passenger on one trip."""
    cost_breakdown: TripCostBreakdown
    dynamic_fare: DynamicFareStructure
    passenger_tier: FareTier
    quoted_fare: Decimal
    valid_until: datetime
    fare_reduction_message: Optional[str] = None
    community_impact_message: Optional[str] = None


def build_fare_quote(
    cost_breakdown: TripCostBreakdown,
    current_passengers: int,
    settings: FareSettings,
    passenger_tier: FareTier = FareTier.ADULT,
    now: Optional[datetime] = None,
    quote_validity_minutes: int = 15,
    currency_symbol: str = "£"
) -> FareQuote:
    """
    Quote a fare for a passenger joining a trip.

    The base fare is the current cost-sharing fare, or the break-even fare
    while nobody has booked. The tier multiplier is applied to the base.
    """
    now = now or datetime.utcnow()
    tier = FareTier(passenger_tier)
    capacity = cost_breakdown.vehicle_capacity

    dynamic_fare = compute_fare(
        cost_breakdown,
        current_passengers,
        capacity,
        settings.default_break_even_occupancy,
        surplus_percentages=settings.surplus_percentages,
        now=now
    )

    base_fare = dynamic_fare.current_fare_per_person
    if base_fare is None:
        base_fare = dynamic_fare.break_even_fare_per_person
    quoted_fare = quantize_money(base_fare * tier.multiplier)

    fare_reduction_message = None
    if (current_passengers < capacity
            and current_passengers < dynamic_fare.break_even_passengers + FARE_REDUCTION_WINDOW):
        next_fare = quantize_money(
            cost_breakdown.total_trip_cost / (current_passengers + 1) * tier.multiplier
        )
        # The first booking is quoted at break-even, which can already be lower
        if next_fare < quoted_fare:
            fare_reduction_message = (
                f"Book now! Your fare drops to {currency_symbol}{next_fare} "
                f"when one more passenger joins"
            )

    community_impact_message = None
    if dynamic_fare.surplus_allocation is not None:
        contribution = dynamic_fare.surplus_allocation.to_cooperative_commonwealth
        community_impact_message = (
            f"This trip is generating {currency_symbol}{contribution} "
            f"for the cooperative commonwealth"
        )

    return FareQuote(
        cost_breakdown=cost_breakdown,
        dynamic_fare=dynamic_fare,
        passenger_tier=tier,
        quoted_fare=quoted_fare,
        valid_until=now + timedelta(minutes=quote_validity_minutes),
        fare_reduction_message=fare_reduction_message,
        community_impact_message=community_impact_message
    )
