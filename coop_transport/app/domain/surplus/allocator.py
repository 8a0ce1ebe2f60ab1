"""
Surplus Allocator.

Splits the surplus a trip earns above break-even between the business
reserve, member dividends and the cooperative commonwealth fund.

Rounding policy: amounts are rounded cumulatively. The reserve is
round(total x reserve%), the dividend bucket is round(total x (reserve% +
dividend%)) minus the reserve, and the commonwealth bucket takes whatever is
left. The three amounts therefore always sum exactly to the rounded total and
none of them can go negative.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from coop_transport.app.domain.money import (
    HUNDRED, check_percentages, non_negative, quantize_money
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurplusAllocation:
    """Surplus split into its three cooperative buckets."""
    total_surplus: Decimal
    business_reserve_percent: Decimal
    dividend_percent: Decimal
    cooperative_commonwealth_percent: Decimal
    to_business_reserve: Decimal
    to_dividends: Decimal
    to_cooperative_commonwealth: Decimal
    allocation_date: datetime
    trip_id: Optional[int] = None
    route_id: Optional[int] = None


def allocate_surplus(
    total_surplus: Any,
    reserve_percent: Any,
    dividend_percent: Any,
    commonwealth_percent: Any,
    allocation_date: Optional[datetime] = None,
    trip_id: Optional[int] = None,
    route_id: Optional[int] = None
) -> SurplusAllocation:
    """
    Allocate a surplus across reserve, dividend and commonwealth buckets.

    Args:
        total_surplus: Surplus above break-even (>= 0)
        reserve_percent: Share for the business reserve
        dividend_percent: Share for member dividends
        commonwealth_percent: Share for the cooperative commonwealth fund
        allocation_date: Timestamp to stamp on the allocation (defaults to now)

    Returns:
        SurplusAllocation whose three amounts sum exactly to total_surplus

    Raises:
        CalculationInputError: On negative input or percentages not summing to 100
    """
    total = quantize_money(non_negative(total_surplus, "total_surplus"), "total_surplus")
    reserve_pct = non_negative(reserve_percent, "reserve_percent")
    dividend_pct = non_negative(dividend_percent, "dividend_percent")
    commonwealth_pct = non_negative(commonwealth_percent, "commonwealth_percent")

    check_percentages(
        [reserve_pct, dividend_pct, commonwealth_pct],
        ["reserve_percent", "dividend_percent", "commonwealth_percent"]
    )

    to_reserve = min(total, quantize_money(total * reserve_pct / HUNDRED))
    through_dividends = min(total, quantize_money(total * (reserve_pct + dividend_pct) / HUNDRED))
    to_dividends = through_dividends - to_reserve
    to_commonwealth = total - through_dividends

    logger.debug(
        "Allocated surplus %s: reserve=%s dividends=%s commonwealth=%s",
        total, to_reserve, to_dividends, to_commonwealth
    )

    return SurplusAllocation(
        total_surplus=total,
        business_reserve_percent=reserve_pct,
        dividend_percent=dividend_pct,
        cooperative_commonwealth_percent=commonwealth_pct,
        to_business_reserve=to_reserve,
        to_dividends=to_dividends,
        to_cooperative_commonwealth=to_commonwealth,
        allocation_date=allocation_date or datetime.utcnow(),
        trip_id=trip_id,
        route_id=route_id
    )
