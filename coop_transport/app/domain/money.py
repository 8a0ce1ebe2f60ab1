"""
Money and numeric helpers shared by the fare, surplus and dividend calculators.

All currency values are Decimal and rounded half-up to the penny.
"""

from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, List, Sequence

from coop_transport.app.core.exceptions import CalculationInputError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
PERCENT_TOLERANCE = Decimal("0.01")


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Coerce a numeric input to Decimal.

    Floats go through str() so that 0.6 stays 0.6 rather than its binary
    approximation.

    Raises:
        CalculationInputError: If the value is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise CalculationInputError(f"{field} must be a number", field=field, value=value)

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise CalculationInputError(f"{field} must be a number", field=field, value=value)

    if not result.is_finite():
        raise CalculationInputError(f"{field} must be a finite number", field=field, value=value)
    return result


def non_negative(value: Any, field: str) -> Decimal:
    """Coerce to Decimal and reject negatives."""
    result = to_decimal(value, field)
    if result < 0:
        raise CalculationInputError(f"{field} must not be negative", field=field, value=value)
    return result


def to_count(value: Any, field: str, minimum: int = 0) -> int:
    """Validate a whole-number count such as passengers or seats."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise CalculationInputError(f"{field} must be a whole number", field=field, value=value)
    if value < minimum:
        raise CalculationInputError(f"{field} must be at least {minimum}", field=field, value=value)
    return value


def quantize_money(value: Decimal, field: str = "amount") -> Decimal:
    """
    Round to the penny.

    Raises:
        CalculationInputError: If the amount is too large to hold to the penny
    """
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise CalculationInputError(f"{field} is too large", field=field, value=value)


def ceil_int(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def check_percentages(percents: Sequence[Decimal], names: Sequence[str], exact: bool = True) -> None:
    """
    Validate a set of allocation percentages.

    With exact=True they must sum to 100 (within a hundredth of a percent),
    otherwise they may sum to anything up to 100.
    """
    for name, percent in zip(names, percents):
        if percent < 0 or percent > HUNDRED:
            raise CalculationInputError(f"{name} must be between 0 and 100", field=name, value=percent)

    total = sum(percents, Decimal(0))
    if exact and abs(total - HUNDRED) > PERCENT_TOLERANCE:
        raise CalculationInputError(
            f"Allocation percentages must sum to 100, got {total}",
            field="percentages",
            value=total
        )
    if not exact and total - HUNDRED > PERCENT_TOLERANCE:
        raise CalculationInputError(
            f"Allocation percentages must not exceed 100, got {total}",
            field="percentages",
            value=total
        )


def apportion(total: Decimal, weights: Sequence[Decimal]) -> List[Decimal]:
    """
    Split a money total proportionally to weights using the largest-remainder method.

    The returned amounts always sum exactly to the rounded total. Ties on the
    remainder go to the earlier weight.
    """
    total_cents = int(quantize_money(total) / CENT)
    weight_sum = sum(weights, Decimal(0))
    if weight_sum <= 0:
        return [Decimal("0.00") for _ in weights]

    shares = []
    for index, weight in enumerate(weights):
        exact = Decimal(total_cents) * weight / weight_sum
        floor = int(exact.to_integral_value(rounding=ROUND_FLOOR))
        shares.append([floor, exact - floor, index])

    leftover = total_cents - sum(share[0] for share in shares)
    for share in sorted(shares, key=lambda s: (-s[1], s[2]))[:leftover]:
        share[0] += 1

    return [(Decimal(share[0]) * CENT).quantize(CENT) for share in shares]
