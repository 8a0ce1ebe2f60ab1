"""
Fare and surplus enumerations.
"""

import enum
from decimal import Decimal


class FareTier(str, enum.Enum):
    """Passenger fare tier enumeration."""
    ADULT = "adult"
    CHILD = "child"
    CONCESSIONARY = "concessionary"  # Concessionary pass holders
    WHEELCHAIR = "wheelchair"
    COMPANION = "companion"  # Travels free with a wheelchair user

    @property
    def multiplier(self) -> Decimal:
        return FARE_TIER_MULTIPLIERS[self]


FARE_TIER_MULTIPLIERS = {
    FareTier.ADULT: Decimal("1.0"),
    FareTier.CHILD: Decimal("0.5"),
    FareTier.CONCESSIONARY: Decimal("0.5"),
    FareTier.WHEELCHAIR: Decimal("1.0"),
    FareTier.COMPANION: Decimal("0.0"),
}


class CooperativeModel(str, enum.Enum):
    """Cooperative ownership model enumeration."""
    PASSENGER = "passenger"  # Consumer co-op, patronage is trips taken
    WORKER = "worker"  # Worker co-op, patronage is trips driven
    HYBRID = "hybrid"  # Multi-stakeholder, pool split between both groups


class MemberType(str, enum.Enum):
    """Cooperative member type enumeration."""
    CUSTOMER = "customer"
    DRIVER = "driver"


class SurplusTransactionType(str, enum.Enum):
    """Route surplus pool transaction type enumeration."""
    SURPLUS_ADDED = "surplus_added"  # Profitable service paid into the pool
    SUBSIDY_APPLIED = "subsidy_applied"  # Pool lowered a service's cost
