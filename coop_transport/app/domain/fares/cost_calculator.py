"""
Trip Cost Calculator.

Turns a tenant's fare settings and a trip's distance/duration into the
transparent cost breakdown shown to passengers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from coop_transport.app.core.exceptions import CalculationInputError
from coop_transport.app.domain.money import (
    CENT, non_negative, quantize_money, to_count
)

MONTHS_PER_YEAR = Decimal(12)


@dataclass(frozen=True)
class FareSettings:
    """Tenant fare configuration."""
    driver_hourly_rate: Decimal = Decimal("15.00")
    fuel_price_per_mile: Decimal = Decimal("0.18")
    vehicle_depreciation_per_mile: Decimal = Decimal("0.12")
    annual_insurance_cost: Decimal = Decimal("3000")
    annual_maintenance_budget: Decimal = Decimal("2400")
    monthly_overhead_costs: Decimal = Decimal("500")
    avg_trips_per_month: int = 200
    default_break_even_occupancy: Decimal = Decimal("0.60")
    business_reserve_percent: Decimal = Decimal("40")
    dividend_percent: Decimal = Decimal("40")
    cooperative_commonwealth_percent: Decimal = Decimal("20")

    @classmethod
    def from_config(cls, config, **overrides) -> "FareSettings":
        """Build settings from the application config, applying per-request overrides."""
        values = {name: getattr(config, name) for name in cls.__dataclass_fields__}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def surplus_percentages(self) -> tuple:
        return (
            self.business_reserve_percent,
            self.dividend_percent,
            self.cooperative_commonwealth_percent,
        )


@dataclass(frozen=True)
class TripCostBreakdown:
    """Cost components for one trip. total_trip_cost is the sum of the six components."""
    driver_wages: Decimal
    fuel_cost: Decimal
    vehicle_depreciation: Decimal
    insurance_allocation: Decimal
    maintenance_allocation: Decimal
    overhead_allocation: Decimal
    total_trip_cost: Decimal
    trip_distance_miles: Decimal
    trip_duration_hours: Decimal
    vehicle_capacity: int
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    COMPONENTS = (
        "driver_wages",
        "fuel_cost",
        "vehicle_depreciation",
        "insurance_allocation",
        "maintenance_allocation",
        "overhead_allocation",
    )

    @classmethod
    def from_components(
        cls,
        vehicle_capacity: int,
        trip_distance_miles: Any = 0,
        trip_duration_hours: Any = 0,
        calculated_at: Optional[datetime] = None,
        **components: Any
    ) -> "TripCostBreakdown":
        """
        Build a breakdown from already-known cost components.

        Missing components count as zero. Each is rounded to the penny and the
        total is derived from the rounded values.

        Raises:
            CalculationInputError: On negative components or unknown component names
        """
        unknown = set(components) - set(cls.COMPONENTS)
        if unknown:
            raise CalculationInputError(f"Unknown cost components: {sorted(unknown)}")

        values = {
            name: quantize_money(non_negative(components.get(name, 0), name), name)
            for name in cls.COMPONENTS
        }
        return cls(
            **values,
            total_trip_cost=sum(values.values(), Decimal("0.00")),
            trip_distance_miles=non_negative(trip_distance_miles, "trip_distance_miles"),
            trip_duration_hours=non_negative(trip_duration_hours, "trip_duration_hours"),
            vehicle_capacity=to_count(vehicle_capacity, "vehicle_capacity", minimum=1),
            calculated_at=calculated_at or datetime.utcnow()
        )

    def component_sum(self) -> Decimal:
        return sum((getattr(self, name) for name in self.COMPONENTS), Decimal("0.00"))

    def validate(self) -> None:
        """Reject negative components or a total that drifted from its components."""
        for name in self.COMPONENTS + ("total_trip_cost",):
            non_negative(getattr(self, name), name)
        if abs(self.component_sum() - self.total_trip_cost) >= CENT:
            raise CalculationInputError(
                "total_trip_cost must equal the sum of its components",
                field="total_trip_cost",
                value=self.total_trip_cost
            )


def compute_trip_cost(
    trip_distance_miles: Any,
    trip_duration_hours: Any,
    vehicle_capacity: int,
    settings: FareSettings
) -> TripCostBreakdown:
    """
    Calculate the cost breakdown of a single trip.

    Direct costs scale with distance and duration. Insurance, maintenance and
    overhead are spread evenly over the tenant's average monthly trip count.

    Args:
        trip_distance_miles: Route distance
        trip_duration_hours: Driver time for the trip
        vehicle_capacity: Seats on the vehicle (> 0)
        settings: Tenant fare settings

    Returns:
        TripCostBreakdown with components rounded to the penny
    """
    distance = non_negative(trip_distance_miles, "trip_distance_miles")
    duration = non_negative(trip_duration_hours, "trip_duration_hours")
    trips_per_month = Decimal(to_count(settings.avg_trips_per_month, "avg_trips_per_month", minimum=1))

    return TripCostBreakdown.from_components(
        vehicle_capacity=vehicle_capacity,
        trip_distance_miles=distance,
        trip_duration_hours=duration,
        driver_wages=non_negative(settings.driver_hourly_rate, "driver_hourly_rate") * duration,
        fuel_cost=non_negative(settings.fuel_price_per_mile, "fuel_price_per_mile") * distance,
        vehicle_depreciation=non_negative(
            settings.vehicle_depreciation_per_mile, "vehicle_depreciation_per_mile"
        ) * distance,
        insurance_allocation=non_negative(
            settings.annual_insurance_cost, "annual_insurance_cost"
        ) / MONTHS_PER_YEAR / trips_per_month,
        maintenance_allocation=non_negative(
            settings.annual_maintenance_budget, "annual_maintenance_budget"
        ) / MONTHS_PER_YEAR / trips_per_month,
        overhead_allocation=non_negative(
            settings.monthly_overhead_costs, "monthly_overhead_costs"
        ) / trips_per_month,
    )
