"""
Configuration settings for the Cooperative Transport Back-Office.

This module handles application configuration using Pydantic settings.
"""

from decimal import Decimal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Cooperative Transport Back-Office"
    api_version: str = "v1"
    debug: bool = False
    log_level: str = "INFO"
    currency_symbol: str = "£"

    # Fare defaults (used when a tenant has no fare settings of its own)
    driver_hourly_rate: Decimal = Decimal("15.00")
    fuel_price_per_mile: Decimal = Decimal("0.18")
    vehicle_depreciation_per_mile: Decimal = Decimal("0.12")
    annual_insurance_cost: Decimal = Decimal("3000")
    annual_maintenance_budget: Decimal = Decimal("2400")
    monthly_overhead_costs: Decimal = Decimal("500")
    avg_trips_per_month: int = 200
    default_break_even_occupancy: Decimal = Decimal("0.60")

    # Surplus allocation (percent of surplus above break-even)
    business_reserve_percent: Decimal = Decimal("40")
    dividend_percent: Decimal = Decimal("40")
    cooperative_commonwealth_percent: Decimal = Decimal("20")

    # Fare quotes
    quote_validity_minutes: int = 15

    # Surplus smoothing
    max_pool_subsidy_percent: Decimal = Decimal("50")
    max_service_subsidy_percent: Decimal = Decimal("30")
    max_acceptable_fare: Decimal = Decimal("20.00")
    minimum_fare_floor: Decimal = Decimal("1.00")
    non_member_surcharge_percent: Decimal = Decimal("20")

    # Member dividends
    hybrid_customer_share_percent: Decimal = Decimal("50")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
