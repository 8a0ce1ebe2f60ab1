"""
Member Dividend Calculation.

Distributes a dividend pool to cooperative members in proportion to their
patronage, according to the tenant's cooperative model:

* passenger: customers, patronage is trips taken
* worker: drivers, patronage is trips driven
* hybrid: the pool is split between customers and drivers first, then each
  half is distributed within its group

Amounts use the largest-remainder method so that the member dividends of a
group sum exactly to the group's pool.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from coop_transport.app.core.exceptions import CalculationInputError
from coop_transport.app.domain.money import (
    HUNDRED, apportion, check_percentages, non_negative, quantize_money, to_decimal
)
from coop_transport.app.models.fare_enums import CooperativeModel, MemberType

logger = logging.getLogger(__name__)

MODEL_MEMBER_TYPES = {
    CooperativeModel.PASSENGER: (MemberType.CUSTOMER,),
    CooperativeModel.WORKER: (MemberType.DRIVER,),
    CooperativeModel.HYBRID: (MemberType.CUSTOMER, MemberType.DRIVER),
}


@dataclass(frozen=True)
class MemberPatronage:
    member_id: int
    member_type: MemberType
    patronage_value: Decimal
    member_name: str = ""
    membership_number: str = ""


@dataclass(frozen=True)
class MemberDividend:
    member_id: int
    member_type: MemberType
    member_name: str
    membership_number: str
    patronage_value: Decimal
    patronage_percentage: Decimal
    dividend_amount: Decimal


@dataclass(frozen=True)
class DividendDistribution:
    cooperative_model: CooperativeModel
    dividend_pool: Decimal
    distributed: Decimal
    undistributed: Decimal
    member_dividends: List[MemberDividend]
    eligible_members: int
    total_patronage: Decimal
    average_dividend_per_member: Decimal
    average_dividend_per_patronage: Decimal


@dataclass(frozen=True)
class PeriodDividendResult:
    gross_surplus: Decimal
    reserves_amount: Decimal
    business_costs_amount: Decimal
    distribution: DividendDistribution


def _group_pools(pool: Decimal, model: CooperativeModel, customer_share_percent: Decimal) -> Dict[MemberType, Decimal]:
    if model != CooperativeModel.HYBRID:
        return {MODEL_MEMBER_TYPES[model][0]: pool}
    customer_pool = quantize_money(pool * customer_share_percent / HUNDRED)
    return {
        MemberType.CUSTOMER: customer_pool,
        MemberType.DRIVER: pool - customer_pool,
    }


def distribute_dividends(
    dividend_pool: Any,
    members: Sequence[MemberPatronage],
    model: CooperativeModel = CooperativeModel.PASSENGER,
    customer_share_percent: Any = Decimal("50")
) -> DividendDistribution:
    """
    Distribute a dividend pool to members by patronage.

    Args:
        dividend_pool: Amount available for dividends (>= 0)
        members: Patronage records; members outside the model's groups and
            members with zero patronage are ignored
        model: Cooperative model of the tenant
        customer_share_percent: Customer half of a hybrid split

    Returns:
        DividendDistribution; a group without eligible members leaves its
        share in `undistributed`

    Raises:
        CalculationInputError: On negative pool, patronage or share
    """
    pool = quantize_money(non_negative(dividend_pool, "dividend_pool"), "dividend_pool")
    model = CooperativeModel(model)
    share = non_negative(customer_share_percent, "customer_share_percent")
    if share > HUNDRED:
        raise CalculationInputError(
            "customer_share_percent must be between 0 and 100",
            field="customer_share_percent",
            value=customer_share_percent
        )

    group_pools = _group_pools(pool, model, share)
    dividends: List[MemberDividend] = []
    total_patronage = Decimal(0)
    distributed = Decimal("0.00")

    for member_type, group_pool in group_pools.items():
        eligible = []
        for member in members:
            patronage = non_negative(member.patronage_value, "patronage_value")
            if MemberType(member.member_type) == member_type and patronage > 0:
                eligible.append((member, patronage))
        if not eligible:
            logger.info("No eligible %s members; %s left undistributed", member_type.value, group_pool)
            continue

        group_patronage = sum((p for _, p in eligible), Decimal(0))
        amounts = apportion(group_pool, [p for _, p in eligible])
        for (member, patronage), amount in zip(eligible, amounts):
            dividends.append(MemberDividend(
                member_id=member.member_id,
                member_type=member_type,
                member_name=member.member_name,
                membership_number=member.membership_number,
                patronage_value=patronage,
                patronage_percentage=quantize_money(patronage / group_patronage * HUNDRED),
                dividend_amount=amount
            ))
        total_patronage += group_patronage
        distributed += group_pool

    eligible_count = len(dividends)
    return DividendDistribution(
        cooperative_model=model,
        dividend_pool=pool,
        distributed=distributed,
        undistributed=pool - distributed,
        member_dividends=dividends,
        eligible_members=eligible_count,
        total_patronage=total_patronage,
        average_dividend_per_member=(
            quantize_money(distributed / eligible_count) if eligible_count else Decimal("0.00")
        ),
        average_dividend_per_patronage=(
            quantize_money(distributed / total_patronage) if total_patronage else Decimal("0.00")
        )
    )


def calculate_period_dividends(
    gross_surplus: Any,
    members: Sequence[MemberPatronage],
    model: CooperativeModel = CooperativeModel.PASSENGER,
    reserves_percent: Any = Decimal("20"),
    business_percent: Any = Decimal("30"),
    dividend_percent: Any = Decimal("50"),
    customer_share_percent: Any = Decimal("50")
) -> PeriodDividendResult:
    """
    Split a period's gross surplus and distribute the dividend share.

    A period that ran at a loss (negative gross surplus) pays no dividend.
    """
    gross = quantize_money(max(to_decimal(gross_surplus, "gross_surplus"), Decimal(0)))
    percents = [
        non_negative(reserves_percent, "reserves_percent"),
        non_negative(business_percent, "business_percent"),
        non_negative(dividend_percent, "dividend_percent"),
    ]
    check_percentages(percents, ["reserves_percent", "business_percent", "dividend_percent"])
    reserves_pct, business_pct, _ = percents

    reserves = quantize_money(gross * reserves_pct / HUNDRED)
    through_business = min(gross, quantize_money(gross * (reserves_pct + business_pct) / HUNDRED))
    business = through_business - reserves
    dividend_pool = gross - through_business

    distribution = distribute_dividends(dividend_pool, members, model, customer_share_percent)
    logger.info(
        "Period dividends calculated: model=%s surplus=%s pool=%s members=%s",
        distribution.cooperative_model.value, gross, dividend_pool, distribution.eligible_members
    )
    return PeriodDividendResult(
        gross_surplus=gross,
        reserves_amount=reserves,
        business_costs_amount=business,
        distribution=distribution
    )
