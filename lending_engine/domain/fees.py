"""Duration-based fee tiers: longer repayment periods carry a higher fee"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from lending_engine.domain.models import Frequency
from lending_engine.utils.money import ceil_whole


@dataclass(frozen=True)
class DurationFeeTier:
    min_weeks: int
    max_weeks: Optional[int]  # None means open-ended
    fee_percent: int
    label: str

    def covers(self, weeks: int) -> bool:
        return weeks >= self.min_weeks and (self.max_weeks is None or weeks <= self.max_weeks)


@dataclass(frozen=True)
class DurationFee:
    fee_percent: int
    fee_amount: Decimal
    total_weeks: int
    tier: DurationFeeTier


DURATION_FEE_TIERS: List[DurationFeeTier] = [
    DurationFeeTier(0, 4, 0, "No Fee"),
    DurationFeeTier(5, 8, 2, "2% Fee"),
    DurationFeeTier(9, 12, 4, "4% Fee"),
    DurationFeeTier(13, 24, 6, "6% Fee"),
    DurationFeeTier(25, 52, 8, "8% Fee"),
    DurationFeeTier(53, None, 10, "10% Fee"),
]


def weeks_per_payment(frequency: Frequency) -> int:
    """Weeks covered by one payment; monthly and custom count as 4"""
    if frequency == Frequency.WEEKLY:
        return 1
    if frequency == Frequency.BIWEEKLY:
        return 2
    return 4


def calculate_duration_fee(
    principal: Decimal,
    frequency: Frequency,
    installment_count: int,
) -> DurationFee:
    """
    Fee for repaying `principal` over `installment_count` payments.

    Example:
        $1000 over 6 biweekly payments = 12 weeks → 4% → $40
    """
    total_weeks = weeks_per_payment(frequency) * installment_count
    tier = next(
        (t for t in DURATION_FEE_TIERS if t.covers(total_weeks)),
        DURATION_FEE_TIERS[-1],
    )
    fee_amount = ceil_whole(Decimal(principal) * tier.fee_percent / 100)

    return DurationFee(
        fee_percent=tier.fee_percent,
        fee_amount=fee_amount,
        total_weeks=total_weeks,
        tier=tier,
    )
