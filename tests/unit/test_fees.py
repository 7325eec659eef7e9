"""Unit tests for duration fee tiers"""

import pytest
from decimal import Decimal
from lending_engine.domain.models import Frequency
from lending_engine.domain.fees import calculate_duration_fee, weeks_per_payment


@pytest.mark.parametrize(
    "frequency,count,weeks,percent",
    [
        (Frequency.WEEKLY, 4, 4, 0),
        (Frequency.WEEKLY, 8, 8, 2),
        (Frequency.BIWEEKLY, 6, 12, 4),
        (Frequency.MONTHLY, 6, 24, 6),
        (Frequency.MONTHLY, 12, 48, 8),
        (Frequency.MONTHLY, 24, 96, 10),
    ],
)
def test_duration_fee_tiers(frequency, count, weeks, percent):
    fee = calculate_duration_fee(Decimal("1000"), frequency, count)

    assert fee.total_weeks == weeks
    assert fee.fee_percent == percent
    assert fee.fee_amount == Decimal(10 * percent)


def test_duration_fee_rounds_up_to_whole_unit():
    """2% of 333 = 6.66 → 7"""
    fee = calculate_duration_fee(Decimal("333"), Frequency.WEEKLY, 6)

    assert fee.fee_amount == Decimal("7")
    assert fee.tier.label == "2% Fee"


def test_weeks_per_payment():
    assert weeks_per_payment(Frequency.WEEKLY) == 1
    assert weeks_per_payment(Frequency.BIWEEKLY) == 2
    assert weeks_per_payment(Frequency.MONTHLY) == 4
    assert weeks_per_payment(Frequency.CUSTOM) == 4
