"""Term resolution: installment count + cadence → equivalent months"""

from decimal import Decimal
from typing import Dict
from lending_engine.domain.models import Frequency
from lending_engine.domain.exceptions import InvalidTermError

# Approximate number of installments per month for each cadence.
# Custom cadences are treated as monthly.
INSTALLMENTS_PER_MONTH: Dict[Frequency, Decimal] = {
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.BIWEEKLY: Decimal("2.17"),
    Frequency.MONTHLY: Decimal("1"),
    Frequency.CUSTOM: Decimal("1"),
}


def resolve_term(installment_count: int, frequency: Frequency) -> Decimal:
    """
    Convert a number of installments into a loan term in months.

    Example:
        13 weekly installments → 13 / 4.33 ≈ 3.0023 months
        6 monthly installments → 6 months

    Raises:
        InvalidTermError: installment_count < 1
    """
    if installment_count < 1:
        raise InvalidTermError(f"Installment count must be at least 1, got {installment_count}")

    return Decimal(installment_count) / INSTALLMENTS_PER_MONTH[Frequency(frequency)]
