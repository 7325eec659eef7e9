"""Installment schedule generation for loan repayment"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple
from lending_engine.domain.models import Frequency, LoanTerms, ScheduleItem
from lending_engine.domain.exceptions import InvalidAmountError, InvalidTermError
from lending_engine.domain.interest import quote_loan
from lending_engine.utils.date_utils import add_days, add_months
from lending_engine.utils.money import to_minor_units, from_minor_units

DEFAULT_CUSTOM_INTERVAL_DAYS = 30

_INTERVAL_DAYS = {
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}


def due_date_for(terms: LoanTerms, start_date: date, index: int) -> date:
    """Due date of the installment at zero-based position `index`"""
    frequency = Frequency(terms.frequency)
    if frequency is Frequency.MONTHLY:
        return add_months(start_date, index)
    if frequency is Frequency.CUSTOM:
        interval = terms.custom_interval_days or DEFAULT_CUSTOM_INTERVAL_DAYS
        return add_days(start_date, index * interval)
    return add_days(start_date, index * _INTERVAL_DAYS[frequency])


def _share(units: int, parts: int) -> int:
    """units / parts rounded half-up, floored when n-1 rounded shares would overshoot"""
    share = int((Decimal(units) / parts).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if share * (parts - 1) > units:
        share = units // parts
    return share


def _installment_units(total: int, interest: int, parts: int) -> Tuple[int, int]:
    """
    (principal, interest) minor units carried by each non-final installment.

    Each item totals total / parts rounded to the minor unit; interest is its
    rounded share of the total interest and principal takes the rest.
    """
    per_total = _share(total, parts)
    per_interest = min(_share(interest, parts), per_total)
    per_principal = per_total - per_interest
    if per_principal * (parts - 1) > total - interest:
        per_principal = (total - interest) // parts
    return per_principal, per_interest


def generate_schedule(
    terms: LoanTerms,
    total_amount: Decimal,
    start_date: Optional[date] = None,
) -> List[ScheduleItem]:
    """
    Generate the installment schedule for a loan.

    Requirements:
    - One item per installment, due dates strictly increasing
    - First installment due on the start date, then every 7 days (weekly),
      14 days (biweekly), calendar month (monthly) or custom_interval_days
    - Each installment totals total_amount / n rounded half-up to the minor
      unit; principal and interest are each spread evenly (straight-line)
    - Last installment absorbs rounding remainders so totals are exact to the
      minor currency unit

    Args:
        terms: Loan terms (principal, cadence, installment count, currency)
        total_amount: Principal plus total interest, from compute_interest
        start_date: First due date (default: terms.start_date)

    Returns:
        List of ScheduleItem objects, all unpaid

    Example:
        $1000.03 over 4 installments at 0% →
        [$250.01, $250.01, $250.01, $250.00]

    Raises:
        InvalidTermError: installment_count < 1 or custom interval < 1 day
        InvalidAmountError: total_amount <= 0 or below the principal
    """
    count = terms.installment_count
    if count < 1:
        raise InvalidTermError(f"Installment count must be at least 1, got {count}")
    if terms.custom_interval_days is not None and terms.custom_interval_days < 1:
        raise InvalidTermError(
            f"Custom interval must be at least 1 day, got {terms.custom_interval_days}"
        )

    total_amount = Decimal(total_amount)
    if total_amount <= 0:
        raise InvalidAmountError(f"Total amount must be positive, got {total_amount}")

    currency = terms.currency
    total_units = to_minor_units(total_amount, currency)
    principal_units = to_minor_units(terms.principal, currency)
    if principal_units <= 0:
        raise InvalidAmountError(f"Principal must be positive, got {terms.principal}")
    if total_units < principal_units:
        raise InvalidAmountError(
            f"Total amount {total_amount} is below the principal {terms.principal}"
        )

    if start_date is None:
        start_date = terms.start_date

    interest_units = total_units - principal_units
    per_principal, per_interest = _installment_units(total_units, interest_units, count)

    schedule = []
    for i in range(count):
        principal, interest = per_principal, per_interest
        if i == count - 1:
            principal = principal_units - per_principal * (count - 1)
            interest = interest_units - per_interest * (count - 1)

        schedule.append(
            ScheduleItem(
                sequence_index=i + 1,
                due_date=due_date_for(terms, start_date, i),
                total_amount=from_minor_units(principal + interest, currency),
                principal_amount=from_minor_units(principal, currency),
                interest_amount=from_minor_units(interest, currency),
            )
        )

    return schedule


def build_schedule(terms: LoanTerms) -> List[ScheduleItem]:
    """Price a loan and expand it into its installment schedule"""
    quote = quote_loan(terms)
    return generate_schedule(terms, quote.total_amount)


def schedule_total(schedule: List[ScheduleItem]) -> Decimal:
    return sum((item.total_amount for item in schedule), Decimal(0))
