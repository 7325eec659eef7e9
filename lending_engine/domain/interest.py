"""Interest calculation for simple and monthly-compounding loans"""

from decimal import Decimal
from lending_engine.domain.models import InterestType, InterestQuote, LoanTerms
from lending_engine.domain.exceptions import InvalidAmountError, InvalidTermError
from lending_engine.domain.terms import resolve_term
from lending_engine.utils.money import round_money


def compute_interest(
    principal: Decimal,
    annual_rate_percent: Decimal,
    term_months: Decimal,
    interest_type: InterestType = InterestType.SIMPLE,
    currency: str = "USD",
) -> InterestQuote:
    """
    Compute total interest and total repayable amount.

    Formulas:
    - simple:   P * (rate / 100) * (months / 12)
    - compound: P * ((1 + rate / 100 / 12) ^ months - 1), compounded monthly

    A zero rate yields exactly zero interest for both types. Interest is
    rounded half-up to the currency minor unit.

    Raises:
        InvalidAmountError: principal <= 0 or rate < 0
        InvalidTermError: term_months <= 0
    """
    principal = Decimal(principal)
    rate = Decimal(annual_rate_percent)
    term_months = Decimal(term_months)

    if principal <= 0:
        raise InvalidAmountError(f"Principal must be positive, got {principal}")
    if rate < 0:
        raise InvalidAmountError(f"Annual rate cannot be negative, got {rate}")
    if term_months <= 0:
        raise InvalidTermError(f"Term must be positive, got {term_months} months")

    if rate == 0:
        total_interest = Decimal(0)
    elif InterestType(interest_type) is InterestType.SIMPLE:
        total_interest = principal * rate * term_months / 1200
    else:
        monthly_rate = rate / 100 / 12
        total_interest = principal * ((1 + monthly_rate) ** term_months - 1)

    total_interest = round_money(total_interest, currency)
    principal = round_money(principal, currency)

    return InterestQuote(
        term_months=term_months,
        total_interest=total_interest,
        total_amount=principal + total_interest,
    )


def quote_loan(terms: LoanTerms) -> InterestQuote:
    """Resolve the term for a loan and price it"""
    term_months = resolve_term(terms.installment_count, terms.frequency)
    return compute_interest(
        terms.principal,
        terms.annual_rate_percent,
        term_months,
        terms.interest_type,
        terms.currency,
    )
