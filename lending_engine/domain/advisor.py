"""Schedule advisor - suggests installment plans before a schedule is generated"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union
from lending_engine.domain.models import (
    PAY_FREQUENCY_MULTIPLIERS,
    ComfortLevel,
    FinancialProfile,
    Frequency,
    IncomeBasedSuggestion,
    InterestType,
    PayFrequency,
    PaymentSafety,
    PaymentSuggestion,
    PresetOption,
    ScheduleValidation,
)
from lending_engine.domain.exceptions import InvalidAmountError, NoSafeSuggestionError
from lending_engine.domain.fees import calculate_duration_fee
from lending_engine.domain.interest import compute_interest
from lending_engine.domain.terms import resolve_term
from lending_engine.utils.money import ceil_whole, round_whole

# (frequency, installments, label, recommended)
_Preset = Tuple[Frequency, int, str, bool]

# Share of monthly disposable income each comfort level commits to repayment
COMFORT_SHARES: Dict[ComfortLevel, Decimal] = {
    ComfortLevel.COMFORTABLE: Decimal("0.15"),
    ComfortLevel.BALANCED: Decimal("0.22"),
    ComfortLevel.AGGRESSIVE: Decimal("0.30"),
}

# Installment count bounds for amounts above the largest band
COMFORT_COUNT_BOUNDS: Dict[ComfortLevel, Tuple[int, int]] = {
    ComfortLevel.COMFORTABLE: (8, 24),
    ComfortLevel.BALANCED: (4, 12),
    ComfortLevel.AGGRESSIVE: (2, 6),
}

# Upper amount bound → installment count per comfort level
INCOME_BANDS: List[Tuple[Decimal, Dict[ComfortLevel, int]]] = [
    (Decimal(100), {ComfortLevel.COMFORTABLE: 4, ComfortLevel.BALANCED: 2, ComfortLevel.AGGRESSIVE: 1}),
    (Decimal(300), {ComfortLevel.COMFORTABLE: 6, ComfortLevel.BALANCED: 4, ComfortLevel.AGGRESSIVE: 2}),
    (Decimal(500), {ComfortLevel.COMFORTABLE: 8, ComfortLevel.BALANCED: 4, ComfortLevel.AGGRESSIVE: 2}),
    (Decimal(1000), {ComfortLevel.COMFORTABLE: 10, ComfortLevel.BALANCED: 6, ComfortLevel.AGGRESSIVE: 3}),
    (Decimal(2000), {ComfortLevel.COMFORTABLE: 12, ComfortLevel.BALANCED: 8, ComfortLevel.AGGRESSIVE: 4}),
]

MIN_INSTALLMENT_BUDGET = Decimal(50)
LOW_DISPOSABLE_RATIO = Decimal("0.1")

WEEKS_PER_PAYCHECK: Dict[PayFrequency, int] = {
    PayFrequency.WEEKLY: 1,
    PayFrequency.BIWEEKLY: 2,
    PayFrequency.SEMIMONTHLY: 2,
    PayFrequency.MONTHLY: 4,
}

# Schedule cadence that lines installments up with paydays; semimonthly
# paydays have no calendar frequency so they run on a 15-day custom interval
SCHEDULE_CADENCE: Dict[PayFrequency, Tuple[Frequency, Optional[int]]] = {
    PayFrequency.WEEKLY: (Frequency.WEEKLY, None),
    PayFrequency.BIWEEKLY: (Frequency.BIWEEKLY, None),
    PayFrequency.SEMIMONTHLY: (Frequency.CUSTOM, 15),
    PayFrequency.MONTHLY: (Frequency.MONTHLY, None),
}

COMFORT_DESCRIPTIONS: Dict[ComfortLevel, str] = {
    ComfortLevel.COMFORTABLE: "Easy on your budget",
    ComfortLevel.BALANCED: "Recommended",
    ComfortLevel.AGGRESSIVE: "Fastest payoff",
}


def _presets_for(amount: Decimal) -> List[_Preset]:
    """Canned plans banded by amount; smaller loans get shorter schedules"""
    if amount <= 100:
        presets = [
            (Frequency.WEEKLY, 1, "Pay in full (1 week)", False),
            (Frequency.WEEKLY, 2, "2 weekly payments", True),
        ]
        if amount >= 50:
            presets.append((Frequency.WEEKLY, 4, "4 weekly payments", False))
        return presets

    if amount <= 500:
        presets = [
            (Frequency.WEEKLY, 2, "2 weekly payments", False),
            (Frequency.WEEKLY, 4, "4 weekly payments", True),
            (Frequency.BIWEEKLY, 4, "4 bi-weekly payments", False),
        ]
        if amount >= 200:
            presets.append((Frequency.MONTHLY, 3, "3 monthly payments", False))
        return presets

    if amount <= 2000:
        return [
            (Frequency.BIWEEKLY, 4, "4 bi-weekly payments", False),
            (Frequency.MONTHLY, 3, "3 monthly payments", True),
            (Frequency.MONTHLY, 4, "4 monthly payments", False),
            (Frequency.MONTHLY, 6, "6 monthly payments", False),
        ]

    if amount <= 10000:
        return [
            (Frequency.MONTHLY, 3, "3 monthly payments", False),
            (Frequency.MONTHLY, 6, "6 monthly payments", True),
            (Frequency.MONTHLY, 9, "9 monthly payments", False),
            (Frequency.MONTHLY, 12, "12 monthly payments", False),
        ]

    return [
        (Frequency.MONTHLY, 6, "6 monthly payments", False),
        (Frequency.MONTHLY, 12, "12 monthly payments", True),
        (Frequency.MONTHLY, 18, "18 monthly payments", False),
        (Frequency.MONTHLY, 24, "24 monthly payments", False),
    ]


def get_repayment_presets(
    amount: Decimal,
    annual_rate_percent: Decimal = Decimal(0),
    include_duration_fees: bool = False,
) -> List[PresetOption]:
    """
    Canned repayment options for an amount, exactly one flagged recommended.

    Advisory only: presets pre-fill a schedule, they never authorize a loan.
    Without fees, payment_amount = ceil(amount / installments). With duration
    fees, simple interest and the duration fee are added before dividing.
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")

    options = []
    for frequency, installments, label, recommended in _presets_for(amount):
        if not include_duration_fees:
            options.append(
                PresetOption(
                    frequency=frequency,
                    installment_count=installments,
                    label=label,
                    payment_amount=ceil_whole(amount / installments),
                    recommended=recommended,
                )
            )
            continue

        quote = compute_interest(
            amount,
            annual_rate_percent,
            resolve_term(installments, frequency),
            InterestType.SIMPLE,
        )
        fee = calculate_duration_fee(amount, frequency, installments)
        total = quote.total_amount + fee.fee_amount
        options.append(
            PresetOption(
                frequency=frequency,
                installment_count=installments,
                label=label,
                payment_amount=ceil_whole(total / installments),
                recommended=recommended,
                duration_fee=fee.fee_amount,
                duration_fee_percent=fee.fee_percent,
                total_amount=total,
                total_weeks=fee.total_weeks,
            )
        )

    return options


def _installment_count(
    amount: Decimal,
    level: ComfortLevel,
    profile: FinancialProfile,
) -> int:
    for upper, counts in INCOME_BANDS:
        if amount <= upper:
            return counts[level]

    multiplier = PAY_FREQUENCY_MULTIPLIERS[profile.pay_frequency]
    monthly_budget = profile.disposable_income * COMFORT_SHARES[level]
    per_installment = max(round_whole(monthly_budget / multiplier), MIN_INSTALLMENT_BUDGET)

    count = int(ceil_whole(amount / per_installment))
    low, high = COMFORT_COUNT_BOUNDS[level]
    return min(max(count, low), high)


def _suggest_for_level(
    amount: Decimal,
    level: ComfortLevel,
    profile: FinancialProfile,
) -> PaymentSuggestion:
    count = _installment_count(amount, level, profile)
    payment = ceil_whole(amount / count)
    multiplier = PAY_FREQUENCY_MULTIPLIERS[profile.pay_frequency]
    percent = round_whole(payment * multiplier / profile.disposable_income * 100)
    schedule_frequency, interval_days = SCHEDULE_CADENCE[profile.pay_frequency]

    return PaymentSuggestion(
        comfort_level=level,
        payment_amount=payment,
        frequency=profile.pay_frequency,
        installment_count=count,
        percent_of_disposable=min(int(percent), 100),
        weeks_to_payoff=count * WEEKS_PER_PAYCHECK[profile.pay_frequency],
        total_repayment=payment * count,
        description=COMFORT_DESCRIPTIONS[level],
        schedule_frequency=schedule_frequency,
        custom_interval_days=interval_days,
    )


def suggest_from_income(
    amount: Decimal,
    profile: FinancialProfile,
    selected_level: Optional[ComfortLevel] = None,
) -> IncomeBasedSuggestion:
    """
    Personalized suggestions for every comfort level.

    Pre-selection order: explicit selection, then the borrower's stored
    preference, then balanced.

    Raises:
        InvalidAmountError: amount <= 0
        NoSafeSuggestionError: disposable income <= 0
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")

    disposable = profile.disposable_income
    if disposable <= 0:
        raise NoSafeSuggestionError(disposable)

    suggestions = {level: _suggest_for_level(amount, level, profile) for level in ComfortLevel}

    warning = None
    if disposable < amount * LOW_DISPOSABLE_RATIO:
        warning = "Your disposable income is low. This loan may be difficult to repay."

    return IncomeBasedSuggestion(
        monthly_income=profile.monthly_income,
        disposable_income=disposable,
        pay_frequency=profile.pay_frequency,
        suggestions=suggestions,
        selected_level=selected_level or profile.comfort_level or ComfortLevel.BALANCED,
        warning=warning,
    )


def suggest_schedule(
    amount: Decimal,
    profile: Optional[FinancialProfile] = None,
    selected_level: Optional[ComfortLevel] = None,
) -> Union[List[PresetOption], IncomeBasedSuggestion]:
    """Income-based suggestions when a profile is supplied, presets otherwise"""
    if profile is None:
        return get_repayment_presets(amount)
    return suggest_from_income(amount, profile, selected_level)


def max_installments_for(amount: Decimal, frequency: Frequency) -> int:
    """Longest realistic schedule for an amount and cadence"""
    if amount <= 100:
        return 4 if frequency == Frequency.WEEKLY else 2
    if amount <= 500:
        if frequency == Frequency.WEEKLY:
            return 8
        return 6 if frequency == Frequency.BIWEEKLY else 3
    if amount <= 2000:
        if frequency == Frequency.MONTHLY:
            return 6
        return 12 if frequency == Frequency.BIWEEKLY else 24
    if amount <= 10000:
        if frequency == Frequency.MONTHLY:
            return 12
        return 24 if frequency == Frequency.BIWEEKLY else 52
    if frequency == Frequency.MONTHLY:
        return 24
    return 48 if frequency == Frequency.BIWEEKLY else 104


def validate_repayment_schedule(
    amount: Decimal,
    frequency: Frequency,
    installments: int,
) -> ScheduleValidation:
    """
    Check that a borrower-chosen schedule is realistic for the amount.

    Rules:
    - Each payment must be at least max($10, 5% of the amount)
    - Installment count is capped per amount band and cadence
      (e.g. a $50 loan can't be stretched over 24 months)
    """
    amount = Decimal(amount)
    if amount <= 0:
        return ScheduleValidation(valid=False, payment_amount=Decimal(0), message="Invalid loan amount")
    if installments <= 0:
        return ScheduleValidation(
            valid=False, payment_amount=Decimal(0), message="Invalid number of installments"
        )

    min_payment = max(Decimal(10), amount * Decimal("0.05"))
    payment = ceil_whole(amount / installments)

    if payment < min_payment:
        return ScheduleValidation(
            valid=False,
            payment_amount=payment,
            message=f"Payment amount is too small. Each payment should be at least ${min_payment:.0f}.",
        )

    max_installments = max_installments_for(amount, Frequency(frequency))
    if installments > max_installments:
        return ScheduleValidation(
            valid=False,
            payment_amount=payment,
            message=(
                f"Repayment period is too long. Maximum {max_installments} "
                f"{Frequency(frequency).value} payments for this loan amount."
            ),
        )

    return ScheduleValidation(valid=True, payment_amount=payment)


def assess_payment_safety(
    payment_amount: Decimal,
    pay_frequency: PayFrequency,
    disposable_income: Decimal,
) -> PaymentSafety:
    """
    Classify a per-paycheck payment against monthly disposable income.

    Thresholds: above 35% is unsafe, above 25% is aggressive but manageable.

    Raises:
        NoSafeSuggestionError: disposable income <= 0
    """
    disposable_income = Decimal(disposable_income)
    if disposable_income <= 0:
        raise NoSafeSuggestionError(disposable_income)

    monthly_payment = Decimal(payment_amount) * PAY_FREQUENCY_MULTIPLIERS[PayFrequency(pay_frequency)]
    percentage = monthly_payment / disposable_income * 100

    if percentage > 35:
        return PaymentSafety(
            safe=False,
            percentage=percentage,
            message="This payment is more than 35% of your disposable income and may be difficult to maintain.",
        )
    if percentage > 25:
        return PaymentSafety(
            safe=True,
            percentage=percentage,
            message="This payment is aggressive but manageable if you have no unexpected expenses.",
        )
    return PaymentSafety(
        safe=True,
        percentage=percentage,
        message="This payment is within a comfortable range for your budget.",
    )
