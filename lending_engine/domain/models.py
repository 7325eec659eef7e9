"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


class Frequency(str, Enum):
    """Repayment cadence of a loan schedule"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class InterestType(str, Enum):
    SIMPLE = "simple"
    COMPOUND = "compound"


class PayFrequency(str, Enum):
    """How often the borrower gets paid"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"


class ComfortLevel(str, Enum):
    COMFORTABLE = "comfortable"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class TrustStatus(str, Enum):
    """Per-lender trust state; suspended and banned are administrative overrides"""

    NEW = "new"
    BUILDING = "building"
    GRADUATED = "graduated"
    SUSPENDED = "suspended"
    BANNED = "banned"


class LenderType(str, Enum):
    PERSONAL = "personal"
    BUSINESS = "business"


# Multipliers converting a per-paycheck amount to a monthly amount
PAY_FREQUENCY_MULTIPLIERS: Dict[PayFrequency, Decimal] = {
    PayFrequency.WEEKLY: Decimal("4.33"),
    PayFrequency.BIWEEKLY: Decimal("2.17"),
    PayFrequency.SEMIMONTHLY: Decimal("2"),
    PayFrequency.MONTHLY: Decimal("1"),
}


@dataclass(frozen=True)
class LoanTerms:
    """Loan input; immutable once a schedule has been generated from it"""

    principal: Decimal
    annual_rate_percent: Decimal
    interest_type: InterestType
    frequency: Frequency
    installment_count: int
    start_date: date
    currency: str = "USD"
    custom_interval_days: Optional[int] = None


@dataclass(frozen=True)
class InterestQuote:
    """Aggregate cost of a loan"""

    term_months: Decimal
    total_interest: Decimal
    total_amount: Decimal


@dataclass
class ScheduleItem:
    """Single installment in a repayment schedule"""

    sequence_index: int
    due_date: date
    total_amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    is_paid: bool = False


@dataclass(frozen=True)
class FinancialProfile:
    """Borrower income profile consulted by the schedule advisor"""

    pay_frequency: PayFrequency
    monthly_income: Decimal
    monthly_expenses: Decimal
    comfort_level: Optional[ComfortLevel] = None

    @property
    def disposable_income(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses

    @classmethod
    def from_paycheck(
        cls,
        pay_amount: Decimal,
        pay_frequency: PayFrequency,
        comfort_level: Optional[ComfortLevel] = None,
        rent_mortgage: Decimal = Decimal(0),
        utilities: Decimal = Decimal(0),
        transportation: Decimal = Decimal(0),
        insurance: Decimal = Decimal(0),
        groceries: Decimal = Decimal(0),
        phone: Decimal = Decimal(0),
        subscriptions: Decimal = Decimal(0),
        childcare: Decimal = Decimal(0),
        other_bills: Decimal = Decimal(0),
        existing_debt_payments: Decimal = Decimal(0),
    ) -> "FinancialProfile":
        """
        Build a profile from a paycheck amount and an itemized expense list.

        Example:
            $1000 weekly pay → $4330 monthly income (× 4.33)
        """
        monthly_income = Decimal(pay_amount) * PAY_FREQUENCY_MULTIPLIERS[pay_frequency]
        monthly_expenses = sum(
            (
                Decimal(rent_mortgage),
                Decimal(utilities),
                Decimal(transportation),
                Decimal(insurance),
                Decimal(groceries),
                Decimal(phone),
                Decimal(subscriptions),
                Decimal(childcare),
                Decimal(other_bills),
                Decimal(existing_debt_payments),
            ),
            Decimal(0),
        )
        return cls(
            pay_frequency=pay_frequency,
            monthly_income=monthly_income,
            monthly_expenses=monthly_expenses,
            comfort_level=comfort_level,
        )


@dataclass(frozen=True)
class PresetOption:
    """Canned schedule option offered for an amount"""

    frequency: Frequency
    installment_count: int
    label: str
    payment_amount: Decimal
    recommended: bool = False
    duration_fee: Optional[Decimal] = None
    duration_fee_percent: Optional[int] = None
    total_amount: Optional[Decimal] = None
    total_weeks: Optional[int] = None


@dataclass(frozen=True)
class PaymentSuggestion:
    """Income-based repayment suggestion for one comfort level"""

    comfort_level: ComfortLevel
    payment_amount: Decimal
    frequency: PayFrequency
    installment_count: int
    percent_of_disposable: int
    weeks_to_payoff: int
    total_repayment: Decimal
    description: str
    schedule_frequency: Frequency = Frequency.MONTHLY
    custom_interval_days: Optional[int] = None


@dataclass(frozen=True)
class IncomeBasedSuggestion:
    """Suggestions for every comfort level plus the pre-selected one"""

    monthly_income: Decimal
    disposable_income: Decimal
    pay_frequency: PayFrequency
    suggestions: Dict[ComfortLevel, PaymentSuggestion]
    selected_level: ComfortLevel
    warning: Optional[str] = None

    @property
    def recommended(self) -> PaymentSuggestion:
        return self.suggestions[self.selected_level]


@dataclass(frozen=True)
class ScheduleValidation:
    valid: bool
    payment_amount: Decimal
    message: Optional[str] = None


@dataclass(frozen=True)
class PaymentSafety:
    safe: bool
    percentage: Decimal
    message: str


@dataclass(frozen=True)
class TrustRecord:
    """Trust between one borrower and one business lender"""

    borrower_id: str
    business_id: str
    completed_loan_count: int = 0
    has_graduated: bool = False
    trust_status: TrustStatus = TrustStatus.NEW
    total_borrowed: Decimal = Decimal(0)
    total_repaid: Decimal = Decimal(0)
    default_count: int = 0
    on_time_payment_count: int = 0
    late_payment_count: int = 0

    @property
    def is_blocked(self) -> bool:
        return self.trust_status in (TrustStatus.SUSPENDED, TrustStatus.BANNED)


@dataclass(frozen=True)
class TierPolicy:
    """Lender-configured ceiling for one ordinal trust tier"""

    lender_id: str
    tier_id: int
    max_loan_amount: Decimal
    is_active: bool = True


@dataclass(frozen=True)
class BusinessProfile:
    """Lending settings of a business lender"""

    business_id: str
    business_name: str
    first_time_borrower_amount: Decimal = Decimal(50)
    max_loan_amount: Decimal = Decimal(5000)
    is_active: bool = True
    allow_first_time_borrowers: bool = True


@dataclass(frozen=True)
class MaxBorrowable:
    """How much a borrower may currently borrow from one business"""

    amount: Decimal
    status: TrustStatus
    is_graduated: bool
    completed_loans: int
    loans_until_graduation: int
    first_time_amount: Decimal
    message: str
    reason: Optional[str] = None

    @property
    def can_borrow(self) -> bool:
        return self.amount > 0


@dataclass(frozen=True)
class GlobalTier:
    """Rung of the personal-lending borrowing ladder"""

    number: int
    name: str
    max_amount: Optional[Decimal]  # None means unlimited

    @property
    def is_unlimited(self) -> bool:
        return self.max_amount is None


@dataclass(frozen=True)
class BorrowerStanding:
    """Borrower's position on the global personal-lending ladder"""

    borrower_id: str
    borrowing_tier: int = 1
    loans_at_current_tier: int = 0
    total_loans_completed: int = 0


@dataclass(frozen=True)
class ActiveLoan:
    """Outstanding personal loan, as supplied by the caller"""

    amount: Decimal
    amount_paid: Decimal = Decimal(0)
    amount_remaining: Optional[Decimal] = None

    @property
    def outstanding(self) -> Decimal:
        if self.amount_remaining is not None:
            return self.amount_remaining
        return max(Decimal(0), self.amount - self.amount_paid)


@dataclass(frozen=True)
class EligibilityResult:
    """Answer to "can this borrower request money now, and how much?" """

    lender_type: LenderType
    can_borrow: bool
    available_amount: Optional[Decimal]  # None means unlimited
    total_outstanding: Decimal = Decimal(0)
    tier_name: Optional[str] = None
    max_amount: Optional[Decimal] = None
    loans_needed: int = 0
    next_tier_amount: Optional[Decimal] = None
    reason: Optional[str] = None
    trust: Optional[MaxBorrowable] = field(default=None)
