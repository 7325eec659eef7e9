"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from lending_engine.domain.models import (
    ComfortLevel,
    Frequency,
    InterestType,
    LenderType,
    PayFrequency,
    TrustStatus,
)


class QuoteRequest(BaseModel):
    """Request body for POST /v1/quote"""

    principal: Decimal = Field(..., description="Loan principal")
    annual_rate_percent: Decimal = Field(Decimal(0), description="Annual interest rate, e.g. 12 for 12%")
    interest_type: InterestType = InterestType.SIMPLE
    frequency: Frequency
    installment_count: int = Field(..., description="Number of installments")
    currency: str = Field("USD", min_length=3, max_length=3)


class QuoteResponse(BaseModel):
    """Response for POST /v1/quote"""

    term_months: Decimal
    total_interest: Decimal
    total_amount: Decimal
    currency: str


class ScheduleRequest(QuoteRequest):
    """Request body for POST /v1/schedule"""

    start_date: date
    custom_interval_days: Optional[int] = None
    total_amount: Optional[Decimal] = Field(None, description="Principal plus interest; priced from the terms when omitted")


class ScheduleItemSchema(BaseModel):
    """Single installment in a repayment schedule"""

    model_config = ConfigDict(from_attributes=True)

    sequence_index: int
    due_date: date
    total_amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    is_paid: bool = False


class ScheduleResponse(BaseModel):
    """Response for POST /v1/schedule"""

    principal: Decimal
    total_interest: Decimal
    total_amount: Decimal
    currency: str
    installments: List[ScheduleItemSchema]


class FinancialProfileSchema(BaseModel):
    pay_frequency: PayFrequency
    monthly_income: Decimal
    monthly_expenses: Decimal = Decimal(0)
    comfort_level: Optional[ComfortLevel] = None


class SuggestRequest(BaseModel):
    """Request body for POST /v1/schedule/suggest"""

    amount: Decimal
    profile: Optional[FinancialProfileSchema] = None
    selected_level: Optional[ComfortLevel] = None
    include_duration_fees: bool = False
    annual_rate_percent: Decimal = Decimal(0)


class PresetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    frequency: Frequency
    installment_count: int
    label: str
    payment_amount: Decimal
    recommended: bool
    duration_fee: Optional[Decimal] = None
    duration_fee_percent: Optional[int] = None
    total_amount: Optional[Decimal] = None
    total_weeks: Optional[int] = None


class PaymentSuggestionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comfort_level: ComfortLevel
    payment_amount: Decimal
    frequency: PayFrequency
    installment_count: int
    percent_of_disposable: int
    weeks_to_payoff: int
    total_repayment: Decimal
    description: str
    schedule_frequency: Frequency
    custom_interval_days: Optional[int] = None


class IncomeBasedSchema(BaseModel):
    monthly_income: Decimal
    disposable_income: Decimal
    pay_frequency: PayFrequency
    suggestions: Dict[ComfortLevel, PaymentSuggestionSchema]
    selected_level: ComfortLevel
    recommended: PaymentSuggestionSchema
    warning: Optional[str] = None


class SuggestResponse(BaseModel):
    """Response for POST /v1/schedule/suggest; exactly one of the two is set"""

    presets: Optional[List[PresetSchema]] = None
    income_based: Optional[IncomeBasedSchema] = None


class ValidateScheduleRequest(BaseModel):
    """Request body for POST /v1/schedule/validate"""

    amount: Decimal
    frequency: Frequency
    installment_count: int
    pay_frequency: Optional[PayFrequency] = None
    disposable_income: Optional[Decimal] = None


class PaymentSafetySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    safe: bool
    percentage: Decimal
    message: str


class ValidateScheduleResponse(BaseModel):
    valid: bool
    payment_amount: Decimal
    message: Optional[str] = None
    safety: Optional[PaymentSafetySchema] = None


class TrustRecordSchema(BaseModel):
    """Trust record between one borrower and one business"""

    model_config = ConfigDict(from_attributes=True)

    borrower_id: str
    business_id: str
    completed_loan_count: int
    has_graduated: bool
    trust_status: TrustStatus
    total_borrowed: Decimal
    total_repaid: Decimal
    default_count: int
    on_time_payment_count: int
    late_payment_count: int


class MaxBorrowableSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    amount: Decimal
    status: TrustStatus
    reason: Optional[str] = None
    is_graduated: bool
    completed_loans: int
    loans_until_graduation: int
    first_time_amount: Decimal
    message: str


class TrustSummaryResponse(BaseModel):
    """Response for GET /v1/trust/{borrower_id}/{business_id}"""

    record: TrustRecordSchema
    max_borrowable: MaxBorrowableSchema


class LoanCompletedRequest(BaseModel):
    amount_repaid: Decimal = Field(Decimal(0), ge=0)


class LoanCreatedRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


class PaymentRecordedRequest(BaseModel):
    on_time: bool


class StandingResponse(BaseModel):
    """Global personal-lending standing after a completed loan"""

    model_config = ConfigDict(from_attributes=True)

    borrower_id: str
    borrowing_tier: int
    loans_at_current_tier: int
    total_loans_completed: int


class EligibilityRequest(BaseModel):
    """Request body for POST /v1/eligibility"""

    borrower_id: str = Field(..., min_length=1, description="Borrower identifier")
    lender_type: LenderType
    lender_id: Optional[str] = Field(None, description="Business lender; omit before a lender is chosen")
    requested_amount: Optional[Decimal] = None


class EligibilityResponse(BaseModel):
    """Response for POST /v1/eligibility"""

    model_config = ConfigDict(from_attributes=True)

    lender_type: LenderType
    can_borrow: bool
    available_amount: Optional[Decimal] = None
    total_outstanding: Decimal
    tier_name: Optional[str] = None
    max_amount: Optional[Decimal] = None
    loans_needed: int
    next_tier_amount: Optional[Decimal] = None
    reason: Optional[str] = None
    trust: Optional[MaxBorrowableSchema] = None
