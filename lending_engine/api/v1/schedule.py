"""POST /v1/quote, /v1/schedule, /v1/schedule/suggest, /v1/schedule/validate - loan pricing and schedules"""

import logging
from fastapi import APIRouter, HTTPException, Request

from lending_engine.api.v1.schemas import (
    IncomeBasedSchema,
    PaymentSafetySchema,
    PaymentSuggestionSchema,
    PresetSchema,
    QuoteRequest,
    QuoteResponse,
    ScheduleItemSchema,
    ScheduleRequest,
    ScheduleResponse,
    SuggestRequest,
    SuggestResponse,
    ValidateScheduleRequest,
    ValidateScheduleResponse,
)
from lending_engine.api.dependencies import get_request_id
from lending_engine.domain.models import FinancialProfile, LoanTerms
from lending_engine.domain.terms import resolve_term
from lending_engine.domain.interest import compute_interest, quote_loan
from lending_engine.domain.installments import generate_schedule
from lending_engine.domain.advisor import (
    assess_payment_safety,
    get_repayment_presets,
    suggest_schedule,
    validate_repayment_schedule,
)
from lending_engine.domain.exceptions import (
    InvalidAmountError,
    InvalidTermError,
    NoSafeSuggestionError,
)
from lending_engine.infrastructure.observability.metrics import record_schedule

router = APIRouter()


@router.post("/quote", response_model=QuoteResponse)
def create_quote(request_body: QuoteRequest, request: Request):
    """Resolve the term in months and price the loan"""
    try:
        term_months = resolve_term(request_body.installment_count, request_body.frequency)
        quote = compute_interest(
            request_body.principal,
            request_body.annual_rate_percent,
            term_months,
            request_body.interest_type,
            request_body.currency,
        )
    except (InvalidAmountError, InvalidTermError) as e:
        logging.warning(f"Invalid quote request: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    return QuoteResponse(
        term_months=quote.term_months,
        total_interest=quote.total_interest,
        total_amount=quote.total_amount,
        currency=request_body.currency,
    )


@router.post("/schedule", response_model=ScheduleResponse)
def create_schedule(request_body: ScheduleRequest, request: Request):
    """
    Generate the installment schedule for a loan.

    When total_amount is omitted the loan is priced from its terms first.
    Sum of installments always equals principal + interest exactly.
    """
    request_id = get_request_id(request)

    try:
        terms = LoanTerms(
            principal=request_body.principal,
            annual_rate_percent=request_body.annual_rate_percent,
            interest_type=request_body.interest_type,
            frequency=request_body.frequency,
            installment_count=request_body.installment_count,
            start_date=request_body.start_date,
            currency=request_body.currency,
            custom_interval_days=request_body.custom_interval_days,
        )
        total_amount = request_body.total_amount
        if total_amount is None:
            total_amount = quote_loan(terms).total_amount
        schedule = generate_schedule(terms, total_amount)

    except (InvalidAmountError, InvalidTermError) as e:
        logging.warning(f"Invalid schedule request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_schedule(terms.frequency.value, len(schedule))
    logging.info(
        "Schedule generated",
        extra={
            "request_id": request_id,
            "step": "schedule_generated",
            "frequency": terms.frequency.value,
            "installment_count": len(schedule),
            "total_amount": str(total_amount),
        },
    )

    principal = sum((item.principal_amount for item in schedule))
    interest = sum((item.interest_amount for item in schedule))
    return ScheduleResponse(
        principal=principal,
        total_interest=interest,
        total_amount=principal + interest,
        currency=terms.currency,
        installments=[ScheduleItemSchema.model_validate(item) for item in schedule],
    )


@router.post("/schedule/suggest", response_model=SuggestResponse)
def create_suggestions(request_body: SuggestRequest, request: Request):
    """
    Suggest repayment options for an amount.

    With a financial profile: income-based suggestions per comfort level.
    Without one: canned presets banded by amount, one of them recommended.
    """
    try:
        if request_body.profile is None:
            presets = get_repayment_presets(
                request_body.amount,
                request_body.annual_rate_percent,
                request_body.include_duration_fees,
            )
            return SuggestResponse(presets=[PresetSchema.model_validate(p) for p in presets])

        profile = FinancialProfile(
            pay_frequency=request_body.profile.pay_frequency,
            monthly_income=request_body.profile.monthly_income,
            monthly_expenses=request_body.profile.monthly_expenses,
            comfort_level=request_body.profile.comfort_level,
        )
        result = suggest_schedule(request_body.amount, profile, request_body.selected_level)

    except NoSafeSuggestionError as e:
        logging.info(f"No safe suggestion: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e))

    suggestions = {
        level: PaymentSuggestionSchema.model_validate(s) for level, s in result.suggestions.items()
    }
    return SuggestResponse(
        income_based=IncomeBasedSchema(
            monthly_income=result.monthly_income,
            disposable_income=result.disposable_income,
            pay_frequency=result.pay_frequency,
            suggestions=suggestions,
            selected_level=result.selected_level,
            recommended=suggestions[result.selected_level],
            warning=result.warning,
        )
    )


@router.post("/schedule/validate", response_model=ValidateScheduleResponse)
def validate_schedule(request_body: ValidateScheduleRequest):
    """Check a borrower-chosen schedule, and its affordability when income is given"""
    validation = validate_repayment_schedule(
        request_body.amount,
        request_body.frequency,
        request_body.installment_count,
    )

    safety = None
    if validation.valid and request_body.pay_frequency and request_body.disposable_income is not None:
        try:
            safety = assess_payment_safety(
                validation.payment_amount,
                request_body.pay_frequency,
                request_body.disposable_income,
            )
        except NoSafeSuggestionError as e:
            raise HTTPException(status_code=422, detail=str(e))

    return ValidateScheduleResponse(
        valid=validation.valid,
        payment_amount=validation.payment_amount,
        message=validation.message,
        safety=PaymentSafetySchema.model_validate(safety) if safety else None,
    )
