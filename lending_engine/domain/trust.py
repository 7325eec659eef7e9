"""Borrower trust engine - per (borrower, business) trust state machine

Every transition is a pure function returning a new TrustRecord; persisting it
atomically is the caller's job (see TrustRepository.compare_and_swap).

States: new → building → graduated, with suspended and banned reachable from
any state. Overrides are only lifted by an explicit reinstate.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional
from lending_engine.domain.models import (
    BusinessProfile,
    MaxBorrowable,
    TierPolicy,
    TrustRecord,
    TrustStatus,
)
from lending_engine.domain.exceptions import InvalidAmountError

GRADUATION_LOAN_COUNT = 3

# Ordering used when a default-reset must not soften an override in force
_SEVERITY = {
    TrustStatus.NEW: 0,
    TrustStatus.BUILDING: 0,
    TrustStatus.GRADUATED: 0,
    TrustStatus.SUSPENDED: 1,
    TrustStatus.BANNED: 2,
}


def new_trust_record(borrower_id: str, business_id: str) -> TrustRecord:
    """Implicit record for a first interaction between borrower and business"""
    return TrustRecord(borrower_id=borrower_id, business_id=business_id)


def status_for_count(completed_loan_count: int) -> TrustStatus:
    """Trust status implied by the completed-loan count alone"""
    if completed_loan_count >= GRADUATION_LOAN_COUNT:
        return TrustStatus.GRADUATED
    if completed_loan_count > 0:
        return TrustStatus.BUILDING
    return TrustStatus.NEW


def loans_until_graduation(record: TrustRecord) -> int:
    if record.has_graduated:
        return 0
    return max(0, GRADUATION_LOAN_COUNT - record.completed_loan_count)


def apply_loan_created(record: TrustRecord, amount: Decimal) -> TrustRecord:
    """A new loan with this business was funded"""
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError(f"Loan amount must be positive, got {amount}")
    return replace(record, total_borrowed=record.total_borrowed + amount)


def apply_loan_completed(record: TrustRecord, amount_repaid: Decimal = Decimal(0)) -> TrustRecord:
    """
    A loan with this business was fully repaid.

    Graduation happens in the same transition that takes the count to 3.
    Suspended/banned borrowers still accrue the count but keep their status.
    """
    amount_repaid = Decimal(amount_repaid)
    if amount_repaid < 0:
        raise InvalidAmountError(f"Repaid amount cannot be negative, got {amount_repaid}")

    count = record.completed_loan_count + 1
    has_graduated = record.has_graduated or count >= GRADUATION_LOAN_COUNT

    if record.is_blocked:
        status = record.trust_status
    elif has_graduated:
        status = TrustStatus.GRADUATED
    else:
        status = status_for_count(count)

    return replace(
        record,
        completed_loan_count=count,
        has_graduated=has_graduated,
        trust_status=status,
        total_repaid=record.total_repaid + amount_repaid,
    )


def apply_payment_recorded(record: TrustRecord, on_time: bool) -> TrustRecord:
    """Track installment punctuality with this business"""
    if on_time:
        return replace(record, on_time_payment_count=record.on_time_payment_count + 1)
    return replace(record, late_payment_count=record.late_payment_count + 1)


def ban(record: TrustRecord) -> TrustRecord:
    return replace(record, trust_status=TrustStatus.BANNED)


def suspend(record: TrustRecord) -> TrustRecord:
    return replace(record, trust_status=TrustStatus.SUSPENDED)


def reinstate(record: TrustRecord) -> TrustRecord:
    """Lift any override; status and graduation follow the count again"""
    return replace(
        record,
        trust_status=status_for_count(record.completed_loan_count),
        has_graduated=record.completed_loan_count >= GRADUATION_LOAN_COUNT,
    )


def reset_on_default(
    record: TrustRecord,
    reset_status: TrustStatus = TrustStatus.NEW,
) -> TrustRecord:
    """
    Borrower defaulted: progress is wiped, history counters are kept.

    The resulting status is the configured reset status, unless an override
    already in force is more severe (a banned borrower stays banned).
    """
    reset_status = TrustStatus(reset_status)
    if reset_status in (TrustStatus.BUILDING, TrustStatus.GRADUATED):
        raise ValueError(f"Reset status must be new, suspended or banned, got {reset_status.value}")

    status = reset_status
    if _SEVERITY[record.trust_status] > _SEVERITY[reset_status]:
        status = record.trust_status

    return replace(
        record,
        completed_loan_count=0,
        has_graduated=False,
        trust_status=status,
        default_count=record.default_count + 1,
    )


def select_tier_policy(
    policies: Iterable[TierPolicy],
    lender_id: str,
    borrower_tier: Optional[int],
) -> Optional[TierPolicy]:
    """
    Active policy for the borrower's tier at this lender.

    Falls back to the lender's highest active tier when the exact tier has no
    active policy; None when the lender has no active policies at all.
    """
    active = [p for p in policies if p.lender_id == lender_id and p.is_active]
    if not active:
        return None

    for policy in active:
        if policy.tier_id == borrower_tier:
            return policy

    return max(active, key=lambda p: p.tier_id)


def compute_max_borrowable(
    record: Optional[TrustRecord],
    business: BusinessProfile,
    policies: Iterable[TierPolicy] = (),
    borrower_tier: Optional[int] = None,
) -> MaxBorrowable:
    """
    Current borrowing ceiling for one borrower at one business.

    Rules:
    - banned / suspended → 0
    - no completed loans at a lender closed to first-time borrowers → 0
    - not graduated → the business's first-time borrower amount
    - graduated → matching tier policy, else highest active tier policy,
      else the first-time borrower amount

    A missing record is treated as a brand-new relationship.
    """
    if record is None:
        record = new_trust_record("", business.business_id)

    first_time_amount = business.first_time_borrower_amount
    name = business.business_name
    until_graduation = loans_until_graduation(record)

    if record.trust_status is TrustStatus.BANNED:
        return MaxBorrowable(
            amount=Decimal(0),
            status=TrustStatus.BANNED,
            is_graduated=record.has_graduated,
            completed_loans=record.completed_loan_count,
            loans_until_graduation=until_graduation,
            first_time_amount=first_time_amount,
            message=f"You are not eligible to borrow from {name}.",
            reason="banned",
        )

    if record.trust_status is TrustStatus.SUSPENDED:
        return MaxBorrowable(
            amount=Decimal(0),
            status=TrustStatus.SUSPENDED,
            is_graduated=record.has_graduated,
            completed_loans=record.completed_loan_count,
            loans_until_graduation=until_graduation,
            first_time_amount=first_time_amount,
            message=f"Your borrowing privileges with {name} are temporarily suspended.",
            reason="suspended",
        )

    if record.completed_loan_count == 0 and not business.allow_first_time_borrowers:
        return MaxBorrowable(
            amount=Decimal(0),
            status=record.trust_status,
            is_graduated=False,
            completed_loans=0,
            loans_until_graduation=until_graduation,
            first_time_amount=first_time_amount,
            message=f"{name} is not accepting new borrowers right now.",
            reason="first_time_not_accepted",
        )

    if not record.has_graduated:
        if record.completed_loan_count == 0:
            message = (
                f"As a new borrower with {name}, you can borrow up to ${first_time_amount}. "
                f"Complete {GRADUATION_LOAN_COUNT} loans to unlock higher amounts."
            )
        else:
            message = (
                f"{record.completed_loan_count}/{GRADUATION_LOAN_COUNT} loans completed. "
                f"{until_graduation} more to unlock higher amounts."
            )
        return MaxBorrowable(
            amount=first_time_amount,
            status=record.trust_status,
            is_graduated=False,
            completed_loans=record.completed_loan_count,
            loans_until_graduation=until_graduation,
            first_time_amount=first_time_amount,
            message=message,
        )

    policy = select_tier_policy(policies, business.business_id, borrower_tier)
    amount = policy.max_loan_amount if policy is not None else first_time_amount

    return MaxBorrowable(
        amount=amount,
        status=record.trust_status,
        is_graduated=True,
        completed_loans=record.completed_loan_count,
        loans_until_graduation=0,
        first_time_amount=first_time_amount,
        message=f"You've graduated! You can borrow up to ${amount} from {name}.",
    )
