"""Eligibility calculator - how much may a borrower request right now?"""

from decimal import Decimal
from typing import Iterable, Optional
from lending_engine.domain.models import (
    ActiveLoan,
    BorrowerStanding,
    BusinessProfile,
    EligibilityResult,
    LenderType,
    TierPolicy,
    TrustRecord,
)
from lending_engine.domain.exceptions import AmountExceedsLimitError, InvalidAmountError
from lending_engine.domain.tiers import get_tier, loans_needed_to_upgrade, next_tier
from lending_engine.domain.trust import compute_max_borrowable


def total_outstanding(active_loans: Iterable[ActiveLoan]) -> Decimal:
    return sum((loan.outstanding for loan in active_loans), Decimal(0))


def personal_eligibility(
    standing: BorrowerStanding,
    active_loans: Iterable[ActiveLoan] = (),
) -> EligibilityResult:
    """
    Eligibility against the global tier ladder (personal lenders).

    available = max(0, tier limit - outstanding principal on active loans).
    The top tier is unlimited and can always borrow.
    """
    tier = get_tier(standing.borrowing_tier)
    upcoming = next_tier(tier.number)
    outstanding = total_outstanding(active_loans)
    loans_needed = loans_needed_to_upgrade(standing)

    if tier.is_unlimited:
        return EligibilityResult(
            lender_type=LenderType.PERSONAL,
            can_borrow=True,
            available_amount=None,
            total_outstanding=outstanding,
            tier_name=tier.name,
            max_amount=None,
            loans_needed=0,
        )

    available = max(Decimal(0), tier.max_amount - outstanding)
    can_borrow = available > 0
    reason = None
    if not can_borrow:
        reason = (
            f"You've reached your borrowing limit of ${tier.max_amount}. "
            "Pay off existing loans to borrow more."
        )

    return EligibilityResult(
        lender_type=LenderType.PERSONAL,
        can_borrow=can_borrow,
        available_amount=available,
        total_outstanding=outstanding,
        tier_name=tier.name,
        max_amount=tier.max_amount,
        loans_needed=loans_needed,
        next_tier_amount=upcoming.max_amount if upcoming else None,
        reason=reason,
    )


def business_eligibility(
    record: Optional[TrustRecord],
    business: BusinessProfile,
    policies: Iterable[TierPolicy] = (),
    borrower_tier: Optional[int] = None,
) -> EligibilityResult:
    """Eligibility at one business lender; the cap comes from the trust engine"""
    trust = compute_max_borrowable(record, business, policies, borrower_tier)

    return EligibilityResult(
        lender_type=LenderType.BUSINESS,
        can_borrow=trust.can_borrow,
        available_amount=trust.amount,
        tier_name=trust.status.value,
        max_amount=trust.amount,
        loans_needed=trust.loans_until_graduation,
        reason=None if trust.can_borrow else trust.message,
        trust=trust,
    )


def first_time_offer(businesses: Iterable[BusinessProfile]) -> Decimal:
    """Largest amount any active business offers a first-time borrower"""
    offers = [
        b.first_time_borrower_amount
        for b in businesses
        if b.is_active and b.allow_first_time_borrowers
    ]
    return max(offers, default=Decimal(0))


def unselected_business_eligibility(businesses: Iterable[BusinessProfile]) -> EligibilityResult:
    """Eligibility before a lender is chosen, used to pre-filter amounts"""
    offer = first_time_offer(businesses)
    return EligibilityResult(
        lender_type=LenderType.BUSINESS,
        can_borrow=offer > 0,
        available_amount=offer,
        max_amount=offer,
        reason=None if offer > 0 else "No business lender is currently accepting new borrowers.",
    )


def require_within_limit(result: EligibilityResult, requested_amount: Decimal) -> EligibilityResult:
    """
    Reject a request above the computed ceiling.

    Raises:
        InvalidAmountError: requested_amount <= 0
        AmountExceedsLimitError: requested_amount > available_amount
    """
    requested_amount = Decimal(requested_amount)
    if requested_amount <= 0:
        raise InvalidAmountError(f"Requested amount must be positive, got {requested_amount}")

    ceiling = result.available_amount
    if ceiling is None or requested_amount <= ceiling:
        return result

    if result.reason:
        reason = result.reason
    elif result.lender_type is LenderType.PERSONAL and requested_amount > result.max_amount:
        reason = f"Amount exceeds your tier limit of ${result.max_amount}"
    elif result.lender_type is LenderType.PERSONAL:
        reason = (
            f"Total loans would exceed your limit of ${result.max_amount}. "
            f"Available: ${ceiling}"
        )
    else:
        reason = f"Amount exceeds the maximum of ${ceiling} you can currently borrow"

    raise AmountExceedsLimitError(
        requested=requested_amount,
        ceiling=ceiling,
        reason=reason,
        tier_name=result.tier_name,
        loans_needed=result.loans_needed,
    )
