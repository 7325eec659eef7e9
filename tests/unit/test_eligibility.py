"""Unit tests for the global tier ladder and eligibility calculator"""

import pytest
from decimal import Decimal
from lending_engine.domain.models import (
    ActiveLoan,
    BorrowerStanding,
    BusinessProfile,
    LenderType,
    TierPolicy,
    TrustRecord,
    TrustStatus,
)
from lending_engine.domain.tiers import advance_standing, get_tier, loans_needed_to_upgrade, next_tier
from lending_engine.domain.eligibility import (
    business_eligibility,
    first_time_offer,
    personal_eligibility,
    require_within_limit,
    total_outstanding,
    unselected_business_eligibility,
)
from lending_engine.domain.exceptions import AmountExceedsLimitError, InvalidAmountError


@pytest.fixture
def business() -> BusinessProfile:
    return BusinessProfile("biz_1", "Corner Lending", first_time_borrower_amount=Decimal("50"))


def test_tier_ladder():
    assert get_tier(1).name == "Starter"
    assert get_tier(1).max_amount == Decimal("150")
    assert get_tier(5).max_amount == Decimal("2000")
    assert get_tier(6).is_unlimited is True
    assert get_tier(99).number == 6
    assert next_tier(6) is None
    assert next_tier(2).name == "Silver"


def test_advance_standing_every_three_loans():
    standing = BorrowerStanding("user_1")
    for _ in range(3):
        standing = advance_standing(standing)

    assert standing.borrowing_tier == 2
    assert standing.loans_at_current_tier == 0
    assert standing.total_loans_completed == 3
    assert loans_needed_to_upgrade(standing) == 3


def test_advance_standing_stops_at_top_tier():
    standing = advance_standing(BorrowerStanding("user_1", borrowing_tier=6, loans_at_current_tier=5))

    assert standing.borrowing_tier == 6
    assert loans_needed_to_upgrade(standing) == 0


def test_total_outstanding_prefers_amount_remaining():
    loans = [
        ActiveLoan(Decimal("100"), amount_remaining=Decimal("40")),
        ActiveLoan(Decimal("50"), amount_paid=Decimal("20")),
    ]

    assert total_outstanding(loans) == Decimal("70")


def test_personal_eligibility_subtracts_outstanding():
    result = personal_eligibility(
        BorrowerStanding("user_1", borrowing_tier=2, loans_at_current_tier=1),
        [ActiveLoan(Decimal("100"), amount_remaining=Decimal("100"))],
    )

    assert result.lender_type == LenderType.PERSONAL
    assert result.available_amount == Decimal("200")
    assert result.total_outstanding == Decimal("100")
    assert result.tier_name == "Bronze"
    assert result.loans_needed == 2
    assert result.next_tier_amount == Decimal("600")
    assert result.can_borrow is True


def test_personal_eligibility_never_negative():
    result = personal_eligibility(
        BorrowerStanding("user_1"),
        [ActiveLoan(Decimal("200"), amount_remaining=Decimal("200"))],
    )

    assert result.available_amount == Decimal("0")
    assert result.can_borrow is False
    assert result.reason is not None


def test_personal_eligibility_unlimited_tier():
    result = personal_eligibility(
        BorrowerStanding("user_1", borrowing_tier=6),
        [ActiveLoan(Decimal("50000"))],
    )

    assert result.can_borrow is True
    assert result.available_amount is None
    assert result.max_amount is None


def test_business_eligibility_first_time(business):
    result = business_eligibility(None, business)

    assert result.lender_type == LenderType.BUSINESS
    assert result.available_amount == Decimal("50")
    assert result.tier_name == "new"
    assert result.loans_needed == 3
    assert result.trust.first_time_amount == Decimal("50")


def test_business_eligibility_refuses_first_time_borrower():
    closed = BusinessProfile("biz_1", "Corner Lending", first_time_borrower_amount=Decimal("50"), allow_first_time_borrowers=False)

    result = business_eligibility(None, closed)

    assert result.can_borrow is False
    assert result.available_amount == Decimal("0")
    assert result.reason == "Corner Lending is not accepting new borrowers right now."


def test_business_eligibility_banned(business):
    record = TrustRecord("user_1", "biz_1", completed_loan_count=4, has_graduated=True, trust_status=TrustStatus.BANNED)

    result = business_eligibility(record, business, [TierPolicy("biz_1", 1, Decimal("300"))], 1)

    assert result.can_borrow is False
    assert result.available_amount == Decimal("0")
    assert result.reason is not None


def test_first_time_offer_skips_closed_lenders():
    businesses = [
        BusinessProfile("a", "A", first_time_borrower_amount=Decimal("75")),
        BusinessProfile("b", "B", first_time_borrower_amount=Decimal("200"), allow_first_time_borrowers=False),
        BusinessProfile("c", "C", first_time_borrower_amount=Decimal("500"), is_active=False),
    ]

    assert first_time_offer(businesses) == Decimal("75")
    assert first_time_offer([]) == Decimal("0")


def test_unselected_business_eligibility_without_lenders():
    result = unselected_business_eligibility([])

    assert result.can_borrow is False
    assert result.available_amount == Decimal("0")


def test_require_within_limit_first_time_over_ceiling(business):
    """Count 0, first-time amount 50, request 75 → rejected with ceiling 50"""
    result = business_eligibility(None, business)

    with pytest.raises(AmountExceedsLimitError) as exc_info:
        require_within_limit(result, Decimal("75"))

    assert exc_info.value.ceiling == Decimal("50")
    assert exc_info.value.shortfall == Decimal("25")
    assert exc_info.value.loans_needed == 3


def test_require_within_limit_personal_reasons():
    result = personal_eligibility(
        BorrowerStanding("user_1"),
        [ActiveLoan(Decimal("100"), amount_remaining=Decimal("100"))],
    )

    with pytest.raises(AmountExceedsLimitError) as exc_info:
        require_within_limit(result, Decimal("100"))
    assert "Available: $50" in exc_info.value.reason
    assert exc_info.value.tier_name == "Starter"

    with pytest.raises(AmountExceedsLimitError) as exc_info:
        require_within_limit(result, Decimal("500"))
    assert "tier limit" in exc_info.value.reason


def test_require_within_limit_accepts_amount_at_ceiling(business):
    result = business_eligibility(None, business)

    assert require_within_limit(result, Decimal("50")) is result


def test_require_within_limit_unlimited():
    result = personal_eligibility(BorrowerStanding("user_1", borrowing_tier=6))

    assert require_within_limit(result, Decimal("1000000")) is result


def test_require_within_limit_rejects_non_positive(business):
    with pytest.raises(InvalidAmountError):
        require_within_limit(business_eligibility(None, business), Decimal("0"))
