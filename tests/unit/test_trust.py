"""Unit tests for the borrower trust state machine"""

import pytest
from dataclasses import replace
from decimal import Decimal
from lending_engine.domain.models import BusinessProfile, TierPolicy, TrustRecord, TrustStatus
from lending_engine.domain.trust import (
    apply_loan_completed,
    apply_loan_created,
    apply_payment_recorded,
    ban,
    compute_max_borrowable,
    new_trust_record,
    reinstate,
    reset_on_default,
    select_tier_policy,
    suspend,
)
from lending_engine.domain.exceptions import InvalidAmountError


@pytest.fixture
def business() -> BusinessProfile:
    return BusinessProfile(
        business_id="biz_1",
        business_name="Corner Lending",
        first_time_borrower_amount=Decimal("50"),
        max_loan_amount=Decimal("5000"),
    )


@pytest.fixture
def policies() -> list[TierPolicy]:
    return [
        TierPolicy("biz_1", 1, Decimal("200")),
        TierPolicy("biz_1", 2, Decimal("500")),
        TierPolicy("biz_1", 3, Decimal("1000"), is_active=False),
    ]


def completed(n: int) -> TrustRecord:
    record = new_trust_record("user_1", "biz_1")
    for _ in range(n):
        record = apply_loan_completed(record)
    return record


def test_new_record_defaults():
    record = new_trust_record("user_1", "biz_1")

    assert record.completed_loan_count == 0
    assert record.has_graduated is False
    assert record.trust_status == TrustStatus.NEW


def test_first_completion_moves_to_building():
    record = completed(1)

    assert record.trust_status == TrustStatus.BUILDING
    assert record.has_graduated is False


def test_third_completion_graduates_in_same_transition():
    before = completed(2)
    after = apply_loan_completed(before)

    assert before.has_graduated is False
    assert after.completed_loan_count == 3
    assert after.has_graduated is True
    assert after.trust_status == TrustStatus.GRADUATED


def test_transitions_do_not_mutate_input():
    record = completed(2)
    apply_loan_completed(record)

    assert record.completed_loan_count == 2


def test_completion_tracks_repaid_amount():
    record = apply_loan_completed(new_trust_record("user_1", "biz_1"), Decimal("52.50"))

    assert record.total_repaid == Decimal("52.50")


def test_completion_keeps_suspension():
    record = apply_loan_completed(suspend(completed(2)))

    assert record.trust_status == TrustStatus.SUSPENDED
    assert record.has_graduated is True
    assert record.completed_loan_count == 3


def test_loan_created_accumulates_borrowed():
    record = apply_loan_created(new_trust_record("user_1", "biz_1"), Decimal("50"))
    record = apply_loan_created(record, Decimal("25"))

    assert record.total_borrowed == Decimal("75")
    assert record.trust_status == TrustStatus.NEW


def test_loan_created_rejects_non_positive():
    with pytest.raises(InvalidAmountError):
        apply_loan_created(new_trust_record("user_1", "biz_1"), Decimal("0"))


def test_payment_recorded_counts():
    record = apply_payment_recorded(new_trust_record("user_1", "biz_1"), on_time=True)
    record = apply_payment_recorded(record, on_time=False)

    assert record.on_time_payment_count == 1
    assert record.late_payment_count == 1


def test_reinstate_recomputes_from_count():
    record = replace(completed(5), trust_status=TrustStatus.BANNED)

    reinstated = reinstate(record)

    assert reinstated.trust_status == TrustStatus.GRADUATED
    assert reinstated.has_graduated is True


def test_reinstate_building():
    assert reinstate(suspend(completed(1))).trust_status == TrustStatus.BUILDING


def test_reset_on_default_wipes_progress():
    record = reset_on_default(completed(4))

    assert record.completed_loan_count == 0
    assert record.has_graduated is False
    assert record.trust_status == TrustStatus.NEW
    assert record.default_count == 1


def test_reset_on_default_configured_status():
    assert reset_on_default(completed(2), TrustStatus.SUSPENDED).trust_status == TrustStatus.SUSPENDED


def test_reset_on_default_never_softens_ban():
    record = reset_on_default(ban(completed(3)), TrustStatus.NEW)

    assert record.trust_status == TrustStatus.BANNED


def test_reset_on_default_rejects_progress_status():
    with pytest.raises(ValueError):
        reset_on_default(completed(1), TrustStatus.GRADUATED)


def test_max_borrowable_first_time(business):
    result = compute_max_borrowable(None, business)

    assert result.amount == Decimal("50")
    assert result.status == TrustStatus.NEW
    assert result.loans_until_graduation == 3
    assert result.can_borrow is True


def test_max_borrowable_lender_closed_to_first_time_borrowers(business):
    closed = replace(business, allow_first_time_borrowers=False)

    result = compute_max_borrowable(None, closed)

    assert result.amount == Decimal("0")
    assert result.can_borrow is False
    assert result.reason == "first_time_not_accepted"


def test_max_borrowable_closed_lender_still_serves_returning_borrowers(business):
    closed = replace(business, allow_first_time_borrowers=False)

    assert compute_max_borrowable(completed(1), closed).amount == Decimal("50")


def test_max_borrowable_building(business, policies):
    result = compute_max_borrowable(completed(2), business, policies, borrower_tier=2)

    assert result.amount == Decimal("50")
    assert result.loans_until_graduation == 1
    assert "2/3" in result.message


def test_max_borrowable_graduated_uses_tier_policy(business, policies):
    result = compute_max_borrowable(completed(3), business, policies, borrower_tier=2)

    assert result.amount == Decimal("500")
    assert result.is_graduated is True
    assert result.loans_until_graduation == 0


def test_max_borrowable_graduated_falls_back_to_highest_active_tier(business, policies):
    """Tier 3 policy is inactive: highest active (tier 2) applies"""
    result = compute_max_borrowable(completed(3), business, policies, borrower_tier=3)

    assert result.amount == Decimal("500")


def test_max_borrowable_graduated_without_policies(business):
    result = compute_max_borrowable(completed(3), business, [], borrower_tier=1)

    assert result.amount == Decimal("50")


def test_max_borrowable_banned(business, policies):
    result = compute_max_borrowable(ban(completed(3)), business, policies, borrower_tier=2)

    assert result.amount == Decimal("0")
    assert result.status == TrustStatus.BANNED
    assert result.reason == "banned"
    assert result.can_borrow is False


def test_max_borrowable_suspended(business, policies):
    result = compute_max_borrowable(suspend(completed(5)), business, policies, borrower_tier=1)

    assert result.amount == Decimal("0")
    assert result.reason == "suspended"


def test_select_tier_policy_ignores_other_lenders(policies):
    other = [TierPolicy("biz_2", 1, Decimal("9999"))]

    assert select_tier_policy(other, "biz_1", 1) is None
    assert select_tier_policy(policies + other, "biz_1", 1).max_loan_amount == Decimal("200")
