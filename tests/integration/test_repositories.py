"""Integration tests for persistence: versioned trust updates and service orchestration"""

import pytest
from unittest.mock import patch
from decimal import Decimal
from sqlalchemy import update
from sqlalchemy.orm import Session
from lending_engine.domain.models import LenderType, TrustStatus
from lending_engine.domain.trust import apply_loan_completed
from lending_engine.domain.exceptions import (
    AmountExceedsLimitError,
    BusinessNotFoundError,
    TrustTransitionConflictError,
)
from lending_engine.infrastructure.database.models import BorrowerBusinessTrust, BorrowerStandingRow, Loan
from lending_engine.infrastructure.database.repositories import (
    BusinessRepository,
    LoanRepository,
    TrustRepository,
    trust_to_domain,
)
from lending_engine.services.trust_service import TrustService
from lending_engine.services.eligibility_service import EligibilityService


def test_get_or_create_starts_new_record(db: Session, business):
    repo = TrustRepository(db)

    row = repo.get_or_create("user_1", "biz_corner")
    db.commit()

    assert row.version == 1
    assert trust_to_domain(row).trust_status == TrustStatus.NEW
    assert repo.get_or_create("user_1", "biz_corner").id == row.id


def test_compare_and_swap_bumps_version(db: Session, business):
    repo = TrustRepository(db)
    row = repo.get_or_create("user_1", "biz_corner")

    repo.compare_and_swap(row, apply_loan_completed(trust_to_domain(row)))
    db.commit()

    stored = repo.get("user_1", "biz_corner")
    assert stored.version == 2
    assert stored.completed_loan_count == 1
    assert stored.trust_status == "building"


def test_compare_and_swap_rejects_stale_version(db: Session, business):
    """A writer holding an outdated version loses and nothing is applied"""
    repo = TrustRepository(db)
    row = repo.get_or_create("user_1", "biz_corner")
    db.commit()
    stale = trust_to_domain(row)

    # Concurrent writer moves the version on behind this session's back
    db.execute(
        update(BorrowerBusinessTrust)
        .where(BorrowerBusinessTrust.id == row.id)
        .values(version=BorrowerBusinessTrust.version + 1)
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(TrustTransitionConflictError):
        repo.compare_and_swap(row, apply_loan_completed(stale))

    db.rollback()
    assert repo.get("user_1", "biz_corner").completed_loan_count == 0


def test_business_defaults_when_amounts_unset(db: Session, unconfigured_business):
    row = BusinessRepository(db).get("biz_plain")

    profile = BusinessRepository.to_domain(row, Decimal("50"), Decimal("5000"))

    assert profile.first_time_borrower_amount == Decimal("50")
    assert profile.max_loan_amount == Decimal("5000")


def test_trust_service_graduates_and_advances_standing(db: Session, business):
    service = TrustService(db)

    for _ in range(3):
        record = service.apply_loan_completed("user_1", "biz_corner", Decimal("50"))

    assert record.has_graduated is True
    assert record.trust_status == TrustStatus.GRADUATED
    assert record.total_repaid == Decimal("150")

    standing = db.query(BorrowerStandingRow).filter_by(borrower_id="user_1").one()
    assert standing.borrowing_tier == 2
    assert standing.total_loans_completed == 3

    # Graduated: the lender policy for the borrower's trust tier applies
    assert service.get_max_borrowable("user_1", "biz_corner").amount == Decimal("200")
    standing.trust_tier = 2
    db.commit()
    assert service.get_max_borrowable("user_1", "biz_corner").amount == Decimal("500")


def test_trust_service_ban_and_reinstate(db: Session, business):
    service = TrustService(db)
    service.apply_loan_completed("user_1", "biz_corner")

    assert service.ban("user_1", "biz_corner").trust_status == TrustStatus.BANNED
    assert service.get_max_borrowable("user_1", "biz_corner").amount == Decimal("0")
    assert service.reinstate("user_1", "biz_corner").trust_status == TrustStatus.BUILDING


def test_trust_service_reset_uses_configured_status(db: Session, business):
    service = TrustService(db, reset_status="suspended")
    service.apply_loan_completed("user_1", "biz_corner")

    record = service.reset_on_default("user_1", "biz_corner")

    assert record.trust_status == TrustStatus.SUSPENDED
    assert record.completed_loan_count == 0
    assert record.default_count == 1


def test_trust_service_unknown_business(db: Session):
    with pytest.raises(BusinessNotFoundError):
        TrustService(db).ban("user_1", "nope")


@patch(
    "lending_engine.infrastructure.database.repositories.StandingRepository.compare_and_swap",
    side_effect=TrustTransitionConflictError("user_1"),
)
def test_trust_service_rolls_back_lender_record_when_standing_update_loses(mock_standing_cas, db: Session, business):
    """The trust increment is undone when the global standing write conflicts"""
    service = TrustService(db)

    with pytest.raises(TrustTransitionConflictError):
        service.apply_loan_completed("user_1", "biz_corner", Decimal("50"))

    assert mock_standing_cas.called
    assert service.get_trust_record("user_1", "biz_corner").completed_loan_count == 0
    assert db.query(BorrowerStandingRow).filter_by(borrower_id="user_1").first() is None


@patch(
    "lending_engine.infrastructure.database.repositories.TrustRepository.compare_and_swap",
    side_effect=TrustTransitionConflictError("user_1", "biz_corner"),
)
def test_trust_service_conflict_keeps_previous_state(mock_trust_cas, db: Session, business):
    service = TrustService(db)
    row = TrustRepository(db).get_or_create("user_1", "biz_corner")
    db.commit()

    with pytest.raises(TrustTransitionConflictError):
        service.ban("user_1", "biz_corner")

    stored = TrustRepository(db).get("user_1", "biz_corner")
    assert stored.trust_status == "new"
    assert stored.version == row.version == 1


def test_trust_service_rejects_inactive_business(db: Session, business):
    business.is_active = False
    db.commit()

    with pytest.raises(BusinessNotFoundError):
        TrustService(db).get_max_borrowable("user_1", "biz_corner")


def test_active_personal_loans(db: Session):
    db.add_all(
        [
            Loan(borrower_id="user_1", lender_type="personal", amount=Decimal("100"), amount_remaining=Decimal("60")),
            Loan(borrower_id="user_1", lender_type="personal", amount=Decimal("80"), status="completed"),
            Loan(borrower_id="user_1", lender_type="business", business_id=None, amount=Decimal("40")),
        ]
    )
    db.commit()

    loans = LoanRepository(db).active_personal_loans("user_1")

    assert len(loans) == 1
    assert loans[0].outstanding == Decimal("60")


def test_eligibility_service_personal_over_limit(db: Session):
    db.add(Loan(borrower_id="user_1", lender_type="personal", amount=Decimal("100"), amount_remaining=Decimal("100")))
    db.commit()

    service = EligibilityService(db)
    result = service.check_eligibility("user_1", LenderType.PERSONAL)
    assert result.available_amount == Decimal("50")

    with pytest.raises(AmountExceedsLimitError):
        service.check_eligibility("user_1", LenderType.PERSONAL, requested_amount=Decimal("75"))


def test_eligibility_service_business_without_lender(db: Session, business, unconfigured_business):
    result = EligibilityService(db).check_eligibility("user_1", LenderType.BUSINESS)

    assert result.can_borrow is True
    assert result.available_amount == Decimal("50")


def test_loan_amounts_keep_three_decimal_minor_units(db: Session):
    """BHD and KWD amounts are stored to the fils"""
    db.add(Loan(borrower_id="user_1", lender_type="personal", amount=Decimal("12.345"), amount_remaining=Decimal("10.005")))
    db.commit()

    loans = LoanRepository(db).active_personal_loans("user_1")

    assert loans[0].amount == Decimal("12.345")
    assert loans[0].outstanding == Decimal("10.005")
