"""Data access layer for trust, standing, business and loan entities"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from lending_engine.infrastructure.database.models import (
    BorrowerBusinessTrust,
    BorrowerStandingRow,
    BusinessProfileRow,
    LenderTierPolicy,
    Loan,
)
from lending_engine.domain.models import (
    ActiveLoan,
    BorrowerStanding,
    BusinessProfile,
    LenderType,
    TierPolicy,
    TrustRecord,
    TrustStatus,
)
from lending_engine.domain.exceptions import TrustTransitionConflictError


def trust_to_domain(row: BorrowerBusinessTrust) -> TrustRecord:
    return TrustRecord(
        borrower_id=row.borrower_id,
        business_id=row.business_id,
        completed_loan_count=row.completed_loan_count,
        has_graduated=row.has_graduated,
        trust_status=TrustStatus(row.trust_status),
        total_borrowed=Decimal(row.total_borrowed),
        total_repaid=Decimal(row.total_repaid),
        default_count=row.default_count,
        on_time_payment_count=row.on_time_payment_count,
        late_payment_count=row.late_payment_count,
    )


def standing_to_domain(row: BorrowerStandingRow) -> BorrowerStanding:
    return BorrowerStanding(
        borrower_id=row.borrower_id,
        borrowing_tier=row.borrowing_tier,
        loans_at_current_tier=row.loans_at_current_tier,
        total_loans_completed=row.total_loans_completed,
    )


class TrustRepository:
    """Repository for borrower×business trust records"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, borrower_id: str, business_id: str) -> Optional[BorrowerBusinessTrust]:
        return (
            self.db.query(BorrowerBusinessTrust)
            .filter(
                BorrowerBusinessTrust.borrower_id == borrower_id,
                BorrowerBusinessTrust.business_id == business_id,
            )
            .first()
        )

    def get_or_create(self, borrower_id: str, business_id: str) -> BorrowerBusinessTrust:
        """
        Fetch the trust record, creating a "new" one on first interaction.

        Raises:
            TrustTransitionConflictError: another request created it concurrently
        """
        row = self.get(borrower_id, business_id)
        if row is not None:
            return row

        row = BorrowerBusinessTrust(borrower_id=borrower_id, business_id=business_id)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise TrustTransitionConflictError(borrower_id, business_id) from e
        return row

    def compare_and_swap(self, row: BorrowerBusinessTrust, record: TrustRecord) -> BorrowerBusinessTrust:
        """
        Write `record` only if nobody changed the row since it was read.

        Single UPDATE keyed by (borrower_id, business_id, version); the whole
        record is written at once so a transition never partially applies.

        Raises:
            TrustTransitionConflictError: the version moved on (lost the race)
        """
        expected_version = row.version
        result = self.db.execute(
            update(BorrowerBusinessTrust)
            .where(
                BorrowerBusinessTrust.borrower_id == row.borrower_id,
                BorrowerBusinessTrust.business_id == row.business_id,
                BorrowerBusinessTrust.version == expected_version,
            )
            .values(
                completed_loan_count=record.completed_loan_count,
                has_graduated=record.has_graduated,
                trust_status=record.trust_status.value,
                total_borrowed=record.total_borrowed,
                total_repaid=record.total_repaid,
                default_count=record.default_count,
                on_time_payment_count=record.on_time_payment_count,
                late_payment_count=record.late_payment_count,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            raise TrustTransitionConflictError(row.borrower_id, row.business_id)

        self.db.expire(row)
        return row


class StandingRepository:
    """Repository for global borrower standings"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, borrower_id: str) -> Optional[BorrowerStandingRow]:
        return self.db.query(BorrowerStandingRow).filter(BorrowerStandingRow.borrower_id == borrower_id).first()

    def get_or_create(self, borrower_id: str) -> BorrowerStandingRow:
        row = self.get(borrower_id)
        if row is not None:
            return row

        row = BorrowerStandingRow(borrower_id=borrower_id)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise TrustTransitionConflictError(borrower_id) from e
        return row

    def compare_and_swap(self, row: BorrowerStandingRow, standing: BorrowerStanding) -> BorrowerStandingRow:
        expected_version = row.version
        result = self.db.execute(
            update(BorrowerStandingRow)
            .where(
                BorrowerStandingRow.borrower_id == row.borrower_id,
                BorrowerStandingRow.version == expected_version,
            )
            .values(
                borrowing_tier=standing.borrowing_tier,
                loans_at_current_tier=standing.loans_at_current_tier,
                total_loans_completed=standing.total_loans_completed,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            raise TrustTransitionConflictError(row.borrower_id)

        self.db.expire(row)
        return row


class BusinessRepository:
    """Read-only access to business profiles and tier policies"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, business_id: str) -> Optional[BusinessProfileRow]:
        return self.db.query(BusinessProfileRow).filter(BusinessProfileRow.id == business_id).first()

    def get_active(self, business_id: str) -> Optional[BusinessProfileRow]:
        """Business profile, or None when it is unknown or deactivated"""
        row = self.get(business_id)
        return row if row is not None and row.is_active else None

    def list_active(self) -> List[BusinessProfileRow]:
        return self.db.query(BusinessProfileRow).filter(BusinessProfileRow.is_active.is_(True)).all()

    def policies_for(self, lender_id: str) -> List[TierPolicy]:
        rows = (
            self.db.query(LenderTierPolicy)
            .filter(LenderTierPolicy.lender_id == lender_id)
            .order_by(LenderTierPolicy.tier_id)
            .all()
        )
        return [
            TierPolicy(
                lender_id=r.lender_id,
                tier_id=r.tier_id,
                max_loan_amount=Decimal(r.max_loan_amount),
                is_active=r.is_active,
            )
            for r in rows
        ]

    @staticmethod
    def to_domain(
        row: BusinessProfileRow,
        default_first_time_amount: Decimal,
        default_max_amount: Decimal,
    ) -> BusinessProfile:
        """Unset lending amounts fall back to the configured defaults"""
        first_time = row.first_time_borrower_amount
        max_amount = row.max_loan_amount
        return BusinessProfile(
            business_id=row.id,
            business_name=row.business_name,
            first_time_borrower_amount=Decimal(first_time) if first_time else default_first_time_amount,
            max_loan_amount=Decimal(max_amount) if max_amount else default_max_amount,
            is_active=row.is_active,
            allow_first_time_borrowers=row.allow_first_time_borrowers,
        )


class LoanRepository:
    """Repository for loan summaries"""

    def __init__(self, db: Session):
        self.db = db

    def active_personal_loans(self, borrower_id: str) -> List[ActiveLoan]:
        rows = (
            self.db.query(Loan)
            .filter(
                Loan.borrower_id == borrower_id,
                Loan.lender_type == LenderType.PERSONAL.value,
                Loan.status == "active",
            )
            .all()
        )
        return [
            ActiveLoan(
                amount=Decimal(r.amount),
                amount_paid=Decimal(r.amount_paid),
                amount_remaining=Decimal(r.amount_remaining) if r.amount_remaining is not None else None,
            )
            for r in rows
        ]
