"""Trust service - applies trust transitions atomically and answers max-borrowable queries"""

import logging
from decimal import Decimal
from typing import Callable, Optional
from sqlalchemy.orm import Session

from lending_engine.config import settings
from lending_engine.domain import trust as trust_engine
from lending_engine.domain.models import BorrowerStanding, BusinessProfile, MaxBorrowable, TrustRecord, TrustStatus
from lending_engine.domain.tiers import advance_standing
from lending_engine.domain.exceptions import BusinessNotFoundError, TrustTransitionConflictError
from lending_engine.infrastructure.database.repositories import (
    BusinessRepository,
    StandingRepository,
    TrustRepository,
    standing_to_domain,
    trust_to_domain,
)
from lending_engine.infrastructure.observability.logging import log_trust_transition
from lending_engine.infrastructure.observability.metrics import record_trust_conflict, record_trust_transition


class TrustService:
    """
    Orchestrates the trust engine over persisted records.

    Each public mutation reads the current record, applies one pure transition
    and writes the result with a versioned compare-and-swap, committing once.
    A lost race surfaces as TrustTransitionConflictError; nothing is applied.
    """

    def __init__(self, db: Session, reset_status: Optional[str] = None, request_id: Optional[str] = None):
        self.db = db
        self.reset_status = TrustStatus(reset_status or settings.default_reset_status)
        self.request_id = request_id
        self.trust_repo = TrustRepository(db)
        self.standing_repo = StandingRepository(db)
        self.business_repo = BusinessRepository(db)

    def get_business(self, business_id: str) -> BusinessProfile:
        row = self.business_repo.get_active(business_id)
        if row is None:
            raise BusinessNotFoundError(f"Business {business_id} not found")
        return BusinessRepository.to_domain(
            row,
            settings.default_first_time_borrower_amount,
            settings.default_standard_max_amount,
        )

    def borrower_tier(self, borrower_id: str) -> int:
        """Tier used to pick a lender's tier policy; unknown borrowers sit at tier 1"""
        row = self.standing_repo.get(borrower_id)
        return row.trust_tier if row is not None else 1

    def get_trust_record(self, borrower_id: str, business_id: str) -> TrustRecord:
        """Current record, or the implicit "new" record when none is stored yet"""
        self.get_business(business_id)
        row = self.trust_repo.get(borrower_id, business_id)
        if row is None:
            return trust_engine.new_trust_record(borrower_id, business_id)
        return trust_to_domain(row)

    def get_max_borrowable(self, borrower_id: str, business_id: str) -> MaxBorrowable:
        business = self.get_business(business_id)
        row = self.trust_repo.get(borrower_id, business_id)
        record = trust_to_domain(row) if row is not None else trust_engine.new_trust_record(borrower_id, business_id)
        return trust_engine.compute_max_borrowable(
            record,
            business,
            self.business_repo.policies_for(business_id),
            self.borrower_tier(borrower_id),
        )

    def apply_loan_completed(
        self,
        borrower_id: str,
        business_id: str,
        amount_repaid: Decimal = Decimal(0),
    ) -> TrustRecord:
        """Loan at a business fully repaid: advances the lender record and the global ladder"""
        return self._transition(
            borrower_id,
            business_id,
            "loan_completed",
            lambda record: trust_engine.apply_loan_completed(record, amount_repaid),
            advance_global=True,
        )

    def apply_loan_created(self, borrower_id: str, business_id: str, amount: Decimal) -> TrustRecord:
        return self._transition(
            borrower_id,
            business_id,
            "loan_created",
            lambda record: trust_engine.apply_loan_created(record, amount),
        )

    def record_payment(self, borrower_id: str, business_id: str, on_time: bool) -> TrustRecord:
        return self._transition(
            borrower_id,
            business_id,
            "payment_on_time" if on_time else "payment_late",
            lambda record: trust_engine.apply_payment_recorded(record, on_time),
        )

    def ban(self, borrower_id: str, business_id: str) -> TrustRecord:
        return self._transition(borrower_id, business_id, "ban", trust_engine.ban)

    def suspend(self, borrower_id: str, business_id: str) -> TrustRecord:
        return self._transition(borrower_id, business_id, "suspend", trust_engine.suspend)

    def reinstate(self, borrower_id: str, business_id: str) -> TrustRecord:
        return self._transition(borrower_id, business_id, "reinstate", trust_engine.reinstate)

    def reset_on_default(self, borrower_id: str, business_id: str) -> TrustRecord:
        return self._transition(
            borrower_id,
            business_id,
            "reset_on_default",
            lambda record: trust_engine.reset_on_default(record, self.reset_status),
        )

    def apply_personal_loan_completed(self, borrower_id: str) -> BorrowerStanding:
        """Loan from a personal lender fully repaid: only the global ladder moves"""
        try:
            standing = self._advance_standing(borrower_id)
            self.db.commit()
        except TrustTransitionConflictError:
            self.db.rollback()
            record_trust_conflict("personal_loan_completed")
            raise
        except Exception:
            self.db.rollback()
            raise

        logging.info(
            "Global standing advanced",
            extra={
                "request_id": self.request_id,
                "borrower_id": borrower_id,
                "step": "standing_advanced",
                "borrowing_tier": standing.borrowing_tier,
                "loans_at_current_tier": standing.loans_at_current_tier,
            },
        )
        return standing

    def _advance_standing(self, borrower_id: str) -> BorrowerStanding:
        row = self.standing_repo.get_or_create(borrower_id)
        standing = advance_standing(standing_to_domain(row))
        self.standing_repo.compare_and_swap(row, standing)
        return standing

    def _transition(
        self,
        borrower_id: str,
        business_id: str,
        action: str,
        transition: Callable[[TrustRecord], TrustRecord],
        advance_global: bool = False,
    ) -> TrustRecord:
        try:
            self.get_business(business_id)
            row = self.trust_repo.get_or_create(borrower_id, business_id)
            before = trust_to_domain(row)
            after = transition(before)
            self.trust_repo.compare_and_swap(row, after)
            if advance_global:
                self._advance_standing(borrower_id)
            self.db.commit()
        except TrustTransitionConflictError:
            self.db.rollback()
            record_trust_conflict(action)
            logging.warning(
                "Trust update lost a concurrent race",
                extra={"request_id": self.request_id, "borrower_id": borrower_id, "business_id": business_id, "action": action},
            )
            raise
        except Exception:
            self.db.rollback()
            raise

        record_trust_transition(action, after.trust_status.value)
        log_trust_transition(
            borrower_id,
            business_id,
            action,
            before.trust_status.value,
            after.trust_status.value,
            after.completed_loan_count,
            request_id=self.request_id,
        )
        return after
