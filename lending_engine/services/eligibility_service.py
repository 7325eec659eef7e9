"""Eligibility service - loads borrower state and runs the eligibility calculator"""

import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from lending_engine.config import settings
from lending_engine.domain.models import BorrowerStanding, EligibilityResult, LenderType
from lending_engine.domain.eligibility import (
    business_eligibility,
    personal_eligibility,
    require_within_limit,
    unselected_business_eligibility,
)
from lending_engine.domain.exceptions import AmountExceedsLimitError, BusinessNotFoundError
from lending_engine.infrastructure.database.repositories import (
    BusinessRepository,
    LoanRepository,
    StandingRepository,
    TrustRepository,
    standing_to_domain,
    trust_to_domain,
)
from lending_engine.infrastructure.observability.logging import log_eligibility
from lending_engine.infrastructure.observability.metrics import record_eligibility


class EligibilityService:
    """Read-only: nothing here mutates borrower state"""

    def __init__(self, db: Session, request_id: Optional[str] = None):
        self.db = db
        self.request_id = request_id
        self.standing_repo = StandingRepository(db)
        self.business_repo = BusinessRepository(db)
        self.trust_repo = TrustRepository(db)
        self.loan_repo = LoanRepository(db)

    def check_eligibility(
        self,
        borrower_id: str,
        lender_type: LenderType,
        requested_amount: Optional[Decimal] = None,
        lender_id: Optional[str] = None,
    ) -> EligibilityResult:
        """
        How much can this borrower request right now?

        Args:
            borrower_id: Borrower identifier
            lender_type: personal (global tier ladder) or business (per-lender trust)
            requested_amount: When given, the request is checked against the ceiling
            lender_id: Business lender; omitted means no lender chosen yet

        Raises:
            BusinessNotFoundError: lender_id does not name an active business
            AmountExceedsLimitError: requested_amount is above the ceiling
        """
        lender_type = LenderType(lender_type)
        if lender_type is LenderType.PERSONAL:
            result = self._personal(borrower_id)
        elif lender_id:
            result = self._business(borrower_id, lender_id)
        else:
            result = unselected_business_eligibility(self._active_businesses())

        if requested_amount is not None:
            try:
                require_within_limit(result, requested_amount)
            except AmountExceedsLimitError as e:
                record_eligibility(lender_type.value, "over_limit", result.available_amount)
                logging.info(
                    "Requested amount exceeds limit",
                    extra={
                        "request_id": self.request_id,
                        "borrower_id": borrower_id,
                        "step": "eligibility_check",
                        "lender_type": lender_type.value,
                        **e.to_dict(),
                    },
                )
                raise

        record_eligibility(
            lender_type.value,
            "eligible" if result.can_borrow else "ineligible",
            result.available_amount,
        )
        log_eligibility(
            borrower_id,
            lender_type.value,
            result.can_borrow,
            result.available_amount,
            requested_amount=requested_amount,
            request_id=self.request_id,
        )
        return result

    def _personal(self, borrower_id: str) -> EligibilityResult:
        row = self.standing_repo.get(borrower_id)
        standing = standing_to_domain(row) if row is not None else BorrowerStanding(borrower_id=borrower_id)
        return personal_eligibility(standing, self.loan_repo.active_personal_loans(borrower_id))

    def _business(self, borrower_id: str, lender_id: str) -> EligibilityResult:
        row = self.business_repo.get_active(lender_id)
        if row is None:
            raise BusinessNotFoundError(f"Business {lender_id} not found")

        business = BusinessRepository.to_domain(
            row,
            settings.default_first_time_borrower_amount,
            settings.default_standard_max_amount,
        )
        trust_row = self.trust_repo.get(borrower_id, lender_id)
        standing_row = self.standing_repo.get(borrower_id)

        return business_eligibility(
            trust_to_domain(trust_row) if trust_row is not None else None,
            business,
            self.business_repo.policies_for(lender_id),
            standing_row.trust_tier if standing_row is not None else 1,
        )

    def _active_businesses(self):
        return [
            BusinessRepository.to_domain(
                row,
                settings.default_first_time_borrower_amount,
                settings.default_standard_max_amount,
            )
            for row in self.business_repo.list_active()
        ]
