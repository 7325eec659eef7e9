"""Domain-specific exceptions"""

from decimal import Decimal
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Principal, rate or requested amount is outside the permitted range"""

    pass


class InvalidTermError(DomainException):
    """Installment count or term length is not usable"""

    pass


class NoSafeSuggestionError(DomainException):
    """Disposable income leaves no room for any repayment suggestion"""

    def __init__(self, disposable_income: Decimal):
        super().__init__(
            f"No safe repayment suggestion: disposable income is {disposable_income}"
        )
        self.disposable_income = disposable_income


class AmountExceedsLimitError(DomainException):
    """Requested amount is above the borrower's current ceiling"""

    def __init__(
        self,
        requested: Decimal,
        ceiling: Decimal,
        reason: str,
        tier_name: Optional[str] = None,
        loans_needed: int = 0,
    ):
        super().__init__(reason)
        self.requested = requested
        self.ceiling = ceiling
        self.shortfall = max(Decimal(0), requested - ceiling)
        self.reason = reason
        self.tier_name = tier_name
        self.loans_needed = loans_needed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason": self.reason,
            "requested": str(self.requested),
            "ceiling": str(self.ceiling),
            "shortfall": str(self.shortfall),
            "tier_name": self.tier_name,
            "loans_needed": self.loans_needed,
        }


class TrustTransitionConflictError(DomainException):
    """A concurrent mutation of the same trust record won; retry the operation"""

    def __init__(self, borrower_id: str, business_id: Optional[str] = None):
        scope = f"at business {business_id}" if business_id else "on global standing"
        super().__init__(f"Concurrent trust update for borrower {borrower_id} {scope}")
        self.borrower_id = borrower_id
        self.business_id = business_id


class BusinessNotFoundError(DomainException):
    """No business profile exists for the given identifier"""

    pass
