"""/v1/trust and /v1/standing - borrower trust records, lifecycle events and admin actions"""

import logging
from typing import Literal
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from lending_engine.api.v1.schemas import (
    LoanCompletedRequest,
    LoanCreatedRequest,
    MaxBorrowableSchema,
    PaymentRecordedRequest,
    StandingResponse,
    TrustRecordSchema,
    TrustSummaryResponse,
)
from lending_engine.api.dependencies import get_request_id
from lending_engine.infrastructure.database.session import get_db
from lending_engine.services.trust_service import TrustService
from lending_engine.domain.exceptions import (
    BusinessNotFoundError,
    InvalidAmountError,
    TrustTransitionConflictError,
)

router = APIRouter()

AdminAction = Literal["ban", "suspend", "reinstate", "reset"]


def _apply(request: Request, run):
    """Run a trust mutation and map domain errors to HTTP responses"""
    request_id = get_request_id(request)
    try:
        return run()

    except BusinessNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except TrustTransitionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    except InvalidAmountError as e:
        logging.warning(f"Invalid trust update: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/trust/{borrower_id}/{business_id}", response_model=TrustSummaryResponse)
def get_trust(borrower_id: str, business_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Trust record and current borrowing ceiling at one business.

    Borrowers with no history get the implicit "new" record.
    """
    service = TrustService(db, request_id=get_request_id(request))

    def run():
        record = service.get_trust_record(borrower_id, business_id)
        max_borrowable = service.get_max_borrowable(borrower_id, business_id)
        return TrustSummaryResponse(
            record=TrustRecordSchema.model_validate(record),
            max_borrowable=MaxBorrowableSchema.model_validate(max_borrowable),
        )

    return _apply(request, run)


@router.post("/trust/{borrower_id}/{business_id}/loan-completed", response_model=TrustRecordSchema)
def loan_completed(
    borrower_id: str,
    business_id: str,
    request_body: LoanCompletedRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Loan fully repaid; the third completion graduates the borrower at this business"""
    service = TrustService(db, request_id=get_request_id(request))
    record = _apply(
        request,
        lambda: service.apply_loan_completed(borrower_id, business_id, request_body.amount_repaid),
    )
    return TrustRecordSchema.model_validate(record)


@router.post("/trust/{borrower_id}/{business_id}/loan-created", response_model=TrustRecordSchema)
def loan_created(
    borrower_id: str,
    business_id: str,
    request_body: LoanCreatedRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    service = TrustService(db, request_id=get_request_id(request))
    record = _apply(request, lambda: service.apply_loan_created(borrower_id, business_id, request_body.amount))
    return TrustRecordSchema.model_validate(record)


@router.post("/trust/{borrower_id}/{business_id}/payment", response_model=TrustRecordSchema)
def payment_recorded(
    borrower_id: str,
    business_id: str,
    request_body: PaymentRecordedRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    service = TrustService(db, request_id=get_request_id(request))
    record = _apply(request, lambda: service.record_payment(borrower_id, business_id, request_body.on_time))
    return TrustRecordSchema.model_validate(record)


@router.post("/trust/{borrower_id}/{business_id}/{action}", response_model=TrustRecordSchema)
def admin_action(
    borrower_id: str,
    business_id: str,
    action: AdminAction,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Administrative override by the lender.

    ban / suspend force the borrowing ceiling to 0; reinstate restores the
    status implied by the completed-loan count; reset records a default.
    """
    service = TrustService(db, request_id=get_request_id(request))
    handlers = {
        "ban": service.ban,
        "suspend": service.suspend,
        "reinstate": service.reinstate,
        "reset": service.reset_on_default,
    }
    record = _apply(request, lambda: handlers[action](borrower_id, business_id))
    return TrustRecordSchema.model_validate(record)


@router.post("/standing/{borrower_id}/loan-completed", response_model=StandingResponse)
def personal_loan_completed(borrower_id: str, request: Request, db: Session = Depends(get_db)):
    """Personal loan fully repaid; advances the borrower on the global tier ladder"""
    service = TrustService(db, request_id=get_request_id(request))
    standing = _apply(request, lambda: service.apply_personal_loan_completed(borrower_id))
    return StandingResponse.model_validate(standing)
