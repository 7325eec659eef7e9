"""POST /v1/eligibility - how much can a borrower request right now"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from lending_engine.api.v1.schemas import EligibilityRequest, EligibilityResponse
from lending_engine.api.dependencies import get_request_id
from lending_engine.infrastructure.database.session import get_db
from lending_engine.services.eligibility_service import EligibilityService
from lending_engine.domain.exceptions import (
    AmountExceedsLimitError,
    BusinessNotFoundError,
    InvalidAmountError,
)

router = APIRouter()


@router.post("/eligibility", response_model=EligibilityResponse)
def check_eligibility(request_body: EligibilityRequest, request: Request, db: Session = Depends(get_db)):
    """
    Compute the borrower's current ceiling.

    Personal lenders: global tier ladder minus outstanding principal.
    Business lenders: per-lender trust; without lender_id, the best first-time
    offer among active businesses.

    A requested_amount above the ceiling is rejected with 409 and the
    ceiling, shortfall and loans needed to unlock more.
    """
    request_id = get_request_id(request)
    service = EligibilityService(db, request_id=request_id)

    try:
        result = service.check_eligibility(
            borrower_id=request_body.borrower_id,
            lender_type=request_body.lender_type,
            requested_amount=request_body.requested_amount,
            lender_id=request_body.lender_id,
        )

    except AmountExceedsLimitError as e:
        raise HTTPException(status_code=409, detail=e.to_dict())

    except BusinessNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return EligibilityResponse.model_validate(result)
