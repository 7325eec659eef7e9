"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter
from lending_engine.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_trust_transition(
    borrower_id: str,
    business_id: str,
    action: str,
    previous_status: str,
    new_status: str,
    completed_loan_count: int,
    request_id: Optional[str] = None,
) -> None:
    """Log a persisted trust state change for audit"""
    logging.info(
        "Trust transition applied",
        extra={
            "request_id": request_id,
            "borrower_id": borrower_id,
            "business_id": business_id,
            "step": "trust_transition",
            "action": action,
            "previous_status": previous_status,
            "new_status": new_status,
            "completed_loan_count": completed_loan_count,
        },
    )


def log_eligibility(
    borrower_id: str,
    lender_type: str,
    can_borrow: bool,
    available_amount: Optional[Decimal],
    requested_amount: Optional[Decimal] = None,
    request_id: Optional[str] = None,
) -> None:
    """Log structured eligibility outcome for analysis"""
    logging.info(
        "Eligibility checked",
        extra={
            "request_id": request_id,
            "borrower_id": borrower_id,
            "step": "eligibility_check",
            "lender_type": lender_type,
            "outcome": "eligible" if can_borrow else "ineligible",
            "available_amount": str(available_amount) if available_amount is not None else "unlimited",
            "requested_amount": str(requested_amount) if requested_amount is not None else None,
        },
    )
