"""Prometheus metrics for monitoring trust transitions, eligibility outcomes, and schedules"""

from typing import Optional
from decimal import Decimal
from prometheus_client import Counter, Histogram

# Trust metrics
trust_transition_counter = Counter(
    "lending_trust_transitions_total",
    "Trust record transitions applied",
    ["action", "status"],  # action: loan_completed | ban | ... ; status: resulting trust status
)

trust_conflict_counter = Counter(
    "lending_trust_conflicts_total",
    "Trust updates rejected by the version check",
    ["action"],
)

# Eligibility metrics
eligibility_counter = Counter(
    "lending_eligibility_checks_total",
    "Eligibility checks performed",
    ["lender_type", "outcome"],  # eligible | ineligible | over_limit
)

available_amount_bucket_counter = Counter(
    "lending_available_amount_bucket",
    "Available borrowing amounts by bucket",
    ["bucket"],  # $0, $0-$150, $150-$600, $600-$2000, $2000+, unlimited
)

# Schedule metrics
schedule_counter = Counter(
    "lending_schedules_generated_total",
    "Installment schedules generated",
    ["frequency"],
)

schedule_installments_histogram = Histogram(
    "lending_schedule_installments",
    "Installment count of generated schedules",
    buckets=[1, 2, 4, 6, 8, 12, 18, 24, 52],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_trust_transition(action: str, status: str) -> None:
    trust_transition_counter.labels(action=action, status=status).inc()


def record_trust_conflict(action: str) -> None:
    trust_conflict_counter.labels(action=action).inc()


def record_eligibility(lender_type: str, outcome: str, available_amount: Optional[Decimal]) -> None:
    """Record eligibility outcome and bucket the available amount for distribution analysis"""
    eligibility_counter.labels(lender_type=lender_type, outcome=outcome).inc()

    if available_amount is None:
        bucket = "unlimited"
    elif available_amount == 0:
        bucket = "$0"
    elif available_amount <= 150:
        bucket = "$0-$150"
    elif available_amount <= 600:
        bucket = "$150-$600"
    elif available_amount <= 2000:
        bucket = "$600-$2000"
    else:
        bucket = "$2000+"

    available_amount_bucket_counter.labels(bucket=bucket).inc()


def record_schedule(frequency: str, installment_count: int) -> None:
    schedule_counter.labels(frequency=frequency).inc()
    schedule_installments_histogram.observe(installment_count)
