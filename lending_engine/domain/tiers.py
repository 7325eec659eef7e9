"""Global borrowing ladder for personal lending"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Optional
from lending_engine.domain.models import BorrowerStanding, GlobalTier

# Tier limits:
# - Starter:  $150  every borrower starts here
# - Bronze:   $300
# - Silver:   $600
# - Gold:     $1200
# - Platinum: $2000
# - Diamond:  unlimited
GLOBAL_TIERS: List[GlobalTier] = [
    GlobalTier(1, "Starter", Decimal(150)),
    GlobalTier(2, "Bronze", Decimal(300)),
    GlobalTier(3, "Silver", Decimal(600)),
    GlobalTier(4, "Gold", Decimal(1200)),
    GlobalTier(5, "Platinum", Decimal(2000)),
    GlobalTier(6, "Diamond (Unlimited)", None),
]

LOANS_PER_TIER = 3
TOP_TIER = GLOBAL_TIERS[-1].number


def get_tier(number: int) -> GlobalTier:
    """Tier by ordinal; unknown values clamp into the ladder"""
    number = min(max(number, 1), TOP_TIER)
    return GLOBAL_TIERS[number - 1]


def next_tier(number: int) -> Optional[GlobalTier]:
    if number >= TOP_TIER:
        return None
    return get_tier(number + 1)


def loans_needed_to_upgrade(standing: BorrowerStanding) -> int:
    if standing.borrowing_tier >= TOP_TIER:
        return 0
    return max(0, LOANS_PER_TIER - standing.loans_at_current_tier)


def advance_standing(standing: BorrowerStanding) -> BorrowerStanding:
    """
    Record a completed loan on the global ladder.

    Every LOANS_PER_TIER completions at a tier move the borrower up one tier
    and restart the per-tier count.
    """
    loans_at_tier = standing.loans_at_current_tier + 1
    tier = standing.borrowing_tier

    if tier < TOP_TIER and loans_at_tier >= LOANS_PER_TIER:
        tier += 1
        loans_at_tier = 0

    return replace(
        standing,
        borrowing_tier=tier,
        loans_at_current_tier=loans_at_tier,
        total_loans_completed=standing.total_loans_completed + 1,
    )
