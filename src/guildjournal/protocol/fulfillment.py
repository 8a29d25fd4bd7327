"""
guildjournal/protocol/fulfillment.py

Physical artifact fulfillment.

Pricing rule: the first physical copy of a given badge is free for each
member; every later request for the same badge costs the fixed fee. The
free claim is consumed when the member *requests* the artifact, not when
the Council approves it, so entitlement never depends on fulfillment
status.

The fee is only recorded on the request. No payment is executed.

Usage:
    from guildjournal.protocol.fulfillment import request_physical_artifact

    request = request_physical_artifact(user, badge)
    print(request.cost)  # 0.0 the first time, 15.0 afterwards
"""

import logging

from ..config import PHYSICAL_BADGE_FEE
from .badges import Badge
from .council import PhysicalBadgeRequest, RequestKind, new_request_id
from .profile import UserProfile

logger = logging.getLogger("guildjournal.protocol.fulfillment")


def physical_artifact_cost(user: UserProfile, badge_id: str, fee: float = PHYSICAL_BADGE_FEE) -> float:
    """Price of the next physical copy of badge_id for this member."""
    if badge_id in user.claimed_free_physical_badge_ids:
        return float(fee)
    return 0.0


def has_free_claim(user: UserProfile, badge_id: str) -> bool:
    return badge_id not in user.claimed_free_physical_badge_ids


def request_physical_artifact(
    user: UserProfile,
    badge: Badge,
    fee: float = PHYSICAL_BADGE_FEE,
) -> PhysicalBadgeRequest:
    """
    Build a physical artifact request and consume the free claim if used.

    Args:
        user: Requesting member (mutated: claim list updated on a free copy)
        badge: Badge the artifact is for
        fee: Price of a non-free copy

    Returns:
        PhysicalBadgeRequest in pending status
    """
    cost = physical_artifact_cost(user, badge.id, fee)
    if has_free_claim(user, badge.id):
        user.claimed_free_physical_badge_ids.append(badge.id)
        logger.info(f"Free physical copy of {badge.id} claimed by {user.id}")
    else:
        logger.info(f"Physical copy of {badge.id} for {user.id} priced at {cost:.2f}")

    return PhysicalBadgeRequest(
        id=new_request_id(RequestKind.PHYSICAL),
        user_id=user.id,
        user_name=user.name,
        badge_id=badge.id,
        badge_title=badge.title,
        cost=cost,
    )
