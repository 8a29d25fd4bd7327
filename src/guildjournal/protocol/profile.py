"""
guildjournal/protocol/profile.py

Member profile: tier, journal of owned badge copies, showcase and
physical-artifact entitlements.

Invariant: showcased_badge_ids is always a subset of the ids of owned,
mastered badges. prune_showcase() restores it after any evidence change.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import NotFoundError, ValidationError
from .badges import Badge
from .tiers import Tier

logger = logging.getLogger("guildjournal.protocol.profile")


STORAGE_LOCATIONS = ("local", "personal_cloud", "guild_sync")


@dataclass
class PrivacySettings:
    """Storage preference. Opaque to the engine."""
    storage_location: str = "local"
    is_encrypted: bool = True
    auto_sync: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storageLocation": self.storage_location,
            "isEncrypted": self.is_encrypted,
            "autoSync": self.auto_sync,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PrivacySettings":
        data = data or {}
        return cls(
            storage_location=data.get("storageLocation", "local"),
            is_encrypted=bool(data.get("isEncrypted", True)),
            auto_sync=bool(data.get("autoSync", False)),
        )


@dataclass
class UserProfile:
    """A member's identity and journal."""
    id: str
    name: str
    email: str = ""
    tier: Tier = Tier.SEEKER
    badges: List[Badge] = field(default_factory=list)
    showcased_badge_ids: List[str] = field(default_factory=list)
    colony_id: Optional[str] = None
    claimed_free_physical_badge_ids: List[str] = field(default_factory=list)
    privacy: PrivacySettings = field(default_factory=PrivacySettings)
    council_role: bool = False
    is_scholarship_recipient: bool = False
    pref_physical_badge: bool = False
    mentorship_count: int = 0
    service_milestones: int = 0

    @staticmethod
    def generate_id() -> str:
        return f"seeker-{uuid.uuid4().hex[:9]}"

    def get_badge(self, badge_id: str) -> Optional[Badge]:
        for badge in self.badges:
            if badge.id == badge_id:
                return badge
        return None

    def require_badge(self, badge_id: str) -> Badge:
        badge = self.get_badge(badge_id)
        if badge is None:
            raise NotFoundError(f"Badge {badge_id} is not in {self.id}'s journal")
        return badge

    def owns(self, badge_id: str) -> bool:
        return self.get_badge(badge_id) is not None

    def mastered_badges(self) -> List[Badge]:
        return [b for b in self.badges if b.is_mastered]

    def in_progress_badges(self) -> List[Badge]:
        return [b for b in self.badges if not b.is_mastered]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "tier": self.tier.value,
            "badges": [b.to_dict() for b in self.badges],
            "showcasedBadgeIds": list(self.showcased_badge_ids),
            "claimedFreePhysicalBadgeIds": list(self.claimed_free_physical_badge_ids),
            "privacy": self.privacy.to_dict(),
            "councilRole": self.council_role,
            "isScholarshipRecipient": self.is_scholarship_recipient,
            "prefPhysicalBadge": self.pref_physical_badge,
            "mentorshipCount": self.mentorship_count,
            "serviceMilestones": self.service_milestones,
        }
        if self.colony_id:
            data["colonyId"] = self.colony_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        user = cls(
            id=data.get("id") or cls.generate_id(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            tier=Tier.from_string(data.get("tier") or Tier.SEEKER.value),
            badges=[Badge.from_dict(b) for b in data.get("badges") or []],
            showcased_badge_ids=list(data.get("showcasedBadgeIds") or []),
            colony_id=data.get("colonyId"),
            claimed_free_physical_badge_ids=list(data.get("claimedFreePhysicalBadgeIds") or []),
            privacy=PrivacySettings.from_dict(data.get("privacy")),
            council_role=bool(data.get("councilRole", False)),
            is_scholarship_recipient=bool(data.get("isScholarshipRecipient", False)),
            pref_physical_badge=bool(data.get("prefPhysicalBadge", False)),
            mentorship_count=int(data.get("mentorshipCount", 0) or 0),
            service_milestones=int(data.get("serviceMilestones", 0) or 0),
        )
        prune_showcase(user)
        return user


# ============================================================================
# SHOWCASE
# ============================================================================

def toggle_showcase(user: UserProfile, badge_id: str) -> bool:
    """
    Add or remove a badge from the showcase.

    Removing is always allowed. Adding requires an owned, mastered badge.

    Returns:
        True if the badge is showcased after the call
    """
    if badge_id in user.showcased_badge_ids:
        user.showcased_badge_ids.remove(badge_id)
        return False

    badge = user.require_badge(badge_id)
    if not badge.is_mastered:
        raise ValidationError(f"Badge {badge_id} is not mastered and cannot be showcased")
    user.showcased_badge_ids.append(badge_id)
    return True


def prune_showcase(user: UserProfile) -> List[str]:
    """Drop showcased ids that are no longer owned and mastered."""
    mastered = {b.id for b in user.mastered_badges()}
    removed = [bid for bid in user.showcased_badge_ids if bid not in mastered]
    if removed:
        user.showcased_badge_ids = [bid for bid in user.showcased_badge_ids if bid in mastered]
        logger.info(f"Removed {len(removed)} badge(s) from showcase: {removed}")
    return removed


def set_storage_location(user: UserProfile, location: str) -> None:
    if location not in STORAGE_LOCATIONS:
        raise ValidationError(
            f"Invalid storage location: {location}. "
            f"Valid options: {', '.join(STORAGE_LOCATIONS)}"
        )
    user.privacy.storage_location = location
