"""
guildjournal/protocol/events.py

The closed set of events accepted by the reducer.

Every user or Council action is one of these frozen records. The reducer
maps (GuildState, event) -> GuildState; see guildjournal.protocol.reducer.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .badges import Badge
from .council import CouncilStatus, RequestKind
from .tiers import ActionStatement, Tier


class GuildEvent:
    """Marker base class for reducer events."""


# ============================================================================
# JOURNAL EVENTS
# ============================================================================

@dataclass(frozen=True)
class RecordEvidence(GuildEvent):
    badge_id: str
    requirement_id: str
    url: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class RevokeRequirement(GuildEvent):
    badge_id: str
    requirement_id: str


@dataclass(frozen=True)
class UpdateReflection(GuildEvent):
    badge_id: str
    text: str


@dataclass(frozen=True)
class DownloadBadge(GuildEvent):
    """Copy a library badge into the member's journal."""
    badge_id: str


@dataclass(frozen=True)
class CreateBadge(GuildEvent):
    """Add a manually authored or AI-drafted badge to the journal."""
    badge: Badge


@dataclass(frozen=True)
class ToggleShowcase(GuildEvent):
    badge_id: str


# ============================================================================
# COUNCIL SUBMISSIONS
# ============================================================================

@dataclass(frozen=True)
class SubmitVerification(GuildEvent):
    badge_id: str


@dataclass(frozen=True)
class SubmitProposal(GuildEvent):
    badge: Badge
    goal: str = ""
    metrics: str = ""


@dataclass(frozen=True)
class SubmitPromotion(GuildEvent):
    target_tier: Tier
    supporting_badge_ids: Tuple[str, ...] = ()
    statements: Tuple[ActionStatement, ...] = ()


@dataclass(frozen=True)
class SuggestLink(GuildEvent):
    badge_id: str
    label: str
    url: str


@dataclass(frozen=True)
class SubmitPartnership(GuildEvent):
    partner_name: str
    partner_type: str = "Organization"
    description: str = ""
    website_url: Optional[str] = None


@dataclass(frozen=True)
class RequestPhysicalBadge(GuildEvent):
    badge_id: str


@dataclass(frozen=True)
class ResolveRequest(GuildEvent):
    """Council decision on a pending request."""
    kind: RequestKind
    request_id: str
    status: CouncilStatus
    feedback: Optional[str] = None
    as_partner_badge: bool = False
    partner_name: Optional[str] = None


# ============================================================================
# PROFILE AND COLONY EVENTS
# ============================================================================

@dataclass(frozen=True)
class UpdateProfile(GuildEvent):
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class SetStorageLocation(GuildEvent):
    location: str


@dataclass(frozen=True)
class JoinColony(GuildEvent):
    colony_id: str


@dataclass(frozen=True)
class ProposeColony(GuildEvent):
    name: str
    charter: str = ""
    siege: str = ""
    number: Optional[int] = None


@dataclass(frozen=True)
class ApproveColony(GuildEvent):
    colony_id: str


@dataclass(frozen=True)
class PostColonyNotice(GuildEvent):
    colony_id: str
    content: str


@dataclass(frozen=True)
class ScheduleColonyEvent(GuildEvent):
    colony_id: str
    title: str
    description: str = ""
    date: str = ""
