"""
guildjournal/protocol/reducer.py

Pure state transitions: reduce(state, event) -> new state.

The reducer never mutates its input. It deep-copies the state, applies
the handler registered for the event's class and returns the copy. Any
GuildError raised by a handler propagates and the caller keeps the old
state, so a request can never end up approved without its side effect
(or vice versa).

Usage:
    from guildjournal.protocol.reducer import reduce
    from guildjournal.protocol.events import RecordEvidence

    state = reduce(state, RecordEvidence("b1", "r1", url="https://..."))
"""

import copy
import logging
from typing import Callable, Dict, Optional, Type

from ..config import GuildConfig
from ..exceptions import NotFoundError, ValidationError
from . import colonies, council
from .badges import clone_for_journal
from .events import (
    ApproveColony,
    CreateBadge,
    DownloadBadge,
    GuildEvent,
    JoinColony,
    PostColonyNotice,
    ProposeColony,
    RecordEvidence,
    RequestPhysicalBadge,
    ResolveRequest,
    RevokeRequirement,
    ScheduleColonyEvent,
    SetStorageLocation,
    SubmitPartnership,
    SubmitPromotion,
    SubmitProposal,
    SubmitVerification,
    SuggestLink,
    ToggleShowcase,
    UpdateProfile,
    UpdateReflection,
)
from .fulfillment import request_physical_artifact
from .profile import prune_showcase, set_storage_location, toggle_showcase
from .requirements import Requirement, record_evidence, revoke
from .state import GuildState

logger = logging.getLogger("guildjournal.protocol.reducer")

Handler = Callable[[GuildState, GuildEvent, GuildConfig], None]


def _require_requirement(state: GuildState, badge_id: str, requirement_id: str) -> Requirement:
    badge = state.user.require_badge(badge_id)
    requirement = badge.get_requirement(requirement_id)
    if requirement is None:
        raise NotFoundError(f"Badge {badge_id} has no requirement {requirement_id}")
    return requirement


# ============================================================================
# JOURNAL HANDLERS
# ============================================================================

def _on_record_evidence(state: GuildState, event: RecordEvidence, config: GuildConfig) -> None:
    requirement = _require_requirement(state, event.badge_id, event.requirement_id)
    record_evidence(requirement, url=event.url, note=event.note)
    prune_showcase(state.user)


def _on_revoke(state: GuildState, event: RevokeRequirement, config: GuildConfig) -> None:
    requirement = _require_requirement(state, event.badge_id, event.requirement_id)
    revoke(requirement)
    prune_showcase(state.user)


def _on_update_reflection(state: GuildState, event: UpdateReflection, config: GuildConfig) -> None:
    state.user.require_badge(event.badge_id).reflections = event.text or ""


def _on_download(state: GuildState, event: DownloadBadge, config: GuildConfig) -> None:
    if state.user.owns(event.badge_id):
        logger.debug(f"Badge {event.badge_id} already in journal")
        return
    library_badge = state.get_library_badge(event.badge_id)
    if library_badge is None:
        raise NotFoundError(f"No library badge with id {event.badge_id}")
    state.user.badges.append(clone_for_journal(library_badge))


def _on_create_badge(state: GuildState, event: CreateBadge, config: GuildConfig) -> None:
    if not event.badge.title:
        raise ValidationError("A badge needs a title")
    if state.user.owns(event.badge.id):
        raise ValidationError(f"Badge {event.badge.id} is already in the journal")
    badge = clone_for_journal(event.badge)
    if badge.creator_id is None:
        badge.creator_id = state.user.id
    state.user.badges.append(badge)


def _on_toggle_showcase(state: GuildState, event: ToggleShowcase, config: GuildConfig) -> None:
    toggle_showcase(state.user, event.badge_id)


# ============================================================================
# COUNCIL HANDLERS
# ============================================================================

def _on_submit_verification(state: GuildState, event: SubmitVerification, config: GuildConfig) -> None:
    badge = state.user.require_badge(event.badge_id)
    state.add_request(council.build_verification_request(state.user, badge))


def _on_submit_proposal(state: GuildState, event: SubmitProposal, config: GuildConfig) -> None:
    badge = clone_for_journal(event.badge)
    if badge.creator_id is None:
        badge.creator_id = state.user.id
    state.add_request(council.build_badge_proposal(state.user, badge, event.goal, event.metrics))


def _on_submit_promotion(state: GuildState, event: SubmitPromotion, config: GuildConfig) -> None:
    state.add_request(council.build_promotion_request(
        state.user,
        event.target_tier,
        list(event.supporting_badge_ids),
        list(event.statements),
    ))


def _on_suggest_link(state: GuildState, event: SuggestLink, config: GuildConfig) -> None:
    badge = state.get_library_badge(event.badge_id) or state.user.get_badge(event.badge_id)
    if badge is None:
        raise NotFoundError(f"No badge with id {event.badge_id}")
    state.add_request(council.build_link_suggestion(state.user, badge, event.label, event.url))


def _on_submit_partnership(state: GuildState, event: SubmitPartnership, config: GuildConfig) -> None:
    state.add_request(council.build_partnership_request(
        state.user,
        event.partner_name,
        event.partner_type,
        event.description,
        event.website_url,
    ))


def _on_request_physical(state: GuildState, event: RequestPhysicalBadge, config: GuildConfig) -> None:
    badge = state.user.require_badge(event.badge_id)
    state.add_request(request_physical_artifact(state.user, badge, config.physical_badge_fee))


def _on_resolve(state: GuildState, event: ResolveRequest, config: GuildConfig) -> None:
    council.resolve(
        state,
        event.kind,
        event.request_id,
        event.status,
        feedback=event.feedback,
        as_partner_badge=event.as_partner_badge,
        partner_name=event.partner_name,
    )


# ============================================================================
# PROFILE AND COLONY HANDLERS
# ============================================================================

def _on_update_profile(state: GuildState, event: UpdateProfile, config: GuildConfig) -> None:
    if event.name is not None:
        if not event.name.strip():
            raise ValidationError("Name cannot be empty")
        state.user.name = event.name.strip()
    if event.email is not None:
        state.user.email = event.email.strip()


def _on_set_storage(state: GuildState, event: SetStorageLocation, config: GuildConfig) -> None:
    set_storage_location(state.user, event.location)


def _on_join_colony(state: GuildState, event: JoinColony, config: GuildConfig) -> None:
    colonies.join_colony(state.colonies, state.user.colony_id, event.colony_id)
    state.user.colony_id = event.colony_id


def _on_propose_colony(state: GuildState, event: ProposeColony, config: GuildConfig) -> None:
    colonies.propose_colony(state.colonies, event.name, event.charter, event.siege, event.number)


def _on_approve_colony(state: GuildState, event: ApproveColony, config: GuildConfig) -> None:
    colonies.approve_colony(state.colonies, event.colony_id)


def _on_post_notice(state: GuildState, event: PostColonyNotice, config: GuildConfig) -> None:
    colonies.post_notice(state.colonies, event.colony_id, state.user.name, event.content)


def _on_schedule_event(state: GuildState, event: ScheduleColonyEvent, config: GuildConfig) -> None:
    colonies.schedule_event(
        state.colonies,
        event.colony_id,
        event.title,
        event.description,
        event.date,
        state.user.name,
    )


EVENT_HANDLERS: Dict[Type[GuildEvent], Handler] = {
    RecordEvidence: _on_record_evidence,
    RevokeRequirement: _on_revoke,
    UpdateReflection: _on_update_reflection,
    DownloadBadge: _on_download,
    CreateBadge: _on_create_badge,
    ToggleShowcase: _on_toggle_showcase,
    SubmitVerification: _on_submit_verification,
    SubmitProposal: _on_submit_proposal,
    SubmitPromotion: _on_submit_promotion,
    SuggestLink: _on_suggest_link,
    SubmitPartnership: _on_submit_partnership,
    RequestPhysicalBadge: _on_request_physical,
    ResolveRequest: _on_resolve,
    UpdateProfile: _on_update_profile,
    SetStorageLocation: _on_set_storage,
    JoinColony: _on_join_colony,
    ProposeColony: _on_propose_colony,
    ApproveColony: _on_approve_colony,
    PostColonyNotice: _on_post_notice,
    ScheduleColonyEvent: _on_schedule_event,
}


def reduce(state: GuildState, event: GuildEvent, config: Optional[GuildConfig] = None) -> GuildState:
    """
    Apply one event and return the resulting state.

    Args:
        state: Current state (never mutated)
        event: Event to apply
        config: Settings for fee-bearing events (default: GuildConfig())

    Returns:
        New GuildState

    Raises:
        GuildError: the event is invalid for the current state
        TypeError: the event type has no handler
    """
    handler = EVENT_HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    new_state = copy.deepcopy(state)
    handler(new_state, event, config or GuildConfig())
    logger.debug(f"Applied {type(event).__name__}")
    return new_state
