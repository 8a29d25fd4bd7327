"""
guildjournal/protocol/colonies.py

Colonies: local community groupings a member can join or found.

A proposed colony starts unapproved with its founder as the single
member; a Council member approves the charter. Notices and events are
append-only message boards on a colony.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..exceptions import NotFoundError, ValidationError

logger = logging.getLogger("guildjournal.protocol.colonies")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ColonyNotice:
    """A short message posted to a colony's notice board."""
    id: str
    colony_id: str
    author: str
    content: str
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "colonyId": self.colony_id,
            "author": self.author,
            "content": self.content,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColonyNotice":
        return cls(
            id=data["id"],
            colony_id=data.get("colonyId", ""),
            author=data.get("author", ""),
            content=data.get("content", ""),
            timestamp=data.get("timestamp") or _now_iso(),
        )


@dataclass
class ColonyEvent:
    """A scheduled gathering of a colony."""
    id: str
    colony_id: str
    title: str
    description: str
    date: str
    creator_name: str
    attendees: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "colonyId": self.colony_id,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "creatorName": self.creator_name,
            "attendees": list(self.attendees),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColonyEvent":
        return cls(
            id=data["id"],
            colony_id=data.get("colonyId", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            date=data.get("date", ""),
            creator_name=data.get("creatorName", ""),
            attendees=list(data.get("attendees") or []),
        )


@dataclass
class Colony:
    """A chartered local chapter."""
    id: str
    name: str
    number: int
    siege: str
    charter: str
    members_count: int = 0
    is_approved: bool = False
    notices: List[ColonyNotice] = field(default_factory=list)
    events: List[ColonyEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "siege": self.siege,
            "charter": self.charter,
            "membersCount": self.members_count,
            "isApproved": self.is_approved,
            "notices": [n.to_dict() for n in self.notices],
            "events": [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Colony":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            number=int(data.get("number", 0) or 0),
            siege=data.get("siege", ""),
            charter=data.get("charter", ""),
            members_count=int(data.get("membersCount", 0) or 0),
            is_approved=bool(data.get("isApproved", False)),
            notices=[ColonyNotice.from_dict(n) for n in data.get("notices") or []],
            events=[ColonyEvent.from_dict(e) for e in data.get("events") or []],
        )


# ============================================================================
# OPERATIONS
# ============================================================================

def find_colony(colonies: List[Colony], colony_id: str) -> Colony:
    for colony in colonies:
        if colony.id == colony_id:
            return colony
    raise NotFoundError(f"No colony with id {colony_id}")


def next_colony_number(colonies: List[Colony]) -> int:
    return max((c.number for c in colonies), default=100) + 1


def join_colony(colonies: List[Colony], current_id: Optional[str], colony_id: str) -> Colony:
    """
    Move a member into colony_id, keeping member counts consistent.

    Returns:
        The joined colony
    """
    target = find_colony(colonies, colony_id)
    if current_id == colony_id:
        return target

    if current_id:
        try:
            previous = find_colony(colonies, current_id)
        except NotFoundError:
            logger.warning(f"Previous colony {current_id} no longer exists")
        else:
            previous.members_count = max(0, previous.members_count - 1)

    target.members_count += 1
    logger.info(f"Joined colony {target.id} ({target.name})")
    return target


def propose_colony(
    colonies: List[Colony],
    name: str,
    charter: str,
    siege: str,
    number: Optional[int] = None,
) -> Colony:
    """Create an unapproved colony with its founder as the only member."""
    if not name or not name.strip():
        raise ValidationError("A colony needs a name")
    colony = Colony(
        id=f"col-{uuid.uuid4().hex[:10]}",
        name=name.strip(),
        number=number if number is not None else next_colony_number(colonies),
        siege=siege or "",
        charter=charter or "",
        members_count=1,
        is_approved=False,
    )
    colonies.insert(0, colony)
    logger.info(f"Colony {colony.name} proposed as {colony.id}")
    return colony


def approve_colony(colonies: List[Colony], colony_id: str) -> Colony:
    colony = find_colony(colonies, colony_id)
    colony.is_approved = True
    logger.info(f"Colony charter approved: {colony.name}")
    return colony


def post_notice(colonies: List[Colony], colony_id: str, author: str, content: str) -> ColonyNotice:
    colony = find_colony(colonies, colony_id)
    if not content or not content.strip():
        raise ValidationError("A notice needs content")
    notice = ColonyNotice(
        id=f"notice-{uuid.uuid4().hex[:10]}",
        colony_id=colony.id,
        author=author,
        content=content.strip(),
    )
    colony.notices.insert(0, notice)
    return notice


def schedule_event(
    colonies: List[Colony],
    colony_id: str,
    title: str,
    description: str,
    date: str,
    creator_name: str,
) -> ColonyEvent:
    colony = find_colony(colonies, colony_id)
    if not title or not title.strip():
        raise ValidationError("An event needs a title")
    event = ColonyEvent(
        id=f"event-{uuid.uuid4().hex[:10]}",
        colony_id=colony.id,
        title=title.strip(),
        description=description or "",
        date=date or "",
        creator_name=creator_name,
        attendees=[creator_name] if creator_name else [],
    )
    colony.events.append(event)
    return event
