"""
guildjournal/protocol/requirements.py

Requirement evidence model.

A requirement is one checklist item inside a badge. It may demand an
attachment (evidence_url), a written note (evidence_note), both, or
neither. Completion is always derived from the captured evidence:

    is_completed == (require_attachment -> evidence_url present)
                    AND (require_note -> evidence_note present)

The only two ways to change completion are record_evidence() and
revoke(). A requirement with both demands off is trivially satisfied and
starts out completed, which keeps old checklist-style library badges valid.

Usage:
    from guildjournal.protocol.requirements import Requirement, record_evidence

    req = Requirement.create("Identify 10 native trees", require_attachment=True)
    record_evidence(req, url="https://example.org/photo.jpg")
    assert req.is_completed
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger("guildjournal.protocol.requirements")


def evidence_satisfied(
    require_attachment: bool,
    require_note: bool,
    evidence_url: Optional[str],
    evidence_note: Optional[str],
) -> bool:
    """Evaluate the evidence invariant for a set of demands and evidence."""
    has_attachment = bool(evidence_url) if require_attachment else True
    has_note = bool(evidence_note) if require_note else True
    return has_attachment and has_note


@dataclass
class Requirement:
    """A single checklist item within a badge."""
    id: str
    description: str
    require_attachment: bool = False
    require_note: bool = False
    evidence_url: Optional[str] = None
    evidence_note: Optional[str] = None
    # Derived; see record_evidence() / revoke()
    is_completed: bool = field(init=False, default=False)

    def __post_init__(self):
        self.is_completed = self.is_satisfied()

    def is_satisfied(self) -> bool:
        """Whether the captured evidence meets this requirement's demands."""
        return evidence_satisfied(
            self.require_attachment,
            self.require_note,
            self.evidence_url,
            self.evidence_note,
        )

    @classmethod
    def create(
        cls,
        description: str,
        require_attachment: bool = False,
        require_note: bool = False,
        requirement_id: Optional[str] = None,
    ) -> "Requirement":
        """Create a fresh requirement with no evidence."""
        return cls(
            id=requirement_id or f"req-{uuid.uuid4().hex[:8]}",
            description=description,
            require_attachment=require_attachment,
            require_note=require_note,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "description": self.description,
            "isCompleted": self.is_completed,
            "requireAttachment": self.require_attachment,
            "requireNote": self.require_note,
        }
        if self.evidence_url:
            data["evidenceUrl"] = self.evidence_url
        if self.evidence_note:
            data["evidenceNote"] = self.evidence_note
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Requirement":
        """
        Load a requirement from its persisted form.

        The stored isCompleted flag is never trusted on its own: a stored
        True only survives if the evidence actually satisfies the demands,
        and a stored False (an explicit revoke) is kept as-is.
        """
        req = cls(
            id=str(data.get("id", "")),
            description=data.get("description", ""),
            require_attachment=bool(data.get("requireAttachment", False)),
            require_note=bool(data.get("requireNote", False)),
            evidence_url=data.get("evidenceUrl") or None,
            evidence_note=data.get("evidenceNote") or None,
        )
        stored = data.get("isCompleted")
        if stored is not None:
            req.is_completed = bool(stored) and req.is_satisfied()
        return req


# ============================================================================
# EVIDENCE OPERATIONS
# ============================================================================

def record_evidence(
    requirement: Requirement,
    url: Optional[str] = None,
    note: Optional[str] = None,
) -> Requirement:
    """
    Capture evidence for a requirement and recompute completion.

    Only the provided fields are set; omitted ones keep their value.

    Args:
        requirement: Requirement to update (mutated in place)
        url: Attachment URL or data URI
        note: Written evidence note

    Returns:
        The same requirement, for chaining
    """
    if url is not None:
        requirement.evidence_url = url or None
    if note is not None:
        requirement.evidence_note = note or None

    requirement.is_completed = requirement.is_satisfied()
    logger.debug(
        f"Evidence recorded for {requirement.id}: completed={requirement.is_completed}"
    )
    return requirement


def revoke(requirement: Requirement) -> Requirement:
    """Clear all evidence and mark the requirement incomplete."""
    requirement.evidence_url = None
    requirement.evidence_note = None
    requirement.is_completed = False
    logger.debug(f"Requirement {requirement.id} revoked")
    return requirement
