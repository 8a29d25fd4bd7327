"""
guildjournal/protocol/versioning.py

Snapshot schema versioning and migrations.

Saved snapshots carry a "schemaVersion" field. Snapshots without one were
written by the browser journal and are treated as LEGACY_VERSION.
migrate_snapshot() walks the registered migration chain one step at a
time until the document reaches SNAPSHOT_VERSION.

- Same major version: loadable (after migrations)
- Newer major version: SnapshotVersionError

Usage:
    from guildjournal.protocol.versioning import migrate_snapshot

    data = migrate_snapshot(json.loads(raw))
    state = GuildState.from_dict(data)
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from ..exceptions import SnapshotVersionError

logger = logging.getLogger("guildjournal.protocol.versioning")


# ============================================================================
# VERSION CONSTANTS
# ============================================================================

SNAPSHOT_VERSION = "1.0.0"
LEGACY_VERSION = "0.0.0"
VERSION_KEY = "schemaVersion"

REQUEST_COLLECTIONS = (
    "verificationRequests",
    "badgeProposals",
    "promotionRequests",
    "linkSuggestions",
    "partnershipRequests",
    "physicalBadgeRequests",
)

LEGACY_FEEDBACK_KEYS = ("rejectionReason", "councilFeedback")


# ============================================================================
# VERSION DATA CLASS
# ============================================================================

@dataclass(frozen=True)
class SchemaVersion:
    """
    Semantic version of the snapshot schema.

    - MAJOR: incompatible layout change
    - MINOR: new optional fields
    - PATCH: fixes
    """
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"SchemaVersion({self})"

    def _key(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: "SchemaVersion") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "SchemaVersion") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "SchemaVersion") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "SchemaVersion") -> bool:
        return self._key() >= other._key()

    @classmethod
    def from_string(cls, version_str: str) -> "SchemaVersion":
        """
        Parse version from string.

        Raises:
            ValueError: If string is not a valid version
        """
        try:
            parts = str(version_str).strip().split(".")
            if len(parts) != 3:
                raise ValueError(f"Invalid version format: {version_str}")
            return cls(major=int(parts[0]), minor=int(parts[1]), patch=int(parts[2]))
        except (ValueError, IndexError) as e:
            raise ValueError(f"Invalid version string '{version_str}': {e}")

    def is_compatible_with(self, other: "SchemaVersion") -> bool:
        """Same major version, or a legacy document that has a migration path."""
        return self.major == other.major or self == LEGACY


CURRENT = SchemaVersion.from_string(SNAPSHOT_VERSION)
LEGACY = SchemaVersion.from_string(LEGACY_VERSION)


# ============================================================================
# MIGRATIONS
# ============================================================================

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


def _iter_badges(data: Dict[str, Any]):
    user = data.get("user") or {}
    yield from user.get("badges") or []
    yield from data.get("badgesLibrary") or []
    for proposal in data.get("badgeProposals") or []:
        if isinstance(proposal.get("badge"), dict):
            yield proposal["badge"]


def _migrate_legacy_to_1_0_0(data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill fields the browser journal did not always write."""
    for key in REQUEST_COLLECTIONS:
        data.setdefault(key, [])
        for request in data[key]:
            for legacy_key in LEGACY_FEEDBACK_KEYS:
                if legacy_key in request:
                    value = request.pop(legacy_key)
                    if value and not request.get("feedback"):
                        request["feedback"] = value

    user = data.get("user") or {}
    data["user"] = user
    user.setdefault("badges", [])
    user.setdefault("showcasedBadgeIds", [])
    user.setdefault("claimedFreePhysicalBadgeIds", [])

    data.setdefault("badgesLibrary", [])
    data.setdefault("colonies", [])

    for badge in _iter_badges(data):
        # evidenceUrls was a badge-level list in the browser journal; evidence is per requirement now
        badge.pop("evidenceUrls", None)
        badge.setdefault("usefulLinks", [])
        for requirement in badge.get("requirements") or []:
            requirement.setdefault("requireAttachment", False)
            requirement.setdefault("requireNote", False)

    for colony in data["colonies"]:
        colony.setdefault("notices", [])
        colony.setdefault("events", [])

    return data


# Ordered migration chain: (from_version, to_version, function)
MIGRATIONS: List[Tuple[str, str, Migration]] = [
    (LEGACY_VERSION, "1.0.0", _migrate_legacy_to_1_0_0),
]


def snapshot_version(data: Dict[str, Any]) -> SchemaVersion:
    """Version a snapshot was written with (LEGACY for unversioned data)."""
    raw = data.get(VERSION_KEY)
    if raw is None:
        return LEGACY
    return SchemaVersion.from_string(raw)


def migrate_snapshot(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a snapshot document up to SNAPSHOT_VERSION.

    The input is not modified.

    Args:
        data: Parsed snapshot document

    Returns:
        Migrated copy stamped with the current schemaVersion

    Raises:
        SnapshotVersionError: written by a newer major schema, or no migration path
    """
    try:
        version = snapshot_version(data)
    except ValueError as e:
        raise SnapshotVersionError(str(e)) from e

    if version.major > CURRENT.major:
        raise SnapshotVersionError(
            f"Snapshot schema {version} is newer than supported {CURRENT}"
        )

    migrated = copy.deepcopy(data)
    for from_str, to_str, migration in MIGRATIONS:
        if version == SchemaVersion.from_string(from_str):
            logger.info(f"Migrating snapshot schema {from_str} -> {to_str}")
            migrated = migration(migrated)
            version = SchemaVersion.from_string(to_str)

    if version.major != CURRENT.major:
        raise SnapshotVersionError(f"No migration path from snapshot schema {version}")

    migrated[VERSION_KEY] = SNAPSHOT_VERSION
    return migrated
