"""
guildjournal - Achievement journal and council workflow engine

Tracks a member's progress through a credentialing program:
- Badges whose completion is derived from captured evidence
- Council-reviewed requests (verification, proposals, promotion, links,
  partnerships, physical artifacts) with a pending -> resolved lifecycle
- Tier ascension through Council-approved petitions
- JSON snapshot persistence with schema migration
- Optional AI drafting and guidance via a generative content service

Usage:
    from guildjournal import GuildStore
    from guildjournal.protocol.events import DownloadBadge, RecordEvidence

    store = GuildStore()
    store.load()
    store.dispatch(DownloadBadge("b1"))
    store.dispatch(RecordEvidence("b1", "r1", url="https://...", note="Done"))
"""

from .config import GuildConfig
from .exceptions import (
    GuildError,
    ValidationError,
    NotFoundError,
    InvalidTransitionError,
    CollaboratorError,
    SnapshotVersionError,
)
from .store import GuildStore
from .protocol import (
    Badge,
    Requirement,
    Tier,
    UserProfile,
    CouncilStatus,
    RequestKind,
    GuildState,
    initial_state,
    reduce,
    SnapshotStore,
    MemoryBackend,
    FileBackend,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Store
    "GuildStore",
    "GuildConfig",
    # Errors
    "GuildError",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "CollaboratorError",
    "SnapshotVersionError",
    # Engine
    "Badge",
    "Requirement",
    "Tier",
    "UserProfile",
    "CouncilStatus",
    "RequestKind",
    "GuildState",
    "initial_state",
    "reduce",
    # Persistence
    "SnapshotStore",
    "MemoryBackend",
    "FileBackend",
]
