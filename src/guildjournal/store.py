"""
guildjournal/store.py

GuildStore: the authoritative in-memory state plus persistence.

Every change goes through dispatch(): the event is reduced into a new
state, the new state replaces the old one, subscribers are notified and
the snapshot is saved. The in-memory state always wins; a failed save is
logged and never rolls back or blocks a transition.

Usage:
    from guildjournal.store import GuildStore
    from guildjournal.protocol.events import DownloadBadge

    store = GuildStore(snapshot_store=SnapshotStore(FileBackend(path)))
    store.load()
    store.dispatch(DownloadBadge("b1"))
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .config import GuildConfig
from .exceptions import GuildError
from .protocol.council import CouncilRequest, CouncilStatus, RequestKind
from .protocol.events import GuildEvent
from .protocol.reducer import reduce
from .protocol.state import GuildState, initial_state
from .protocol.storage import SnapshotStore

logger = logging.getLogger("guildjournal.store")

Subscriber = Callable[[GuildState, GuildEvent], None]


class GuildStore:
    """
    Owns the current GuildState.

    Args:
        state: Starting state (default: seeded initial state on load())
        snapshot_store: Persistence collaborator (default: in-memory)
        config: Runtime settings
    """

    def __init__(
        self,
        state: Optional[GuildState] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        config: Optional[GuildConfig] = None,
    ):
        self.config = config or GuildConfig()
        self.snapshots = snapshot_store or SnapshotStore()
        self._state = state
        self._subscribers: List[Subscriber] = []
        self.last_error: Optional[GuildError] = None

    @property
    def state(self) -> GuildState:
        if self._state is None:
            self.load()
        return self._state

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def load(self) -> GuildState:
        """Load the persisted state, or start from the seeded initial state."""
        loaded = self.snapshots.load_snapshot()
        if loaded is not None:
            self._state = loaded
            logger.info(f"Loaded journal for {loaded.user.name} ({loaded.user.tier.value})")
        else:
            self._state = initial_state()
            logger.info(f"Started a new journal for {self._state.user.id}")
        return self._state

    def save(self) -> bool:
        """Persist the current state. Never raises."""
        try:
            return self.snapshots.save_snapshot(self.state)
        except Exception as e:
            logger.error(f"Snapshot save failed: {e}")
            return False

    # ========================================================================
    # DISPATCH
    # ========================================================================

    def dispatch(self, event: GuildEvent) -> bool:
        """
        Apply an event.

        Returns:
            True if the state changed, False if the event was rejected
            (the previous state is kept and the error is in last_error)
        """
        try:
            new_state = reduce(self.state, event, self.config)
        except GuildError as e:
            self.last_error = e
            logger.warning(f"{type(event).__name__} rejected: {e}")
            return False

        self.last_error = None
        self._state = new_state
        self._notify(event)
        self.save()
        return True

    def subscribe(self, callback: Subscriber) -> None:
        """Register callback(state, event), called after every applied event."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, event: GuildEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._state, event)
            except Exception as e:
                logger.error(f"Subscriber {callback!r} failed: {e}")

    # ========================================================================
    # QUERIES
    # ========================================================================

    def pending_requests(self, kind: Optional[RequestKind] = None) -> List[CouncilRequest]:
        return self.state.pending_requests(kind)

    def get_request(self, kind: RequestKind, request_id: str) -> Optional[CouncilRequest]:
        return self.state.get_request(kind, request_id)

    def get_stats(self) -> Dict[str, Any]:
        """Get journal statistics."""
        state = self.state
        user = state.user
        requests: Dict[str, Dict[str, int]] = {}
        for kind in RequestKind:
            counts = {status.value: 0 for status in CouncilStatus}
            for request in state.requests_of(kind):
                counts[request.status.value] += 1
            requests[kind.value] = counts

        return {
            "user_id": user.id,
            "user_name": user.name,
            "tier": user.tier.value,
            "badges_owned": len(user.badges),
            "badges_mastered": len(user.mastered_badges()),
            "badges_in_progress": len(user.in_progress_badges()),
            "badges_verified": sum(1 for b in user.badges if b.is_verified),
            "showcased": len(user.showcased_badge_ids),
            "library_size": len(state.badges_library),
            "colony_id": user.colony_id,
            "free_physical_claims": len(user.claimed_free_physical_badge_ids),
            "access_fund_balance": state.access_fund_balance,
            "pending_requests": len(state.pending_requests()),
            "requests": requests,
        }
