"""
guildjournal/protocol/storage.py

Snapshot persistence for the guild state.

Two layers:
1. StorageBackend - raw key/value bytes (memory or local disk)
2. SnapshotStore  - JSON encoding, schema stamping and migration

Load and save never raise. A failed save is logged and reported as False;
the in-memory state stays authoritative. A snapshot that cannot be parsed
or migrated loads as None.

Usage:
    from guildjournal.protocol.storage import FileBackend, SnapshotStore

    snapshots = SnapshotStore(FileBackend(Path("~/.guildjournal").expanduser()))
    state = snapshots.load_snapshot() or initial_state()
    snapshots.save_snapshot(state)
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from ..config import DEFAULT_STORAGE_DIR, SNAPSHOT_KEY
from ..exceptions import SnapshotVersionError
from .state import GuildState
from .versioning import SNAPSHOT_VERSION, VERSION_KEY, migrate_snapshot

logger = logging.getLogger("guildjournal.protocol.storage")


# ============================================================================
# STORAGE BACKENDS
# ============================================================================

class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def read(self, key: str) -> Optional[bytes]:
        """Get a value by key."""
        pass

    @abstractmethod
    def write(self, key: str, value: bytes) -> bool:
        """Store a value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a value."""
        pass

    @abstractmethod
    def list_keys(self, prefix: str = "") -> List[str]:
        """List keys with optional prefix filter."""
        pass


class MemoryBackend(StorageBackend):
    """In-memory storage backend."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def read(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def write(self, key: str, value: bytes) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        if key in self._data:
            del self._data[key]
            return True
        return False

    def list_keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]


class FileBackend(StorageBackend):
    """Local file storage backend: one <key>.json file per key."""

    def __init__(self, storage_dir: Path = None):
        self.storage_dir = Path(storage_dir or DEFAULT_STORAGE_DIR)

    def _key_to_path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.storage_dir / f"{safe}.json"

    def read(self, key: str) -> Optional[bytes]:
        path = self._key_to_path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {key}: {e}")
            return None

    def write(self, key: str, value: bytes) -> bool:
        path = self._key_to_path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(value)
            tmp_path.replace(path)
            return True
        except OSError as e:
            logger.error(f"Failed to write {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        path = self._key_to_path(key)
        try:
            if path.exists():
                path.unlink()
                return True
        except OSError as e:
            logger.error(f"Failed to delete {key}: {e}")
        return False

    def list_keys(self, prefix: str = "") -> List[str]:
        if not self.storage_dir.exists():
            return []
        return sorted(
            p.stem for p in self.storage_dir.glob("*.json")
            if p.stem.startswith(prefix)
        )


# ============================================================================
# SNAPSHOT STORE
# ============================================================================

class SnapshotStore:
    """
    Loads and saves the whole GuildState as one JSON document.

    Attributes:
        backend: Where the bytes live
        key: Storage key of the snapshot
    """

    def __init__(self, backend: StorageBackend = None, key: str = SNAPSHOT_KEY):
        self.backend = backend or MemoryBackend()
        self.key = key

    def load_snapshot(self) -> Optional[GuildState]:
        """
        Load the persisted state.

        Returns:
            GuildState, or None if nothing is stored or the snapshot is unusable
        """
        raw = self.backend.read(self.key)
        if raw is None:
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Snapshot {self.key} is not valid JSON: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Snapshot {self.key} is not an object")
            return None

        try:
            migrated = migrate_snapshot(data)
            state = GuildState.from_dict(migrated)
        except SnapshotVersionError as e:
            logger.error(f"Snapshot {self.key} cannot be loaded: {e}")
            return None
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError) as e:
            logger.error(f"Snapshot {self.key} is malformed: {e}")
            return None

        logger.debug(f"Loaded snapshot {self.key} for user {state.user.id}")
        return state

    def save_snapshot(self, state: GuildState) -> bool:
        """
        Persist the state.

        Returns:
            True if the backend accepted the write
        """
        try:
            data = state.to_dict()
            data[VERSION_KEY] = SNAPSHOT_VERSION
            payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to encode snapshot: {e}")
            return False

        saved = self.backend.write(self.key, payload)
        if not saved:
            logger.warning(f"Snapshot {self.key} was not saved")
        return saved

    def exists(self) -> bool:
        return self.backend.read(self.key) is not None

    def clear(self) -> bool:
        return self.backend.delete(self.key)
