import logging
import threading
from enum import Enum
from typing import Any

from domain.errors import CredentialsMissingError, DomainError, SyncBusyError
from domain.snapshot import ensure_snapshot_shape

from .github_store import RemoteSnapshotStore
from .local_files import LocalSnapshotFile

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    UNINITIALIZED = "uninitialized"
    FETCHING = "fetching"
    SYNCED = "synced"
    EMPTY = "empty"
    WRITING = "writing"


class SnapshotSynchronizer:
    """Reads and writes whole snapshots against a versioned remote document.

    Reads fall back from the remote store to a read-only local file and then
    to an empty list; they never raise. Writes are conditional on the held
    version token, never retried, and only one may be in flight at a time.
    """

    def __init__(self, remote: RemoteSnapshotStore, fallback: LocalSnapshotFile | None = None) -> None:
        self._remote = remote
        self._fallback = fallback
        self._state = SyncState.UNINITIALIZED
        self._token: str | None = None
        self._write_slot = threading.Lock()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def version_token(self) -> str | None:
        return self._token

    @property
    def is_writing(self) -> bool:
        return self._write_slot.locked()

    def reset(self) -> None:
        self._token = None
        self._state = SyncState.UNINITIALIZED

    def load(self) -> list[dict]:
        self._state = SyncState.FETCHING
        try:
            document = self._remote.fetch()
            checks = ensure_snapshot_shape(document.payload)
        except DomainError as exc:
            logger.warning("Remote snapshot unavailable (%s), falling back to local file", exc)
        else:
            self._token = document.token
            self._state = SyncState.SYNCED
            logger.info("Loaded %s checks from remote store", len(checks))
            return checks

        checks = self._load_fallback()
        if checks is None:
            self._state = SyncState.EMPTY
            logger.warning("No snapshot source available, starting with no checks")
            return []
        self._state = SyncState.SYNCED
        logger.info("Loaded %s checks from local file", len(checks))
        return checks

    def _load_fallback(self) -> list[dict] | None:
        if self._fallback is None:
            return None
        try:
            return ensure_snapshot_shape(self._fallback.read())
        except (OSError, ValueError) as exc:
            logger.warning("Local snapshot %s unreadable: %s", self._fallback.file_path, exc)
            return None

    def save(self, snapshot: dict[str, Any]) -> str:
        """Write the snapshot and return the new version token."""
        if not self._write_slot.acquire(blocking=False):
            logger.info("Write rejected, another save is in flight")
            raise SyncBusyError()

        previous_state = self._state
        self._state = SyncState.WRITING
        try:
            if not self._remote.is_configured:
                raise CredentialsMissingError()
            if self._token is None:
                self._token = self._remote.fetch_token()
            new_token = self._remote.put(snapshot, self._token)
        except Exception:
            self._state = previous_state
            raise
        else:
            self._token = new_token
            self._state = SyncState.SYNCED
            logger.info("Snapshot saved, %s checks", snapshot.get("totalChecks"))
            return new_token
        finally:
            self._write_slot.release()
