import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import date as dt_date
from datetime import datetime, timezone
from typing import Any, Literal

from domain.banks import BankDirectory
from domain.checks import DRAFT_FIELDS, TIMESTAMP_FIELDS, CheckRecord, CheckStatus
from domain.errors import DomainError, PersistenceError
from domain.search import SearchFilters, search_checks, sort_checks
from domain.snapshot import build_snapshot, parse_snapshot
from domain.statistics import (
    CheckStats,
    NotificationBuckets,
    compute_stats,
    notification_buckets,
    overdue_checks,
    upcoming_checks,
)
from infrastructure.local_files import JsonSettingsStore
from infrastructure.synchronizer import SnapshotSynchronizer

logger = logging.getLogger(__name__)

CUSTOM_BANKS_KEY = "custom_banks"
PROTECTED_FIELDS = ("id", *TIMESTAMP_FIELDS)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _check_fields(values: Mapping[str, Any]) -> None:
    protected = sorted(set(values) & set(PROTECTED_FIELDS))
    if protected:
        raise ValueError(f"Fields are managed by the store: {', '.join(protected)}")
    unknown = sorted(set(values) - set(DRAFT_FIELDS))
    if unknown:
        raise ValueError(f"Unknown check fields: {', '.join(unknown)}")


class CheckStore:
    """In-memory list of checks kept durable through a snapshot synchronizer.

    ``add``, ``update`` and ``delete`` undo their in-memory change when the
    write fails. ``import_snapshot`` and ``sweep_auto_status`` keep the new
    state even when the write fails.
    """

    def __init__(
        self,
        synchronizer: SnapshotSynchronizer,
        *,
        baseline_banks: Iterable[str] = (),
        settings: JsonSettingsStore | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._synchronizer = synchronizer
        self._settings = settings
        self._clock = clock
        self._checks: list[CheckRecord] = []
        self._lock = threading.RLock()
        custom = settings.get(CUSTOM_BANKS_KEY, []) if settings is not None else []
        if not isinstance(custom, list):
            logger.warning("Ignoring malformed custom bank list in settings")
            custom = []
        self._banks = BankDirectory(baseline_banks, custom)

    # --- time -----------------------------------------------------------

    def today(self) -> dt_date:
        return self._clock().date()

    def _timestamp(self) -> str:
        stamp = self._clock().astimezone(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")

    # --- persistence ----------------------------------------------------

    def load(self) -> int:
        items = self._synchronizer.load()
        try:
            records = parse_snapshot({"checks": items})
        except DomainError:
            logger.exception("Loaded snapshot could not be parsed, starting empty")
            records = []
        with self._lock:
            self._checks = records
        return len(records)

    def _snapshot(self) -> dict:
        return build_snapshot(self._checks, self._timestamp())

    def _write(self, snapshot: dict) -> None:
        self._synchronizer.save(snapshot)

    # --- reads ----------------------------------------------------------

    def get_all(self) -> list[CheckRecord]:
        with self._lock:
            return list(self._checks)

    def get_by_id(self, check_id: int) -> CheckRecord | None:
        with self._lock:
            return next((c for c in self._checks if c.id == check_id), None)

    def get_next_id(self) -> int:
        with self._lock:
            return max((c.id for c in self._checks), default=0) + 1

    def get_stats(self) -> CheckStats:
        return compute_stats(self.get_all(), self.today())

    def get_upcoming(self, days_ahead: int = 7) -> list[CheckRecord]:
        return upcoming_checks(self.get_all(), self.today(), days_ahead)

    def get_overdue(self) -> list[CheckRecord]:
        return overdue_checks(self.get_all(), self.today())

    def get_notification_buckets(self) -> NotificationBuckets:
        return notification_buckets(self.get_all(), self.today())

    def search(
        self,
        query: str = "",
        filters: SearchFilters | Mapping[str, Any] | None = None,
    ) -> list[CheckRecord]:
        return search_checks(self.get_all(), query, filters)

    @staticmethod
    def sort(
        records: Iterable[CheckRecord],
        column: str,
        direction: Literal["asc", "desc"] = "asc",
    ) -> list[CheckRecord]:
        return sort_checks(records, column, direction)

    # --- mutations ------------------------------------------------------

    def _index_of(self, record: CheckRecord) -> int | None:
        for index, item in enumerate(self._checks):
            if item is record:
                return index
        return None

    def _index_by_id(self, check_id: int) -> int | None:
        for index, item in enumerate(self._checks):
            if item.id == check_id:
                return index
        return None

    def add(self, draft: Mapping[str, Any]) -> CheckRecord:
        _check_fields(draft)
        with self._lock:
            values = dict(draft)
            if not values.get("status"):
                values["status"] = CheckStatus.PENDING
            record = CheckRecord(id=self.get_next_id(), created_at=self._timestamp(), **values)
            self._checks.append(record)
            snapshot = self._snapshot()

        try:
            self._write(snapshot)
        except DomainError as exc:
            with self._lock:
                index = self._index_of(record)
                if index is not None:
                    del self._checks[index]
            logger.warning("Add of check id=%s rolled back: %s", record.id, exc)
            raise PersistenceError(exc) from exc

        logger.info("Check created id=%s company=%s due=%s", record.id, record.company_name, record.due_date)
        return record

    def update(self, check_id: int, patch: Mapping[str, Any]) -> CheckRecord | None:
        _check_fields(patch)
        with self._lock:
            index = self._index_by_id(check_id)
            if index is None:
                return None
            previous = self._checks[index]
            updated = replace(previous, **patch, updated_at=self._timestamp())
            self._checks[index] = updated
            snapshot = self._snapshot()

        try:
            self._write(snapshot)
        except DomainError as exc:
            with self._lock:
                current = self._index_of(updated)
                if current is not None:
                    self._checks[current] = previous
            logger.warning("Update of check id=%s rolled back: %s", check_id, exc)
            raise PersistenceError(exc) from exc

        logger.info("Check updated id=%s fields=%s", check_id, ",".join(sorted(patch)))
        return updated

    def delete(self, check_id: int) -> bool:
        with self._lock:
            index = self._index_by_id(check_id)
            if index is None:
                return False
            removed = self._checks.pop(index)
            snapshot = self._snapshot()

        try:
            self._write(snapshot)
        except DomainError as exc:
            with self._lock:
                self._checks.insert(min(index, len(self._checks)), removed)
            logger.warning("Delete of check id=%s rolled back: %s", check_id, exc)
            raise PersistenceError(exc) from exc

        logger.info("Check deleted id=%s", check_id)
        return True

    def sweep_auto_status(self) -> int:
        """Mark pending checks whose due date has passed as paid."""
        today = self.today()
        with self._lock:
            stamp = self._timestamp()
            changed = 0
            for index, record in enumerate(self._checks):
                if record.status is not CheckStatus.PENDING:
                    continue
                due = record.due
                if due is None or due >= today:
                    continue
                self._checks[index] = replace(record, status=CheckStatus.PAID, auto_updated_at=stamp)
                changed += 1
            if not changed:
                return 0
            snapshot = self._snapshot()

        logger.info("Auto status sweep marked %s checks as paid", changed)
        try:
            self._write(snapshot)
        except DomainError as exc:
            raise PersistenceError(exc) from exc
        return changed

    # --- bulk -----------------------------------------------------------

    def export_snapshot(self) -> dict:
        with self._lock:
            return build_snapshot(self._checks, self._timestamp(), stamp_key="exportedAt")

    def import_snapshot(self, snapshot: Any) -> int:
        records = parse_snapshot(snapshot)
        with self._lock:
            self._checks = records
            payload = self._snapshot()

        logger.info("Imported %s checks", len(records))
        try:
            self._write(payload)
        except DomainError as exc:
            raise PersistenceError(exc) from exc
        return len(records)

    # --- banks ----------------------------------------------------------

    def get_banks(self) -> list[str]:
        return self._banks.all_banks(self.get_all())

    def get_custom_banks(self) -> list[str]:
        return self._banks.custom

    def _persist_banks(self, previous: list[str]) -> None:
        if self._settings is None:
            return
        try:
            self._settings.set(CUSTOM_BANKS_KEY, self._banks.custom)
        except OSError as exc:
            self._banks.restore_custom(previous)
            raise PersistenceError(exc, f"Could not save bank list: {exc}") from exc

    def add_custom_bank(self, name: str) -> str | None:
        with self._lock:
            previous = self._banks.custom
            added = self._banks.add_custom(name)
            if added is None:
                return None
            self._persist_banks(previous)
        logger.info("Custom bank added: %s", added)
        return added

    def remove_custom_bank(self, name: str) -> bool:
        with self._lock:
            previous = self._banks.custom
            if not self._banks.remove_custom(name):
                return False
            self._persist_banks(previous)
        logger.info("Custom bank removed: %s", name)
        return True
