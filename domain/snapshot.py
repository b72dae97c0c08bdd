import logging
from collections.abc import Iterable
from typing import Any

from .checks import CheckRecord
from .errors import MalformedSnapshotError

logger = logging.getLogger(__name__)


def build_snapshot(records: Iterable[CheckRecord], timestamp: str, *, stamp_key: str = "lastUpdated") -> dict:
    checks = [record.to_dict() for record in records]
    return {
        "checks": checks,
        stamp_key: timestamp,
        "totalChecks": len(checks),
    }


def ensure_snapshot_shape(payload: Any) -> list:
    if not isinstance(payload, dict):
        raise MalformedSnapshotError("Invalid file format: expected a JSON object")
    checks = payload.get("checks")
    if not isinstance(checks, list):
        raise MalformedSnapshotError("Invalid file format: 'checks' list is missing")
    return checks


def parse_snapshot(payload: Any) -> list[CheckRecord]:
    """Turn a snapshot document into records.

    Non-object items are skipped. Items without a usable or unique id get the
    next free id so nothing from the document is dropped.
    """
    items = ensure_snapshot_shape(payload)
    parsed: list[CheckRecord | dict] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object check at index %s", index)
            continue
        try:
            parsed.append(CheckRecord.from_dict(item))
        except (TypeError, ValueError):
            parsed.append(item)

    next_id = max((p.id for p in parsed if isinstance(p, CheckRecord)), default=0) + 1
    seen: set[int] = set()
    records: list[CheckRecord] = []
    for entry in parsed:
        if isinstance(entry, CheckRecord) and entry.id not in seen:
            seen.add(entry.id)
            records.append(entry)
            continue
        item = entry.to_dict() if isinstance(entry, CheckRecord) else entry
        logger.warning("Check with invalid or duplicate id %r, assigning id=%s", item.get("id"), next_id)
        records.append(CheckRecord.from_dict({**item, "id": next_id}))
        seen.add(next_id)
        next_id += 1
    return records
