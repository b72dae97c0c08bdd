import json
import logging
import os
from datetime import date as dt_date
from typing import Any

from domain.errors import MalformedSnapshotError
from domain.snapshot import ensure_snapshot_shape

logger = logging.getLogger(__name__)


def export_filename(day: dt_date) -> str:
    return f"cek-takip-{day.isoformat()}.json"


def write_export(snapshot: dict, filepath: str) -> str:
    """Write an exported snapshot as UTF-8 JSON and return the path."""
    ensure_snapshot_shape(snapshot)
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)
    logger.info("Exported %s checks to %s", snapshot.get("totalChecks"), filepath)
    return filepath


def read_import_file(filepath: str) -> Any:
    """Read a snapshot file for import; shape is checked before returning."""
    try:
        with open(filepath, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise MalformedSnapshotError(f"Could not read JSON file: {exc}") from exc
    ensure_snapshot_shape(payload)
    return payload
