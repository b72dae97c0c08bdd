import json

import pytest

from domain.checks import CheckRecord
from domain.errors import MalformedSnapshotError
from domain.snapshot import build_snapshot, ensure_snapshot_shape, parse_snapshot


def test_build_snapshot_format():
    records = [CheckRecord(id=1, company_name="Acme"), CheckRecord(id=2, company_name="Zenith")]
    snapshot = build_snapshot(records, "2024-06-01T09:00:00.000Z")
    assert snapshot["lastUpdated"] == "2024-06-01T09:00:00.000Z"
    assert snapshot["totalChecks"] == 2
    assert [item["firma_adi"] for item in snapshot["checks"]] == ["Acme", "Zenith"]


def test_build_snapshot_export_stamp():
    snapshot = build_snapshot([], "2024-06-01T09:00:00.000Z", stamp_key="exportedAt")
    assert snapshot == {"checks": [], "exportedAt": "2024-06-01T09:00:00.000Z", "totalChecks": 0}


@pytest.mark.parametrize("payload", [None, [], "text", {}, {"checks": None}, {"checks": {"id": 1}}])
def test_shape_rejected(payload):
    with pytest.raises(MalformedSnapshotError):
        ensure_snapshot_shape(payload)


def test_parse_snapshot_skips_non_objects():
    records = parse_snapshot({"checks": [{"id": 1, "firma_adi": "Acme"}, "garbage", 42]})
    assert [r.id for r in records] == [1]


def test_parse_snapshot_assigns_ids_to_invalid_and_duplicate():
    records = parse_snapshot(
        {
            "checks": [
                {"id": 4, "firma_adi": "A"},
                {"firma_adi": "B"},
                {"id": 4, "firma_adi": "C"},
                {"id": 2, "firma_adi": "D"},
            ]
        }
    )
    assert [(r.id, r.company_name) for r in records] == [(4, "A"), (5, "B"), (6, "C"), (2, "D")]


def test_non_finite_amounts_never_reach_the_document():
    records = parse_snapshot({"checks": [{"id": 1, "firma_adi": "Acme", "tl": "NaN", "euro": float("inf")}]})
    payload = json.dumps(build_snapshot(records, "2024-06-01T09:00:00.000Z"), allow_nan=False)
    assert "NaN" not in payload
    assert json.loads(payload)["checks"][0]["tl"] is None
