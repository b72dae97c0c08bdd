from datetime import date

from domain.checks import CheckRecord, CheckStatus
from domain.statistics import compute_stats, notification_buckets, overdue_checks, upcoming_checks

TODAY = date(2024, 6, 1)


def _check(check_id, due=None, status=CheckStatus.PENDING, **amounts):
    return CheckRecord(id=check_id, company_name=f"Company {check_id}", due_date=due, status=status, **amounts)


class TestComputeStats:
    def test_mixed_statuses(self):
        records = [
            _check(1, due="2024-06-01", amount_tl=100.0),
            _check(2, status=CheckStatus.PAID, amount_usd=50.0),
            _check(3, status=CheckStatus.CANCELLED, amount_eur=20.0),
        ]
        stats = compute_stats(records, TODAY)
        assert stats.total == 3
        assert stats.paid == 1
        assert stats.cancelled == 1
        assert stats.pending == 1
        assert stats.pending_tl == 100.0
        assert stats.total_tl == 100.0
        assert stats.pending_usd == 0.0
        assert stats.total_usd == 50.0
        assert stats.total_eur == 20.0
        assert stats.pending_eur == 0.0
        assert stats.today_checks == 1
        assert stats.week_checks == 1

    def test_week_window_is_inclusive(self):
        records = [
            _check(1, due="2024-06-08"),
            _check(2, due="2024-06-09"),
            _check(3, due="2024-05-31"),
            _check(4, due="2024-06-05", status=CheckStatus.PAID),
        ]
        stats = compute_stats(records, TODAY)
        assert stats.week_checks == 1
        assert stats.today_checks == 0

    def test_malformed_values_count_as_zero(self):
        records = [_check(1, due="not-a-date", amount_tl="oops")]
        stats = compute_stats(records, TODAY)
        assert stats.total == 1
        assert stats.total_tl == 0.0
        assert stats.today_checks == 0

    def test_empty(self):
        assert compute_stats([], TODAY).to_dict()["total"] == 0


def test_upcoming_window():
    records = [
        _check(1, due="2024-06-08"),
        _check(2, due="2024-06-01"),
        _check(3, due="2024-06-09"),
        _check(4, due="2024-06-02", status=CheckStatus.PAID),
        _check(5),
    ]
    upcoming = upcoming_checks(records, TODAY, 7)
    assert [r.id for r in upcoming] == [2, 1]


def test_overdue():
    records = [
        _check(1, due="2024-05-31"),
        _check(2, due="2024-06-01"),
        _check(3, due="2024-05-01", status=CheckStatus.CANCELLED),
        _check(4),
    ]
    assert [r.id for r in overdue_checks(records, TODAY)] == [1]


def test_notification_buckets():
    records = [
        _check(1, due="2024-06-01"),
        _check(2, due="2024-06-02"),
        _check(3, due="2024-06-04"),
        _check(4, due="2024-06-08"),
        _check(5, due="2024-06-05"),
        _check(6, due="2024-06-04", status=CheckStatus.PAID),
    ]
    buckets = notification_buckets(records, TODAY)
    assert [r.id for r in buckets.today] == [1, 2]
    assert [r.id for r in buckets.in_3_days] == [3]
    assert [r.id for r in buckets.in_7_days] == [4]
    assert [r.id for r in buckets.all()] == [1, 2, 3, 4]
