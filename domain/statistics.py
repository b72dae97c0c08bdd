from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import date as dt_date
from datetime import timedelta

from .checks import CheckRecord, CheckStatus


@dataclass(frozen=True)
class CheckStats:
    total: int = 0
    paid: int = 0
    cancelled: int = 0
    pending: int = 0
    today_checks: int = 0
    week_checks: int = 0
    total_usd: float = 0.0
    total_eur: float = 0.0
    total_tl: float = 0.0
    pending_usd: float = 0.0
    pending_eur: float = 0.0
    pending_tl: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def days_until(record: CheckRecord, today: dt_date) -> int | None:
    due = record.due
    if due is None:
        return None
    return (due - today).days


def compute_stats(records: Iterable[CheckRecord], today: dt_date, week_days: int = 7) -> CheckStats:
    total = paid = cancelled = today_checks = week_checks = 0
    total_usd = total_eur = total_tl = 0.0
    pending_usd = pending_eur = pending_tl = 0.0

    for record in records:
        total += 1
        if record.status is CheckStatus.PAID:
            paid += 1
        elif record.status is CheckStatus.CANCELLED:
            cancelled += 1

        usd = record.amount_usd or 0.0
        eur = record.amount_eur or 0.0
        tl = record.amount_tl or 0.0
        total_usd += usd
        total_eur += eur
        total_tl += tl

        if record.is_pending:
            pending_usd += usd
            pending_eur += eur
            pending_tl += tl
            days = days_until(record, today)
            if days == 0:
                today_checks += 1
            if days is not None and 0 <= days <= week_days:
                week_checks += 1

    return CheckStats(
        total=total,
        paid=paid,
        cancelled=cancelled,
        pending=total - paid - cancelled,
        today_checks=today_checks,
        week_checks=week_checks,
        total_usd=total_usd,
        total_eur=total_eur,
        total_tl=total_tl,
        pending_usd=pending_usd,
        pending_eur=pending_eur,
        pending_tl=pending_tl,
    )


def upcoming_checks(records: Iterable[CheckRecord], today: dt_date, days_ahead: int = 7) -> list[CheckRecord]:
    horizon = today + timedelta(days=days_ahead)
    upcoming = [
        record
        for record in records
        if record.is_pending and record.due is not None and today <= record.due <= horizon
    ]
    return sorted(upcoming, key=lambda record: record.due)


def overdue_checks(records: Iterable[CheckRecord], today: dt_date) -> list[CheckRecord]:
    return [record for record in records if record.is_pending and record.due is not None and record.due < today]


@dataclass
class NotificationBuckets:
    today: list[CheckRecord] = field(default_factory=list)
    in_3_days: list[CheckRecord] = field(default_factory=list)
    in_7_days: list[CheckRecord] = field(default_factory=list)

    def all(self) -> list[CheckRecord]:
        return [*self.today, *self.in_3_days, *self.in_7_days]


def notification_buckets(records: Iterable[CheckRecord], today: dt_date) -> NotificationBuckets:
    """Pending checks due today or tomorrow, in exactly 3 days, in exactly 7 days."""
    buckets = NotificationBuckets()
    for record in records:
        if not record.is_pending:
            continue
        days = days_until(record, today)
        if days in (0, 1):
            buckets.today.append(record)
        elif days == 3:
            buckets.in_3_days.append(record)
        elif days == 7:
            buckets.in_7_days.append(record)
    return buckets
