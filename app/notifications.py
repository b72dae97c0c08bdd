import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date as dt_date
from typing import Protocol

from domain.checks import CheckRecord, Currency
from domain.statistics import days_until
from infrastructure.local_files import JsonSettingsStore

from .check_store import CheckStore

logger = logging.getLogger(__name__)

LAST_NOTIFICATION_KEY = "last_notification_date"


class NotificationSender(Protocol):
    def send(self, message: "ReminderMessage") -> None:
        ...


@dataclass(frozen=True)
class ReminderMessage:
    subject: str
    check_count: int
    check_list: str
    total_amount: str
    notification_date: str


def _format_amount(amount: float, currency: Currency) -> str:
    return f"{currency.symbol}{amount:,.2f}"


def _format_date(value: dt_date | None) -> str:
    return value.strftime("%d.%m.%Y") if value is not None else "-"


def _days_label(days: int | None) -> str:
    if days == 0:
        return "TODAY"
    if days == 1:
        return "TOMORROW"
    return f"{days} days"


def build_reminder(checks: Sequence[CheckRecord], today: dt_date, *, test: bool = False) -> ReminderMessage:
    lines = []
    totals = {currency: 0.0 for currency in Currency}
    for check in checks:
        amount, currency = check.primary_amount()
        lines.append(
            f"• {check.company_name} - {_format_amount(amount, currency)}"
            f" - Due: {_format_date(check.due)} ({_days_label(days_until(check, today))})"
        )
        for each in Currency:
            totals[each] += check.amount_in(each)

    total_amount = " + ".join(
        _format_amount(totals[currency], currency) for currency in Currency if totals[currency] > 0
    )
    if test:
        subject = "Test: check tracking notification"
    else:
        subject = f"Upcoming check due dates: {len(checks)} checks"
    return ReminderMessage(
        subject=subject,
        check_count=len(checks),
        check_list="\n".join(lines),
        total_amount=total_amount,
        notification_date=_format_date(today),
    )


class NotificationService:
    """Sends at most one due-date reminder per day."""

    def __init__(self, store: CheckStore, sender: NotificationSender, settings: JsonSettingsStore) -> None:
        self._store = store
        self._sender = sender
        self._settings = settings

    def pending_reminders(self) -> list[CheckRecord]:
        return self._store.get_notification_buckets().all()

    def notify_due_checks(self) -> list[CheckRecord]:
        checks = self.pending_reminders()
        if not checks:
            logger.info("No checks requiring notification")
            return []

        today = self._store.today()
        if self._settings.get(LAST_NOTIFICATION_KEY) == today.isoformat():
            logger.info("Notification already sent today")
            return []

        self._sender.send(build_reminder(checks, today))
        self._settings.set(LAST_NOTIFICATION_KEY, today.isoformat())
        logger.info("Reminder sent for %s checks", len(checks))
        return checks

    def send_test(self) -> ReminderMessage:
        today = self._store.today()
        sample = CheckRecord(
            id=1,
            company_name="TEST COMPANY",
            check_number="TEST-001",
            bank="TEST BANK",
            due_date=today.isoformat(),
            amount_eur=10000.0,
        )
        message = build_reminder([sample], today, test=True)
        self._sender.send(message)
        return message
