from datetime import date, datetime, timezone
from unittest.mock import Mock

import pytest

from app.check_store import CheckStore
from app.notifications import LAST_NOTIFICATION_KEY, NotificationService, build_reminder
from domain.checks import CheckRecord
from infrastructure.local_files import JsonSettingsStore
from infrastructure.synchronizer import SnapshotSynchronizer

TODAY = date(2024, 6, 1)


def _store(items) -> CheckStore:
    sync = Mock(spec=SnapshotSynchronizer)
    sync.load.return_value = items
    store = CheckStore(sync, clock=lambda: datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc))
    store.load()
    return store


def test_build_reminder():
    checks = [
        CheckRecord(id=1, company_name="Acme", due_date="2024-06-01", amount_usd=1500.0),
        CheckRecord(id=2, company_name="Zenith", due_date="2024-06-04", amount_tl=200.0),
        CheckRecord(id=3, company_name="Beta", due_date="2024-06-02", amount_usd=500.0),
    ]
    message = build_reminder(checks, TODAY)
    assert message.subject == "Upcoming check due dates: 3 checks"
    assert message.check_count == 3
    lines = message.check_list.splitlines()
    assert lines[0] == "• Acme - $1,500.00 - Due: 01.06.2024 (TODAY)"
    assert lines[1].endswith("(3 days)")
    assert lines[2].endswith("(TOMORROW)")
    assert message.total_amount == "$2,000.00 + ₺200.00"
    assert message.notification_date == "01.06.2024"


class TestNotificationService:
    def setup_method(self):
        self.sender = Mock()
        self.settings = Mock(spec=JsonSettingsStore)
        self.settings.get.return_value = None

    def test_sends_once_and_records_date(self):
        store = _store([{"id": 1, "firma_adi": "Acme", "vade_tarihi": "2024-06-08", "tl": 10}])
        service = NotificationService(store, self.sender, self.settings)
        sent = service.notify_due_checks()
        assert [c.id for c in sent] == [1]
        self.sender.send.assert_called_once()
        self.settings.set.assert_called_once_with(LAST_NOTIFICATION_KEY, "2024-06-01")

    def test_skips_when_already_sent_today(self):
        self.settings.get.return_value = "2024-06-01"
        store = _store([{"id": 1, "firma_adi": "Acme", "vade_tarihi": "2024-06-01"}])
        service = NotificationService(store, self.sender, self.settings)
        assert service.notify_due_checks() == []
        self.sender.send.assert_not_called()

    def test_skips_when_nothing_due(self):
        store = _store([{"id": 1, "firma_adi": "Acme", "vade_tarihi": "2024-06-05"}])
        service = NotificationService(store, self.sender, self.settings)
        assert service.notify_due_checks() == []
        self.sender.send.assert_not_called()
        self.settings.set.assert_not_called()

    def test_sender_failure_does_not_record_date(self):
        self.sender.send.side_effect = RuntimeError("smtp down")
        store = _store([{"id": 1, "firma_adi": "Acme", "vade_tarihi": "2024-06-01"}])
        service = NotificationService(store, self.sender, self.settings)
        with pytest.raises(RuntimeError):
            service.notify_due_checks()
        self.settings.set.assert_not_called()

    def test_send_test(self):
        service = NotificationService(_store([]), self.sender, self.settings)
        message = service.send_test()
        assert message.subject.startswith("Test:")
        assert "TEST COMPANY" in message.check_list
        assert message.total_amount == "€10,000.00"
