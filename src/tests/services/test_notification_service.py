"""Tests for the daily birthday reminder dispatcher.

Tests cover:
- Exactly one reminder per threshold, none on re-runs the same day
- No reminder on the birthday itself or on non-threshold days
- Disabled and missing profiles are skipped
- One recipient's failure does not stop the others
- Ledger write failures after a successful send
- StoreUnavailable when recipients cannot be loaded
- Dry runs send and record nothing
"""

import logging
from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from gift_tracker.models import NotificationLogEntry
from gift_tracker.services import (
    gift_idea_service,
    notification_log_service,
    notification_service,
    profile_service,
    recipient_service,
)
from gift_tracker.services.exceptions import (
    DatabaseError,
    LedgerWriteError,
    StoreUnavailable,
)
from gift_tracker.services.notification_service import (
    DispatchResult,
    dispatch_birthday_notifications,
    find_due_reminders,
)

RUN_DATE = date(2024, 3, 1)


def add_recipient(user_id, name, birthday):
    return recipient_service.create_recipient(
        user_id, {"name": name, "birthday": birthday}, today=RUN_DATE
    )


def ledger_rows(session):
    return [
        (row.recipient_id, row.threshold_days, row.sent_date)
        for row in session.query(NotificationLogEntry).order_by(NotificationLogEntry.id)
    ]


class TestFindDueReminders:
    """Tests for find_due_reminders."""

    def test_only_exact_thresholds(self):
        people = [
            SimpleNamespace(name=name, birthday=birthday)
            for name, birthday in [
                ("fourteen", date(1990, 3, 15)),
                ("seven", date(1990, 3, 8)),
                ("one", date(1990, 3, 2)),
                ("today", date(1990, 3, 1)),
                ("eight", date(1990, 3, 9)),
                ("thirteen", date(1990, 3, 14)),
            ]
        ]

        due = find_due_reminders(people, RUN_DATE)

        assert [(d.recipient.name, d.threshold_days) for d in due] == [
            ("fourteen", 14),
            ("seven", 7),
            ("one", 1),
        ]

    def test_leap_day_birthday_in_non_leap_year(self):
        person = SimpleNamespace(name="Leap", birthday=date(2000, 2, 29))

        due = find_due_reminders([person], date(2023, 2, 21))

        assert [d.threshold_days for d in due] == [7]


class TestDispatch:
    """Tests for dispatch_birthday_notifications."""

    def test_fourteen_day_reminder_sent_once(
        self, test_db, sample_profile, sample_recipient, recording_sender
    ):
        result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.notifications_sent == 1
        assert result.success
        assert len(recording_sender.messages) == 1
        to_address, message = recording_sender.messages[0]
        assert to_address == "ann@example.com"
        assert message.subject == "Birthday reminder: Bob Jones is 14 days away!"
        assert "https://gifts.example.com" in message.text_body
        assert ledger_rows(test_db()) == [(sample_recipient.id, 14, RUN_DATE)]

        second = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert second.notifications_sent == 0
        assert second.skipped_duplicate == 1
        assert len(recording_sender.messages) == 1
        assert len(ledger_rows(test_db())) == 1

    def test_no_reminder_on_birthday(self, test_db, sample_profile, recording_sender):
        add_recipient(sample_profile.id, "Birthday Today", date(2000, 3, 1))

        result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.recipients_scanned == 1
        assert result.due == 0
        assert result.notifications_sent == 0
        assert recording_sender.messages == []

    def test_each_threshold_once_across_days(
        self, test_db, sample_profile, sample_recipient, recording_sender
    ):
        day = date(2024, 2, 1)
        while day <= date(2024, 3, 31):
            dispatch_birthday_notifications(today=day, sender=recording_sender)
            dispatch_birthday_notifications(today=day, sender=recording_sender)
            day += timedelta(days=1)

        subjects = [message.subject for _, message in recording_sender.messages]
        assert subjects == [
            "Birthday reminder: Bob Jones is 14 days away!",
            "Birthday reminder: Bob Jones is one week away!",
            "Birthday reminder: Bob Jones is tomorrow!",
        ]
        assert [row[1:] for row in ledger_rows(test_db())] == [
            (14, date(2024, 3, 1)),
            (7, date(2024, 3, 8)),
            (1, date(2024, 3, 14)),
        ]

    def test_gift_ideas_in_message(self, test_db, sample_profile, sample_recipient, recording_sender):
        gift_idea_service.create_gift_idea(
            sample_recipient.id, {"title": "Espresso cups", "estimated_cost": 24}
        )
        bought = gift_idea_service.create_gift_idea(sample_recipient.id, {"title": "Bookmark"})
        gift_idea_service.toggle_purchased(bought.id)

        dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        _, message = recording_sender.messages[0]
        assert "Espresso cups (estimated cost: $24.00)" in message.text_body
        assert "Bookmark" not in message.text_body
        assert "You have 1 items already purchased." in message.text_body

    def test_disabled_profile_never_emailed(
        self, test_db, sample_profile, sample_recipient, recording_sender
    ):
        profile_service.set_notifications_enabled(sample_profile.id, False)

        result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.skipped_disabled == 1
        assert result.notifications_sent == 0
        assert recording_sender.messages == []
        assert ledger_rows(test_db()) == []

    def test_missing_profile_skipped(self, test_db, sample_recipient, recording_sender, caplog):
        with patch.object(profile_service, "get_profile", return_value=None):
            with caplog.at_level(logging.WARNING):
                result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.skipped_no_profile == 1
        assert result.failed == 0
        assert recording_sender.messages == []
        assert "skipped_no_profile" in caplog.text

    def test_one_failed_send_does_not_stop_others(self, test_db, sample_profile, make_sender):
        other = profile_service.create_profile("carl@example.com")
        first = add_recipient(sample_profile.id, "Dana", date(1988, 3, 8))
        second = add_recipient(other.id, "Eli", date(1992, 3, 8))
        sender = make_sender(fail_for={"ann@example.com"})

        result = dispatch_birthday_notifications(today=RUN_DATE, sender=sender)

        assert result.due == 2
        assert result.failed == 1
        assert result.notifications_sent == 1
        assert not result.success
        assert result.errors[0]["recipient_id"] == first.id
        assert result.errors[0]["stage"] == "email"
        assert [to for to, _ in sender.messages] == ["carl@example.com"]
        assert sender.messages[0][1].subject == "Birthday reminder: Eli is one week away!"
        assert ledger_rows(test_db()) == [(second.id, 7, RUN_DATE)]

        # The failed reminder is retried by the next run on the same day
        retry = dispatch_birthday_notifications(today=RUN_DATE, sender=make_sender())
        assert retry.notifications_sent == 1
        assert retry.skipped_duplicate == 1

    def test_unexpected_sender_error_is_isolated(
        self, test_db, sample_profile, sample_recipient, recording_sender
    ):
        other = profile_service.create_profile("carl@example.com")
        add_recipient(other.id, "Eli", date(1992, 3, 15))

        class FlakySender:
            def __init__(self):
                self.calls = 0

            def send(self, to_address, message):
                self.calls += 1
                if self.calls == 1:
                    raise RuntimeError("socket closed")
                recording_sender.send(to_address, message)

        result = dispatch_birthday_notifications(today=RUN_DATE, sender=FlakySender())

        assert result.failed == 1
        assert result.notifications_sent == 1
        assert "RuntimeError" in result.errors[0]["message"]
        assert len(recording_sender.messages) == 1

    def test_profile_read_failure_is_isolated(self, test_db, sample_profile, sample_recipient):
        with patch.object(profile_service, "get_profile", side_effect=DatabaseError("locked")):
            result = dispatch_birthday_notifications(today=RUN_DATE, sender=None, dry_run=True)

        assert result.failed == 1
        assert result.errors[0]["stage"] == "profile"

    def test_ledger_failure_after_send(
        self, test_db, sample_profile, sample_recipient, recording_sender, caplog
    ):
        failure = LedgerWriteError(sample_recipient.id, 14)
        with patch.object(notification_log_service, "record_sent", side_effect=failure):
            with caplog.at_level(logging.ERROR):
                result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.notifications_sent == 1
        assert result.ledger_failures == 1
        assert result.failed == 0
        assert not result.success
        assert result.errors[0]["stage"] == "ledger"
        assert len(recording_sender.messages) == 1
        assert "ledger_write_failed" in caplog.text

    def test_lost_ledger_race_logs_duplicate_send(
        self, test_db, sample_profile, sample_recipient, recording_sender, caplog
    ):
        with patch.object(notification_log_service, "record_sent", return_value=False):
            with caplog.at_level(logging.WARNING):
                result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.notifications_sent == 1
        assert result.success
        assert "duplicate_send" in caplog.text

    def test_store_unavailable_aborts_run(self, test_db, recording_sender):
        with patch.object(
            recipient_service, "get_all_recipients", side_effect=DatabaseError("disk I/O error")
        ):
            with pytest.raises(StoreUnavailable):
                dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert recording_sender.messages == []

    def test_dry_run_sends_and_records_nothing(
        self, test_db, sample_profile, sample_recipient, recording_sender
    ):
        result = dispatch_birthday_notifications(
            today=RUN_DATE, sender=recording_sender, dry_run=True
        )

        assert result.notifications_sent == 0
        assert [p["recipient_name"] for p in result.planned] == ["Bob Jones"]
        assert recording_sender.messages == []
        assert ledger_rows(test_db()) == []

    def test_defaults_to_current_day(
        self, test_db, sample_profile, sample_recipient, recording_sender, monkeypatch
    ):
        monkeypatch.setattr(notification_service, "current_day", lambda: RUN_DATE)

        result = dispatch_birthday_notifications(sender=recording_sender)

        assert result.run_date == RUN_DATE
        assert result.notifications_sent == 1

    def test_configured_sender_used_by_default(self, test_db, sample_profile, sample_recipient):
        with patch.object(notification_service, "get_email_sender") as factory:
            dispatch_birthday_notifications(today=RUN_DATE)

        factory.return_value.send.assert_called_once()

    def test_empty_store(self, test_db, recording_sender):
        result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        assert result.recipients_scanned == 0
        assert result.success


class TestDispatchResult:
    """Tests for DispatchResult reporting."""

    def test_summary_and_dict(self, test_db, sample_profile, sample_recipient, recording_sender):
        result = dispatch_birthday_notifications(today=RUN_DATE, sender=recording_sender)

        summary = result.get_summary()
        data = result.to_dict()

        assert "Birthday reminders for 2024-03-01" in summary
        assert "Sent: 1" in summary
        assert data["run_date"] == "2024-03-01"
        assert data["notifications_sent"] == 1
        assert data["sent"][0]["to"] == "ann@example.com"
        assert data["sent"][0]["threshold_days"] == 14

    def test_dry_run_summary(self):
        result = DispatchResult(RUN_DATE, dry_run=True)
        assert "(dry run)" in result.get_summary()
        assert "Would send: 0" in result.get_summary()
