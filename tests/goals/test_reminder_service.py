from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.attendance_tracker.attendance_tracker.core.exceptions import ValidationError
from src.attendance_tracker.attendance_tracker.reminders.service import ReminderService


def test_due_at_reminder_time_in_configured_zone():
    service = ReminderService("18:30", "Asia/Kolkata")
    # 13:00 UTC is 18:30 in India
    status = service.check(3, 1, now=datetime(2026, 2, 4, 13, 0, tzinfo=timezone.utc))
    assert status.due is True
    assert status.classes_left == 2
    assert status.message == "Fill your attendance of today 📝 (2 classes left)"


def test_not_due_at_other_minutes():
    service = ReminderService()
    status = service.check(3, 1, now=datetime(2026, 2, 4, 13, 1, tzinfo=timezone.utc))
    assert status.due is False


def test_all_marked_is_never_due():
    service = ReminderService()
    status = service.check(2, 2, now=datetime(2026, 2, 4, 13, 0, tzinfo=timezone.utc))
    assert status.due is False
    assert status.all_marked is True
    assert status.message == "Everyday do better than yesterday 💪"


def test_no_classes_today():
    status = ReminderService().check(0, 0, now=datetime(2026, 2, 4, 13, 0, tzinfo=timezone.utc))
    assert status.due is False
    assert status.all_marked is False


def test_single_class_left_wording():
    status = ReminderService().check(1, 0, now=datetime(2026, 2, 4, 9, 0, tzinfo=timezone.utc))
    assert status.message.endswith("(1 class left)")


def test_bad_configuration():
    with pytest.raises(ValidationError):
        ReminderService("6pm")
    with pytest.raises(ValidationError):
        ReminderService("18:30", "Mars/Olympus")
