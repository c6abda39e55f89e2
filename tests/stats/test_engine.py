from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.attendance_tracker.attendance_tracker.attendance.model import AttendanceRecord
from src.attendance_tracker.attendance_tracker.core.enums import AttendanceMark
from src.attendance_tracker.attendance_tracker.stats.engine import (
    attendance_status,
    calendar_marks,
    can_miss,
    goal_progress,
    overall_stats,
    percentage,
    streak,
    subject_stats,
    subject_trend,
)
from src.attendance_tracker.attendance_tracker.subjects.model import Subject

P, A, O = AttendanceMark.PRESENT, AttendanceMark.ABSENT, AttendanceMark.OFF


def _records(*items):
    """items: (date, mark) or (date, mark, subject_id)."""
    out = []
    for i, item in enumerate(items, start=1):
        day, mark = item[0], item[1]
        subject_id = item[2] if len(item) > 2 else 1
        out.append(AttendanceRecord(record_id=i, date=day, subject_id=subject_id, timetable_entry_id=i, mark=mark))
    return out


def _days(start: date, n: int):
    return [start + timedelta(days=i) for i in range(n)]


@pytest.mark.parametrize("attended", [0, 3, 10])
def test_zero_total_gives_zero_percentage_and_can_miss(attended):
    assert percentage(attended, 0) == 0.0
    assert can_miss(attended, 0) == 0


def test_percentage_clamps_attended_to_total():
    assert percentage(12, 10) == 100.0
    assert percentage(-1, 4) == 0.0


def test_can_miss_matches_simulation_boundaries():
    # 40/53 = 75.47% still fine, 40/54 = 74.07% is not
    assert can_miss(40, 50) == 3
    # exactly 75% today but 30/41 already drops below
    assert can_miss(30, 40) == 0
    # below threshold
    assert can_miss(29, 40) == 0
    assert can_miss(3, 3) == 1
    assert can_miss(4, 4) == 1
    assert can_miss(6, 6) == 2


def test_can_miss_custom_threshold():
    assert can_miss(9, 10, threshold=90) == 0
    assert can_miss(10, 10, threshold=50) == 10


def test_attendance_status_bands():
    assert attendance_status(85) == "excellent"
    assert attendance_status(84.9) == "good"
    assert attendance_status(75) == "good"
    assert attendance_status(74.99) == "critical"


def test_overall_stats_sums_subjects():
    subjects = [
        Subject(1, "Maths", "MA101", attended=20, total_classes=25),
        Subject(2, "Physics", "PH101", attended=20, total_classes=25),
    ]
    summary = overall_stats(subjects)
    assert (summary.attended, summary.total) == (40, 50)
    assert summary.percentage == pytest.approx(80.0)
    assert summary.can_miss == 3


def test_overall_stats_without_subjects():
    summary = overall_stats([])
    assert summary.to_dict() == {"attended": 0, "total": 0, "percentage": 0.0, "can_miss": 0}


def test_subject_stats_repairs_counters():
    stats = subject_stats(Subject(1, "Maths", "MA101", attended=7, total_classes=5))
    assert stats["attended"] == 5
    assert stats["percentage"] == 100.0
    assert stats["status"] == "excellent"


def test_streak_counts_consecutive_perfect_days_ending_today(today):
    days = _days(today - timedelta(days=2), 3)
    s = streak(_records(*[(d, P) for d in days]), today)
    assert (s.current, s.longest) == (3, 3)


def test_streak_still_alive_when_last_perfect_day_was_yesterday(today):
    days = _days(today - timedelta(days=3), 3)
    s = streak(_records(*[(d, P) for d in days]), today)
    assert (s.current, s.longest) == (3, 3)


def test_streak_resets_after_older_gap_but_keeps_longest(today):
    old_run = _days(today - timedelta(days=20), 4)
    recent = _days(today - timedelta(days=1), 2)
    s = streak(_records(*[(d, P) for d in old_run + recent]), today)
    assert s.current == 2
    assert s.longest == 4


def test_streak_is_zero_when_last_perfect_day_is_too_old(today):
    days = _days(today - timedelta(days=6), 3)
    s = streak(_records(*[(d, P) for d in days]), today)
    assert s.current == 0
    assert s.longest == 3


def test_streak_absence_breaks_the_day_and_off_is_ignored(today):
    records = _records(
        (today - timedelta(days=2), P),
        (today - timedelta(days=1), P),
        (today - timedelta(days=1), A),
        (today, P),
        (today, O),
    )
    s = streak(records, today)
    assert s.current == 1
    assert s.longest == 1


def test_streak_only_off_days_is_empty(today):
    assert streak(_records((today, O)), today).to_dict() == {"current": 0, "longest": 0}


def test_subject_trend_skips_off_and_sorts_by_date(today):
    records = _records(
        (today, P),
        (today - timedelta(days=3), P),
        (today - timedelta(days=2), A),
        (today - timedelta(days=1), O),
        (today, A, 2),
    )
    points = subject_trend(records, 1)
    assert [p["percentage"] for p in points] == [100.0, 50.0, 66.67]
    assert [p["class_number"] for p in points] == [1, 2, 3]


def test_calendar_marks_groups_dates(today):
    records = _records((today, P), (today - timedelta(days=1), A), (today - timedelta(days=2), O), (today, P, 2))
    marks = calendar_marks(records, 1)
    assert marks == {
        "present": [today.isoformat()],
        "absent": [(today - timedelta(days=1)).isoformat()],
        "off": [(today - timedelta(days=2)).isoformat()],
    }


def test_goal_progress():
    subjects = [
        Subject(1, "Maths", "MA101", attended=8, total_classes=10),
        Subject(2, "Physics", "PH101", attended=6, total_classes=10),
        Subject(3, "Art", "AR101"),
    ]
    progress = goal_progress(75, 70.0, subjects)
    assert progress.progress_to_goal == pytest.approx(70 / 75 * 100)
    assert progress.is_on_track is False
    assert progress.gap_to_goal == pytest.approx(5.0)
    # zero-class subjects count as meeting the goal and are never at risk
    assert progress.subjects_meeting_goal == 2
    assert [s["code"] for s in progress.at_risk] == ["PH101"]


def test_goal_progress_is_capped_at_100():
    progress = goal_progress(60, 90.0, [])
    assert progress.progress_to_goal == 100.0
    assert progress.is_on_track is True
    assert progress.gap_to_goal == 0.0
