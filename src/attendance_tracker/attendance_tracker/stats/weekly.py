from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from ..common.datetime_utils import week_start
from ..subjects.model import Subject


@dataclass(frozen=True)
class WindowCounts:
    present: int = 0
    absent: int = 0
    off: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent

    @property
    def percentage(self) -> float:
        return self.present / self.total * 100 if self.total else 0.0

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "off": self.off,
            "total": self.total,
            "percentage": round(self.percentage, 2),
        }


@dataclass(frozen=True)
class WeeklyReport:
    week_start: date
    week_end: date
    this_week: WindowCounts
    last_week: WindowCounts
    trend: float
    daily: List[dict] = field(default_factory=list)
    subjects: List[dict] = field(default_factory=list)
    best_day: Optional[dict] = None
    worst_day: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "this_week": self.this_week.to_dict(),
            "last_week": self.last_week.to_dict(),
            "trend": round(self.trend, 2),
            "daily": self.daily,
            "subjects": self.subjects,
            "best_day": self.best_day,
            "worst_day": self.worst_day,
        }


def _count(records: Iterable) -> WindowCounts:
    present = absent = off = 0
    for r in records:
        if r.present is None:
            off += 1
        elif r.present:
            present += 1
        else:
            absent += 1
    return WindowCounts(present=present, absent=absent, off=off)


def _in_window(records: Iterable, start: date) -> list:
    end = start + timedelta(days=6)
    return [r for r in records if start <= r.date <= end]


def weekly_report(records: Sequence, subjects: Sequence[Subject], today: date) -> WeeklyReport:
    """This week versus last week, with weeks starting on Monday."""

    start = week_start(today)
    this_week_records = _in_window(records, start)
    last_week_records = _in_window(records, start - timedelta(days=7))

    this_week = _count(this_week_records)
    last_week = _count(last_week_records)

    daily: List[dict] = []
    for offset in range(7):
        day = start + timedelta(days=offset)
        counts = _count(r for r in this_week_records if r.date == day)
        daily.append(
            {
                "day": day.strftime("%a"),
                "date": day.isoformat(),
                "present": counts.present,
                "absent": counts.absent,
                "total": counts.total,
                "percentage": round(counts.percentage, 2),
            }
        )

    per_subject: List[dict] = []
    for s in subjects:
        counts = _count(r for r in this_week_records if r.subject_id == s.subject_id)
        if counts.total == 0:
            continue
        per_subject.append(
            {
                "id": s.subject_id,
                "name": s.name,
                "code": s.code,
                "present": counts.present,
                "absent": counts.absent,
                "total": counts.total,
                "percentage": round(counts.percentage, 2),
            }
        )
    per_subject.sort(key=lambda item: item["percentage"], reverse=True)

    active_days = [d for d in daily if d["total"] > 0]
    best_day = max(active_days, key=lambda d: d["percentage"]) if active_days else None
    worst_day = min(active_days, key=lambda d: d["percentage"]) if active_days else None

    return WeeklyReport(
        week_start=start,
        week_end=start + timedelta(days=6),
        this_week=this_week,
        last_week=last_week,
        trend=this_week.percentage - last_week.percentage,
        daily=daily,
        subjects=per_subject,
        best_day=best_day,
        worst_day=worst_day,
    )
