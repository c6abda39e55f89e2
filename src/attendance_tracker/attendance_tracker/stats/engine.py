from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.constants import EXCELLENT_PERCENTAGE, MIN_ATTENDANCE_PERCENTAGE
from ..subjects.model import Subject


@dataclass(frozen=True)
class AttendanceSummary:
    attended: int
    total: int
    percentage: float
    can_miss: int

    def to_dict(self) -> dict:
        return {
            "attended": self.attended,
            "total": self.total,
            "percentage": round(self.percentage, 2),
            "can_miss": self.can_miss,
        }


@dataclass(frozen=True)
class Streak:
    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict:
        return {"current": self.current, "longest": self.longest}


@dataclass(frozen=True)
class GoalProgress:
    target_percentage: int
    overall_percentage: float
    progress_to_goal: float
    is_on_track: bool
    gap_to_goal: float
    subjects_meeting_goal: int
    total_subjects: int
    at_risk: List[dict]

    def to_dict(self) -> dict:
        return {
            "target_percentage": self.target_percentage,
            "overall_percentage": round(self.overall_percentage, 2),
            "progress_to_goal": round(self.progress_to_goal, 2),
            "is_on_track": self.is_on_track,
            "gap_to_goal": round(self.gap_to_goal, 2),
            "subjects_meeting_goal": self.subjects_meeting_goal,
            "total_subjects": self.total_subjects,
            "at_risk": list(self.at_risk),
        }


def _clamp(attended: int, total: int) -> tuple[int, int]:
    total = max(int(total), 0)
    attended = min(max(int(attended), 0), total)
    return attended, total


def percentage(attended: int, total: int) -> float:
    """Attendance percentage, 0.0 when no class has been counted yet."""
    attended, total = _clamp(attended, total)
    if total == 0:
        return 0.0
    return attended / total * 100


def can_miss(attended: int, total: int, threshold: int = MIN_ATTENDANCE_PERCENTAGE) -> int:
    """How many further classes can be missed while staying at or above ``threshold``.

    Simulates one missed class at a time; ``attended * 100 >= threshold * total``
    is the integer form of ``attended / total * 100 >= threshold``.
    """
    attended, total = _clamp(attended, total)
    if total == 0 or attended * 100 < threshold * total:
        return 0

    missed = 0
    while attended * 100 >= threshold * (total + missed + 1):
        missed += 1
    return missed


def attendance_status(pct: float) -> str:
    if pct >= EXCELLENT_PERCENTAGE:
        return "excellent"
    if pct >= MIN_ATTENDANCE_PERCENTAGE:
        return "good"
    return "critical"


def overall_stats(subjects: Iterable[Subject]) -> AttendanceSummary:
    attended = 0
    total = 0
    for s in subjects:
        a, t = _clamp(s.attended, s.total_classes)
        attended += a
        total += t
    return AttendanceSummary(
        attended=attended,
        total=total,
        percentage=percentage(attended, total),
        can_miss=can_miss(attended, total),
    )


def subject_stats(subject: Subject) -> dict:
    attended, total = _clamp(subject.attended, subject.total_classes)
    pct = percentage(attended, total)
    return {
        **subject.to_dict(),
        "attended": attended,
        "total_classes": total,
        "percentage": round(pct, 2),
        "can_miss": can_miss(attended, total),
        "status": attendance_status(pct),
    }


def _for_subject(records, subject_id: Optional[int] = None):
    for r in records:
        if subject_id is not None and r.subject_id != subject_id:
            continue
        yield r


def subject_trend(records: Sequence, subject_id: int) -> List[dict]:
    """Cumulative percentage after each non-Off record of a subject, in date order."""
    points: List[dict] = []
    attended = 0
    total = 0
    for r in sorted(_for_subject(records, subject_id), key=lambda r: r.date):
        if r.present is None:
            continue
        total += 1
        if r.present:
            attended += 1
        points.append(
            {
                "class_number": total,
                "date": r.date.isoformat(),
                "percentage": round(attended / total * 100, 2),
            }
        )
    return points


def calendar_marks(records: Sequence, subject_id: int) -> Dict[str, List[str]]:
    marks: Dict[str, List[str]] = {"present": [], "absent": [], "off": []}
    for r in sorted(_for_subject(records, subject_id), key=lambda r: r.date):
        marks[r.mark.value].append(r.date.isoformat())
    return marks


def _perfect_dates(records: Iterable) -> List[date]:
    by_date: Dict[date, list] = defaultdict(lambda: [0, 0])
    for r in records:
        if r.present is None:
            continue
        bucket = by_date[r.date]
        bucket[1] += 1
        if r.present:
            bucket[0] += 1
    return sorted(d for d, (attended, total) in by_date.items() if total > 0 and attended == total)


def streak(records: Iterable, today: date) -> Streak:
    """Consecutive calendar days on which every counted class was attended.

    The current streak is alive only while its most recent perfect day is
    today or yesterday.
    """
    perfect = _perfect_dates(records)
    if not perfect:
        return Streak()

    current = 0
    most_recent = perfect[-1]
    if most_recent in (today, today - timedelta(days=1)):
        expected = most_recent
        for d in reversed(perfect):
            if d != expected:
                break
            current += 1
            expected = d - timedelta(days=1)

    longest = 0
    run = 0
    previous: Optional[date] = None
    for d in perfect:
        run = run + 1 if previous is not None and d - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = d

    return Streak(current=current, longest=longest)


def goal_progress(target_percentage: int, overall_pct: float, subjects: Sequence[Subject]) -> GoalProgress:
    target = int(target_percentage)
    progress = min(overall_pct / target * 100, 100.0) if target > 0 else 100.0

    meeting = 0
    at_risk: List[dict] = []
    for s in subjects:
        if s.total_classes <= 0:
            meeting += 1
            continue
        pct = percentage(s.attended, s.total_classes)
        if pct >= target:
            meeting += 1
        elif pct > 0:
            at_risk.append({"id": s.subject_id, "name": s.name, "code": s.code, "percentage": round(pct, 2)})

    return GoalProgress(
        target_percentage=target,
        overall_percentage=overall_pct,
        progress_to_goal=progress,
        is_on_track=overall_pct >= target,
        gap_to_goal=max(target - overall_pct, 0.0),
        subjects_meeting_goal=meeting,
        total_subjects=len(subjects),
        at_risk=at_risk,
    )
