from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subject:
    """Domain entity: a subject with its aggregate attendance counters.

    ``attended`` and ``total_classes`` mirror the sums of the subject's non-Off
    attendance records and always satisfy ``0 <= attended <= total_classes``.
    """

    subject_id: int
    name: str
    code: str
    attended: int = 0
    total_classes: int = 0

    def with_counts(self, attended: int, total_classes: int) -> "Subject":
        total_classes = max(int(total_classes), 0)
        attended = min(max(int(attended), 0), total_classes)
        return Subject(
            subject_id=self.subject_id,
            name=self.name,
            code=self.code,
            attended=attended,
            total_classes=total_classes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.subject_id,
            "name": self.name,
            "code": self.code,
            "attended": self.attended,
            "total_classes": self.total_classes,
        }
