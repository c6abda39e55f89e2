from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SharedEntry:
    day: str
    subject_code: str
    subject_name: str
    time: str

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "subject_code": self.subject_code,
            "subject_name": self.subject_name,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SharedEntry":
        return cls(
            day=str(data.get("day", "")),
            subject_code=str(data.get("subject_code", "")),
            subject_name=str(data.get("subject_name", "")),
            time=str(data.get("time", "")),
        )


@dataclass(frozen=True)
class SharedCode:
    code: str
    user_id: int
    entries: List[SharedEntry] = field(default_factory=list)
