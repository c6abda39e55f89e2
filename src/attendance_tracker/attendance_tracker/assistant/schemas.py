"""
Pydantic schemas for the AI gateway payloads.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.datetime_utils import parse_hhmm
from ..core.constants import (
    MAX_CHAT_CONTENT_LENGTH,
    MAX_CHAT_MESSAGES,
    MAX_CHAT_SUBJECTS,
    MAX_CHAT_TIMETABLE_ENTRIES,
)
from ..core.enums import Weekday
from ..core.exceptions import ValidationError


# ---- Extraction ----
class ExtractedSubject(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)

    @field_validator("name", "code")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ExtractedSlot(BaseModel):
    day: Weekday
    subjectCode: str = Field(min_length=1)
    time: str

    @field_validator("subjectCode")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        return value.strip()

    @field_validator("time")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        try:
            return parse_hhmm(value)
        except ValidationError as e:
            raise ValueError(str(e))


class TimetableExtraction(BaseModel):
    kind: Literal["subjects_and_timetable"] = "subjects_and_timetable"
    subjects: List[ExtractedSubject] = Field(default_factory=list)
    timetable: List[ExtractedSlot] = Field(default_factory=list)

    def reconciled(self) -> "TimetableExtraction":
        """Drop timetable rows whose subject code names no extracted subject."""
        known = {s.code.lower() for s in self.subjects}
        rows = [row for row in self.timetable if row.subjectCode.lower() in known]
        return TimetableExtraction(subjects=list(self.subjects), timetable=rows)


class ExtractionFailure(BaseModel):
    kind: Literal["error"] = "error"
    message: str


ExtractionOutcome = Annotated[Union[TimetableExtraction, ExtractionFailure], Field(discriminator="kind")]


# ---- Chat ----
class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1, max_length=MAX_CHAT_CONTENT_LENGTH)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1, max_length=MAX_CHAT_MESSAGES)
    timetable: List[Any] = Field(default_factory=list, max_length=MAX_CHAT_TIMETABLE_ENTRIES)
    subjects: List[Any] = Field(default_factory=list, max_length=MAX_CHAT_SUBJECTS)
