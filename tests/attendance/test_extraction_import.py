from __future__ import annotations

import pytest

from src.attendance_tracker.attendance_tracker.assistant.schemas import ExtractionFailure, TimetableExtraction
from src.attendance_tracker.attendance_tracker.core.exceptions import ValidationError


def test_apply_extraction_creates_subjects_before_entries(db):
    c = db.coordinator()
    c.add_subject("Mathematics", "MA101")
    outcome = TimetableExtraction.model_validate(
        {
            "subjects": [{"name": "Mathematics", "code": "ma101"}, {"name": "Physics", "code": "PH101"}],
            "timetable": [
                {"day": "Monday", "subjectCode": "MA101", "time": "09:00"},
                {"day": "Monday", "subjectCode": "PH101", "time": "10:00"},
                {"day": "Tuesday", "subjectCode": "XX000", "time": "10:00"},
            ],
        }
    )

    applied = c.apply_extraction(outcome)

    assert [s.code for s in applied["subjects"]] == ["PH101"]
    assert len(applied["entries"]) == 2
    assert {s.code for s in db.coordinator().state.subjects} == {"MA101", "PH101"}


def test_apply_extraction_error_outcome(db):
    with pytest.raises(ValidationError, match="blurry"):
        db.coordinator().apply_extraction(ExtractionFailure(message="blurry"))
