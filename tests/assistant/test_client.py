from __future__ import annotations

import base64
import io
import json

import pytest
import requests
from PIL import Image

from src.attendance_tracker.attendance_tracker.assistant import client as client_module
from src.attendance_tracker.attendance_tracker.assistant.client import AssistantClient, normalize_image, system_prompt
from src.attendance_tracker.attendance_tracker.assistant.schemas import ExtractionFailure, TimetableExtraction
from src.attendance_tracker.attendance_tracker.core.enums import Weekday
from src.attendance_tracker.attendance_tracker.core.exceptions import (
    AIServiceError,
    InvalidInputError,
    PaymentRequiredError,
    RateLimitedError,
)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not None else ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _png_b64(fmt: str = "PNG") -> str:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "white").save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _tool_call(arguments) -> dict:
    return {
        "choices": [
            {"message": {"tool_calls": [{"function": {"name": "extract_timetable", "arguments": arguments}}]}}
        ]
    }


@pytest.fixture
def calls(monkeypatch):
    """Replace requests.post; tests push the next response onto ``calls['responses']``."""
    seen = {"requests": [], "responses": []}

    def fake_post(url, json=None, headers=None, timeout=None):
        seen["requests"].append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        nxt = seen["responses"].pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    monkeypatch.setattr(client_module.requests, "post", fake_post)
    return seen


@pytest.fixture
def assistant():
    return AssistantClient(api_key="test-key", gateway_url="https://gateway.test/v1/chat/completions", timeout=5)


def test_normalize_image_accepts_raw_base64_and_data_urls():
    raw = _png_b64()
    assert normalize_image(raw).startswith("data:image/png;base64,")
    assert normalize_image(f"data:image/png;base64,{raw}") == f"data:image/png;base64,{raw}"


@pytest.mark.parametrize(
    "value",
    [
        "",
        "not base64 at all!",
        "data:image/bmp;base64,AAAA",
        base64.b64encode(b"plain text, not an image").decode(),
    ],
)
def test_normalize_image_rejects_bad_input(value):
    with pytest.raises(InvalidInputError):
        normalize_image(value)


def test_normalize_image_rejects_oversized(monkeypatch):
    monkeypatch.setattr(client_module, "MAX_IMAGE_BYTES", 10)
    with pytest.raises(InvalidInputError):
        normalize_image(_png_b64())


def test_extract_timetable_drops_unknown_subject_codes(assistant, calls):
    calls["responses"].append(
        FakeResponse(
            200,
            _tool_call(
                json.dumps(
                    {
                        "subjects": [{"name": "Mathematics", "code": "MA101"}],
                        "timetable": [
                            {"day": "Monday", "subjectCode": "MA101", "time": "9:00"},
                            {"day": "Tuesday", "subjectCode": "ZZ999", "time": "10:00"},
                        ],
                    }
                )
            ),
        )
    )

    outcome = assistant.extract_timetable(_png_b64())

    assert isinstance(outcome, TimetableExtraction)
    assert outcome.kind == "subjects_and_timetable"
    assert [(r.day, r.subjectCode, r.time) for r in outcome.timetable] == [(Weekday.MONDAY, "MA101", "09:00")]

    sent = calls["requests"][0]
    assert sent["headers"]["Authorization"] == "Bearer test-key"
    assert sent["json"]["model"] == "google/gemini-2.5-flash"
    assert sent["json"]["tool_choice"]["function"]["name"] == "extract_timetable"
    assert sent["timeout"] == 5


@pytest.mark.parametrize(
    "payload",
    [
        {"choices": [{"message": {"content": "I see a timetable"}}]},
        _tool_call("{broken json"),
        _tool_call(json.dumps({"subjects": [{"name": "Maths"}], "timetable": []})),
        _tool_call(json.dumps({"subjects": [], "timetable": [{"day": "Moonday", "subjectCode": "A", "time": "09:00"}]})),
    ],
)
def test_extract_timetable_malformed_payload_is_an_error_outcome(assistant, calls, payload):
    calls["responses"].append(FakeResponse(200, payload))
    outcome = assistant.extract_timetable(_png_b64())
    assert isinstance(outcome, ExtractionFailure)
    assert outcome.kind == "error"


@pytest.mark.parametrize(
    "status,error",
    [(429, RateLimitedError), (402, PaymentRequiredError), (500, AIServiceError)],
)
def test_gateway_status_codes(assistant, calls, status, error):
    calls["responses"].append(FakeResponse(status, {"error": "nope"}))
    with pytest.raises(error):
        assistant.chat([{"role": "user", "content": "hi"}])


def test_transport_failure(assistant, calls):
    calls["responses"].append(requests.ConnectionError("down"))
    with pytest.raises(AIServiceError):
        assistant.chat([{"role": "user", "content": "hi"}])


def test_no_retry_after_rate_limit(assistant, calls):
    calls["responses"].append(FakeResponse(429, {}))
    with pytest.raises(RateLimitedError):
        assistant.extract_timetable(_png_b64())
    assert len(calls["requests"]) == 1


def test_chat_prepends_context_and_returns_reply(assistant, calls):
    calls["responses"].append(FakeResponse(200, {"choices": [{"message": {"content": "Attend Maths."}}]}))
    subjects = [{"name": "Maths", "code": "MA101", "attended": 3, "total_classes": 4, "percentage": 75.0}]

    reply = assistant.chat([{"role": "user", "content": "Can I skip?"}], timetable=[{"id": 1}], subjects=subjects)

    assert reply == "Attend Maths."
    messages = calls["requests"][0]["json"]["messages"]
    assert messages[0]["role"] == "system"
    assert "Current timetable: 1 entries" in messages[0]["content"]
    assert "Maths (MA101): 3/4 attended, 75.0%" in messages[0]["content"]
    assert messages[1] == {"role": "user", "content": "Can I skip?"}


@pytest.mark.parametrize(
    "messages,kwargs",
    [
        ([], {}),
        ([{"role": "user", "content": "x"}] * 51, {}),
        ([{"role": "user"}], {}),
        ([{"role": "user", "content": ""}], {}),
        ([{"role": "user", "content": 42}], {}),
        ([{"role": "user", "content": "x" * 5001}], {}),
        ([{"role": "user", "content": "x"}], {"timetable": [{}] * 101}),
        ([{"role": "user", "content": "x"}], {"subjects": [{}] * 51}),
    ],
)
def test_chat_input_validation(assistant, calls, messages, kwargs):
    with pytest.raises(InvalidInputError):
        assistant.chat(messages, **kwargs)
    assert calls["requests"] == []


def test_missing_api_key_is_a_service_error(calls):
    with pytest.raises(AIServiceError):
        AssistantClient(api_key="").chat([{"role": "user", "content": "hi"}])


def test_system_prompt_without_data():
    prompt = system_prompt([], [])
    assert "Current timetable: No timetable" in prompt
    assert "Current subjects: No subjects" in prompt
