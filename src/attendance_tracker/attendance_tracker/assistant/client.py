from __future__ import annotations

import base64
import binascii
import io
import json
import logging
import re
from typing import Any, List, Optional, Sequence

import pydantic
import requests
from PIL import Image, UnidentifiedImageError

from ..core.constants import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES
from ..core.exceptions import AIServiceError, InvalidInputError, PaymentRequiredError, RateLimitedError
from .schemas import ChatRequest, ExtractionFailure, ExtractionOutcome, TimetableExtraction

log = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"

EXTRACTION_PROMPT = (
    "Analyze this timetable image and extract all the information. Identify subjects with their codes, "
    "days, and time slots. Return the complete timetable structure."
)

EXTRACTION_TOOL = {
    "type": "function",
    "function": {
        "name": "extract_timetable",
        "description": "Extract timetable information from the image",
        "parameters": {
            "type": "object",
            "properties": {
                "subjects": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string", "description": "Full subject name"},
                            "code": {"type": "string", "description": "Subject code or abbreviation"},
                        },
                        "required": ["name", "code"],
                        "additionalProperties": False,
                    },
                },
                "timetable": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "day": {
                                "type": "string",
                                "enum": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
                                "description": "Day of the week",
                            },
                            "subjectCode": {"type": "string", "description": "Subject code matching the subjects array"},
                            "time": {"type": "string", "description": "Time in HH:MM format (24-hour)"},
                        },
                        "required": ["day", "subjectCode", "time"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["subjects", "timetable"],
            "additionalProperties": False,
        },
    },
}

_DATA_URL_RE = re.compile(r"^data:image/([a-zA-Z0-9.+-]+);base64,(.*)$", re.DOTALL)


def normalize_image(image_data: str) -> str:
    """Validate a base64 image (raw or data URL) and return it as a data URL."""

    if not isinstance(image_data, str) or not image_data.strip():
        raise InvalidInputError("Please upload an image")

    declared: Optional[str] = None
    encoded = image_data.strip()
    match = _DATA_URL_RE.match(encoded)
    if match:
        declared = match.group(1).lower()
        encoded = match.group(2)
        if declared not in ALLOWED_IMAGE_TYPES:
            raise InvalidInputError("Unsupported image type")

    if len(encoded) * 3 // 4 > MAX_IMAGE_BYTES + 3:
        raise InvalidInputError("Image must be 10MB or smaller")
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Image is not valid base64 data")
    if len(raw) > MAX_IMAGE_BYTES:
        raise InvalidInputError("Image must be 10MB or smaller")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            actual = (img.format or "").lower()
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidInputError("Uploaded file is not a readable image")
    if actual not in ALLOWED_IMAGE_TYPES:
        raise InvalidInputError("Unsupported image type")

    return f"data:image/{declared or actual};base64,{encoded}"


def system_prompt(timetable: Sequence[Any], subjects: Sequence[Any]) -> str:
    lines = [
        "You are an intelligent attendance assistant. You have access to the student's timetable and attendance data.",
        "",
        f"Current timetable: {f'{len(timetable)} entries' if timetable else 'No timetable'}",
        f"Current subjects: {f'{len(subjects)} subjects' if subjects else 'No subjects'}",
    ]
    for s in subjects:
        if isinstance(s, dict) and "name" in s:
            lines.append(
                f"- {s.get('name')} ({s.get('code', '')}): {s.get('attended', 0)}/{s.get('total_classes', 0)} attended"
                + (f", {s['percentage']}%" if "percentage" in s else "")
            )
    lines += [
        "",
        "Help the student with questions about:",
        "- Which classes to attend or bunk",
        "- Current attendance percentages",
        "- How many classes they can miss while maintaining 75% attendance",
        "- Recommendations based on their attendance status",
        "- Understanding their timetable",
        "",
        "Be concise, helpful, and provide specific advice based on their actual data.",
    ]
    return "\n".join(lines)


class AssistantClient:
    """Client for an OpenAI-compatible chat-completions gateway."""

    def __init__(
        self,
        *,
        api_key: str,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60,
    ):
        self._api_key = api_key
        self._gateway_url = gateway_url
        self._model = model
        self._timeout = timeout

    def _post(self, payload: dict) -> dict:
        if not self._api_key:
            raise AIServiceError("AI service is not configured")

        try:
            resp = requests.post(
                self._gateway_url,
                json={"model": self._model, **payload},
                headers={"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            log.error("AI gateway unreachable: %s", e)
            raise AIServiceError("Unable to reach the AI service") from e

        if resp.status_code == 429:
            raise RateLimitedError("Rate limit exceeded. Please try again later.")
        if resp.status_code == 402:
            raise PaymentRequiredError("Payment required. Please add credits to your workspace.")
        if not resp.ok:
            log.error("AI gateway error: %s %s", resp.status_code, resp.text[:500])
            raise AIServiceError("Unable to process request")

        try:
            return resp.json()
        except ValueError as e:
            raise AIServiceError("AI service returned an invalid response") from e

    def extract_timetable(self, image_data: str) -> ExtractionOutcome:
        data_url = normalize_image(image_data)
        data = self._post(
            {
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                "tools": [EXTRACTION_TOOL],
                "tool_choice": {"type": "function", "function": {"name": "extract_timetable"}},
            }
        )

        try:
            arguments = data["choices"][0]["message"]["tool_calls"][0]["function"]["arguments"]
        except (KeyError, IndexError, TypeError):
            log.warning("Extraction response carried no tool call")
            return ExtractionFailure(message="Could not find a timetable in this image")

        try:
            if isinstance(arguments, str):
                arguments = json.loads(arguments)
            extraction = TimetableExtraction.model_validate(arguments)
        except (ValueError, pydantic.ValidationError) as e:
            log.warning("Malformed extraction payload: %s", e)
            return ExtractionFailure(message="The timetable in this image could not be read")

        reconciled = extraction.reconciled()
        dropped = len(extraction.timetable) - len(reconciled.timetable)
        if dropped:
            log.info("Dropped %s extracted rows with unknown subject codes", dropped)
        return reconciled

    def chat(
        self,
        messages: List[dict],
        timetable: Optional[Sequence[Any]] = None,
        subjects: Optional[Sequence[Any]] = None,
    ) -> str:
        try:
            request = ChatRequest.model_validate(
                {"messages": messages, "timetable": list(timetable or []), "subjects": list(subjects or [])}
            )
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first.get("loc", ()))
            raise InvalidInputError(f"Invalid chat request ({where}): {first.get('msg')}")

        context = {"role": "system", "content": system_prompt(request.timetable, request.subjects)}
        data = self._post({"messages": [context, *(m.model_dump() for m in request.messages)]})
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise AIServiceError("AI service returned an empty reply")
        if not isinstance(content, str):
            raise AIServiceError("AI service returned an empty reply")
        return content
