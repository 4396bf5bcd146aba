"""Homework Rules — student-id parsing, submission and review checks.

Invariants:
    - parse_student_ids accepts list, JSON-array string, comma string or single value
    - parse_student_ids raises ValidationFailedError on any non-integer entry or empty result
    - check_can_submit is PURE: returns an error descriptor, does NOT mutate the assignment

Design Decisions:
    - Lenient id parsing: multipart form clients send arrays as repeated fields,
      JSON strings or CSV depending on the HTTP library
"""

import json
from datetime import datetime
from typing import Any

from learnhub.core.clock import ensure_utc
from learnhub.core.domain_types import HomeworkStatus
from learnhub.core.errors import ValidationFailedError

NOTIFICATION_PREVIEW_CHARS: int = 50


def _to_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailedError(
            f"Invalid student ID: {value}", "student_ids",
        )


def parse_student_ids(value: Any) -> list[int]:
    """Normalize the many shapes clients send student ids in."""
    if value is None:
        raise ValidationFailedError(
            "At least one student must be assigned to the homework", "student_ids",
        )

    if isinstance(value, (list, tuple)):
        if len(value) == 1 and isinstance(value[0], str):
            return parse_student_ids(value[0])
        ids = [_to_int(v) for v in value]
    elif isinstance(value, int):
        ids = [value]
    else:
        text = str(value).strip()
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            ids = [_to_int(v) for v in parsed]
        elif isinstance(parsed, int):
            ids = [parsed]
        elif "," in text:
            ids = [_to_int(part) for part in text.split(",") if part.strip()]
        elif text:
            ids = [_to_int(text)]
        else:
            ids = []

    if not ids:
        raise ValidationFailedError(
            "At least one student must be assigned to the homework", "student_ids",
        )
    return list(dict.fromkeys(ids))


def check_can_submit(
    status: str, due_date: datetime, now: datetime,
) -> dict | None:
    """Submission gate: once per assignment, before the deadline."""
    if status in (HomeworkStatus.SUBMITTED.value, HomeworkStatus.GRADED.value):
        return {
            "error_code": "ALREADY_SUBMITTED",
            "message": "Assignment already submitted",
        }
    if now > ensure_utc(due_date):
        return {
            "error_code": "DEADLINE_PASSED",
            "message": "Assignment deadline has passed",
        }
    return None


def assignment_preview(description: str | None) -> str:
    """Short body for the homework_assigned push."""
    text = (description or "").strip()
    if len(text) <= NOTIFICATION_PREVIEW_CHARS:
        return text
    return text[:NOTIFICATION_PREVIEW_CHARS] + "..."
