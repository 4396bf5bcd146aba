"""Homework Rules — lenient student-id parsing and the submission gate.

Tests:
    - parse_student_ids accepts list, JSON string, CSV, single value, single-item list
    - Invalid or empty input raises ValidationFailedError on field student_ids
    - check_can_submit: submitted/graded → ALREADY_SUBMITTED, past due → DEADLINE_PASSED
"""

from datetime import datetime, timedelta, timezone

import pytest

from learnhub.core.errors import ValidationFailedError
from learnhub.core.homework_rules import (
    assignment_preview, check_can_submit, parse_student_ids,
)

NOW = datetime(2026, 5, 10, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value, expected", [
    ([1, 2, 3], [1, 2, 3]),
    (["4", "5"], [4, 5]),
    ("[6, 7]", [6, 7]),
    ("8,9, 10", [8, 9, 10]),
    ("11", [11]),
    (12, [12]),
    (["[13, 14]"], [13, 14]),
    (["15,16"], [15, 16]),
    ([1, 1, 2], [1, 2]),
])
def test_parse_student_ids_shapes(value, expected):
    assert parse_student_ids(value) == expected


@pytest.mark.parametrize("value", [None, [], "", "[]", "abc", [1, "x"], "1,two"])
def test_parse_student_ids_rejects_invalid(value):
    with pytest.raises(ValidationFailedError) as exc:
        parse_student_ids(value)
    assert exc.value.field == "student_ids"
    assert exc.value.http_status == 400


def test_pending_before_deadline_can_submit():
    assert check_can_submit("pending", NOW + timedelta(days=1), NOW) is None


@pytest.mark.parametrize("status", ["submitted", "graded"])
def test_already_submitted(status):
    err = check_can_submit(status, NOW + timedelta(days=1), NOW)
    assert err["error_code"] == "ALREADY_SUBMITTED"


def test_deadline_passed():
    err = check_can_submit("pending", NOW - timedelta(minutes=1), NOW)
    assert err["error_code"] == "DEADLINE_PASSED"


def test_naive_due_date_treated_as_utc():
    naive = (NOW + timedelta(hours=2)).replace(tzinfo=None)
    assert check_can_submit("pending", naive, NOW) is None


def test_assignment_preview_truncates_long_text():
    text = "x" * 80
    assert assignment_preview(text) == "x" * 50 + "..."
    assert assignment_preview("short") == "short"
    assert assignment_preview(None) == ""
