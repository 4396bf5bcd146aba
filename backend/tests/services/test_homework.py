"""Homework — assignment fan-out, submission gates, grading and review.

Invariants:
    - Every assigned student gets one pending assignment and a homework_assigned push
    - student_ids accepted as repeated form fields, JSON array or CSV
    - Submit once, before the due date (409 / 400)
    - Only the creating teacher grades or reviews (403); other teachers read 404
    - Attachments over 10 MB are refused before anything reaches storage
    - A grade is kept even when the student's notification cannot be written
"""

from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from learnhub.core.clock import utc_now
from learnhub.core.upload_rules import MAX_DOCUMENT_BYTES
from learnhub.models.homework import HomeworkAssignment
from learnhub.models.notification import Notification
from learnhub.services.notification_dispatcher import NotificationDispatcher


def _due(days: int = 7) -> str:
    return (utc_now() + timedelta(days=days)).isoformat()


async def _create(client, headers, student_ids, due_date=None, files=None, **fields):
    data = {"title": "Worksheet 1", "due_date": due_date or _due(), "student_ids": student_ids}
    data.update(fields)
    return await client.post("/api/v1/homework", data=data, files=files, headers=headers)


async def _assignment_for(client, headers):
    res = await client.get("/api/v1/homework/student", headers=headers)
    assert res.status_code == 200
    return res.json()[0]


# ─── Create ──────────────────────────────────────────────────────

async def test_create_with_csv_ids(client, teacher, student, make_user, auth_headers, fresh_db):
    other = await make_user("student")
    res = await _create(
        client, auth_headers(teacher), f"{student.id},{other.id}",
        description="Chapter 3 exercises",
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["created_by"]["id"] == teacher.id
    assert sorted(a["student"]["id"] for a in body["assignments"]) == sorted([student.id, other.id])
    assert {a["status"] for a in body["assignments"]} == {"pending"}

    async with fresh_db() as db:
        types = (await db.execute(select(Notification.type))).scalars().all()
    assert types == ["homework_assigned"]


async def test_create_with_repeated_fields_and_file(client, teacher, student, make_user, auth_headers, fake_storage):
    other = await make_user("student")
    res = await _create(
        client, auth_headers(teacher), [str(student.id), str(other.id)],
        files={"file": ("sheet.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert res.status_code == 201, res.text
    assert len(res.json()["assignments"]) == 2
    assert res.json()["file_url"] == "https://files.test/homeworks/object-1"
    assert list(fake_storage.objects) == ["homeworks/object-1"]


async def test_create_with_json_array_ids(client, teacher, student, auth_headers):
    res = await _create(client, auth_headers(teacher), f"[{student.id}]")
    assert res.status_code == 201
    assert [a["student"]["id"] for a in res.json()["assignments"]] == [student.id]


async def test_create_with_oversized_file_is_rejected(client, teacher, student, auth_headers, fake_storage, fresh_db):
    res = await _create(
        client, auth_headers(teacher), str(student.id),
        files={"file": ("scan.pdf", b"\x00" * (MAX_DOCUMENT_BYTES + 1), "application/pdf")},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "FILE_TOO_LARGE"
    assert fake_storage.objects == {}
    async with fresh_db() as db:
        assert (await db.execute(select(HomeworkAssignment))).scalars().all() == []


async def test_create_unknown_student_is_404(client, teacher, student, auth_headers):
    res = await _create(client, auth_headers(teacher), f"{student.id},9999")
    assert res.status_code == 404


async def test_create_invalid_ids_is_400(client, teacher, auth_headers):
    res = await _create(client, auth_headers(teacher), "abc")
    assert res.status_code == 400


async def test_create_invalid_due_date_is_400(client, teacher, student, auth_headers):
    res = await _create(client, auth_headers(teacher), str(student.id), due_date="next week")
    assert res.status_code == 400


async def test_student_cannot_create(client, student, auth_headers):
    res = await _create(client, auth_headers(student), str(student.id))
    assert res.status_code == 403


# ─── Submit ──────────────────────────────────────────────────────

async def test_submit_once(client, teacher, student, auth_headers):
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))
    assert assignment["homework"]["title"] == "Worksheet 1"
    url = f"/api/v1/homework/assignment/{assignment['id']}/submit"

    res = await client.post(url, data={"submission_text": "x = 4"}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["status"] == "submitted"
    assert res.json()["submitted_at"] is not None

    again = await client.post(url, data={"submission_text": "x = 5"}, headers=auth_headers(student))
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_SUBMITTED"


async def test_submit_after_deadline_rejected(client, teacher, student, auth_headers):
    await _create(client, auth_headers(teacher), str(student.id), due_date=_due(-1))
    assignment = await _assignment_for(client, auth_headers(student))

    res = await client.post(
        f"/api/v1/homework/assignment/{assignment['id']}/submit",
        data={"submission_text": "late"}, headers=auth_headers(student),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "DEADLINE_PASSED"


async def test_cannot_read_someone_elses_assignment(client, teacher, student, make_user, auth_headers):
    outsider = await make_user("student")
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))

    res = await client.get(
        f"/api/v1/homework/assignment/{assignment['id']}", headers=auth_headers(outsider),
    )
    assert res.status_code == 404


# ─── Grade / review ──────────────────────────────────────────────

async def test_grade_notifies_student(client, teacher, student, auth_headers):
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))

    res = await client.post(
        f"/api/v1/homework/assignment/{assignment['id']}/grade",
        json={"grade": "A", "feedback": "Nice work"}, headers=auth_headers(teacher),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "graded"
    assert body["grade"] == "A"
    assert body["graded_at"] is not None

    inbox = (await client.get("/api/v1/notifications", headers=auth_headers(student))).json()
    assert inbox["notifications"][0]["type"] == "homework_graded"


async def test_grade_kept_when_notification_cannot_be_written(
    client, teacher, student, auth_headers, fresh_db, monkeypatch,
):
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))

    async def connection_lost(self, user_ids):
        raise OperationalError("SELECT users.id FROM users", {}, Exception("connection lost"))

    monkeypatch.setattr(NotificationDispatcher, "_ensure_users_exist", connection_lost)
    res = await client.post(
        f"/api/v1/homework/assignment/{assignment['id']}/grade",
        json={"grade": "B"}, headers=auth_headers(teacher),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "graded"

    async with fresh_db() as db:
        stored = await db.get(HomeworkAssignment, assignment["id"])
        assert stored.grade == "B"
        types = (await db.execute(select(Notification.type))).scalars().all()
    assert types == ["homework_assigned"]


async def test_grade_by_other_teacher_forbidden(client, teacher, student, make_user, auth_headers):
    other = await make_user("teacher")
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))

    res = await client.post(
        f"/api/v1/homework/assignment/{assignment['id']}/grade",
        json={"grade": "F"}, headers=auth_headers(other),
    )
    assert res.status_code == 403


async def test_review_pending_clears_grade(client, teacher, student, auth_headers):
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))
    url = f"/api/v1/homework/assignment/{assignment['id']}"
    await client.post(f"{url}/grade", json={"grade": "B"}, headers=auth_headers(teacher))

    res = await client.put(
        f"{url}/review", json={"status": "pending", "feedback": "Show your steps"},
        headers=auth_headers(teacher),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "pending"
    assert body["grade"] is None
    assert body["graded_at"] is None
    assert body["feedback"] == "Show your steps"


async def test_review_graded_requires_grade(client, teacher, student, auth_headers):
    await _create(client, auth_headers(teacher), str(student.id))
    assignment = await _assignment_for(client, auth_headers(student))

    res = await client.put(
        f"/api/v1/homework/assignment/{assignment['id']}/review",
        json={"status": "graded"}, headers=auth_headers(teacher),
    )
    assert res.status_code == 400


# ─── Teacher reads / delete ──────────────────────────────────────

async def test_other_teacher_cannot_see_homework(client, teacher, student, make_user, auth_headers):
    other = await make_user("teacher")
    created = (await _create(client, auth_headers(teacher), str(student.id))).json()

    mine = await client.get(f"/api/v1/homework/{created['id']}", headers=auth_headers(teacher))
    theirs = await client.get(f"/api/v1/homework/{created['id']}", headers=auth_headers(other))
    assert mine.status_code == 200
    assert theirs.status_code == 404

    listing = (await client.get("/api/v1/homework/teacher", headers=auth_headers(other))).json()
    assert listing == []


async def test_delete_homework_removes_assignments(client, teacher, student, auth_headers):
    created = (await _create(client, auth_headers(teacher), str(student.id))).json()

    res = await client.delete(f"/api/v1/homework/{created['id']}", headers=auth_headers(teacher))
    assert res.status_code == 204

    assignments = (await client.get("/api/v1/homework/student", headers=auth_headers(student))).json()
    assert assignments == []
