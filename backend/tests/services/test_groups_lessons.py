"""Groups & Lessons — group membership, lesson access and video uploads.

Invariants:
    - Unknown student ids on group create are ignored; linked students get a group_invite
    - Lesson readers are the creator or students of the lesson's group
    - Only the creator uploads/removes videos; a new upload deletes the old object
      only once it is stored, so a failed upload keeps the current video
    - A notification that cannot be written never fails the group or lesson request
    - Videos outside the MIME whitelist are rejected before storage is touched
"""

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from learnhub.models.notification import Notification
from learnhub.services.notification_dispatcher import NotificationDispatcher


async def _connection_lost(self, user_ids):
    raise OperationalError("SELECT users.id FROM users", {}, Exception("connection lost"))


async def _create_group(client, headers, student_ids, name="Algebra I"):
    res = await client.post(
        "/api/v1/groups", json={"name": name, "student_ids": student_ids}, headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


async def _create_lesson(client, headers, group_id, name="Linear equations"):
    res = await client.post(
        "/api/v1/lessons",
        json={"name": name, "content": "Solve for x", "group_id": group_id},
        headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


async def _upload(client, headers, lesson_id, content_type="video/mp4", content=b"\x00" * 64):
    return await client.post(
        f"/api/v1/lessons/{lesson_id}/upload-video",
        files={"file": ("intro.mp4", content, content_type)},
        headers=headers,
    )


# ─── Groups ──────────────────────────────────────────────────────

async def test_create_group_ignores_unknown_students(client, teacher, student, auth_headers):
    group = await _create_group(client, auth_headers(teacher), [student.id, 9999])
    assert group["teacher"]["id"] == teacher.id
    assert [s["id"] for s in group["students"]] == [student.id]
    assert group["lessons"] == []


async def test_group_students_get_invite(client, teacher, student, auth_headers, fresh_db):
    await _create_group(client, auth_headers(teacher), [student.id])
    async with fresh_db() as db:
        types = (await db.execute(select(Notification.type))).scalars().all()
    assert types == ["group_invite"]


async def test_student_cannot_create_group(client, student, auth_headers):
    res = await client.post(
        "/api/v1/groups", json={"name": "Nope"}, headers=auth_headers(student),
    )
    assert res.status_code == 403


async def test_group_listings_by_membership(client, teacher, student, make_user, auth_headers):
    outsider = await make_user("student")
    group = await _create_group(client, auth_headers(teacher), [student.id])

    mine = (await client.get("/api/v1/groups/student", headers=auth_headers(student))).json()
    theirs = (await client.get("/api/v1/groups/student", headers=auth_headers(outsider))).json()
    teaching = (await client.get("/api/v1/groups/teacher", headers=auth_headers(teacher))).json()
    assert [g["id"] for g in mine] == [group["id"]]
    assert theirs == []
    assert [g["id"] for g in teaching] == [group["id"]]


async def test_get_unknown_group_is_404(client, student, auth_headers):
    res = await client.get("/api/v1/groups/9999", headers=auth_headers(student))
    assert res.status_code == 404


async def test_group_created_when_invite_cannot_be_written(
    client, teacher, student, auth_headers, fresh_db, monkeypatch,
):
    monkeypatch.setattr(NotificationDispatcher, "_ensure_users_exist", _connection_lost)
    group = await _create_group(client, auth_headers(teacher), [student.id])
    assert group["teacher"]["id"] == teacher.id
    assert [s["id"] for s in group["students"]] == [student.id]

    async with fresh_db() as db:
        assert (await db.execute(select(Notification))).scalars().all() == []


# ─── Lessons ─────────────────────────────────────────────────────

async def test_create_lesson_notifies_group(client, teacher, student, auth_headers):
    group = await _create_group(client, auth_headers(teacher), [student.id])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    assert lesson["group"]["id"] == group["id"]
    assert lesson["creator"]["id"] == teacher.id
    assert lesson["video_url"] is None

    inbox = (await client.get("/api/v1/notifications", headers=auth_headers(student))).json()
    assert inbox["notifications"][0]["type"] == "lesson_created"


async def test_lesson_created_when_notification_cannot_be_written(
    client, teacher, student, auth_headers, monkeypatch,
):
    group = await _create_group(client, auth_headers(teacher), [student.id])
    monkeypatch.setattr(NotificationDispatcher, "_ensure_users_exist", _connection_lost)
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    assert lesson["group"]["id"] == group["id"]

    res = await _upload(client, auth_headers(teacher), lesson["id"])
    assert res.status_code == 200
    assert res.json()["video_url"].endswith("object-1")


async def test_create_lesson_in_missing_group_is_404(client, teacher, auth_headers):
    res = await client.post(
        "/api/v1/lessons", json={"name": "Orphan", "group_id": 9999},
        headers=auth_headers(teacher),
    )
    assert res.status_code == 404


async def test_lesson_access(client, teacher, student, make_user, auth_headers):
    outsider = await make_user("student")
    group = await _create_group(client, auth_headers(teacher), [student.id])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    url = f"/api/v1/lessons/{lesson['id']}"

    assert (await client.get(url, headers=auth_headers(teacher))).status_code == 200
    assert (await client.get(url, headers=auth_headers(student))).status_code == 200
    assert (await client.get(url, headers=auth_headers(outsider))).status_code == 403


async def test_upload_video_replaces_previous(client, teacher, auth_headers, fake_storage):
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])

    first = await _upload(client, auth_headers(teacher), lesson["id"])
    assert first.status_code == 200
    assert first.json()["video_url"] == "https://files.test/lessons/videos/object-1"
    assert first.json()["video_size"] == 64

    second = await _upload(client, auth_headers(teacher), lesson["id"])
    assert second.json()["video_url"].endswith("object-2")
    assert fake_storage.deleted == ["lessons/videos/object-1"]
    assert list(fake_storage.objects) == ["lessons/videos/object-2"]


async def test_failed_upload_keeps_current_video(client, teacher, auth_headers, fake_storage):
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    assert (await _upload(client, auth_headers(teacher), lesson["id"])).status_code == 200

    fake_storage.fail_uploads = True
    res = await _upload(client, auth_headers(teacher), lesson["id"])
    assert res.status_code == 502
    assert res.json()["error"]["code"] == "STORAGE_ERROR"

    current = await client.get(f"/api/v1/lessons/{lesson['id']}", headers=auth_headers(teacher))
    assert current.json()["video_url"] == "https://files.test/lessons/videos/object-1"
    assert list(fake_storage.objects) == ["lessons/videos/object-1"]
    assert fake_storage.deleted == []


async def test_upload_rejects_non_video(client, teacher, auth_headers, fake_storage):
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])

    res = await _upload(client, auth_headers(teacher), lesson["id"], content_type="image/png")
    assert res.status_code == 400
    assert fake_storage.objects == {}


async def test_upload_by_other_teacher_forbidden(client, teacher, make_user, auth_headers):
    other = await make_user("teacher")
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])

    res = await _upload(client, auth_headers(other), lesson["id"])
    assert res.status_code == 403


async def test_remove_video(client, teacher, auth_headers, fake_storage):
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    await _upload(client, auth_headers(teacher), lesson["id"])
    url = f"/api/v1/lessons/{lesson['id']}/video"

    res = await client.delete(url, headers=auth_headers(teacher))
    assert res.status_code == 200
    assert res.json()["video_url"] is None
    assert fake_storage.deleted == ["lessons/videos/object-1"]

    again = await client.delete(url, headers=auth_headers(teacher))
    assert again.status_code == 400


async def test_teacher_lesson_pagination(client, teacher, auth_headers):
    group = await _create_group(client, auth_headers(teacher), [])
    for i in range(3):
        await _create_lesson(client, auth_headers(teacher), group["id"], name=f"Lesson {i}")

    res = await client.get(
        "/api/v1/lessons", params={"page": 2, "limit": 2}, headers=auth_headers(teacher),
    )
    body = res.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert [item["name"] for item in body["data"]] == ["Lesson 0"]

    recent = (await client.get("/api/v1/lessons/recent", headers=auth_headers(teacher))).json()
    assert [item["name"] for item in recent] == ["Lesson 2", "Lesson 1", "Lesson 0"]


async def test_delete_lesson_removes_video(client, teacher, auth_headers, fake_storage):
    group = await _create_group(client, auth_headers(teacher), [])
    lesson = await _create_lesson(client, auth_headers(teacher), group["id"])
    await _upload(client, auth_headers(teacher), lesson["id"])

    res = await client.delete(f"/api/v1/lessons/{lesson['id']}", headers=auth_headers(teacher))
    assert res.status_code == 204
    assert fake_storage.deleted == ["lessons/videos/object-1"]
    missing = await client.get(f"/api/v1/lessons/{lesson['id']}", headers=auth_headers(teacher))
    assert missing.status_code == 404
