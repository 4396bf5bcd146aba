"""Lesson Routes — lesson CRUD and video upload for teachers, reads for group members.

Invariants:
    - Mutations and teacher listings require the teacher role
    - GET /lessons/{id} is open to the creator and the group's students only
    - Video uploads are multipart with a single "file" field, read no further than the 100 MB cap
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import (
    get_current_user, get_dispatcher, get_file_storage, require_role,
)
from learnhub.api.uploads import read_capped
from learnhub.core.domain_types import RoleName, UploadKind
from learnhub.core.service_protocols import FileStorage
from learnhub.infrastructure.database import get_db
from learnhub.models.user import User
from learnhub.schemas.lesson import LessonCreate, LessonPage, LessonResponse
from learnhub.services.lessons import LessonService
from learnhub.services.notification_dispatcher import NotificationDispatcher

router = APIRouter(prefix="/api/v1/lessons", tags=["lessons"])

require_teacher = require_role(RoleName.TEACHER.value)


def _lesson_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage | None = Depends(get_file_storage),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
) -> LessonService:
    return LessonService(db, storage, notifier)


@router.post("", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    body: LessonCreate,
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    return await lessons.create(body.name, body.content, body.group_id, teacher)


@router.post("/{lesson_id}/upload-video", response_model=LessonResponse)
async def upload_video(
    lesson_id: int,
    file: UploadFile = File(...),
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    content = await read_capped(file, UploadKind.VIDEO)
    return await lessons.upload_video(
        lesson_id, teacher, content, file.filename, file.content_type,
    )


@router.delete("/{lesson_id}/video", response_model=LessonResponse)
async def remove_video(
    lesson_id: int,
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    return await lessons.remove_video(lesson_id, teacher)


@router.get("", response_model=LessonPage)
async def list_my_lessons(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    return await lessons.list_for_teacher(teacher.id, page, limit)


@router.get("/recent", response_model=list[LessonResponse])
async def list_recent_lessons(
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    return await lessons.recent_for_teacher(teacher.id)


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: int,
    user: User = Depends(get_current_user),
    lessons: LessonService = Depends(_lesson_service),
):
    return await lessons.get_with_access(lesson_id, user)


@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(
    lesson_id: int,
    teacher: User = Depends(require_teacher),
    lessons: LessonService = Depends(_lesson_service),
):
    await lessons.delete(lesson_id, teacher)
