"""Homework Routes — teachers assign and grade; students read and submit.

Invariants:
    - Creation and submission are multipart forms (optional "file" field)
    - student_ids form values accepted as repeated fields, JSON array or CSV
    - Static paths (/student, /teacher, /assignment/...) declared before /{homework_id}
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import (
    get_current_user, get_dispatcher, get_file_storage, require_role,
)
from learnhub.api.uploads import read_optional_document
from learnhub.core.domain_types import RoleName
from learnhub.core.service_protocols import FileStorage
from learnhub.infrastructure.database import get_db
from learnhub.models.user import User
from learnhub.schemas.homework import (
    AssignmentResponse, GradeRequest, HomeworkResponse, ReviewRequest,
    StudentAssignmentResponse,
)
from learnhub.services.homework import HomeworkService
from learnhub.services.notification_dispatcher import NotificationDispatcher

router = APIRouter(prefix="/api/v1/homework", tags=["homework"])

require_teacher = require_role(RoleName.TEACHER.value)


def _homework_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage | None = Depends(get_file_storage),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
) -> HomeworkService:
    return HomeworkService(db, storage, notifier)


@router.post("", response_model=HomeworkResponse, status_code=status.HTTP_201_CREATED)
async def create_homework(
    title: str = Form(..., min_length=1, max_length=255),
    due_date: str = Form(...),
    student_ids: list[str] = Form(...),
    description: str | None = Form(None),
    file: UploadFile | None = File(None),
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.create(
        teacher, title.strip(), description, due_date, student_ids,
        file=await read_optional_document(file),
    )


@router.get("/student", response_model=list[StudentAssignmentResponse])
async def list_my_assignments(
    user: User = Depends(get_current_user),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.list_for_student(user.id)


@router.get("/teacher", response_model=list[HomeworkResponse])
async def list_my_homework(
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.list_for_teacher(teacher.id)


@router.get("/assignment/{assignment_id}", response_model=StudentAssignmentResponse)
async def get_assignment(
    assignment_id: int,
    user: User = Depends(get_current_user),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.get_assignment(assignment_id, user)


@router.post("/assignment/{assignment_id}/submit", response_model=AssignmentResponse)
async def submit_assignment(
    assignment_id: int,
    submission_text: str | None = Form(None),
    file: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.submit(
        assignment_id, user, submission_text, file=await read_optional_document(file),
    )


@router.post("/assignment/{assignment_id}/grade", response_model=AssignmentResponse)
async def grade_assignment(
    assignment_id: int,
    body: GradeRequest,
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.grade(assignment_id, teacher, body.grade, body.feedback)


@router.put("/assignment/{assignment_id}/review", response_model=AssignmentResponse)
async def review_assignment(
    assignment_id: int,
    body: ReviewRequest,
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.review(
        assignment_id, teacher, body.status, body.grade, body.feedback,
    )


@router.get("/{homework_id}", response_model=HomeworkResponse)
async def get_homework(
    homework_id: int,
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    return await homework.get_with_assignments(homework_id, teacher)


@router.delete("/{homework_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_homework(
    homework_id: int,
    teacher: User = Depends(require_teacher),
    homework: HomeworkService = Depends(_homework_service),
):
    await homework.delete(homework_id, teacher)
