"""Group Routes — teachers create groups; members look them up.

Invariants:
    - POST /groups requires the teacher role; the caller becomes the group's teacher
    - GET /groups/teacher and /groups/student list the caller's own groups
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_user, get_dispatcher, require_role
from learnhub.core.domain_types import RoleName
from learnhub.infrastructure.database import get_db
from learnhub.models.user import User
from learnhub.schemas.group import GroupCreate, GroupResponse
from learnhub.services.groups import GroupService
from learnhub.services.notification_dispatcher import NotificationDispatcher

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    body: GroupCreate,
    teacher: User = Depends(require_role(RoleName.TEACHER.value)),
    db: AsyncSession = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
):
    return await GroupService(db, notifier).create(body.name, teacher, body.student_ids)


@router.get("", response_model=list[GroupResponse])
async def list_groups(
    _: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await GroupService(db).list_all()


@router.get("/teacher", response_model=list[GroupResponse])
async def list_my_teaching_groups(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await GroupService(db).list_for_teacher(user.id)


@router.get("/student", response_model=list[GroupResponse])
async def list_my_groups(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await GroupService(db).list_for_student(user.id)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: int,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await GroupService(db).get(group_id)
