"""Role Routes — reads for any authenticated user, mutations for teachers."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_user, require_role
from learnhub.core.domain_types import RoleName
from learnhub.infrastructure.database import get_db
from learnhub.models.user import User
from learnhub.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from learnhub.services.roles import RoleService

router = APIRouter(prefix="/api/v1/roles", tags=["roles"])

require_teacher = require_role(RoleName.TEACHER.value)


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    _: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await RoleService(db).list()


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await RoleService(db).get(role_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    body: RoleCreate,
    _: User = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await RoleService(db).create(body.name)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    body: RoleUpdate,
    _: User = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await RoleService(db).update(role_id, body.name)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    _: User = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    await RoleService(db).delete(role_id)
