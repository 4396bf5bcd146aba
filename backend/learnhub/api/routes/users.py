"""User Routes — any authenticated user reads; teachers manage accounts."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_user, get_hasher, require_role
from learnhub.core.domain_types import RoleName
from learnhub.infrastructure.database import get_db
from learnhub.infrastructure.security import PasswordHasher
from learnhub.models.user import User
from learnhub.schemas.user import UserCreate, UserResponse, UserUpdate
from learnhub.services.users import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])

require_teacher = require_role(RoleName.TEACHER.value)


def _user_service(
    db: AsyncSession = Depends(get_db), hasher: PasswordHasher = Depends(get_hasher),
) -> UserService:
    return UserService(db, hasher)


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(get_current_user), users: UserService = Depends(_user_service),
):
    return await users.list()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: User = Depends(get_current_user),
    users: UserService = Depends(_user_service),
):
    return await users.get(user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    _: User = Depends(require_teacher),
    users: UserService = Depends(_user_service),
):
    return await users.create(body.name, body.email, body.password, body.role)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    _: User = Depends(require_teacher),
    users: UserService = Depends(_user_service),
):
    return await users.update(user_id, **body.model_dump(exclude_unset=True))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    _: User = Depends(require_teacher),
    users: UserService = Depends(_user_service),
):
    await users.delete(user_id)
