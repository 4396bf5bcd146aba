"""Device Token Routes — register the caller's push token; teachers inspect tokens."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_user, require_role
from learnhub.core.domain_types import RoleName
from learnhub.infrastructure.database import get_db
from learnhub.models.user import User
from learnhub.schemas.device_token import DeviceTokenRegister, DeviceTokenResponse
from learnhub.services.device_tokens import DeviceTokenService

router = APIRouter(prefix="/api/v1/device-tokens", tags=["device-tokens"])


@router.post("/register", response_model=DeviceTokenResponse)
async def register_device_token(
    body: DeviceTokenRegister,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DeviceTokenService(db).register(user.id, body.token)


@router.get("/user/{user_id}", response_model=list[str])
async def get_user_tokens(
    user_id: int,
    _: User = Depends(require_role(RoleName.TEACHER.value)),
    db: AsyncSession = Depends(get_db),
):
    return await DeviceTokenService(db).tokens_for_users([user_id])
