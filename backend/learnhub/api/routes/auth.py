"""Auth Routes — register, login, token refresh, logout and session management.

Invariants:
    - register/login/refresh/logout are public; session endpoints need a bearer token
    - Refresh tokens travel in the JSON body, never in query strings
    - logout is idempotent (unknown or already-revoked tokens → 204)
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import client_ip, get_codec, get_current_user, get_hasher
from learnhub.config import get_settings
from learnhub.infrastructure.database import get_db
from learnhub.infrastructure.security import AccessTokenCodec, PasswordHasher
from learnhub.models.user import User
from learnhub.schemas.auth import (
    LoginRequest, LoginResponse, RefreshRequest, RegisterRequest, RegisterResponse,
    SessionResponse, TokenPairResponse,
)
from learnhub.services.auth_service import AuthService
from learnhub.services.refresh_tokens import RefreshTokenService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    codec: AccessTokenCodec = Depends(get_codec),
) -> AuthService:
    return AuthService(db, hasher, codec, get_settings().refresh_token_ttl_days)


@router.post(
    "/register", response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, auth: AuthService = Depends(_auth_service)):
    user = await auth.register(body.name, body.email, body.password)
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest, request: Request, auth: AuthService = Depends(_auth_service),
):
    return await auth.login(
        body.email, body.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )


@router.post("/refresh", response_model=TokenPairResponse)
async def refresh(body: RefreshRequest, auth: AuthService = Depends(_auth_service)):
    """Exchange a refresh token for a new pair; the presented token is revoked."""
    return await auth.refresh(body.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(body: RefreshRequest, auth: AuthService = Depends(_auth_service)):
    await auth.logout(body.refresh_token)


@router.post("/logout-all")
async def logout_all(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(_auth_service),
):
    """Revoke every session of the current user."""
    revoked = await auth.logout_all(user.id)
    return {"revoked_count": revoked}


@router.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await RefreshTokenService(db).list_active(user.id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await RefreshTokenService(db).revoke_session(user.id, session_id)
