"""User Schemas — account payloads; password hashes never leave the service layer.

Invariants:
    - UserResponse has no password field (from_attributes reads only declared fields)
    - Passwords 6-128 chars; emails validated by pydantic's EmailStr
    - UserUpdate fields are all optional; only provided fields are applied
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from learnhub.schemas.role import RoleResponse


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: str = Field("student", min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)
    role: str | None = Field(None, min_length=1, max_length=50)


class UserBrief(BaseModel):
    """Compact user reference embedded in group/lesson/homework payloads."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: RoleResponse | None = None
    created_at: datetime
