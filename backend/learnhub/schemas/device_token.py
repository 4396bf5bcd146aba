"""Device Token Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeviceTokenRegister(BaseModel):
    token: str = Field(min_length=1, max_length=512)

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token cannot be empty or whitespace")
        return v


class DeviceTokenResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    token: str
    created_at: datetime
