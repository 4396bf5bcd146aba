"""Lesson Schemas — lesson payloads and the paginated teacher listing.

Invariants:
    - video_path (storage key) is internal and never serialized
    - LessonPage.total_pages = ceil(total / limit)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnhub.schemas.user import UserBrief


class LessonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    content: str | None = Field(None, max_length=50_000)
    group_id: int = Field(ge=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("lesson name cannot be empty or whitespace")
        return v


class LessonGroupSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class LessonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    content: str | None = None
    video_url: str | None = None
    video_size: int | None = None
    group: LessonGroupSummary | None = None
    creator: UserBrief | None = None
    created_at: datetime


class LessonPage(BaseModel):
    data: list[LessonResponse]
    total: int
    page: int
    limit: int
    total_pages: int
