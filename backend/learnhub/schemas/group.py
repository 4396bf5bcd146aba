"""Group Schemas — groups render with teacher, students and lesson summaries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnhub.schemas.user import UserBrief


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    student_ids: list[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("group name cannot be empty or whitespace")
        return v


class GroupLessonSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    video_url: str | None = None
    created_at: datetime


class GroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    teacher: UserBrief | None = None
    students: list[UserBrief] = Field(default_factory=list)
    lessons: list[GroupLessonSummary] = Field(default_factory=list)
    created_at: datetime
