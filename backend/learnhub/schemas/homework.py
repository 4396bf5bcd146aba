"""Homework Schemas — homework, per-student assignments, grading and review.

Invariants:
    - ReviewRequest.status is "graded" or "pending"; "graded" requires a grade
    - Homework creation and submission are multipart forms (files), so their inputs
      are read with Form()/File() in the route, not with a request model here
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from learnhub.schemas.user import UserBrief


class GradeRequest(BaseModel):
    grade: str = Field(min_length=1, max_length=50)
    feedback: str | None = Field(None, max_length=5000)


class ReviewRequest(BaseModel):
    status: Literal["graded", "pending"]
    grade: str | None = Field(None, max_length=50)
    feedback: str | None = Field(None, max_length=5000)

    @model_validator(mode="after")
    def grade_required_when_graded(self) -> "ReviewRequest":
        if self.status == "graded" and not (self.grade and self.grade.strip()):
            raise ValueError("grade is required when status is 'graded'")
        return self


class HomeworkSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    file_url: str | None = None
    due_date: datetime
    created_by: UserBrief | None = None
    created_at: datetime


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    homework_id: int
    student: UserBrief | None = None
    status: str
    submit_file_url: str | None = None
    submission_text: str | None = None
    submitted_at: datetime | None = None
    grade: str | None = None
    feedback: str | None = None
    graded_at: datetime | None = None


class StudentAssignmentResponse(AssignmentResponse):
    """An assignment as its student sees it: with the parent homework."""
    homework: HomeworkSummary


class HomeworkResponse(HomeworkSummary):
    """A homework as its teacher sees it: with every student's assignment."""
    assignments: list[AssignmentResponse] = Field(default_factory=list)
