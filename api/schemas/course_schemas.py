"""
Course, membership and lesson schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional

from curriculum.core.models import CourseState, UserCourseRole


class CreateCourseRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""


class UpdateCourseRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class CourseResponse(BaseModel):
    id: int
    title: str
    description: str
    state: CourseState
    published_date: Optional[str] = None


class MembershipResponse(BaseModel):
    user_id: int
    course_id: int
    role: UserCourseRole


class CreateLessonRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""


class UpdateLessonRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class LessonResponse(BaseModel):
    id: int
    course_id: int
    title: str
    description: str
    order: int


class LessonListResponse(BaseModel):
    lessons: list[LessonResponse]


class ChangeOrderRequest(BaseModel):
    """Target 1-based position within the parent."""
    order: int


class SiblingOrderResponse(BaseModel):
    id: int
    order: int


class OrderListResponse(BaseModel):
    items: list[SiblingOrderResponse]
