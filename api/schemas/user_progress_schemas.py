"""
Per-user lesson progress schemas.
"""

from pydantic import BaseModel
from typing import Optional

from curriculum.core.models import LessonProgressState


class LessonProgressResponse(BaseModel):
    user_id: int
    lesson_id: int
    state: LessonProgressState
    date_started: str
    date_complete: Optional[str] = None  # ISO when Done


class CourseProgressResponse(BaseModel):
    course_id: int
    lessons: list[LessonProgressResponse]
