"""
Common utility functions used across multiple routes.
"""

from datetime import datetime
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from api.config import get_db
from api.schemas.course_schemas import CourseResponse, LessonResponse
from api.schemas.exercise_schemas import CompletionResponse, ExerciseDetailResponse, ExerciseResponse
from api.schemas.user_progress_schemas import LessonProgressResponse
from api.schemas.user_schemas import User
from api.services.progression_repository import SqlProgressionRepository
from api.utils.auth import get_current_user
from curriculum.core.context import UserContext
from curriculum.core.models import Course, Exercise, ExerciseCompletion, Lesson, LessonProgress


def iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string with Z suffix."""
    if dt is None:
        return None
    return dt.isoformat() + "Z"


def get_repository(db: Session = Depends(get_db)) -> SqlProgressionRepository:
    return SqlProgressionRepository(db)


def user_context(current_user: User = Depends(get_current_user)) -> UserContext:
    return UserContext(user_id=current_user.id)


def course_response(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        title=course.title,
        description=course.description,
        state=course.state,
        published_date=iso_format(course.published_date),
    )


def lesson_response(lesson: Lesson) -> LessonResponse:
    return LessonResponse(
        id=lesson.id,
        course_id=lesson.course_id,
        title=lesson.title,
        description=lesson.description,
        order=lesson.order,
    )


def exercise_response(exercise: Exercise, *, with_answer: bool = False) -> ExerciseResponse:
    fields = dict(
        id=exercise.id,
        lesson_id=exercise.lesson_id,
        title=exercise.title,
        description=exercise.description,
        exercise_type=exercise.exercise_type,
        difficulty=exercise.difficulty,
        order=exercise.order,
        exercise_body=exercise.exercise_body,
        time_to_complete=exercise.time_to_complete,
    )
    if with_answer:
        return ExerciseDetailResponse(answer_body=exercise.answer_body, **fields)
    return ExerciseResponse(**fields)


def completion_response(completion: ExerciseCompletion, exercise: Optional[Exercise] = None) -> CompletionResponse:
    deadline = exercise.deadline_for(completion.date_started) if exercise is not None else None
    return CompletionResponse(
        id=completion.id,
        exercise_id=completion.exercise_id,
        user_id=completion.user_id,
        attempt_number=completion.attempt_number,
        state=completion.state,
        body=completion.submitted_body,
        date_started=iso_format(completion.date_started),
        deadline=iso_format(deadline),
        date_last_changes=iso_format(completion.date_last_changes),
        date_completed=iso_format(completion.date_completed),
        points_scored=completion.points_scored,
        max_points=completion.max_points,
    )


def progress_response(progress: LessonProgress) -> LessonProgressResponse:
    return LessonProgressResponse(
        user_id=progress.user_id,
        lesson_id=progress.lesson_id,
        state=progress.state,
        date_started=iso_format(progress.date_started),
        date_complete=iso_format(progress.date_complete),
    )
