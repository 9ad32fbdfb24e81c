"""
Exercise and attempt (completion) schemas.

Student-facing exercise payloads never carry the reference solution.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional

from curriculum.core.models import CompletionState, Difficulty, ExerciseType


class CreateExerciseRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    exercise_type: ExerciseType
    difficulty: Difficulty
    answer_body: dict[str, Any]
    exercise_body: Optional[dict[str, Any]] = None
    time_to_complete: Optional[int] = Field(default=None, gt=0)  # seconds


class UpdateExerciseRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    exercise_type: Optional[ExerciseType] = None
    difficulty: Optional[Difficulty] = None
    answer_body: Optional[dict[str, Any]] = None
    exercise_body: Optional[dict[str, Any]] = None
    time_to_complete: Optional[int] = Field(default=None, gt=0)
    retake: bool = False


class ExerciseResponse(BaseModel):
    id: int
    lesson_id: int
    title: str
    description: str
    exercise_type: ExerciseType
    difficulty: Difficulty
    order: int
    exercise_body: Optional[dict[str, Any]] = None
    time_to_complete: Optional[int] = None


class ExerciseDetailResponse(ExerciseResponse):
    """Creator view: includes the reference solution."""
    answer_body: dict[str, Any]


class ExerciseListResponse(BaseModel):
    exercises: list[ExerciseResponse]


class SaveBodyRequest(BaseModel):
    body: Any


class CompletionResponse(BaseModel):
    id: int
    exercise_id: int
    user_id: int
    attempt_number: int
    state: CompletionState
    body: dict[str, Any]
    date_started: str
    deadline: Optional[str] = None
    date_last_changes: Optional[str] = None
    date_completed: Optional[str] = None
    points_scored: Optional[float] = None
    max_points: Optional[float] = None


class CompletionListResponse(BaseModel):
    completions: list[CompletionResponse]
