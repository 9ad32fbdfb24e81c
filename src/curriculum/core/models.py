"""
Domain records for the progression engine.

Plain dataclasses handed across the repository boundary. Storage adapters map
their rows onto these; nothing in here knows about SQL or HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional


class CourseState(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


class UserCourseRole(str, Enum):
    CREATOR = "Creator"
    STUDENT = "Student"


class ExerciseType(str, Enum):
    CONSPECT = "Conspect"
    INTERACTIVE_CONSPECT = "InteractiveConspect"


class Difficulty(str, Enum):
    """Ordinal difficulty. `weight` scales the maximum score to a 0-100 range."""
    READ = "Read"
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def weight(self) -> float:
        return DIFFICULTY_WEIGHTS[self]


DIFFICULTY_WEIGHTS: Dict[Difficulty, float] = {
    Difficulty.READ: 0.0,
    Difficulty.EASY: 0.35,
    Difficulty.MEDIUM: 0.7,
    Difficulty.HARD: 1.0,
}


class CompletionState(str, Enum):
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self is not CompletionState.IN_PROGRESS


class LessonProgressState(str, Enum):
    PAUSE = "Pause"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


@dataclass
class Course:
    id: int
    title: str
    description: str = ""
    state: CourseState = CourseState.DRAFT
    published_date: Optional[datetime] = None


@dataclass
class UserCourse:
    user_id: int
    course_id: int
    role: UserCourseRole


@dataclass
class SiblingOrder:
    """An ordered item within a parent scope (lesson in a course, exercise in a lesson)."""
    id: int
    order: int


@dataclass
class Lesson:
    id: int
    course_id: int
    title: str
    description: str = ""
    order: int = 1


@dataclass
class Exercise:
    id: int
    lesson_id: int
    title: str
    exercise_type: ExerciseType
    answer_body: Dict[str, Any]
    difficulty: Difficulty
    order: int = 1
    description: str = ""
    exercise_body: Optional[Dict[str, Any]] = None
    time_to_complete: Optional[int] = None  # seconds after date_started

    def deadline_for(self, date_started: datetime) -> Optional[datetime]:
        if self.time_to_complete is None:
            return None
        return date_started + timedelta(seconds=self.time_to_complete)


@dataclass
class ExerciseDraft:
    """Exercise fields supplied by a creator; order and id are assigned on create."""
    lesson_id: int
    title: str
    exercise_type: ExerciseType
    answer_body: Dict[str, Any]
    difficulty: Difficulty
    description: str = ""
    exercise_body: Optional[Dict[str, Any]] = None
    time_to_complete: Optional[int] = None


@dataclass
class ExerciseCompletion:
    id: int
    exercise_id: int
    user_id: int
    attempt_number: int
    date_started: datetime
    state: CompletionState = CompletionState.IN_PROGRESS
    submitted_body: Dict[str, Any] = field(default_factory=dict)
    date_last_changes: Optional[datetime] = None
    date_completed: Optional[datetime] = None
    points_scored: Optional[float] = None
    max_points: Optional[float] = None


@dataclass
class ExerciseEstimate:
    """Grading result persisted onto a completion."""
    points: float
    max_points: float
    difficulty: Difficulty
    state: CompletionState


@dataclass
class LessonProgress:
    user_id: int
    lesson_id: int
    date_started: datetime
    state: LessonProgressState = LessonProgressState.IN_PROGRESS
    date_complete: Optional[datetime] = None


class _Patch:
    """Partial update: a field left as None means "unchanged"."""

    _control_fields: tuple = ()

    def changes(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if f.name not in self._control_fields and getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass
class CoursePatch(_Patch):
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[CourseState] = None
    published_date: Optional[datetime] = None


@dataclass
class LessonPatch(_Patch):
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ExercisePatch(_Patch):
    title: Optional[str] = None
    description: Optional[str] = None
    exercise_type: Optional[ExerciseType] = None
    answer_body: Optional[Dict[str, Any]] = None
    exercise_body: Optional[Dict[str, Any]] = None
    difficulty: Optional[Difficulty] = None
    time_to_complete: Optional[int] = None
    # Retake edits wipe existing attempts and re-open downstream progress.
    retake: bool = False

    _control_fields = ("retake",)
