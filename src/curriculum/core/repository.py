"""
Storage capabilities consumed by the progression engine.

Each interface covers one aggregate; `ProgressionRepository` bundles them with
`atomic()` so interactors can group multi-row writes (reorder, cascade,
completion + lesson state) into a single all-or-nothing unit.

Lookups of a single record raise EntityNotFound when the id is unknown;
`*_optional` variants return None instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from curriculum.core.models import (
    CompletionState,
    Course,
    CoursePatch,
    Exercise,
    ExerciseCompletion,
    ExerciseDraft,
    ExerciseEstimate,
    ExercisePatch,
    Lesson,
    LessonPatch,
    LessonProgress,
    LessonProgressState,
    SiblingOrder,
    UserCourse,
)


class CourseRepository(ABC):
    @abstractmethod
    def get_course(self, course_id: int) -> Course:
        pass

    @abstractmethod
    def create_course(self, title: str, description: str) -> int:
        pass

    @abstractmethod
    def update_course(self, course_id: int, patch: CoursePatch) -> None:
        pass

    @abstractmethod
    def get_user_course(self, user_id: int, course_id: int) -> Optional[UserCourse]:
        pass

    @abstractmethod
    def create_user_course(self, user_course: UserCourse) -> None:
        pass

    @abstractmethod
    def delete_user_course(self, user_id: int, course_id: int) -> None:
        pass


class LessonRepository(ABC):
    @abstractmethod
    def get_lesson(self, lesson_id: int) -> Lesson:
        pass

    @abstractmethod
    def list_course_lessons(self, course_id: int) -> List[Lesson]:
        """Lessons of a course in ascending order."""

    @abstractmethod
    def create_lesson(self, course_id: int, title: str, description: str, order: int) -> int:
        pass

    @abstractmethod
    def update_lesson(self, lesson_id: int, patch: LessonPatch) -> None:
        pass

    @abstractmethod
    def delete_lesson(self, lesson_id: int) -> None:
        pass

    @abstractmethod
    def update_lesson_orders(self, orders: Iterable[SiblingOrder]) -> None:
        pass


class ExerciseRepository(ABC):
    @abstractmethod
    def get_exercise(self, exercise_id: int) -> Exercise:
        pass

    @abstractmethod
    def list_lesson_exercises(self, lesson_id: int) -> List[Exercise]:
        """Exercises of a lesson in ascending order."""

    @abstractmethod
    def create_exercise(self, draft: ExerciseDraft, order: int) -> int:
        pass

    @abstractmethod
    def update_exercise(self, exercise_id: int, patch: ExercisePatch) -> None:
        pass

    @abstractmethod
    def delete_exercise(self, exercise_id: int) -> None:
        pass

    @abstractmethod
    def update_exercise_orders(self, orders: Iterable[SiblingOrder]) -> None:
        pass


class CompletionRepository(ABC):
    @abstractmethod
    def get_completion(self, completion_id: int) -> ExerciseCompletion:
        pass

    @abstractmethod
    def list_user_completions(self, user_id: int, exercise_id: int) -> List[ExerciseCompletion]:
        pass

    @abstractmethod
    def create_completion(
        self,
        exercise_id: int,
        user_id: int,
        attempt_number: int,
        date_started: datetime,
        body: Dict[str, Any],
    ) -> ExerciseCompletion:
        """Raise AttemptAlreadyStarted if the attempt number is already taken."""

    @abstractmethod
    def save_completion_body(self, completion_id: int, body: Dict[str, Any], changed_at: datetime) -> None:
        pass

    @abstractmethod
    def complete_completion(
        self, completion_id: int, estimate: ExerciseEstimate, completed_at: datetime
    ) -> bool:
        """Move an InProgress completion to its graded state.

        Returns False when the row was no longer InProgress, i.e. somebody else
        completed it first.
        """

    @abstractmethod
    def list_completions_in_state(self, state: CompletionState) -> List[ExerciseCompletion]:
        pass

    @abstractmethod
    def delete_exercise_completions(self, exercise_id: int) -> int:
        pass

    @abstractmethod
    def count_succeeded_exercises(self, user_id: int, exercise_ids: Iterable[int]) -> int:
        """Number of distinct exercises among `exercise_ids` with a Succeeded completion by the user."""


class LessonProgressRepository(ABC):
    @abstractmethod
    def get_lesson_progress(self, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        pass

    @abstractmethod
    def list_course_progresses(self, user_id: int, course_id: int) -> List[LessonProgress]:
        pass

    @abstractmethod
    def create_lesson_progress(self, user_id: int, lesson_id: int, date_started: datetime) -> LessonProgress:
        pass

    @abstractmethod
    def update_lesson_progress_state(
        self,
        user_id: int,
        lesson_id: int,
        state: LessonProgressState,
        date_complete: Optional[datetime] = None,
    ) -> bool:
        """Returns False when the user has no progress row for the lesson."""

    @abstractmethod
    def set_lessons_progress_state(self, lesson_ids: Iterable[int], state: LessonProgressState) -> int:
        """Force every user's progress on the given lessons into `state`; returns rows touched."""


class ProgressionRepository(
    CourseRepository,
    LessonRepository,
    ExerciseRepository,
    CompletionRepository,
    LessonProgressRepository,
):
    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Context manager that commits on success and rolls back on error."""
