"""
Student-side exercise lifecycle: start an attempt, save the diagram, complete it.
"""

from __future__ import annotations

import logging
import copy
from typing import Any, List

from curriculum.core.clock import Clock, utc_now
from curriculum.core.context import Ctx, require_user
from curriculum.core.errors import (
    AttemptAlreadyCompleted,
    CompletionAccessDenied,
    PreviousExerciseNotCompleted,
    PreviousExerciseNotFound,
    TimeToCompleteExpired,
)
from curriculum.core.models import CompletionState, Exercise, ExerciseCompletion
from curriculum.core.permissions import PermissionManager
from curriculum.core.repository import ProgressionRepository
from curriculum.diagram.schemas import empty_conspect
from curriculum.diagram.validator import validate_exercise_body
from curriculum.progression.transitions import grade_and_complete

logger = logging.getLogger(__name__)


class StudentExerciseInteractor:
    def __init__(self, repository: ProgressionRepository, clock: Clock = utc_now):
        self.repository = repository
        self.permissions = PermissionManager(repository)
        self.clock = clock

    def start_exercise(self, ctx: Ctx, exercise_id: int) -> ExerciseCompletion:
        user_id = require_user(ctx)
        self.permissions.check_exercise_student(ctx, exercise_id)

        exercise = self.repository.get_exercise(exercise_id)
        self._check_exercise_order(user_id, exercise)

        attempts = self.repository.list_user_completions(user_id, exercise_id)
        body = copy.deepcopy(exercise.exercise_body) if exercise.exercise_body else empty_conspect()

        with self.repository.atomic():
            completion = self.repository.create_completion(
                exercise_id=exercise_id,
                user_id=user_id,
                attempt_number=len(attempts),
                date_started=self.clock(),
                body=body,
            )

        logger.info(
            "exercise started user_id=%s exercise_id=%s attempt=%s",
            user_id,
            exercise_id,
            completion.attempt_number,
        )
        return completion

    def save_submission(self, ctx: Ctx, completion_id: int, body: Any) -> ExerciseCompletion:
        user_id = require_user(ctx)
        completion = self._owned_in_progress(user_id, completion_id)
        exercise = self.repository.get_exercise(completion.exercise_id)

        now = self.clock()
        deadline = exercise.deadline_for(completion.date_started)
        if deadline is not None and now >= deadline:
            raise TimeToCompleteExpired(completion_id=completion_id)

        conspect = validate_exercise_body(exercise.exercise_type, body)
        stored = body if isinstance(body, dict) else conspect.model_dump(by_alias=True)

        with self.repository.atomic():
            self.repository.save_completion_body(completion_id, stored, now)

        return self.repository.get_completion(completion_id)

    def complete_exercise(self, ctx: Ctx, completion_id: int) -> ExerciseCompletion:
        user_id = require_user(ctx)
        completion = self._owned_in_progress(user_id, completion_id)
        exercise = self.repository.get_exercise(completion.exercise_id)

        if grade_and_complete(self.repository, exercise, completion, self.clock()) is None:
            raise AttemptAlreadyCompleted(completion_id=completion_id)

        return self.repository.get_completion(completion_id)

    def list_exercises(self, ctx: Ctx, lesson_id: int) -> List[Exercise]:
        self.permissions.check_lesson_student(ctx, lesson_id)
        return self.repository.list_lesson_exercises(lesson_id)

    def list_attempts(self, ctx: Ctx, exercise_id: int) -> List[ExerciseCompletion]:
        user_id = require_user(ctx)
        self.permissions.check_exercise_student(ctx, exercise_id)
        return self.repository.list_user_completions(user_id, exercise_id)

    def _check_exercise_order(self, user_id: int, exercise: Exercise) -> None:
        if exercise.order == 1:
            return

        siblings = self.repository.list_lesson_exercises(exercise.lesson_id)
        previous = next((e for e in siblings if e.order == exercise.order - 1), None)
        if previous is None:
            raise PreviousExerciseNotFound(exercise_id=exercise.id)

        completions = self.repository.list_user_completions(user_id, previous.id)
        if not any(c.state is CompletionState.SUCCEEDED for c in completions):
            raise PreviousExerciseNotCompleted(exercise_id=previous.id)

    def _owned_in_progress(self, user_id: int, completion_id: int) -> ExerciseCompletion:
        completion = self.repository.get_completion(completion_id)
        if completion.user_id != user_id:
            raise CompletionAccessDenied(user_id=user_id, completion_id=completion_id)
        if completion.state.is_terminal:
            raise AttemptAlreadyCompleted(completion_id=completion_id)
        return completion
