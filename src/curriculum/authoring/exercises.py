from __future__ import annotations

import logging
from typing import List

from curriculum.core.context import Ctx
from curriculum.core.errors import CannotUpdateBodyWithoutType, CannotUpdateTypeWithoutBody
from curriculum.core.models import Exercise, ExerciseDraft, ExercisePatch, SiblingOrder
from curriculum.core.permissions import PermissionManager
from curriculum.core.repository import ProgressionRepository
from curriculum.diagram.validator import coerce_exercise_type, parse_conspect, validate_exercise_body
from curriculum.ordering.reindexer import changed_orders, compact, reorder
from curriculum.progression.transitions import cascade_exercise_edit

logger = logging.getLogger(__name__)


def _orders(exercises: List[Exercise]) -> List[SiblingOrder]:
    return [SiblingOrder(id=e.id, order=e.order) for e in exercises]


class CreatorExerciseInteractor:
    def __init__(self, repository: ProgressionRepository):
        self.repository = repository
        self.permissions = PermissionManager(repository)

    def create_exercise(self, ctx: Ctx, draft: ExerciseDraft) -> Exercise:
        """Validate the reference solution and append the exercise to its lesson."""
        self.permissions.check_lesson_creator(ctx, draft.lesson_id)

        draft.exercise_type = coerce_exercise_type(draft.exercise_type)
        validate_exercise_body(draft.exercise_type, draft.answer_body)
        if draft.exercise_body is not None:
            parse_conspect(draft.exercise_body)

        with self.repository.atomic():
            order = len(self.repository.list_lesson_exercises(draft.lesson_id)) + 1
            exercise_id = self.repository.create_exercise(draft, order)

        logger.info("exercise created exercise_id=%s lesson_id=%s order=%s", exercise_id, draft.lesson_id, order)
        return self.repository.get_exercise(exercise_id)

    def update_exercise(self, ctx: Ctx, exercise_id: int, patch: ExercisePatch) -> Exercise:
        """
        Apply a partial update. Type and answer body travel together so the
        stored solution always matches its declared grammar. A retake edit
        also wipes attempts and re-opens downstream lesson progress.
        """
        self.permissions.check_exercise_creator(ctx, exercise_id)

        if patch.answer_body is not None:
            if patch.exercise_type is None:
                raise CannotUpdateBodyWithoutType(exercise_id=exercise_id)
            patch.exercise_type = coerce_exercise_type(patch.exercise_type)
            validate_exercise_body(patch.exercise_type, patch.answer_body)
        elif patch.exercise_type is not None:
            raise CannotUpdateTypeWithoutBody(exercise_id=exercise_id)

        if patch.exercise_body is not None:
            parse_conspect(patch.exercise_body)

        with self.repository.atomic():
            if not patch.is_empty():
                self.repository.update_exercise(exercise_id, patch)
            if patch.retake:
                cascade_exercise_edit(self.repository, self.repository.get_exercise(exercise_id))

        return self.repository.get_exercise(exercise_id)

    def delete_exercise(self, ctx: Ctx, exercise_id: int) -> None:
        self.permissions.check_exercise_creator(ctx, exercise_id)
        exercise = self.repository.get_exercise(exercise_id)

        with self.repository.atomic():
            self.repository.delete_exercise_completions(exercise_id)
            self.repository.delete_exercise(exercise_id)
            remaining = _orders(self.repository.list_lesson_exercises(exercise.lesson_id))
            self.repository.update_exercise_orders(changed_orders(remaining, compact(remaining)))

        logger.info("exercise deleted exercise_id=%s lesson_id=%s", exercise_id, exercise.lesson_id)

    def change_exercise_order(self, ctx: Ctx, exercise_id: int, order: int) -> List[SiblingOrder]:
        self.permissions.check_exercise_creator(ctx, exercise_id)
        exercise = self.repository.get_exercise(exercise_id)

        with self.repository.atomic():
            current = _orders(self.repository.list_lesson_exercises(exercise.lesson_id))
            result = reorder(current, exercise_id, order)
            self.repository.update_exercise_orders(changed_orders(current, result))

        logger.info("exercise reordered exercise_id=%s from=%s to=%s", exercise_id, exercise.order, order)
        return sorted(result, key=lambda s: s.order)
