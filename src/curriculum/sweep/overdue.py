"""
Overdue sweep: auto-grade in-progress attempts whose deadline has passed.

Each completion is graded and persisted in its own transaction so one broken
record never blocks the rest of the batch.
"""

from __future__ import annotations

import logging
from typing import Dict

from curriculum.core.clock import Clock, utc_now
from curriculum.core.context import Ctx, SystemContext
from curriculum.core.models import CompletionState, Exercise, ExerciseCompletion
from curriculum.core.repository import ProgressionRepository
from curriculum.progression.transitions import grade_and_complete

logger = logging.getLogger(__name__)


class OverdueSweep:
    def __init__(self, repository: ProgressionRepository, clock: Clock = utc_now, ctx: Ctx | None = None):
        self.repository = repository
        self.clock = clock
        self.ctx = ctx or SystemContext(source="overdue-sweep")

    def run(self) -> int:
        """Returns the number of completions moved to a terminal state."""
        completed = 0
        failed = 0
        exercises: Dict[int, Exercise] = {}

        pending = self.repository.list_completions_in_state(CompletionState.IN_PROGRESS)
        for completion in pending:
            try:
                completed += self._complete_if_overdue(completion, exercises)
            except Exception:
                failed += 1
                logger.exception(
                    "overdue sweep item failed completion_id=%s exercise_id=%s",
                    completion.id,
                    completion.exercise_id,
                )

        logger.info(
            "overdue sweep source=%s pending=%s completed=%s failed=%s",
            getattr(self.ctx, "source", "-"),
            len(pending),
            completed,
            failed,
        )
        return completed

    def _complete_if_overdue(self, completion: ExerciseCompletion, exercises: Dict[int, Exercise]) -> int:
        exercise = exercises.get(completion.exercise_id)
        if exercise is None:
            exercise = self.repository.get_exercise(completion.exercise_id)
            exercises[exercise.id] = exercise

        deadline = exercise.deadline_for(completion.date_started)
        if deadline is None:
            return 0

        now = self.clock()
        if now < deadline:
            return 0

        estimate = grade_and_complete(self.repository, exercise, completion, now)
        return 0 if estimate is None else 1
