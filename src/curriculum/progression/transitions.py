"""
Shared state transitions used by both student requests and the overdue sweep.

- grade_and_complete: InProgress -> Succeeded|Failed, then lesson completion check
- mark_lesson_done_if_complete: LessonProgress -> Done once every exercise succeeded
- cascade_exercise_edit: retake edit wipes attempts and re-opens progress
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from curriculum.core.models import (
    CompletionState,
    Exercise,
    ExerciseCompletion,
    ExerciseEstimate,
    LessonProgressState,
)
from curriculum.core.repository import ProgressionRepository
from curriculum.diagram.grading import evaluate

logger = logging.getLogger(__name__)


def grade_and_complete(
    repository: ProgressionRepository,
    exercise: Exercise,
    completion: ExerciseCompletion,
    now: datetime,
) -> Optional[ExerciseEstimate]:
    """
    Grade the saved body and persist the terminal state.
    Returns None if the completion left InProgress before this write landed.
    """
    estimate = evaluate(exercise, completion)

    with repository.atomic():
        if not repository.complete_completion(completion.id, estimate, now):
            logger.debug("completion already terminal completion_id=%s", completion.id)
            return None
        if estimate.state is CompletionState.SUCCEEDED:
            mark_lesson_done_if_complete(repository, completion.user_id, exercise.lesson_id, now)

    logger.info(
        "completion graded completion_id=%s exercise_id=%s user_id=%s state=%s points=%.2f/%.2f",
        completion.id,
        exercise.id,
        completion.user_id,
        estimate.state.value,
        estimate.points,
        estimate.max_points,
    )
    return estimate


def mark_lesson_done_if_complete(
    repository: ProgressionRepository, user_id: int, lesson_id: int, now: datetime
) -> bool:
    progress = repository.get_lesson_progress(user_id, lesson_id)
    if progress is None or progress.state is LessonProgressState.DONE:
        return False

    exercise_ids = [e.id for e in repository.list_lesson_exercises(lesson_id)]
    succeeded = repository.count_succeeded_exercises(user_id, exercise_ids)
    if succeeded != len(exercise_ids):
        return False

    repository.update_lesson_progress_state(user_id, lesson_id, LessonProgressState.DONE, date_complete=now)
    logger.info("lesson done user_id=%s lesson_id=%s", user_id, lesson_id)
    return True


def cascade_exercise_edit(repository: ProgressionRepository, exercise: Exercise) -> None:
    """
    Invalidate progress that depended on the edited exercise.
    Caller owns the transaction.
    """
    lesson = repository.get_lesson(exercise.lesson_id)
    later_lesson_ids = [
        other.id for other in repository.list_course_lessons(lesson.course_id) if other.order > lesson.order
    ]

    deleted = repository.delete_exercise_completions(exercise.id)
    paused = repository.set_lessons_progress_state(later_lesson_ids, LessonProgressState.PAUSE)
    reopened = repository.set_lessons_progress_state([lesson.id], LessonProgressState.IN_PROGRESS)

    logger.info(
        "retake cascade exercise_id=%s completions_deleted=%s lessons_paused=%s lessons_reopened=%s",
        exercise.id,
        deleted,
        paused,
        reopened,
    )
