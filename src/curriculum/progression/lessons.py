"""
Student-side lesson lifecycle with sequential gating.
"""

from __future__ import annotations

import logging
from typing import List

from curriculum.core.clock import Clock, utc_now
from curriculum.core.context import Ctx, require_user
from curriculum.core.errors import PreviousLessonNotCompleted, PreviousLessonNotFound
from curriculum.core.models import Lesson, LessonProgress, LessonProgressState
from curriculum.core.permissions import PermissionManager
from curriculum.core.repository import ProgressionRepository
from curriculum.progression.transitions import mark_lesson_done_if_complete

logger = logging.getLogger(__name__)


class StudentLessonInteractor:
    def __init__(self, repository: ProgressionRepository, clock: Clock = utc_now):
        self.repository = repository
        self.permissions = PermissionManager(repository)
        self.clock = clock

    def start_lesson(self, ctx: Ctx, lesson_id: int) -> LessonProgress:
        """
        Create the user's progress for a lesson, or resume a paused one.
        A lesson already InProgress/Done is returned unchanged.
        """
        user_id = require_user(ctx)
        self.permissions.check_lesson_student(ctx, lesson_id)

        lesson = self.repository.get_lesson(lesson_id)
        existing = self.repository.get_lesson_progress(user_id, lesson_id)
        if existing is not None and existing.state is not LessonProgressState.PAUSE:
            return existing

        self._check_lesson_order(user_id, lesson)

        now = self.clock()
        with self.repository.atomic():
            if existing is None:
                self.repository.create_lesson_progress(user_id, lesson_id, now)
            else:
                self.repository.update_lesson_progress_state(user_id, lesson_id, LessonProgressState.IN_PROGRESS)
            # exercises may have been completed before the lesson was started
            mark_lesson_done_if_complete(self.repository, user_id, lesson_id, now)
            progress = self.repository.get_lesson_progress(user_id, lesson_id)

        logger.info("lesson started user_id=%s lesson_id=%s resumed=%s", user_id, lesson_id, existing is not None)
        return progress

    def list_lessons(self, ctx: Ctx, course_id: int) -> List[Lesson]:
        self.permissions.check_course_student(ctx, course_id)
        return self.repository.list_course_lessons(course_id)

    def list_course_progress(self, ctx: Ctx, course_id: int) -> List[LessonProgress]:
        user_id = require_user(ctx)
        self.permissions.check_course_student(ctx, course_id)
        return self.repository.list_course_progresses(user_id, course_id)

    def _check_lesson_order(self, user_id: int, lesson: Lesson) -> None:
        if lesson.order == 1:
            return

        siblings = self.repository.list_course_lessons(lesson.course_id)
        previous = next((l for l in siblings if l.order == lesson.order - 1), None)
        if previous is None:
            raise PreviousLessonNotFound(lesson_id=lesson.id)

        progress = self.repository.get_lesson_progress(user_id, previous.id)
        if progress is None or progress.state is not LessonProgressState.DONE:
            raise PreviousLessonNotCompleted(lesson_id=previous.id)
