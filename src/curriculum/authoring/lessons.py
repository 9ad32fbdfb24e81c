from __future__ import annotations

import logging
from typing import List

from curriculum.core.context import Ctx
from curriculum.core.models import Lesson, LessonPatch, SiblingOrder
from curriculum.core.permissions import PermissionManager
from curriculum.core.repository import ProgressionRepository
from curriculum.ordering.reindexer import changed_orders, compact, reorder

logger = logging.getLogger(__name__)


def _orders(lessons: List[Lesson]) -> List[SiblingOrder]:
    return [SiblingOrder(id=l.id, order=l.order) for l in lessons]


class CreatorLessonInteractor:
    def __init__(self, repository: ProgressionRepository):
        self.repository = repository
        self.permissions = PermissionManager(repository)

    def create_lesson(self, ctx: Ctx, course_id: int, title: str, description: str = "") -> Lesson:
        """Append a lesson at order N+1."""
        self.permissions.check_course_creator(ctx, course_id)
        with self.repository.atomic():
            order = len(self.repository.list_course_lessons(course_id)) + 1
            lesson_id = self.repository.create_lesson(course_id, title, description, order)
        logger.info("lesson created lesson_id=%s course_id=%s order=%s", lesson_id, course_id, order)
        return self.repository.get_lesson(lesson_id)

    def update_lesson(self, ctx: Ctx, lesson_id: int, patch: LessonPatch) -> Lesson:
        self.permissions.check_lesson_creator(ctx, lesson_id)
        if not patch.is_empty():
            with self.repository.atomic():
                self.repository.update_lesson(lesson_id, patch)
        return self.repository.get_lesson(lesson_id)

    def delete_lesson(self, ctx: Ctx, lesson_id: int) -> None:
        """Delete a lesson and close the gap in the course's orders."""
        self.permissions.check_lesson_creator(ctx, lesson_id)
        lesson = self.repository.get_lesson(lesson_id)

        with self.repository.atomic():
            self.repository.delete_lesson(lesson_id)
            remaining = _orders(self.repository.list_course_lessons(lesson.course_id))
            self.repository.update_lesson_orders(changed_orders(remaining, compact(remaining)))

        logger.info("lesson deleted lesson_id=%s course_id=%s", lesson_id, lesson.course_id)

    def change_lesson_order(self, ctx: Ctx, lesson_id: int, order: int) -> List[SiblingOrder]:
        self.permissions.check_lesson_creator(ctx, lesson_id)
        lesson = self.repository.get_lesson(lesson_id)

        with self.repository.atomic():
            current = _orders(self.repository.list_course_lessons(lesson.course_id))
            result = reorder(current, lesson_id, order)
            self.repository.update_lesson_orders(changed_orders(current, result))

        logger.info("lesson reordered lesson_id=%s from=%s to=%s", lesson_id, lesson.order, order)
        return sorted(result, key=lambda s: s.order)
