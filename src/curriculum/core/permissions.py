"""
Course membership gates.

Creator operations need a Creator membership on the owning course; student
operations need any membership. The system context passes every gate.
"""

from __future__ import annotations

from curriculum.core.context import Ctx, is_system, require_user
from curriculum.core.errors import PermissionDenied
from curriculum.core.models import UserCourseRole
from curriculum.core.repository import ProgressionRepository


class PermissionManager:
    def __init__(self, repository: ProgressionRepository):
        self.repository = repository

    def check_course_creator(self, ctx: Ctx, course_id: int) -> None:
        if is_system(ctx):
            return
        user_id = require_user(ctx)
        membership = self.repository.get_user_course(user_id, course_id)
        if membership is None or membership.role is not UserCourseRole.CREATOR:
            raise PermissionDenied(user_id=user_id, course_id=course_id)

    def check_course_student(self, ctx: Ctx, course_id: int) -> None:
        if is_system(ctx):
            return
        user_id = require_user(ctx)
        if self.repository.get_user_course(user_id, course_id) is None:
            raise PermissionDenied(user_id=user_id, course_id=course_id)

    def check_lesson_creator(self, ctx: Ctx, lesson_id: int) -> None:
        lesson = self.repository.get_lesson(lesson_id)
        self.check_course_creator(ctx, lesson.course_id)

    def check_lesson_student(self, ctx: Ctx, lesson_id: int) -> None:
        lesson = self.repository.get_lesson(lesson_id)
        self.check_course_student(ctx, lesson.course_id)

    def check_exercise_creator(self, ctx: Ctx, exercise_id: int) -> None:
        exercise = self.repository.get_exercise(exercise_id)
        self.check_lesson_creator(ctx, exercise.lesson_id)

    def check_exercise_student(self, ctx: Ctx, exercise_id: int) -> None:
        exercise = self.repository.get_exercise(exercise_id)
        self.check_lesson_student(ctx, exercise.lesson_id)
