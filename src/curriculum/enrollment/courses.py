"""
Student course registration.
"""

from __future__ import annotations

import logging

from curriculum.core.context import Ctx, require_user
from curriculum.core.errors import (
    CannotRegisterForCourseTwice,
    CourseMustBePublished,
    CreatorCannotSubscribeToCourse,
)
from curriculum.core.models import CourseState, UserCourse, UserCourseRole
from curriculum.core.repository import ProgressionRepository

logger = logging.getLogger(__name__)


class StudentCourseInteractor:
    def __init__(self, repository: ProgressionRepository):
        self.repository = repository

    def register_for_course(self, ctx: Ctx, course_id: int) -> UserCourse:
        user_id = require_user(ctx)
        course = self.repository.get_course(course_id)

        if course.state is not CourseState.PUBLISHED:
            raise CourseMustBePublished(course_id=course_id)

        membership = self.repository.get_user_course(user_id, course_id)
        if membership is not None:
            if membership.role is UserCourseRole.CREATOR:
                raise CreatorCannotSubscribeToCourse(course_id=course_id)
            raise CannotRegisterForCourseTwice(course_id=course_id)

        user_course = UserCourse(user_id=user_id, course_id=course_id, role=UserCourseRole.STUDENT)
        with self.repository.atomic():
            self.repository.create_user_course(user_course)

        logger.info("course registration user_id=%s course_id=%s", user_id, course_id)
        return user_course

    def unsubscribe_from_course(self, ctx: Ctx, course_id: int) -> None:
        user_id = require_user(ctx)
        membership = self.repository.get_user_course(user_id, course_id)
        # creators leave a course by archiving it, not by unsubscribing
        if membership is None or membership.role is not UserCourseRole.STUDENT:
            return
        with self.repository.atomic():
            self.repository.delete_user_course(user_id, course_id)
