from __future__ import annotations

import logging

from curriculum.core.clock import Clock, utc_now
from curriculum.core.context import Ctx, require_user
from curriculum.core.models import Course, CoursePatch, CourseState, UserCourse, UserCourseRole
from curriculum.core.permissions import PermissionManager
from curriculum.core.repository import ProgressionRepository

logger = logging.getLogger(__name__)


class CreatorCourseInteractor:
    def __init__(self, repository: ProgressionRepository, clock: Clock = utc_now):
        self.repository = repository
        self.permissions = PermissionManager(repository)
        self.clock = clock

    def create_course(self, ctx: Ctx, title: str, description: str = "") -> Course:
        """Create a draft course owned by the calling user."""
        user_id = require_user(ctx)
        with self.repository.atomic():
            course_id = self.repository.create_course(title, description)
            self.repository.create_user_course(
                UserCourse(user_id=user_id, course_id=course_id, role=UserCourseRole.CREATOR)
            )
        logger.info("course created course_id=%s creator_id=%s", course_id, user_id)
        return self.repository.get_course(course_id)

    def update_course(self, ctx: Ctx, course_id: int, patch: CoursePatch) -> Course:
        self.permissions.check_course_creator(ctx, course_id)
        # state changes go through publish/archive
        patch = CoursePatch(title=patch.title, description=patch.description)
        if not patch.is_empty():
            with self.repository.atomic():
                self.repository.update_course(course_id, patch)
        return self.repository.get_course(course_id)

    def publish_course(self, ctx: Ctx, course_id: int) -> Course:
        self.permissions.check_course_creator(ctx, course_id)
        with self.repository.atomic():
            self.repository.update_course(
                course_id, CoursePatch(state=CourseState.PUBLISHED, published_date=self.clock())
            )
        logger.info("course published course_id=%s", course_id)
        return self.repository.get_course(course_id)

    def archive_course(self, ctx: Ctx, course_id: int) -> Course:
        self.permissions.check_course_creator(ctx, course_id)
        with self.repository.atomic():
            self.repository.update_course(course_id, CoursePatch(state=CourseState.ARCHIVED))
        logger.info("course archived course_id=%s", course_id)
        return self.repository.get_course(course_id)
