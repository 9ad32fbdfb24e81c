"""
Course endpoints: authoring (create, edit, publish, archive), student
registration and per-course listings.
"""

from fastapi import APIRouter, Depends, status

from api.schemas.course_schemas import (
    CourseResponse,
    CreateCourseRequest,
    CreateLessonRequest,
    LessonListResponse,
    LessonResponse,
    MembershipResponse,
    UpdateCourseRequest,
)
from api.schemas.user_progress_schemas import CourseProgressResponse
from api.services.progression_repository import SqlProgressionRepository
from api.utils.common import course_response, get_repository, lesson_response, progress_response, user_context
from curriculum.authoring import CreatorCourseInteractor, CreatorLessonInteractor
from curriculum.core.context import UserContext
from curriculum.core.models import CoursePatch
from curriculum.enrollment import StudentCourseInteractor
from curriculum.progression import StudentLessonInteractor

course_routes = APIRouter()


@course_routes.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    req: CreateCourseRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CourseResponse:
    course = CreatorCourseInteractor(repository).create_course(ctx, req.title, req.description)
    return course_response(course)


@course_routes.patch("/courses/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    req: UpdateCourseRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CourseResponse:
    patch = CoursePatch(title=req.title, description=req.description)
    return course_response(CreatorCourseInteractor(repository).update_course(ctx, course_id, patch))


@course_routes.post("/courses/{course_id}/publish", response_model=CourseResponse)
async def publish_course(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CourseResponse:
    return course_response(CreatorCourseInteractor(repository).publish_course(ctx, course_id))


@course_routes.post("/courses/{course_id}/archive", response_model=CourseResponse)
async def archive_course(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CourseResponse:
    return course_response(CreatorCourseInteractor(repository).archive_course(ctx, course_id))


@course_routes.post(
    "/courses/{course_id}/register",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_course(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> MembershipResponse:
    membership = StudentCourseInteractor(repository).register_for_course(ctx, course_id)
    return MembershipResponse(user_id=membership.user_id, course_id=membership.course_id, role=membership.role)


@course_routes.delete("/courses/{course_id}/register", status_code=status.HTTP_204_NO_CONTENT)
async def unsubscribe_from_course(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> None:
    StudentCourseInteractor(repository).unsubscribe_from_course(ctx, course_id)


@course_routes.get("/courses/{course_id}/lessons", response_model=LessonListResponse)
async def list_lessons(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> LessonListResponse:
    lessons = StudentLessonInteractor(repository).list_lessons(ctx, course_id)
    return LessonListResponse(lessons=[lesson_response(l) for l in lessons])


@course_routes.post(
    "/courses/{course_id}/lessons",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    course_id: int,
    req: CreateLessonRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> LessonResponse:
    lesson = CreatorLessonInteractor(repository).create_lesson(ctx, course_id, req.title, req.description)
    return lesson_response(lesson)


@course_routes.get("/courses/{course_id}/progress", response_model=CourseProgressResponse)
async def course_progress(
    course_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CourseProgressResponse:
    progresses = StudentLessonInteractor(repository).list_course_progress(ctx, course_id)
    return CourseProgressResponse(course_id=course_id, lessons=[progress_response(p) for p in progresses])
