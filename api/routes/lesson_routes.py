"""
Lesson endpoints: edit, delete, reorder, start, and its exercise listing / creation.
"""

from fastapi import APIRouter, Depends, status

from api.schemas.course_schemas import (
    ChangeOrderRequest,
    LessonResponse,
    OrderListResponse,
    SiblingOrderResponse,
    UpdateLessonRequest,
)
from api.schemas.exercise_schemas import CreateExerciseRequest, ExerciseDetailResponse, ExerciseListResponse
from api.schemas.user_progress_schemas import LessonProgressResponse
from api.services.progression_repository import SqlProgressionRepository
from api.utils.common import exercise_response, get_repository, lesson_response, progress_response, user_context
from curriculum.authoring import CreatorExerciseInteractor, CreatorLessonInteractor
from curriculum.core.context import UserContext
from curriculum.core.models import ExerciseDraft, LessonPatch
from curriculum.progression import StudentExerciseInteractor, StudentLessonInteractor

lesson_routes = APIRouter()


@lesson_routes.patch("/lessons/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: int,
    req: UpdateLessonRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> LessonResponse:
    patch = LessonPatch(title=req.title, description=req.description)
    return lesson_response(CreatorLessonInteractor(repository).update_lesson(ctx, lesson_id, patch))


@lesson_routes.delete("/lessons/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(
    lesson_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> None:
    CreatorLessonInteractor(repository).delete_lesson(ctx, lesson_id)


@lesson_routes.put("/lessons/{lesson_id}/order", response_model=OrderListResponse)
async def change_lesson_order(
    lesson_id: int,
    req: ChangeOrderRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> OrderListResponse:
    orders = CreatorLessonInteractor(repository).change_lesson_order(ctx, lesson_id, req.order)
    return OrderListResponse(items=[SiblingOrderResponse(id=o.id, order=o.order) for o in orders])


@lesson_routes.post("/lessons/{lesson_id}/start", response_model=LessonProgressResponse)
async def start_lesson(
    lesson_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> LessonProgressResponse:
    return progress_response(StudentLessonInteractor(repository).start_lesson(ctx, lesson_id))


@lesson_routes.get("/lessons/{lesson_id}/exercises", response_model=ExerciseListResponse)
async def list_exercises(
    lesson_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> ExerciseListResponse:
    exercises = StudentExerciseInteractor(repository).list_exercises(ctx, lesson_id)
    return ExerciseListResponse(exercises=[exercise_response(e) for e in exercises])


@lesson_routes.post(
    "/lessons/{lesson_id}/exercises",
    response_model=ExerciseDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_exercise(
    lesson_id: int,
    req: CreateExerciseRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> ExerciseDetailResponse:
    draft = ExerciseDraft(
        lesson_id=lesson_id,
        title=req.title,
        description=req.description,
        exercise_type=req.exercise_type,
        answer_body=req.answer_body,
        exercise_body=req.exercise_body,
        difficulty=req.difficulty,
        time_to_complete=req.time_to_complete,
    )
    exercise = CreatorExerciseInteractor(repository).create_exercise(ctx, draft)
    return exercise_response(exercise, with_answer=True)
