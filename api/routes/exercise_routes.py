"""
Exercise endpoints (authoring and attempts) and completion endpoints
(save the diagram, complete the attempt).
"""

from fastapi import APIRouter, Depends, status

from api.schemas.course_schemas import ChangeOrderRequest, OrderListResponse, SiblingOrderResponse
from api.schemas.exercise_schemas import (
    CompletionListResponse,
    CompletionResponse,
    ExerciseDetailResponse,
    SaveBodyRequest,
    UpdateExerciseRequest,
)
from api.services.progression_repository import SqlProgressionRepository
from api.utils.common import completion_response, exercise_response, get_repository, user_context
from curriculum.authoring import CreatorExerciseInteractor
from curriculum.core.context import UserContext
from curriculum.core.models import ExercisePatch
from curriculum.progression import StudentExerciseInteractor

exercise_routes = APIRouter()


@exercise_routes.patch("/exercises/{exercise_id}", response_model=ExerciseDetailResponse)
async def update_exercise(
    exercise_id: int,
    req: UpdateExerciseRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> ExerciseDetailResponse:
    patch = ExercisePatch(**req.model_dump())
    exercise = CreatorExerciseInteractor(repository).update_exercise(ctx, exercise_id, patch)
    return exercise_response(exercise, with_answer=True)


@exercise_routes.delete("/exercises/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(
    exercise_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> None:
    CreatorExerciseInteractor(repository).delete_exercise(ctx, exercise_id)


@exercise_routes.put("/exercises/{exercise_id}/order", response_model=OrderListResponse)
async def change_exercise_order(
    exercise_id: int,
    req: ChangeOrderRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> OrderListResponse:
    orders = CreatorExerciseInteractor(repository).change_exercise_order(ctx, exercise_id, req.order)
    return OrderListResponse(items=[SiblingOrderResponse(id=o.id, order=o.order) for o in orders])


@exercise_routes.post(
    "/exercises/{exercise_id}/start",
    response_model=CompletionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_exercise(
    exercise_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CompletionResponse:
    completion = StudentExerciseInteractor(repository).start_exercise(ctx, exercise_id)
    return completion_response(completion, repository.get_exercise(exercise_id))


@exercise_routes.get("/exercises/{exercise_id}/completions", response_model=CompletionListResponse)
async def list_completions(
    exercise_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CompletionListResponse:
    completions = StudentExerciseInteractor(repository).list_attempts(ctx, exercise_id)
    exercise = repository.get_exercise(exercise_id)
    return CompletionListResponse(completions=[completion_response(c, exercise) for c in completions])


@exercise_routes.put("/completions/{completion_id}/body", response_model=CompletionResponse)
async def save_completion_body(
    completion_id: int,
    req: SaveBodyRequest,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CompletionResponse:
    completion = StudentExerciseInteractor(repository).save_submission(ctx, completion_id, req.body)
    return completion_response(completion, repository.get_exercise(completion.exercise_id))


@exercise_routes.post("/completions/{completion_id}/complete", response_model=CompletionResponse)
async def complete_completion(
    completion_id: int,
    ctx: UserContext = Depends(user_context),
    repository: SqlProgressionRepository = Depends(get_repository),
) -> CompletionResponse:
    completion = StudentExerciseInteractor(repository).complete_exercise(ctx, completion_id)
    return completion_response(completion, repository.get_exercise(completion.exercise_id))
