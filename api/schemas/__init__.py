"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import CourseResponse, CompletionResponse
    from api.schemas.exercise_schemas import CompletionResponse
"""

from api.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
)
from api.schemas.user_schemas import User
from api.schemas.course_schemas import (
    ChangeOrderRequest,
    CourseResponse,
    CreateCourseRequest,
    CreateLessonRequest,
    LessonListResponse,
    LessonResponse,
    MembershipResponse,
    OrderListResponse,
    SiblingOrderResponse,
    UpdateCourseRequest,
    UpdateLessonRequest,
)
from api.schemas.exercise_schemas import (
    CompletionListResponse,
    CompletionResponse,
    CreateExerciseRequest,
    ExerciseDetailResponse,
    ExerciseListResponse,
    ExerciseResponse,
    SaveBodyRequest,
    UpdateExerciseRequest,
)
from api.schemas.user_progress_schemas import (
    CourseProgressResponse,
    LessonProgressResponse,
)

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "MeResponse",
    "RegisterRequest",
    "RegisterResponse",
    # user
    "User",
    # course / lesson
    "ChangeOrderRequest",
    "CourseResponse",
    "CreateCourseRequest",
    "CreateLessonRequest",
    "LessonListResponse",
    "LessonResponse",
    "MembershipResponse",
    "OrderListResponse",
    "SiblingOrderResponse",
    "UpdateCourseRequest",
    "UpdateLessonRequest",
    # exercise / completion
    "CompletionListResponse",
    "CompletionResponse",
    "CreateExerciseRequest",
    "ExerciseDetailResponse",
    "ExerciseListResponse",
    "ExerciseResponse",
    "SaveBodyRequest",
    "UpdateExerciseRequest",
    # progress
    "CourseProgressResponse",
    "LessonProgressResponse",
]
