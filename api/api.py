from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from api.routes.auth_routes import auth_routes
from api.routes.course_routes import course_routes
from api.routes.lesson_routes import lesson_routes
from api.routes.exercise_routes import exercise_routes
from api.config import create_db, get_settings
from api.services.sweep_service import SweepScheduler
from api.utils.logger import configure_logging, set_request_id, clear_request_id
from curriculum.core.errors import CoreError, PermissionDenied, CompletionAccessDenied
from fastapi import Request
from starlette.responses import Response, JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = configure_logging()

CATEGORY_STATUS = {
    "validation": 422,
    "state_conflict": 409,
    "not_found": 404,
    "data_inconsistency": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    create_db()
    scheduler = None
    if settings.sweep_enabled:
        scheduler = SweepScheduler(settings.sweep_interval_seconds)
        scheduler.start()
    app.state.sweep_scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


def core_error_status(exc: CoreError) -> int:
    if isinstance(exc, (PermissionDenied, CompletionAccessDenied)):
        return 403
    return CATEGORY_STATUS.get(exc.category, HTTP_500_INTERNAL_SERVER_ERROR)


@app.exception_handler(CoreError)
async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    status_code = core_error_status(exc)
    if status_code >= 500:
        logger.error("core error status=%s method=%s path=%s error=%s", status_code, request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.warning("core error status=%s method=%s path=%s error=%s", status_code, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(exc.to_dict())})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Log server-side errors with stack traces; client errors as warnings.
    if exc.status_code >= 500:
        logger.exception("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=\n%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "Curriculum is Healthy"}

app.include_router(auth_routes, prefix="/auth")
app.include_router(course_routes)
app.include_router(lesson_routes)
app.include_router(exercise_routes)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
