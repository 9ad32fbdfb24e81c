"""
SQLAlchemy-backed storage for the progression engine.

Maps ORM rows onto the curriculum domain records. Writes are flushed
immediately (sessions run with autoflush=False) and committed when the
outermost `atomic()` block exits.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from api.models.models import (
    Course as DbCourse,
    Exercise as DbExercise,
    ExerciseCompletion as DbCompletion,
    Lesson as DbLesson,
    LessonProgress as DbLessonProgress,
    UserCourse as DbUserCourse,
)
from api.utils.logger import configure_logging
from curriculum.core.errors import AttemptAlreadyStarted, EntityNotFound
from curriculum.core.models import (
    CompletionState,
    Course,
    CoursePatch,
    Exercise,
    ExerciseCompletion,
    ExerciseDraft,
    ExerciseEstimate,
    ExercisePatch,
    Lesson,
    LessonPatch,
    LessonProgress,
    LessonProgressState,
    SiblingOrder,
    UserCourse,
)
from curriculum.core.repository import ProgressionRepository

logger = configure_logging()


def _course(row: DbCourse) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description or "",
        state=row.state,
        published_date=row.published_date,
    )


def _lesson(row: DbLesson) -> Lesson:
    return Lesson(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        description=row.description or "",
        order=row.lesson_order,
    )


def _exercise(row: DbExercise) -> Exercise:
    return Exercise(
        id=row.id,
        lesson_id=row.lesson_id,
        title=row.title,
        description=row.description or "",
        exercise_type=row.exercise_type,
        answer_body=row.answer_body,
        exercise_body=row.exercise_body,
        difficulty=row.difficulty,
        time_to_complete=row.time_to_complete,
        order=row.exercise_order,
    )


def _completion(row: DbCompletion) -> ExerciseCompletion:
    return ExerciseCompletion(
        id=row.id,
        exercise_id=row.exercise_id,
        user_id=row.user_id,
        attempt_number=row.attempt_number,
        date_started=row.date_started,
        state=row.state,
        submitted_body=row.body or {},
        date_last_changes=row.date_last_changes,
        date_completed=row.date_completed,
        points_scored=row.points_scored,
        max_points=row.max_points,
    )


def _progress(row: DbLessonProgress) -> LessonProgress:
    return LessonProgress(
        user_id=row.user_id,
        lesson_id=row.lesson_id,
        date_started=row.date_started,
        state=row.state,
        date_complete=row.date_complete,
    )


class SqlProgressionRepository(ProgressionRepository):
    """ProgressionRepository over a single SQLAlchemy session."""

    def __init__(self, db: DBSession):
        self.db = db
        self._depth = 0

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.db.commit()
        except Exception:
            if self._depth == 1:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1

    def _row(self, model, entity: str, key: Any):
        row = self.db.get(model, key)
        if row is None:
            raise EntityNotFound(entity, key)
        return row

    # ----- courses -----

    def get_course(self, course_id: int) -> Course:
        return _course(self._row(DbCourse, "course", course_id))

    def create_course(self, title: str, description: str) -> int:
        row = DbCourse(title=title, description=description)
        self.db.add(row)
        self.db.flush()
        return int(row.id)

    def update_course(self, course_id: int, patch: CoursePatch) -> None:
        row = self._row(DbCourse, "course", course_id)
        for name, value in patch.changes().items():
            setattr(row, name, value)
        self.db.flush()

    def get_user_course(self, user_id: int, course_id: int) -> Optional[UserCourse]:
        row = self.db.get(DbUserCourse, (user_id, course_id))
        if row is None:
            return None
        return UserCourse(user_id=row.user_id, course_id=row.course_id, role=row.user_role)

    def create_user_course(self, user_course: UserCourse) -> None:
        self.db.add(
            DbUserCourse(
                user_id=user_course.user_id,
                course_id=user_course.course_id,
                user_role=user_course.role,
            )
        )
        self.db.flush()

    def delete_user_course(self, user_id: int, course_id: int) -> None:
        row = self.db.get(DbUserCourse, (user_id, course_id))
        if row is not None:
            self.db.delete(row)
            self.db.flush()

    # ----- lessons -----

    def get_lesson(self, lesson_id: int) -> Lesson:
        return _lesson(self._row(DbLesson, "lesson", lesson_id))

    def list_course_lessons(self, course_id: int) -> List[Lesson]:
        rows = (
            self.db.query(DbLesson)
            .filter(DbLesson.course_id == course_id)
            .order_by(DbLesson.lesson_order.asc(), DbLesson.id.asc())
            .all()
        )
        return [_lesson(r) for r in rows]

    def create_lesson(self, course_id: int, title: str, description: str, order: int) -> int:
        self._row(DbCourse, "course", course_id)
        row = DbLesson(course_id=course_id, title=title, description=description, lesson_order=order)
        self.db.add(row)
        self.db.flush()
        return int(row.id)

    def update_lesson(self, lesson_id: int, patch: LessonPatch) -> None:
        row = self._row(DbLesson, "lesson", lesson_id)
        for name, value in patch.changes().items():
            setattr(row, name, value)
        self.db.flush()

    def delete_lesson(self, lesson_id: int) -> None:
        # cascades to exercises, their completions and lesson progress
        self.db.delete(self._row(DbLesson, "lesson", lesson_id))
        self.db.flush()

    def update_lesson_orders(self, orders: Iterable[SiblingOrder]) -> None:
        for item in orders:
            self._row(DbLesson, "lesson", item.id).lesson_order = item.order
        self.db.flush()

    # ----- exercises -----

    def get_exercise(self, exercise_id: int) -> Exercise:
        return _exercise(self._row(DbExercise, "exercise", exercise_id))

    def list_lesson_exercises(self, lesson_id: int) -> List[Exercise]:
        rows = (
            self.db.query(DbExercise)
            .filter(DbExercise.lesson_id == lesson_id)
            .order_by(DbExercise.exercise_order.asc(), DbExercise.id.asc())
            .all()
        )
        return [_exercise(r) for r in rows]

    def create_exercise(self, draft: ExerciseDraft, order: int) -> int:
        self._row(DbLesson, "lesson", draft.lesson_id)
        row = DbExercise(
            lesson_id=draft.lesson_id,
            title=draft.title,
            description=draft.description,
            exercise_type=draft.exercise_type,
            exercise_body=draft.exercise_body,
            answer_body=draft.answer_body,
            difficulty=draft.difficulty,
            time_to_complete=draft.time_to_complete,
            exercise_order=order,
        )
        self.db.add(row)
        self.db.flush()
        return int(row.id)

    def update_exercise(self, exercise_id: int, patch: ExercisePatch) -> None:
        row = self._row(DbExercise, "exercise", exercise_id)
        for name, value in patch.changes().items():
            setattr(row, name, value)
        self.db.flush()

    def delete_exercise(self, exercise_id: int) -> None:
        self.db.delete(self._row(DbExercise, "exercise", exercise_id))
        self.db.flush()

    def update_exercise_orders(self, orders: Iterable[SiblingOrder]) -> None:
        for item in orders:
            self._row(DbExercise, "exercise", item.id).exercise_order = item.order
        self.db.flush()

    # ----- completions -----

    def get_completion(self, completion_id: int) -> ExerciseCompletion:
        return _completion(self._row(DbCompletion, "completion", completion_id))

    def list_user_completions(self, user_id: int, exercise_id: int) -> List[ExerciseCompletion]:
        rows = (
            self.db.query(DbCompletion)
            .filter(DbCompletion.user_id == user_id, DbCompletion.exercise_id == exercise_id)
            .order_by(DbCompletion.attempt_number.asc())
            .all()
        )
        return [_completion(r) for r in rows]

    def create_completion(
        self,
        exercise_id: int,
        user_id: int,
        attempt_number: int,
        date_started: datetime,
        body: Dict[str, Any],
    ) -> ExerciseCompletion:
        row = DbCompletion(
            exercise_id=exercise_id,
            user_id=user_id,
            attempt_number=attempt_number,
            date_started=date_started,
            state=CompletionState.IN_PROGRESS,
            body=body,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            logger.warning(
                "attempt already started exercise_id=%s user_id=%s attempt=%s",
                exercise_id,
                user_id,
                attempt_number,
            )
            raise AttemptAlreadyStarted(exercise_id=exercise_id, attempt_number=attempt_number) from e
        return _completion(row)

    def save_completion_body(self, completion_id: int, body: Dict[str, Any], changed_at: datetime) -> None:
        row = self._row(DbCompletion, "completion", completion_id)
        row.body = body
        row.date_last_changes = changed_at
        self.db.flush()

    def complete_completion(
        self, completion_id: int, estimate: ExerciseEstimate, completed_at: datetime
    ) -> bool:
        updated = (
            self.db.query(DbCompletion)
            .filter(
                DbCompletion.id == completion_id,
                DbCompletion.state == CompletionState.IN_PROGRESS,
            )
            .update(
                {
                    DbCompletion.state: estimate.state,
                    DbCompletion.points_scored: estimate.points,
                    DbCompletion.max_points: estimate.max_points,
                    DbCompletion.date_completed: completed_at,
                },
                synchronize_session=False,
            )
        )
        self.db.expire_all()
        return updated == 1

    def list_completions_in_state(self, state: CompletionState) -> List[ExerciseCompletion]:
        rows = (
            self.db.query(DbCompletion)
            .filter(DbCompletion.state == state)
            .order_by(DbCompletion.date_started.asc(), DbCompletion.id.asc())
            .all()
        )
        return [_completion(r) for r in rows]

    def delete_exercise_completions(self, exercise_id: int) -> int:
        deleted = (
            self.db.query(DbCompletion)
            .filter(DbCompletion.exercise_id == exercise_id)
            .delete(synchronize_session=False)
        )
        self.db.expire_all()
        return int(deleted)

    def count_succeeded_exercises(self, user_id: int, exercise_ids: Iterable[int]) -> int:
        ids = list(exercise_ids)
        if not ids:
            return 0
        count = (
            self.db.query(func.count(func.distinct(DbCompletion.exercise_id)))
            .filter(
                DbCompletion.user_id == user_id,
                DbCompletion.exercise_id.in_(ids),
                DbCompletion.state == CompletionState.SUCCEEDED,
            )
            .scalar()
        )
        return int(count or 0)

    # ----- lesson progress -----

    def get_lesson_progress(self, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        row = self.db.get(DbLessonProgress, (user_id, lesson_id))
        return _progress(row) if row is not None else None

    def list_course_progresses(self, user_id: int, course_id: int) -> List[LessonProgress]:
        rows = (
            self.db.query(DbLessonProgress)
            .join(DbLesson, DbLesson.id == DbLessonProgress.lesson_id)
            .filter(DbLessonProgress.user_id == user_id, DbLesson.course_id == course_id)
            .order_by(DbLesson.lesson_order.asc())
            .all()
        )
        return [_progress(r) for r in rows]

    def create_lesson_progress(self, user_id: int, lesson_id: int, date_started: datetime) -> LessonProgress:
        row = DbLessonProgress(
            user_id=user_id,
            lesson_id=lesson_id,
            date_started=date_started,
            state=LessonProgressState.IN_PROGRESS,
        )
        self.db.add(row)
        self.db.flush()
        return _progress(row)

    def update_lesson_progress_state(
        self,
        user_id: int,
        lesson_id: int,
        state: LessonProgressState,
        date_complete: Optional[datetime] = None,
    ) -> bool:
        row = self.db.get(DbLessonProgress, (user_id, lesson_id))
        if row is None:
            return False
        row.state = state
        row.date_complete = date_complete if state is LessonProgressState.DONE else None
        self.db.flush()
        return True

    def set_lessons_progress_state(self, lesson_ids: Iterable[int], state: LessonProgressState) -> int:
        ids = list(lesson_ids)
        if not ids:
            return 0
        values: Dict[Any, Any] = {DbLessonProgress.state: state}
        if state is not LessonProgressState.DONE:
            values[DbLessonProgress.date_complete] = None
        touched = (
            self.db.query(DbLessonProgress)
            .filter(DbLessonProgress.lesson_id.in_(ids))
            .update(values, synchronize_session=False)
        )
        self.db.expire_all()
        return int(touched)
