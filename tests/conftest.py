"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
import tempfile
from pathlib import Path

# Settings are read once at import; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SWEEP_ENABLED", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="curriculum-logs-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))
tests_path = Path(__file__).parent
if str(tests_path) not in sys.path:
    sys.path.insert(0, str(tests_path))


from factories import FakeClock, make_conspect  # noqa: E402


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine for tests."""
    return create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def session_factory(in_memory_engine):
    from api.config import Base
    import api.models  # noqa: F401
    Base.metadata.create_all(in_memory_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    """Create an in-memory database session. Uses api.config.Base for schema."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repository(db_session):
    from api.services.progression_repository import SqlProgressionRepository
    return SqlProgressionRepository(db_session)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def conspect():
    """Factory for valid diagrams; see make_conspect."""
    return make_conspect


class CurriculumSeed:
    """Builds users, courses, lessons and exercises through the authoring interactors."""

    def __init__(self, db, repository, clock):
        from curriculum.authoring import CreatorCourseInteractor, CreatorExerciseInteractor, CreatorLessonInteractor
        from curriculum.enrollment import StudentCourseInteractor

        self.db = db
        self.repository = repository
        self.clock = clock
        self.courses = CreatorCourseInteractor(repository, clock=clock)
        self.lessons = CreatorLessonInteractor(repository)
        self.exercises = CreatorExerciseInteractor(repository)
        self.enrollment = StudentCourseInteractor(repository)

    def user(self, email: str) -> int:
        from api.models.models import User
        user = User(email=email, hashed_password="x")
        self.db.add(user)
        self.db.commit()
        return int(user.id)

    def ctx(self, user_id: int):
        from curriculum.core.context import UserContext
        return UserContext(user_id=user_id)

    def course(self, creator_id: int, *, publish: bool = True, title: str = "Biology") -> int:
        course = self.courses.create_course(self.ctx(creator_id), title)
        if publish:
            self.courses.publish_course(self.ctx(creator_id), course.id)
        return course.id

    def lesson(self, creator_id: int, course_id: int, title: str = "Lesson") -> int:
        return self.lessons.create_lesson(self.ctx(creator_id), course_id, title).id

    def exercise(
        self,
        creator_id: int,
        lesson_id: int,
        *,
        difficulty=None,
        answer_body=None,
        exercise_body=None,
        time_to_complete=None,
        title: str = "Exercise",
    ) -> int:
        from curriculum.core.models import Difficulty, ExerciseDraft, ExerciseType
        draft = ExerciseDraft(
            lesson_id=lesson_id,
            title=title,
            exercise_type=ExerciseType.CONSPECT,
            answer_body=answer_body or make_conspect(),
            difficulty=difficulty or Difficulty.EASY,
            exercise_body=exercise_body,
            time_to_complete=time_to_complete,
        )
        return self.exercises.create_exercise(self.ctx(creator_id), draft).id

    def student(self, course_id: int, email: str = "student@example.com") -> int:
        user_id = self.user(email)
        self.enrollment.register_for_course(self.ctx(user_id), course_id)
        return user_id


@pytest.fixture
def seed(db_session, repository, clock):
    return CurriculumSeed(db_session, repository, clock)


@pytest.fixture
def creator_id(seed):
    return seed.user("creator@example.com")
