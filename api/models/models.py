from api.config import Base
from sqlalchemy import (
    Column,
    Integer,
    String,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Float,
    Enum as SQLEnum,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from curriculum.core.models import (
    CompletionState,
    CourseState,
    Difficulty,
    ExerciseType,
    LessonProgressState,
    UserCourseRole,
)


def _enum(enum_cls):
    # store "InProgress", not "IN_PROGRESS"
    return SQLEnum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=32)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    hashed_password = Column(String)


class Course(Base):
    __tablename__ = "courses"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    state = Column(_enum(CourseState), nullable=False, default=CourseState.DRAFT)
    published_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    members = relationship("UserCourse", backref="course", cascade="all, delete-orphan")
    lessons = relationship("Lesson", backref="course", cascade="all, delete-orphan")


class UserCourse(Base):
    __tablename__ = "users_courses"
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id"), primary_key=True, index=True)
    user_role = Column(_enum(UserCourseRole), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Lesson(Base):
    __tablename__ = "lessons"
    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    # 1..N within the course; not unique-constrained so reorders can rewrite rows one by one
    lesson_order = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    exercises = relationship("Exercise", backref="lesson", cascade="all, delete-orphan")
    progresses = relationship("LessonProgress", backref="lesson", cascade="all, delete-orphan")


class Exercise(Base):
    __tablename__ = "exercises"
    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    exercise_type = Column(_enum(ExerciseType), nullable=False)
    exercise_body = Column(JSON, nullable=True)  # prompt diagram shown to the student
    answer_body = Column(JSON, nullable=False)  # reference solution used for grading
    difficulty = Column(_enum(Difficulty), nullable=False)
    time_to_complete = Column(Integer, nullable=True)  # seconds
    exercise_order = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    completions = relationship("ExerciseCompletion", backref="exercise", cascade="all, delete-orphan")


class ExerciseCompletion(Base):
    __tablename__ = "exercise_completions"
    __table_args__ = (
        UniqueConstraint("exercise_id", "user_id", "attempt_number", name="uq_completion_attempt"),
    )
    id = Column(Integer, primary_key=True, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    date_started = Column(DateTime, nullable=False)
    date_last_changes = Column(DateTime, nullable=True)
    date_completed = Column(DateTime, nullable=True)
    state = Column(_enum(CompletionState), nullable=False, default=CompletionState.IN_PROGRESS, index=True)
    body = Column(JSON, nullable=False)
    points_scored = Column(Float, nullable=True)
    max_points = Column(Float, nullable=True)


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), primary_key=True, index=True)
    date_started = Column(DateTime, nullable=False)
    date_complete = Column(DateTime, nullable=True)
    state = Column(_enum(LessonProgressState), nullable=False, default=LessonProgressState.IN_PROGRESS)
