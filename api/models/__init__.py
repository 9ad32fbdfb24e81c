"""
API data models. Single import surface for DB entities.

DB entities (api.models.models):
- User, Course, UserCourse, Lesson, Exercise, ExerciseCompletion, LessonProgress
"""

from api.models.models import (
    User,
    Course,
    UserCourse,
    Lesson,
    Exercise,
    ExerciseCompletion,
    LessonProgress,
)

__all__ = [
    "User",
    "Course",
    "UserCourse",
    "Lesson",
    "Exercise",
    "ExerciseCompletion",
    "LessonProgress",
]
