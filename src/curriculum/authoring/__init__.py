from curriculum.authoring.courses import CreatorCourseInteractor
from curriculum.authoring.exercises import CreatorExerciseInteractor
from curriculum.authoring.lessons import CreatorLessonInteractor

__all__ = ["CreatorCourseInteractor", "CreatorExerciseInteractor", "CreatorLessonInteractor"]
