from curriculum.progression.exercises import StudentExerciseInteractor
from curriculum.progression.lessons import StudentLessonInteractor

__all__ = ["StudentExerciseInteractor", "StudentLessonInteractor"]
