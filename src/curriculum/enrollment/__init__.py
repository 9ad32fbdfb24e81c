from curriculum.enrollment.courses import StudentCourseInteractor

__all__ = ["StudentCourseInteractor"]
