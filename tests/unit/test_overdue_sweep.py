"""Overdue sweep: deadline handling, lesson completion and per-item isolation."""
import pytest

from factories import make_conspect
from curriculum.core.context import UserContext
from curriculum.core.models import CompletionState, Difficulty, LessonProgressState
from curriculum.progression import StudentExerciseInteractor, StudentLessonInteractor
from curriculum.sweep import OverdueSweep


@pytest.fixture
def timed(seed, creator_id, repository, clock):
    """One lesson with a single 60-second exercise; the student has started both."""
    course_id = seed.course(creator_id)
    lesson_id = seed.lesson(creator_id, course_id)
    exercise_id = seed.exercise(creator_id, lesson_id, time_to_complete=60)
    student = UserContext(user_id=seed.student(course_id))

    StudentLessonInteractor(repository, clock=clock).start_lesson(student, lesson_id)
    exercises = StudentExerciseInteractor(repository, clock=clock)
    completion = exercises.start_exercise(student, exercise_id)
    return {
        "student": student,
        "lesson_id": lesson_id,
        "exercise_id": exercise_id,
        "completion_id": completion.id,
        "exercises": exercises,
    }


@pytest.mark.unit
class TestOverdueSweep:
    def test_before_deadline_untouched(self, timed, repository, clock):
        clock.advance(59)
        assert OverdueSweep(repository, clock=clock).run() == 0
        assert repository.get_completion(timed["completion_id"]).state is CompletionState.IN_PROGRESS

    def test_after_deadline_graded(self, timed, repository, clock):
        timed["exercises"].save_submission(timed["student"], timed["completion_id"], make_conspect())
        clock.advance(61)

        assert OverdueSweep(repository, clock=clock).run() == 1

        completion = repository.get_completion(timed["completion_id"])
        assert completion.state is CompletionState.SUCCEEDED
        assert completion.date_completed == clock()
        progress = repository.get_lesson_progress(timed["student"].user_id, timed["lesson_id"])
        assert progress.state is LessonProgressState.DONE

    def test_unsaved_attempt_fails(self, timed, repository, clock):
        clock.advance(61)
        assert OverdueSweep(repository, clock=clock).run() == 1
        assert repository.get_completion(timed["completion_id"]).state is CompletionState.FAILED
        progress = repository.get_lesson_progress(timed["student"].user_id, timed["lesson_id"])
        assert progress.state is LessonProgressState.IN_PROGRESS

    def test_second_run_finds_nothing(self, timed, repository, clock):
        clock.advance(61)
        sweep = OverdueSweep(repository, clock=clock)
        assert sweep.run() == 1
        assert sweep.run() == 0

    def test_already_completed_by_student_skipped(self, timed, repository, clock):
        timed["exercises"].complete_exercise(timed["student"], timed["completion_id"])
        clock.advance(61)
        assert OverdueSweep(repository, clock=clock).run() == 0

    def test_exercise_without_deadline_never_swept(self, seed, creator_id, repository, clock):
        course_id = seed.course(creator_id)
        exercise_id = seed.exercise(creator_id, seed.lesson(creator_id, course_id))
        student = UserContext(user_id=seed.student(course_id))
        completion = StudentExerciseInteractor(repository, clock=clock).start_exercise(student, exercise_id)

        clock.advance(365 * 24 * 3600)

        assert OverdueSweep(repository, clock=clock).run() == 0
        assert repository.get_completion(completion.id).state is CompletionState.IN_PROGRESS

    def test_read_exercise_succeeds_when_swept(self, seed, creator_id, repository, clock):
        course_id = seed.course(creator_id)
        exercise_id = seed.exercise(
            creator_id, seed.lesson(creator_id, course_id), difficulty=Difficulty.READ, time_to_complete=10
        )
        student = UserContext(user_id=seed.student(course_id))
        completion = StudentExerciseInteractor(repository, clock=clock).start_exercise(student, exercise_id)

        clock.advance(10)

        assert OverdueSweep(repository, clock=clock).run() == 1
        assert repository.get_completion(completion.id).state is CompletionState.SUCCEEDED

    def test_failure_is_isolated(self, timed, seed, creator_id, repository, clock, monkeypatch):
        other_course = seed.course(creator_id, title="Other")
        other_exercise = seed.exercise(creator_id, seed.lesson(creator_id, other_course), time_to_complete=60)
        other_student = UserContext(user_id=seed.student(other_course, "other@example.com"))
        other = StudentExerciseInteractor(repository, clock=clock).start_exercise(other_student, other_exercise)
        clock.advance(61)

        real_get_exercise = repository.get_exercise

        def flaky_get_exercise(exercise_id):
            if exercise_id == timed["exercise_id"]:
                raise RuntimeError("corrupted row")
            return real_get_exercise(exercise_id)

        monkeypatch.setattr(repository, "get_exercise", flaky_get_exercise)

        assert OverdueSweep(repository, clock=clock).run() == 1
        assert repository.get_completion(other.id).state is CompletionState.FAILED
        assert repository.get_completion(timed["completion_id"]).state is CompletionState.IN_PROGRESS

    def test_unfilled_prompt_stages_still_graded(self, seed, creator_id, repository, clock):
        prompt = make_conspect(connections=())
        prompt["nodes"][2]["body"] = {"header": "Stages"}
        course_id = seed.course(creator_id)
        lesson_id = seed.lesson(creator_id, course_id)
        exercise_id = seed.exercise(creator_id, lesson_id, exercise_body=prompt, time_to_complete=60)
        student = UserContext(user_id=seed.student(course_id))
        completion = StudentExerciseInteractor(repository, clock=clock).start_exercise(student, exercise_id)
        assert completion.submitted_body == prompt

        clock.advance(61)
        sweep = OverdueSweep(repository, clock=clock)

        assert sweep.run() == 1
        assert sweep.run() == 0
        graded = repository.get_completion(completion.id)
        assert graded.state is CompletionState.FAILED
        assert graded.points_scored == 0.0
