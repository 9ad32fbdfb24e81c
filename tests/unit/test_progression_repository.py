"""SQLAlchemy repository: transactions, conditional completion and uniqueness."""
import pytest

from factories import T0, make_conspect
from curriculum.core.errors import AttemptAlreadyStarted, EntityNotFound
from curriculum.core.models import (
    CompletionState,
    Difficulty,
    ExerciseEstimate,
    LessonProgressState,
    SiblingOrder,
)


@pytest.fixture
def exercise_id(seed, creator_id):
    return seed.exercise(creator_id, seed.lesson(creator_id, seed.course(creator_id)))


def _estimate(state=CompletionState.SUCCEEDED):
    return ExerciseEstimate(points=35.0, max_points=35.0, difficulty=Difficulty.EASY, state=state)


@pytest.mark.unit
class TestAtomic:
    def test_rolls_back_on_error(self, repository, seed, creator_id):
        course_id = seed.course(creator_id)
        with pytest.raises(RuntimeError):
            with repository.atomic():
                repository.create_lesson(course_id, "Doomed", "", 1)
                raise RuntimeError("boom")
        assert repository.list_course_lessons(course_id) == []

    def test_nested_block_commits_with_outer(self, repository, seed, creator_id):
        course_id = seed.course(creator_id)
        with pytest.raises(RuntimeError):
            with repository.atomic():
                with repository.atomic():
                    repository.create_lesson(course_id, "Inner", "", 1)
                raise RuntimeError("outer fails")
        assert repository.list_course_lessons(course_id) == []

    def test_multi_row_order_update(self, repository, seed, creator_id):
        course_id = seed.course(creator_id)
        a = seed.lesson(creator_id, course_id, "A")
        b = seed.lesson(creator_id, course_id, "B")
        with repository.atomic():
            repository.update_lesson_orders([SiblingOrder(id=a, order=2), SiblingOrder(id=b, order=1)])
        assert [l.id for l in repository.list_course_lessons(course_id)] == [b, a]


@pytest.mark.unit
class TestCompletions:
    def test_duplicate_attempt_number(self, repository, exercise_id, creator_id):
        with repository.atomic():
            repository.create_completion(exercise_id, creator_id, 0, T0, make_conspect())
        with pytest.raises(AttemptAlreadyStarted):
            with repository.atomic():
                repository.create_completion(exercise_id, creator_id, 0, T0, make_conspect())
        assert len(repository.list_user_completions(creator_id, exercise_id)) == 1

    def test_complete_only_once(self, repository, exercise_id, creator_id):
        with repository.atomic():
            completion = repository.create_completion(exercise_id, creator_id, 0, T0, make_conspect())
        with repository.atomic():
            assert repository.complete_completion(completion.id, _estimate(), T0) is True
        with repository.atomic():
            assert repository.complete_completion(completion.id, _estimate(CompletionState.FAILED), T0) is False

        stored = repository.get_completion(completion.id)
        assert stored.state is CompletionState.SUCCEEDED
        assert stored.points_scored == 35.0

    def test_count_distinct_succeeded(self, repository, exercise_id, creator_id):
        with repository.atomic():
            for attempt in range(2):
                c = repository.create_completion(exercise_id, creator_id, attempt, T0, make_conspect())
                repository.complete_completion(c.id, _estimate(), T0)
        assert repository.count_succeeded_exercises(creator_id, [exercise_id]) == 1
        assert repository.count_succeeded_exercises(creator_id, []) == 0

    def test_in_state_listing(self, repository, exercise_id, creator_id):
        with repository.atomic():
            open_one = repository.create_completion(exercise_id, creator_id, 0, T0, make_conspect())
            done = repository.create_completion(exercise_id, creator_id, 1, T0, make_conspect())
            repository.complete_completion(done.id, _estimate(), T0)
        pending = repository.list_completions_in_state(CompletionState.IN_PROGRESS)
        assert [c.id for c in pending] == [open_one.id]

    def test_unknown_completion(self, repository):
        with pytest.raises(EntityNotFound) as exc:
            repository.get_completion(404)
        assert exc.value.details == {"entity": "completion", "id": 404}


@pytest.mark.unit
class TestLessonProgress:
    def test_bulk_state_clears_completion_date(self, repository, seed, creator_id):
        course_id = seed.course(creator_id)
        lesson_id = seed.lesson(creator_id, course_id)
        with repository.atomic():
            repository.create_lesson_progress(creator_id, lesson_id, T0)
            repository.update_lesson_progress_state(creator_id, lesson_id, LessonProgressState.DONE, date_complete=T0)
        with repository.atomic():
            assert repository.set_lessons_progress_state([lesson_id], LessonProgressState.PAUSE) == 1

        progress = repository.get_lesson_progress(creator_id, lesson_id)
        assert progress.state is LessonProgressState.PAUSE
        assert progress.date_complete is None

    def test_update_missing_row(self, repository):
        assert repository.update_lesson_progress_state(1, 1, LessonProgressState.DONE) is False
