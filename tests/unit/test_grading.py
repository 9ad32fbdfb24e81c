"""Unit tests for the grading engine (pure functions)."""
from datetime import datetime

import pytest

from factories import make_conspect
from curriculum.core.models import CompletionState, Difficulty, Exercise, ExerciseCompletion, ExerciseType
from curriculum.diagram import evaluate
from curriculum.diagram.grading import (
    Estimate,
    evaluate_connections,
    evaluate_conspects,
    evaluate_node,
    verdict,
)
from curriculum.diagram.schemas import Connection, Node


def _exercise(difficulty=Difficulty.HARD, answer_body=None):
    return Exercise(
        id=1,
        lesson_id=1,
        title="Exercise",
        exercise_type=ExerciseType.CONSPECT,
        answer_body=answer_body or make_conspect(),
        difficulty=difficulty,
    )


def _completion(body):
    return ExerciseCompletion(
        id=1,
        exercise_id=1,
        user_id=1,
        attempt_number=0,
        date_started=datetime(2025, 1, 1),
        submitted_body=body,
    )


def _edges(*pairs):
    return [Connection(**{"from": a, "to": b}) for a, b in pairs]


def _stages_node(node_id, stage_ids):
    return Node(
        id=node_id,
        kind="ProcessStages",
        body={"header": "S", "stages": [{"id": s, "name": str(s)} for s in stage_ids]},
    )


@pytest.mark.unit
class TestConnections:
    def test_matching_edges(self):
        result = evaluate_connections(_edges(("a", "b"), ("b", "c")), _edges(("a", "b"), ("b", "c")))
        assert result == Estimate(points=2, max_points=2)

    def test_direction_matters(self):
        result = evaluate_connections(_edges(("b", "a")), _edges(("a", "b")))
        assert result == Estimate(points=0, max_points=1)

    def test_omissions_penalized_below_zero(self):
        result = evaluate_connections(_edges(("x", "y")), _edges(("a", "b"), ("b", "c"), ("c", "d")))
        assert result == Estimate(points=-2, max_points=1)

    def test_extra_student_edges_only_raise_max(self):
        result = evaluate_connections(_edges(("a", "b"), ("x", "y")), _edges(("a", "b")))
        assert result == Estimate(points=1, max_points=2)


@pytest.mark.unit
class TestNodes:
    def test_partial_stage_match(self):
        result = evaluate_node(_stages_node("p1", [1, 2, 3]), [_stages_node("p1", [1, 5, 3])])
        assert result == Estimate(points=2, max_points=3)

    def test_shorter_solution_stops_comparison(self):
        result = evaluate_node(_stages_node("p1", [1, 2, 3]), [_stages_node("p1", [1])])
        assert result == Estimate(points=1, max_points=3)

    def test_no_matching_id(self):
        result = evaluate_node(_stages_node("p1", [1, 2]), [_stages_node("p9", [1, 2])])
        assert result == Estimate()

    def test_header_is_ungraded(self):
        header = Node(id="h1", kind="Header", body={"header": "H"})
        assert evaluate_node(header, [header]) == Estimate()


@pytest.mark.unit
class TestEvaluate:
    def test_exact_answer_scores_full(self):
        estimate = evaluate(_exercise(Difficulty.HARD), _completion(make_conspect()))
        assert estimate.state is CompletionState.SUCCEEDED
        assert estimate.points == pytest.approx(100.0)
        assert estimate.max_points == pytest.approx(100.0)

    def test_scaled_by_difficulty(self):
        estimate = evaluate(_exercise(Difficulty.EASY), _completion(make_conspect()))
        assert estimate.max_points == pytest.approx(35.0)
        assert estimate.points == pytest.approx(35.0)
        assert estimate.difficulty is Difficulty.EASY

    def test_partial_answer(self):
        # edges 2/2, stages 2/3 -> 4/5
        student = make_conspect(stages=(1, 2, 3))
        solution = make_conspect(stages=(1, 5, 3))
        estimate = evaluate(_exercise(Difficulty.MEDIUM, solution), _completion(student))
        assert estimate.points == pytest.approx(70.0 * 4 / 5)
        assert estimate.state is CompletionState.SUCCEEDED

    def test_exactly_three_fifths_passes(self):
        # edges 2/2, stages 1/3 -> 3/5
        solution = make_conspect(stages=(1, 5, 6))
        estimate = evaluate(_exercise(Difficulty.HARD, solution), _completion(make_conspect(stages=(1, 2, 3))))
        assert estimate.state is CompletionState.SUCCEEDED
        assert estimate.points == pytest.approx(60.0)

    def test_just_below_three_fifths_fails(self):
        # edges 2/3 (one stray), stages 2/4 -> 4/7
        student = make_conspect(stages=(1, 2, 3, 4), connections=(("h1", "d1"), ("d1", "p1"), ("p1", "h1")))
        solution = make_conspect(stages=(1, 2, 8, 9))
        raw = evaluate_conspects(student, solution)
        assert (raw.points, raw.max_points) == (4, 7)
        estimate = evaluate(_exercise(Difficulty.HARD, solution), _completion(student))
        assert estimate.state is CompletionState.FAILED
        assert estimate.points == pytest.approx(100.0 * 4 / 7)

    def test_prompt_stages_node_without_stages_scores_zero(self):
        # a prompt node copied into the attempt before the student filled it in
        student = make_conspect(connections=())
        student["nodes"][2]["body"] = {"header": "Stages"}
        assert evaluate_node(Node(**student["nodes"][2]), [_stages_node("p1", [1, 2, 3])]) == Estimate()

        estimate = evaluate(_exercise(Difficulty.HARD), _completion(student))
        assert estimate.state is CompletionState.FAILED
        assert estimate.points == 0.0

    def test_below_threshold_fails(self):
        student = make_conspect(stages=(9, 9, 9), connections=(("d1", "h1"), ("p1", "d1")))
        estimate = evaluate(_exercise(Difficulty.HARD), _completion(student))
        assert estimate.state is CompletionState.FAILED
        assert estimate.points == pytest.approx(0.0)

    def test_negative_raw_score_floors_points(self):
        student = make_conspect(stages=(), connections=(("x", "y"),))
        solution = make_conspect(
            stages=(),
            connections=(("h1", "d1"), ("d1", "p1"), ("p1", "h1"), ("h1", "p1")),
        )
        raw = evaluate_conspects(student, solution)
        assert raw.points < 0

        estimate = evaluate(_exercise(Difficulty.HARD, solution), _completion(student))
        assert estimate.points == 0.0
        assert estimate.state is CompletionState.FAILED

    def test_nothing_gradable_fails(self):
        estimate = evaluate(_exercise(Difficulty.HARD), _completion({"nodes": [], "connections": []}))
        assert estimate.state is CompletionState.FAILED
        assert estimate.points == 0.0
        assert estimate.max_points == pytest.approx(100.0)

    def test_read_always_succeeds(self):
        estimate = evaluate(_exercise(Difficulty.READ), _completion({"nodes": [], "connections": []}))
        assert estimate.state is CompletionState.SUCCEEDED
        assert (estimate.points, estimate.max_points) == (0.0, 0.0)


@pytest.mark.unit
class TestVerdict:
    @pytest.mark.parametrize(
        "ratio,state",
        [(0.6, CompletionState.SUCCEEDED), (0.59, CompletionState.FAILED), (1.0, CompletionState.SUCCEEDED)],
    )
    def test_threshold(self, ratio, state):
        assert verdict(ratio) is state
