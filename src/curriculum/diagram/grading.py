"""
Grading engine: compares a student's diagram with the exercise's reference solution.

Raw score = connections sub-score + process-stage nodes sub-score. The raw
ratio is scaled to `100 * weight(difficulty)`; a ratio of at least 0.6 passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, cast

from curriculum.core.errors import IncorrectProcessStagesFormat
from curriculum.core.models import (
    CompletionState,
    Difficulty,
    Exercise,
    ExerciseCompletion,
    ExerciseEstimate,
)
from curriculum.diagram.schemas import Connection, Node, NodeKind, ProcessStagesBody
from curriculum.diagram.validator import node_payload, parse_conspect

PASS_THRESHOLD = 0.6


@dataclass
class Estimate:
    points: int = 0
    max_points: int = 0

    def __add__(self, other: "Estimate") -> "Estimate":
        return Estimate(self.points + other.points, self.max_points + other.max_points)


def evaluate(exercise: Exercise, completion: ExerciseCompletion) -> ExerciseEstimate:
    """Grade the completion's saved body against the exercise's answer body."""
    if exercise.difficulty is Difficulty.READ:
        return ExerciseEstimate(
            points=0.0,
            max_points=0.0,
            difficulty=Difficulty.READ,
            state=CompletionState.SUCCEEDED,
        )

    raw = evaluate_conspects(completion.submitted_body, exercise.answer_body)
    scaled_max = 100.0 * exercise.difficulty.weight

    if raw.max_points <= 0:
        # nothing gradable in the submission
        return ExerciseEstimate(
            points=0.0,
            max_points=scaled_max,
            difficulty=exercise.difficulty,
            state=CompletionState.FAILED,
        )

    ratio = raw.points / raw.max_points
    return ExerciseEstimate(
        points=max(0.0, scaled_max * ratio),
        max_points=scaled_max,
        difficulty=exercise.difficulty,
        state=verdict(ratio),
    )


def verdict(ratio: float) -> CompletionState:
    return CompletionState.SUCCEEDED if ratio >= PASS_THRESHOLD else CompletionState.FAILED


def evaluate_conspects(student_body, solution_body) -> Estimate:
    student = parse_conspect(student_body)
    solution = parse_conspect(solution_body)
    return (
        evaluate_connections(student.connections, solution.connections)
        + evaluate_nodes(student.nodes, solution.nodes)
    )


def evaluate_connections(student: Sequence[Connection], solution: Sequence[Connection]) -> Estimate:
    """
    One point per student edge that also exists in the solution.
    Missing edges (solution has more than the student) are subtracted; the
    result is allowed to go negative.
    """
    solution_edges = {c.edge for c in solution}
    result = Estimate(points=0, max_points=len(student))

    for connection in student:
        if connection.edge in solution_edges:
            result.points += 1

    surplus = len(solution) - len(student)
    if surplus > 0:
        result.points -= surplus

    return result


def evaluate_nodes(student: Sequence[Node], solution: Sequence[Node]) -> Estimate:
    result = Estimate()
    for node in student:
        result = result + evaluate_node(node, solution)
    return result


def evaluate_node(node: Node, solution: Sequence[Node]) -> Estimate:
    # Header and Definition nodes carry no gradable structure.
    if node.kind is not NodeKind.PROCESS_STAGES:
        return Estimate()

    solution_node = next((n for n in solution if n.id == node.id), None)
    if solution_node is None:
        return Estimate()

    stages = _submitted_stage_ids(node)
    solution_stages = _stage_ids(solution_node)

    points = sum(1 for mine, theirs in zip(stages, solution_stages) if mine == theirs)
    return Estimate(points=points, max_points=len(stages))


def _stage_ids(node: Node) -> List[int]:
    # a same-id solution node of another kind is reported as a stages format error
    payload = node_payload(node.model_copy(update={"kind": NodeKind.PROCESS_STAGES}))
    return [stage.id for stage in cast(ProcessStagesBody, payload).stages]


def _submitted_stage_ids(node: Node) -> List[int]:
    # a prompt node copied into the attempt may have no stages filled in yet
    try:
        return _stage_ids(node)
    except IncorrectProcessStagesFormat:
        return []
