"""
Submission grammar checks for conspect exercises.

Runs whenever a diagram is written: exercise creation and update (reference
solution) and every student save.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError

from curriculum.core.errors import (
    IncorrectBodyFormat,
    IncorrectDefinitionFormat,
    IncorrectExerciseType,
    IncorrectHeaderFormat,
    IncorrectProcessStagesFormat,
    InvalidInputError,
    NotEnoughNodes,
)
from curriculum.core.models import ExerciseType
from curriculum.diagram.schemas import (
    Conspect,
    DefinitionBody,
    HeaderBody,
    Node,
    NodeKind,
    NodePayload,
    ProcessStagesBody,
)

MIN_NODES = 3

_PAYLOADS: Dict[NodeKind, tuple[Type[BaseModel], Type[InvalidInputError]]] = {
    NodeKind.HEADER: (HeaderBody, IncorrectHeaderFormat),
    NodeKind.DEFINITION: (DefinitionBody, IncorrectDefinitionFormat),
    NodeKind.PROCESS_STAGES: (ProcessStagesBody, IncorrectProcessStagesFormat),
}


def coerce_exercise_type(exercise_type: Any) -> ExerciseType:
    try:
        return ExerciseType(exercise_type)
    except ValueError:
        raise IncorrectExerciseType(exercise_type=str(exercise_type)) from None


def parse_conspect(body: Any) -> Conspect:
    """Parse a diagram without grammar rules beyond its shape."""
    if isinstance(body, Conspect):
        return body
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError as e:
            raise IncorrectBodyFormat(description=str(e)) from None
    try:
        return Conspect.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise IncorrectBodyFormat(description=f"{location}: {first.get('msg')}") from None


def node_payload(node: Node) -> NodePayload:
    """Validate a node body against its kind; raises the kind-specific format error."""
    model, error = _PAYLOADS[node.kind]
    try:
        return model.model_validate(node.body)  # type: ignore[return-value]
    except ValidationError:
        raise error(node_id=node.id) from None


def validate_nodes(conspect: Conspect) -> None:
    number_of_nodes = len(conspect.nodes)
    if number_of_nodes < MIN_NODES:
        raise NotEnoughNodes(number_of_nodes=number_of_nodes)
    for node in conspect.nodes:
        node_payload(node)


def validate_exercise_body(exercise_type: Any, body: Any) -> Conspect:
    """Check `body` against the grammar of `exercise_type` and return the parsed diagram."""
    exercise_type = coerce_exercise_type(exercise_type)

    if exercise_type in (ExerciseType.CONSPECT, ExerciseType.INTERACTIVE_CONSPECT):
        conspect = parse_conspect(body)
        validate_nodes(conspect)
        return conspect

    raise IncorrectExerciseType(exercise_type=exercise_type.value)
