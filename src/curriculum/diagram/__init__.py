from curriculum.diagram.grading import PASS_THRESHOLD, evaluate
from curriculum.diagram.schemas import Conspect, Connection, Node, NodeKind
from curriculum.diagram.validator import parse_conspect, validate_exercise_body

__all__ = [
    "Conspect",
    "Connection",
    "Node",
    "NodeKind",
    "PASS_THRESHOLD",
    "evaluate",
    "parse_conspect",
    "validate_exercise_body",
]
