"""
Error hierarchy for the progression engine.

Every error carries a `category` so callers (HTTP handlers, the sweep) can
decide how to surface it without matching on concrete classes:

- validation: bad input shape or order value; never retried
- state_conflict: the request is not allowed in the current state
- data_inconsistency: stored data contradicts an invariant
- not_found: a referenced record does not exist
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CoreError(Exception):
    category = "core"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.details: Dict[str, Any] = details
        super().__init__(message or self.default_message())

    @property
    def code(self) -> str:
        return type(self).__name__

    def default_message(self) -> str:
        if not self.details:
            return self.code
        pairs = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.code} ({pairs})"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "category": self.category, "message": str(self), **self.details}


class InvalidInputError(CoreError):
    category = "validation"


class StateConflictError(CoreError):
    category = "state_conflict"


class DataInconsistencyError(CoreError):
    category = "data_inconsistency"


class EntityNotFound(CoreError):
    category = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(entity=entity, id=entity_id)


# ----- validation -----

class IncorrectBodyFormat(InvalidInputError):
    pass


class IncorrectHeaderFormat(InvalidInputError):
    pass


class IncorrectDefinitionFormat(InvalidInputError):
    pass


class IncorrectProcessStagesFormat(InvalidInputError):
    pass


class NotEnoughNodes(InvalidInputError):
    def __init__(self, number_of_nodes: int):
        super().__init__(number_of_nodes=number_of_nodes)


class IncorrectExerciseType(InvalidInputError):
    pass


class InvalidOrder(InvalidInputError):
    def __init__(self, item_id: int, order: int):
        super().__init__(item_id=item_id, order=order)


class CannotUpdateBodyWithoutType(InvalidInputError):
    pass


class CannotUpdateTypeWithoutBody(InvalidInputError):
    pass


# ----- state conflicts -----

class PermissionDenied(StateConflictError):
    pass


class PreviousExerciseNotCompleted(StateConflictError):
    def __init__(self, exercise_id: int):
        super().__init__(exercise_id=exercise_id)


class PreviousLessonNotCompleted(StateConflictError):
    def __init__(self, lesson_id: int):
        super().__init__(lesson_id=lesson_id)


class CourseMustBePublished(StateConflictError):
    pass


class CreatorCannotSubscribeToCourse(StateConflictError):
    pass


class CannotRegisterForCourseTwice(StateConflictError):
    pass


class TimeToCompleteExpired(StateConflictError):
    pass


class AttemptAlreadyCompleted(StateConflictError):
    pass


class AttemptAlreadyStarted(StateConflictError):
    def __init__(self, exercise_id: int, attempt_number: int):
        super().__init__(exercise_id=exercise_id, attempt_number=attempt_number)


class CompletionAccessDenied(StateConflictError):
    def __init__(self, user_id: int, completion_id: int):
        super().__init__(user_id=user_id, completion_id=completion_id)


# ----- data inconsistency -----

class PreviousExerciseNotFound(DataInconsistencyError):
    def __init__(self, exercise_id: int):
        super().__init__(exercise_id=exercise_id)


class PreviousLessonNotFound(DataInconsistencyError):
    def __init__(self, lesson_id: int):
        super().__init__(lesson_id=lesson_id)
