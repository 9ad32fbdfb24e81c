"""
Request context passed into every interactor call.

A caller is either a real user or the system itself (scheduler, maintenance
scripts). The two are separate types so a user id can never be mistaken for
an elevated caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from curriculum.core.errors import PermissionDenied


@dataclass(frozen=True)
class UserContext:
    user_id: int


@dataclass(frozen=True)
class SystemContext:
    source: str = "system"


Ctx = Union[UserContext, SystemContext]


def is_system(ctx: Ctx) -> bool:
    return isinstance(ctx, SystemContext)


def require_user(ctx: Ctx) -> int:
    """Return the acting user's id; student operations have no meaning for the system caller."""
    if isinstance(ctx, UserContext):
        return ctx.user_id
    raise PermissionDenied("operation requires a user context")
