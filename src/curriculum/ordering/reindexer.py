"""
Order maintenance for sibling items (lessons in a course, exercises in a lesson).

Within a parent the orders always form the contiguous sequence 1..N. `reorder`
moves one item and renumbers the rest in a single forward pass; `compact`
closes the gap left by a deletion.
"""

from __future__ import annotations

from typing import Iterable, List

from curriculum.core.errors import EntityNotFound, InvalidOrder
from curriculum.core.models import SiblingOrder


def reorder(siblings: Iterable[SiblingOrder], moved_id: int, target_order: int) -> List[SiblingOrder]:
    """
    Move `moved_id` to `target_order` and return the new order of every sibling.

    Walks the siblings once in ascending order keeping a running `shift`:
    - the moved item flips the shift (0 -> -1 when moving forward, back to 0
      when the destination slot was already passed) and takes `target_order`;
    - the item currently sitting at `target_order` steps forward if the moved
      item is still ahead, or back into the vacated slot if it was passed,
      and bumps the shift by one;
    - every other item is offset by the current shift.
    """
    ordered = sorted(siblings, key=lambda s: s.order)
    number_of_items = len(ordered)

    if target_order < 1 or target_order > number_of_items:
        raise InvalidOrder(item_id=moved_id, order=target_order)

    moved = next((s for s in ordered if s.id == moved_id), None)
    if moved is None:
        raise EntityNotFound("sibling", moved_id)

    if moved.order == target_order:
        return [SiblingOrder(id=s.id, order=s.order) for s in ordered]

    result: List[SiblingOrder] = []
    shift = 0

    for item in ordered:
        if item.id == moved_id:
            shift = -1 if shift == 0 else 0
            new_order = target_order
        elif item.order == target_order:
            new_order = item.order + 1 if shift == 0 else item.order - 1
            shift += 1
        else:
            new_order = item.order + shift

        result.append(SiblingOrder(id=item.id, order=new_order))

    return result


def compact(siblings: Iterable[SiblingOrder]) -> List[SiblingOrder]:
    """Renumber siblings to 1..N keeping their relative order."""
    ordered = sorted(siblings, key=lambda s: s.order)
    return [SiblingOrder(id=s.id, order=idx) for idx, s in enumerate(ordered, start=1)]


def changed_orders(before: Iterable[SiblingOrder], after: Iterable[SiblingOrder]) -> List[SiblingOrder]:
    """Subset of `after` whose order differs from `before`; only these rows need writing."""
    previous = {s.id: s.order for s in before}
    return [s for s in after if previous.get(s.id) != s.order]
