"""Unit tests for sibling order maintenance (pure functions)."""
import pytest

from curriculum.core.errors import EntityNotFound, InvalidOrder
from curriculum.core.models import SiblingOrder
from curriculum.ordering import changed_orders, compact, reorder


def _siblings(pairs):
    return [SiblingOrder(id=i, order=o) for i, o in pairs]


def _as_pairs(result):
    return [(s.id, s.order) for s in sorted(result, key=lambda s: s.order)]


BASE = [(3, 1), (5, 2), (1, 3), (10, 4), (16, 5), (9, 6)]


@pytest.mark.unit
class TestReorder:
    def test_forward_move(self):
        result = reorder(_siblings(BASE), moved_id=1, target_order=5)
        assert _as_pairs(result) == [(3, 1), (5, 2), (10, 3), (16, 4), (1, 5), (9, 6)]

    def test_backward_move(self):
        result = reorder(_siblings(BASE), moved_id=16, target_order=2)
        assert _as_pairs(result) == [(3, 1), (16, 2), (5, 3), (1, 4), (10, 5), (9, 6)]

    def test_move_to_last(self):
        result = reorder(_siblings(BASE), moved_id=3, target_order=6)
        assert _as_pairs(result) == [(5, 1), (1, 2), (10, 3), (16, 4), (9, 5), (3, 6)]

    def test_move_to_first(self):
        result = reorder(_siblings(BASE), moved_id=9, target_order=1)
        assert _as_pairs(result) == [(9, 1), (3, 2), (5, 3), (1, 4), (10, 5), (16, 6)]

    def test_adjacent_swap(self):
        result = reorder(_siblings(BASE), moved_id=5, target_order=3)
        assert _as_pairs(result) == [(3, 1), (1, 2), (5, 3), (10, 4), (16, 5), (9, 6)]

    def test_same_position_is_noop(self):
        result = reorder(_siblings(BASE), moved_id=10, target_order=4)
        assert _as_pairs(result) == BASE

    def test_unsorted_input_accepted(self):
        shuffled = list(reversed(BASE))
        result = reorder(_siblings(shuffled), moved_id=1, target_order=5)
        assert _as_pairs(result) == [(3, 1), (5, 2), (10, 3), (16, 4), (1, 5), (9, 6)]

    @pytest.mark.parametrize("moved_id", [3, 5, 1, 10, 16, 9])
    @pytest.mark.parametrize("target", [1, 2, 3, 4, 5, 6])
    def test_result_is_contiguous_and_matches_remove_insert(self, moved_id, target):
        result = reorder(_siblings(BASE), moved_id=moved_id, target_order=target)

        assert sorted(s.order for s in result) == [1, 2, 3, 4, 5, 6]
        expected = [i for i, _ in BASE if i != moved_id]
        expected.insert(target - 1, moved_id)
        assert [i for i, _ in _as_pairs(result)] == expected

    @pytest.mark.parametrize("moved_id", [3, 5, 1, 10, 16, 9])
    @pytest.mark.parametrize("target", [1, 2, 3, 4, 5, 6])
    def test_move_there_and_back_restores_orders(self, moved_id, target):
        original = dict(BASE)[moved_id]
        moved = reorder(_siblings(BASE), moved_id=moved_id, target_order=target)
        restored = reorder(moved, moved_id=moved_id, target_order=original)
        assert _as_pairs(restored) == BASE

    def test_target_above_count_rejected(self):
        with pytest.raises(InvalidOrder):
            reorder(_siblings(BASE), moved_id=1, target_order=7)

    def test_target_below_one_rejected(self):
        with pytest.raises(InvalidOrder):
            reorder(_siblings(BASE), moved_id=1, target_order=0)

    def test_unknown_item(self):
        with pytest.raises(EntityNotFound):
            reorder(_siblings(BASE), moved_id=42, target_order=2)

    def test_single_item(self):
        assert _as_pairs(reorder(_siblings([(7, 1)]), moved_id=7, target_order=1)) == [(7, 1)]


@pytest.mark.unit
class TestCompact:
    def test_closes_gap(self):
        result = compact(_siblings([(3, 1), (1, 3), (10, 4)]))
        assert _as_pairs(result) == [(3, 1), (1, 2), (10, 3)]

    def test_empty(self):
        assert compact([]) == []


@pytest.mark.unit
class TestChangedOrders:
    def test_only_moved_rows(self):
        before = _siblings(BASE)
        after = reorder(before, moved_id=5, target_order=3)
        changed = {(s.id, s.order) for s in changed_orders(before, after)}
        assert changed == {(5, 3), (1, 2)}

    def test_noop_has_no_writes(self):
        before = _siblings(BASE)
        assert changed_orders(before, reorder(before, moved_id=1, target_order=3)) == []
