import unittest

from grid_model import CellCoord
from selection_state import SelectionState


def C(col, row):
    return CellCoord(col, row)


class SelectionBufferTests(unittest.TestCase):
    def test_select_non_additive_reduces_to_single(self):
        sel = SelectionState()
        sel.select_rectangle(C(0, 0), C(2, 2))
        sel.select(C(1, 1), additive=False)
        self.assertEqual(sel.members(), {C(1, 1)})

    def test_select_additive_is_idempotent(self):
        sel = SelectionState()
        sel.select(C(0, 0))
        sel.select(C(1, 0), additive=True)
        sel.select(C(1, 0), additive=True)
        self.assertEqual(len(sel), 2)

    def test_rectangle_is_symmetric(self):
        a = SelectionState()
        b = SelectionState()
        a.select_rectangle(C(0, 0), C(2, 2))
        b.select_rectangle(C(2, 2), C(0, 0))
        self.assertEqual(a.members(), b.members())
        self.assertEqual(len(a), 9)

    def test_rectangle_normalizes_each_axis_independently(self):
        sel = SelectionState()
        sel.select_rectangle(C(3, 0), C(1, 2))
        expected = {C(c, r) for c in range(1, 4) for r in range(0, 3)}
        self.assertEqual(sel.members(), expected)

    def test_rectangle_replaces_buffer(self):
        sel = SelectionState()
        sel.select(C(5, 5))
        sel.select_rectangle(C(0, 0), C(0, 1))
        self.assertEqual(sel.members(), {C(0, 0), C(0, 1)})

    def test_rectangle_uses_coord_factory(self):
        sel = SelectionState(coord_factory=lambda c, r: CellCoord(c, r, f"k{c}"))
        sel.select_rectangle(C(0, 0), C(1, 0))
        self.assertEqual(sorted(c.key for c in sel.members()), ["k0", "k1"])

    def test_deselect_and_clear(self):
        sel = SelectionState()
        sel.select_rectangle(C(0, 0), C(1, 0))
        sel.deselect(C(0, 0))
        sel.deselect(C(9, 9))
        self.assertEqual(sel.members(), {C(1, 0)})
        sel.clear()
        self.assertEqual(len(sel), 0)
        self.assertIsNone(sel.rect())

    def test_members_is_a_snapshot(self):
        sel = SelectionState()
        sel.select(C(0, 0))
        snapshot = sel.members()
        sel.clear()
        self.assertEqual(snapshot, {C(0, 0)})

    def test_rect_bounds(self):
        sel = SelectionState()
        sel.select_rectangle(C(2, 1), C(0, 3))
        self.assertEqual(sel.rect(), (0, 2, 1, 3))


class DragStateTests(unittest.TestCase):
    def test_drag_cycle_keeps_selection_after_end(self):
        sel = SelectionState()
        self.assertEqual(sel.state, SelectionState.IDLE)

        sel.begin_drag(C(0, 0))
        self.assertEqual(sel.state, SelectionState.DRAGGING)
        self.assertEqual(sel.anchor, C(0, 0))
        self.assertEqual(sel.members(), {C(0, 0)})

        self.assertTrue(sel.drag_to(C(1, 1)))
        self.assertEqual(len(sel), 4)

        sel.end_drag()
        self.assertEqual(sel.state, SelectionState.IDLE)
        self.assertIsNone(sel.anchor)
        self.assertEqual(len(sel), 4)

    def test_drag_to_replaces_instead_of_accumulating(self):
        sel = SelectionState()
        sel.begin_drag(C(0, 0))
        sel.drag_to(C(2, 2))
        sel.drag_to(C(0, 1))
        self.assertEqual(sel.members(), {C(0, 0), C(0, 1)})

    def test_drag_to_while_idle_is_ignored(self):
        sel = SelectionState()
        sel.select(C(3, 3))
        self.assertFalse(sel.drag_to(C(0, 0)))
        self.assertEqual(sel.members(), {C(3, 3)})

    def test_drag_to_same_cell_is_ignored(self):
        sel = SelectionState()
        sel.begin_drag(C(0, 0))
        self.assertFalse(sel.drag_to(C(0, 0)))
        self.assertTrue(sel.drag_to(C(1, 0)))
        self.assertFalse(sel.drag_to(C(1, 0)))

    def test_begin_drag_clears_previous_selection(self):
        sel = SelectionState()
        sel.select_rectangle(C(0, 0), C(3, 3))
        sel.begin_drag(C(2, 2))
        self.assertEqual(sel.members(), {C(2, 2)})


if __name__ == "__main__":
    unittest.main()
