from typing import Callable, Optional

from grid_model import CellCoord


class SelectionState:
    """Selected cells plus the anchor of an in-progress drag."""

    IDLE = "idle"
    DRAGGING = "dragging"

    def __init__(self, coord_factory: Optional[Callable[[int, int], CellCoord]] = None):
        self._make = coord_factory or (lambda col, row: CellCoord(col, row))
        self._buffer: set[CellCoord] = set()
        self.anchor: Optional[CellCoord] = None
        self._last_hover: Optional[CellCoord] = None

    @property
    def state(self) -> str:
        return self.DRAGGING if self.anchor is not None else self.IDLE

    @property
    def dragging(self) -> bool:
        return self.anchor is not None

    def __len__(self):
        return len(self._buffer)

    def __contains__(self, coord):
        return coord in self._buffer

    # ---------- buffer ----------
    def select(self, coord: CellCoord, additive: bool = False):
        if not additive:
            self._buffer.clear()
        self._buffer.add(coord)

    def select_rectangle(self, anchor: CellCoord, target: CellCoord):
        c0, c1 = sorted((anchor.col, target.col))
        r0, r1 = sorted((anchor.row, target.row))
        self._buffer = {
            self._make(c, r) for c in range(c0, c1 + 1) for r in range(r0, r1 + 1)
        }

    def clear(self):
        self._buffer.clear()

    def deselect(self, coord: CellCoord):
        self._buffer.discard(coord)

    def members(self) -> frozenset:
        return frozenset(self._buffer)

    def is_selected(self, coord: CellCoord) -> bool:
        return coord in self._buffer

    def rect(self):
        if not self._buffer:
            return None
        cols = [c.col for c in self._buffer]
        rows = [c.row for c in self._buffer]
        return (min(cols), max(cols), min(rows), max(rows))

    # ---------- drag ----------
    def begin_drag(self, coord: CellCoord):
        self.select(coord, additive=False)
        self.anchor = coord
        self._last_hover = coord

    def drag_to(self, coord: CellCoord) -> bool:
        """Extend the rectangle to coord; returns False when nothing changed."""
        if self.anchor is None:
            return False
        if coord == self._last_hover:
            return False
        self._last_hover = coord
        self.select_rectangle(self.anchor, coord)
        return True

    def end_drag(self):
        self.anchor = None
        self._last_hover = None
