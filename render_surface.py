"""
Rendering surface contract used by GridController.

The controller never draws. It asks a surface to create header/body
cells, lets column editors fill those cells, and toggles the selected
marker. Surfaces also own the input devices: they deliver per-cell
events through the handlers attached with CellSurface.listen and
global events through subscribe_global.

MemorySurface is a complete headless implementation; CursesSurface
(curses_surface.py) draws the same structure in a terminal.
"""
from typing import Any, Callable, Optional

from grid_model import CellCoord


POINTER_UP = "pointer_up"
DELETE_KEY = "delete_key"
GLOBAL_EVENTS = (POINTER_UP, DELETE_KEY)

PRIMARY_DOWN = "primary_down"
POINTER_ENTER = "pointer_enter"
ACTIVATE = "activate"
CELL_EVENTS = (PRIMARY_DOWN, POINTER_ENTER, ACTIVATE)


class CellSurface:
    """Visual content of one header or body cell."""

    def __init__(self, coord: Optional[CellCoord] = None, header: bool = False):
        self.coord = coord
        self.header = header
        self.text = ""
        self.children: list[Any] = []
        self.selected = False
        self.editor: Optional["EditableSurface"] = None
        self._handlers: dict[str, Callable] = {}

    def clear(self):
        self.text = ""
        self.children = []
        self.editor = None

    def set_text(self, text: str):
        self.text = "" if text is None else str(text)

    def append_child(self, node):
        self.children.append(node)

    def display_text(self) -> str:
        if self.editor is not None:
            return self.editor.value
        parts = [self.text] if self.text else []
        parts.extend(str(child) for child in self.children)
        return " ".join(parts)

    # ---------- events ----------
    def listen(self, **handlers):
        for name, handler in handlers.items():
            if name not in CELL_EVENTS:
                raise ValueError(f"Unknown cell event '{name}'")
            self._handlers[name] = handler

    def fire(self, event: str) -> bool:
        handler = self._handlers.get(event)
        if handler is None:
            return False
        handler(self.coord)
        return True


class EditableSurface:
    """
    Focusable input pre-populated with a value.
    commit() / cancel() close it exactly once and notify the bound handlers.
    """

    def __init__(self, value: str = ""):
        self.value = "" if value is None else str(value)
        self.focused = True
        self.closed = False
        self._on_commit: Optional[Callable[[str], None]] = None
        self._on_cancel: Optional[Callable[[], None]] = None

    def bind(self, on_commit=None, on_cancel=None):
        self._on_commit = on_commit
        self._on_cancel = on_cancel

    def commit(self, value=None):
        if self.closed:
            return
        if value is not None:
            self.value = value
        self.closed = True
        self.focused = False
        if self._on_commit is not None:
            self._on_commit(self.value)

    def cancel(self):
        if self.closed:
            return
        self.closed = True
        self.focused = False
        if self._on_cancel is not None:
            self._on_cancel()

    def blur(self):
        # losing focus commits, same as a browser input
        self.commit()


class Subscription:
    def __init__(self, registry: dict, event: str, handler: Callable):
        self._registry = registry
        self.event = event
        self.handler = handler
        self.active = True

    def close(self):
        if not self.active:
            return
        handlers = self._registry.get(self.event, [])
        if self.handler in handlers:
            handlers.remove(self.handler)
        self.active = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class RenderSurface:
    """Interface every surface implements."""

    def reset(self):
        raise NotImplementedError

    def create_header_cell(self, col: int, label: str) -> CellSurface:
        raise NotImplementedError

    def create_row(self, row: int):
        raise NotImplementedError

    def create_body_cell(self, coord: CellCoord) -> CellSurface:
        raise NotImplementedError

    def cell_at(self, coord: CellCoord) -> Optional[CellSurface]:
        raise NotImplementedError

    def set_selected(self, coord: CellCoord, selected: bool):
        cell = self.cell_at(coord)
        if cell is not None:
            cell.selected = selected

    def open_text_input(self, coord: CellCoord, value: str) -> EditableSurface:
        editable = EditableSurface(value)
        self.mount_editor(coord, editable)
        return editable

    def mount_editor(self, coord: CellCoord, editable: EditableSurface):
        raise NotImplementedError

    def focused_editor(self) -> Optional[EditableSurface]:
        raise NotImplementedError

    def subscribe_global(self, event: str, handler: Callable) -> Subscription:
        raise NotImplementedError

    def set_status(self, message: str):
        pass


class MemorySurface(RenderSurface):
    """Headless surface that keeps the laid-out table in lists."""

    def __init__(self):
        self.header: list[CellSurface] = []
        self.rows: list[list[CellSurface]] = []
        self.status = ""
        self._cells: dict[tuple[int, int], CellSurface] = {}
        self._focused: Optional[EditableSurface] = None
        self._listeners: dict[str, list[Callable]] = {e: [] for e in GLOBAL_EVENTS}

    # ---------- layout ----------
    def reset(self):
        self.header = []
        self.rows = []
        self._cells = {}
        self._focused = None

    def create_header_cell(self, col, label):
        cell = CellSurface(header=True)
        cell.set_text(label)
        self.header.append(cell)
        return cell

    def create_row(self, row):
        while len(self.rows) <= row:
            self.rows.append([])
        return self.rows[row]

    def create_body_cell(self, coord):
        cell = CellSurface(coord)
        self.create_row(coord.row).append(cell)
        self._cells[coord.as_tuple()] = cell
        return cell

    def cell_at(self, coord):
        return self._cells.get(coord.as_tuple())

    # ---------- editing ----------
    def mount_editor(self, coord, editable):
        cell = self.cell_at(coord)
        if cell is None:
            raise KeyError(coord)
        cell.clear()
        cell.editor = editable
        self._focused = editable

    def focused_editor(self):
        if self._focused is not None and not self._focused.focused:
            self._focused = None
        return self._focused

    # ---------- global events ----------
    def subscribe_global(self, event, handler):
        if event not in self._listeners:
            raise ValueError(f"Unknown global event '{event}'")
        self._listeners[event].append(handler)
        return Subscription(self._listeners, event, handler)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str):
        for handler in list(self._listeners.get(event, [])):
            handler()

    def set_status(self, message):
        self.status = message

    # ---------- input helpers ----------
    def press(self, col: int, row: int) -> bool:
        cell = self._cells.get((col, row))
        return cell.fire(PRIMARY_DOWN) if cell is not None else False

    def hover(self, col: int, row: int) -> bool:
        cell = self._cells.get((col, row))
        return cell.fire(POINTER_ENTER) if cell is not None else False

    def double_click(self, col: int, row: int) -> bool:
        cell = self._cells.get((col, row))
        return cell.fire(ACTIVATE) if cell is not None else False

    def release(self):
        self.emit(POINTER_UP)

    def press_delete(self):
        self.emit(DELETE_KEY)

    def texts(self) -> list[list[str]]:
        return [[cell.display_text() for cell in row] for row in self.rows]
