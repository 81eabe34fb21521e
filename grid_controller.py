import logging
from collections.abc import Mapping
from typing import Optional

from column_editor import ColumnEditor, DEFAULT_EDITOR
from grid_errors import GridError, OutOfRangeError, SchemaError
from grid_model import CellCoord, DataModel, EMPTY
from render_surface import (
    DELETE_KEY,
    POINTER_UP,
    EditableSurface,
    RenderSurface,
)
from selection_state import SelectionState

logger = logging.getLogger(__name__)


class GridController:
    """
    Owns the data model and selection for one grid and drives a surface.

    Every cell paint goes through resolve_editor(col).render(); the
    controller itself never writes to a cell surface.
    """

    def __init__(self, surface: RenderSurface, config: Optional[dict] = None, **kwargs):
        self.surface = surface
        self._model: Optional[DataModel] = None
        self._selection: Optional[SelectionState] = None
        self._editors: list[ColumnEditor] = []
        self._subscriptions = []
        self._editing: Optional[tuple[CellCoord, EditableSurface]] = None

        config = dict(config or {}, **kwargs)
        if config:
            self.initialize(config)

    # ---------- setup ----------
    def initialize(self, config: dict):
        rows = config.get("rows")
        if rows is None:
            rows = config.get("data", [])
        columns = config.get("columns")
        editors = config.get("column_editors")
        if editors is None:
            editors = config.get("column_properties")

        # Build everything before touching the surface so a bad schema
        # leaves no half-rendered grid behind.
        model = DataModel(columns, rows)
        resolved = self._resolve_editors(model, editors)

        self.teardown()
        self._model = model
        self._editors = resolved
        self._selection = SelectionState(coord_factory=model.coord)
        self._editing = None

        logger.debug(
            "Grid initialized with %d columns and %d rows",
            model.column_count,
            model.row_count,
        )

        self.surface.reset()
        self.render_head()
        self.render_rows()
        self._subscribe()
        return self

    @property
    def model(self) -> DataModel:
        if self._model is None:
            raise GridError("Grid has not been initialized")
        return self._model

    @property
    def selection(self) -> SelectionState:
        if self._selection is None:
            raise GridError("Grid has not been initialized")
        return self._selection

    @staticmethod
    def _resolve_editors(model: DataModel, editors) -> list[ColumnEditor]:
        resolved = [DEFAULT_EDITOR] * model.column_count
        if not editors:
            return resolved

        if isinstance(editors, Mapping):
            items = editors.items()
        else:
            items = enumerate(editors)

        for target, editor in items:
            if editor is None:
                continue
            if isinstance(target, str):
                idx = model.column_by_key(target)
            else:
                idx = target
                model.column_by_index(idx)
            if not hasattr(editor, "render"):
                raise SchemaError(f"Editor for column {target!r} has no render()")
            resolved[idx] = editor
        return resolved

    def _subscribe(self):
        self._subscriptions = [
            self.surface.subscribe_global(POINTER_UP, self.on_drag_end),
            self.surface.subscribe_global(DELETE_KEY, self.on_delete_key),
        ]

    def teardown(self):
        for sub in self._subscriptions:
            sub.close()
        self._subscriptions = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.teardown()
        return False

    # ---------- editors ----------
    def resolve_editor(self, col: int) -> ColumnEditor:
        self.model.column_by_index(col)
        return self._editors[col]

    def resolve_editor_by_key(self, key: str) -> ColumnEditor:
        return self._editors[self.model.column_by_key(key)]

    # ---------- rendering ----------
    def render_head(self):
        for col, label in enumerate(self.model.columns):
            self.surface.create_header_cell(col, label)

    def render_rows(self):
        for row in range(self.model.row_count):
            self.surface.create_row(row)
            for col in range(self.model.column_count):
                coord = self.model.coord(col, row)
                cell = self.surface.create_body_cell(coord)
                cell.listen(
                    primary_down=self.on_cell_primary_down,
                    pointer_enter=self.on_cell_hover_during_drag,
                    activate=self.on_cell_activate,
                )
                self.render_cell(coord)

    def render_cell(self, coord: CellCoord) -> bool:
        value = self.model.read(coord.row, coord.col)
        cell = self.surface.cell_at(coord)
        if cell is None:
            return False
        try:
            self._editors[coord.col].render(value, cell)
        except Exception:
            logger.exception("Render failed for cell (%d, %d)", coord.col, coord.row)
            return False
        return True

    def refresh_column(self, col: int):
        self.model.column_by_index(col)
        for row in range(self.model.row_count):
            coord = self.model.coord(col, row)
            if self._editing is not None and self._editing[0] == coord:
                continue
            self.render_cell(coord)

    def _sync_selected(self, before: frozenset):
        after = self.selection.members()
        for coord in before - after:
            self.surface.set_selected(coord, False)
        for coord in after - before:
            self.surface.set_selected(coord, True)

    # ---------- coordinates ----------
    def _coord(self, coord) -> CellCoord:
        if isinstance(coord, CellCoord):
            return self.model.coord(coord.col, coord.row)
        if not isinstance(coord, (tuple, list)) or len(coord) != 2:
            raise OutOfRangeError(message=f"Expected a (col, row) pair, got {coord!r}")
        col, row = coord
        if isinstance(col, str):
            col = self.model.column_by_key(col)
        return self.model.coord(col, row)

    # ---------- selection ----------
    def on_cell_primary_down(self, coord):
        coord = self._coord(coord)
        before = self.selection.members()
        self.selection.begin_drag(coord)
        self._sync_selected(before)

    def on_cell_hover_during_drag(self, coord):
        if not self.selection.dragging:
            return
        coord = self._coord(coord)
        before = self.selection.members()
        if self.selection.drag_to(coord):
            self._sync_selected(before)

    def on_drag_end(self):
        self.selection.end_drag()

    def select(self, coord, additive: bool = False):
        coord = self._coord(coord)
        before = self.selection.members()
        self.selection.select(coord, additive)
        self._sync_selected(before)

    def select_rectangle(self, anchor, target):
        anchor = self._coord(anchor)
        target = self._coord(target)
        before = self.selection.members()
        self.selection.select_rectangle(anchor, target)
        self._sync_selected(before)

    def deselect(self, coord):
        coord = self._coord(coord)
        before = self.selection.members()
        self.selection.deselect(coord)
        self._sync_selected(before)

    def clear_selection(self):
        before = self.selection.members()
        self.selection.clear()
        self._sync_selected(before)

    @property
    def selected(self) -> frozenset:
        return self.selection.members()

    # ---------- editing ----------
    @property
    def editing(self) -> Optional[CellCoord]:
        return self._editing[0] if self._editing is not None else None

    def on_cell_activate(self, coord) -> Optional[EditableSurface]:
        coord = self._coord(coord)
        editor = self._editors[coord.col]
        if not getattr(editor, "editable", True):
            self.surface.set_status(f"Column '{coord.key}' is read-only")
            return None

        if self._editing is not None:
            # one open editor at a time; leaving the old one commits it
            self._editing[1].blur()

        value = self.model.read(coord.row, coord.col)
        cell = self.surface.cell_at(coord)
        editable = None
        if hasattr(editor, "create_editor"):
            editable = editor.create_editor(value, cell)
        if editable is None:
            editable = self.surface.open_text_input(coord, DEFAULT_EDITOR.format(value))
        else:
            self.surface.mount_editor(coord, editable)

        editable.bind(
            on_commit=lambda text: self._commit_edit(coord, editable, text),
            on_cancel=lambda: self._cancel_edit(coord, editable),
        )
        self._editing = (coord, editable)
        logger.debug("Editing cell (%d, %d)", coord.col, coord.row)
        return editable

    def _finish_edit(self, editable):
        if self._editing is not None and self._editing[1] is editable:
            self._editing = None

    def _commit_edit(self, coord: CellCoord, editable, text):
        self._finish_edit(editable)
        editor = self._editors[coord.col]
        previous = self.model.read(coord.row, coord.col)
        try:
            value = editor.parse(text, previous) if hasattr(editor, "parse") else text
        except ValueError:
            self.surface.set_status(f"Invalid value for column '{coord.key}'")
            self.render_cell(coord)
            return
        self.model.write(coord.row, coord.col, value)
        logger.debug("Committed cell (%d, %d)", coord.col, coord.row)
        self.render_cell(coord)

    def _cancel_edit(self, coord: CellCoord, editable):
        self._finish_edit(editable)
        self.render_cell(coord)

    def on_delete_key(self) -> int:
        if self.surface.focused_editor() is not None:
            return 0
        targets = sorted(self.selection.members(), key=lambda c: (c.row, c.col))
        for coord in targets:
            self.model.write(coord.row, coord.col, EMPTY)
            self.render_cell(coord)
        if targets:
            logger.debug("Cleared %d cells", len(targets))
        return len(targets)

    # ---------- external access ----------
    def get_cell_value(self, coord):
        coord = self._coord(coord)
        return self.model.read(coord.row, coord.col)

    def set_cell_value(self, coord, value):
        coord = self._coord(coord)
        if self._editing is not None and self._editing[0] == coord:
            # the write wins over whatever is still in the open editor
            editable = self._editing[1]
            self._editing = None
            editable.bind()
            editable.cancel()
        self.model.write(coord.row, coord.col, value)
        self.render_cell(coord)
        return value

    def column_index_of(self, key: str) -> int:
        return self.model.column_index_of(key)


