# ~/Apps/fuzzytable/curses_surface.py
import curses
import logging
import queue
import time

from grid_model import CellCoord
from render_surface import (
    ACTIVATE,
    DELETE_KEY,
    GLOBAL_EVENTS,
    POINTER_ENTER,
    POINTER_UP,
    PRIMARY_DOWN,
    CellSurface,
    EditableSurface,
    RenderSurface,
    Subscription,
)

logger = logging.getLogger(__name__)

KEY_ESC = 27
KEY_CTRL_C = 3
KEY_ENTER = (10, 13, curses.KEY_ENTER)
KEY_BACKSPACE = (curses.KEY_BACKSPACE, 127, 8)
KEY_DELETE = (curses.KEY_DC, ord("x"))


def _color(pair: int) -> int:
    try:
        return curses.color_pair(pair)
    except curses.error:
        return 0


class CursesSurface(RenderSurface):
    """
    Terminal surface: lays cells out like a spreadsheet and turns curses
    mouse/keyboard input into cell and global events.
    """

    PAIR_CELL_TEXT = 1
    PAIR_CELL_SELECTED = 2
    PAIR_EDITOR = 3
    MAX_COL_WIDTH = 40
    STATUS_TTL = 3.0
    DOUBLE_CLICK_SECS = 0.4

    def __init__(self, win, max_col_width=None):
        self.win = win
        if max_col_width:
            self.MAX_COL_WIDTH = max_col_width
        try:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(self.PAIR_CELL_TEXT, curses.COLOR_WHITE, -1)
            curses.init_pair(self.PAIR_CELL_SELECTED, curses.COLOR_BLACK, curses.COLOR_CYAN)
            curses.init_pair(self.PAIR_EDITOR, curses.COLOR_BLACK, curses.COLOR_WHITE)
        except curses.error:
            pass

        self.header: list[CellSurface] = []
        self.rows: list[list[CellSurface]] = []
        self._cells: dict[tuple[int, int], CellSurface] = {}
        self._listeners: dict[str, list] = {e: [] for e in GLOBAL_EVENTS}
        self._focused: EditableSurface | None = None
        self._focused_coord: CellCoord | None = None
        self._editor_cursor = 0
        self._pending = queue.SimpleQueue()

        # keyboard cursor and viewport
        self.curr_row = 0
        self.curr_col = 0
        self.row_offset = 0
        self.col_offset = 0
        self.keyboard_drag = False

        # hit-test layout from the last draw
        self._col_spans: list[tuple[int, int, int]] = []
        self._row_ys: dict[int, int] = {}
        self._hover: tuple[int, int] | None = None
        self._last_press: tuple[tuple[int, int], float] | None = None

        self.status_msg = ""
        self.status_until = 0.0
        self.running = False

    # ---------- layout ----------
    def reset(self):
        self.header = []
        self.rows = []
        self._cells = {}
        self._focused = None
        self._focused_coord = None
        self._last_press = None
        self.curr_row = 0
        self.curr_col = 0
        self.row_offset = 0
        self.col_offset = 0

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
        self._cells[(coord.col, coord.row)] = cell
        return cell

    def cell_at(self, coord):
        return self._cells.get((coord.col, coord.row))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.header)

    # ---------- editing ----------
    def mount_editor(self, coord, editable):
        cell = self.cell_at(coord)
        if cell is None:
            raise KeyError(coord)
        cell.clear()
        cell.editor = editable
        self._focused = editable
        self._focused_coord = coord
        self._editor_cursor = len(editable.value)
        self.curr_row, self.curr_col = coord.row, coord.col

    def focused_editor(self):
        if self._focused is not None and not self._focused.focused:
            self._focused = None
            self._focused_coord = None
        return self._focused

    # ---------- global events ----------
    def subscribe_global(self, event, handler):
        if event not in self._listeners:
            raise ValueError(f"Unknown global event '{event}'")
        self._listeners[event].append(handler)
        return Subscription(self._listeners, event, handler)

    def emit(self, event):
        for handler in list(self._listeners.get(event, [])):
            handler()

    def set_status(self, message, ttl=None):
        self.status_msg = message
        self.status_until = time.time() + (ttl or self.STATUS_TTL)

    def call_soon(self, fn):
        """Queue fn to run on the event-loop thread; safe from any thread."""
        self._pending.put(fn)

    def run_pending(self) -> int:
        ran = 0
        while True:
            try:
                fn = self._pending.get_nowait()
            except queue.Empty:
                return ran
            try:
                fn()
            except Exception:
                logger.exception("Queued callback failed")
            ran += 1

    # ---------- geometry ----------
    def get_col_width(self, col_idx):
        if col_idx < 0 or col_idx >= len(self.header):
            return self.MAX_COL_WIDTH
        max_len = len(self.header[col_idx].display_text())
        for row in self.rows:
            if col_idx < len(row):
                max_len = max(max_len, len(row[col_idx].display_text()))
        return min(self.MAX_COL_WIDTH, max_len + 2)

    def cell_from_point(self, y, x):
        row = self._row_ys.get(y)
        if row is None:
            return None
        for x0, x1, col in self._col_spans:
            if x0 <= x < x1:
                return (col, row)
        return None

    def _adjust_viewport(self, h, w, widths, row_w):
        avail_w = max(1, w - (row_w + 1))
        if self.curr_col < self.col_offset:
            self.col_offset = self.curr_col
        while self.col_offset < self.curr_col:
            used = sum(cw + 1 for cw in widths[self.col_offset : self.curr_col + 1])
            if used <= avail_w:
                break
            self.col_offset += 1
        self.col_offset = max(0, self.col_offset)

        body_h = max(1, h - 3)
        if self.curr_row < self.row_offset:
            self.row_offset = self.curr_row
        elif self.curr_row >= self.row_offset + body_h:
            self.row_offset = self.curr_row - body_h + 1
        self.row_offset = max(0, self.row_offset)

    # ---------- rendering ----------
    def draw(self):
        win = self.win
        win.erase()
        h, w = win.getmaxyx()

        widths = [self.get_col_width(c) for c in range(len(self.header))]
        row_w = max(3, len(str(max(len(self.rows) - 1, 0))) + 1)
        self._adjust_viewport(h, w, widths, row_w)

        self._col_spans = []
        x = row_w + 1
        for c in range(self.col_offset, len(self.header)):
            if x >= w - 1:
                break
            eff_cw = min(widths[c], max(1, w - x - 1))
            self._col_spans.append((x, x + eff_cw, c))
            x += eff_cw + 1

        # header
        for x0, x1, c in self._col_spans:
            cw = x1 - x0
            name = self.header[c].display_text()[:cw].rjust(cw)
            win.addnstr(1, x0, name, cw, curses.A_BOLD)

        # rows
        self._row_ys = {}
        base_y = 2
        for y in range(base_y, h - 1):
            r = self.row_offset + (y - base_y)
            if r >= len(self.rows):
                break
            self._row_ys[y] = r
            win.addnstr(y, 0, str(r).rjust(row_w), row_w)
            for x0, x1, c in self._col_spans:
                cw = x1 - x0
                cell = self.rows[r][c]
                attr = _color(self.PAIR_CELL_TEXT)
                if cell.editor is not None:
                    text = self._editor_window(cell.editor.value, cw)
                    attr = _color(self.PAIR_EDITOR)
                else:
                    text = cell.display_text()[:cw].rjust(cw)
                    if cell.selected:
                        attr = _color(self.PAIR_CELL_SELECTED) | curses.A_STANDOUT
                    if r == self.curr_row and c == self.curr_col:
                        attr |= curses.A_REVERSE
                win.addnstr(y, x0, text, cw, attr)

        # status line
        try:
            win.hline(h - 1, 0, " ", w)
        except curses.error:
            pass
        win.addnstr(h - 1, 0, self.status_text(w), max(0, w - 1))
        win.refresh()

    def _editor_window(self, value, width):
        start = max(0, self._editor_cursor - width + 1)
        return value[start : start + width].ljust(width)

    def status_text(self, width):
        if self.status_msg and time.time() < self.status_until:
            text = f" {self.status_msg}"
        else:
            mode = "EDIT" if self.focused_editor() is not None else "GRID"
            if self.keyboard_drag:
                mode = "SELECT"
            shape = f"{len(self.rows)}x{len(self.header)}"
            text = f" {mode} | {shape} | cell {self.curr_col},{self.curr_row}"
        return text.ljust(width)[: max(0, width - 1)]

    # ---------- input ----------
    def _fire(self, col, row, event):
        cell = self._cells.get((col, row))
        if cell is None:
            return False
        return cell.fire(event)

    def handle_mouse(self, y, x, bstate):
        hit = self.cell_from_point(y, x)
        if bstate & curses.BUTTON1_DOUBLE_CLICKED:
            if hit is not None:
                self.curr_col, self.curr_row = hit
                self._fire(*hit, ACTIVATE)
            return
        if bstate & curses.BUTTON1_PRESSED:
            self._blur_editor()
            if hit is None:
                self._last_press = None
                return
            self.curr_col, self.curr_row = hit
            self._hover = hit
            self._fire(*hit, PRIMARY_DOWN)
            # click resolution is off (see run), so pair presses here
            now = time.time()
            last = self._last_press
            if last is not None and last[0] == hit and now - last[1] <= self.DOUBLE_CLICK_SECS:
                self._last_press = None
                self._fire(*hit, ACTIVATE)
            else:
                self._last_press = (hit, now)
            return
        if bstate & curses.BUTTON1_RELEASED:
            if hit is not None and hit != self._hover:
                self._fire(*hit, POINTER_ENTER)
            self._hover = None
            self.emit(POINTER_UP)
            return
        if hit is not None and hit != self._hover:
            self._hover = hit
            self._fire(*hit, POINTER_ENTER)

    def _blur_editor(self):
        editor = self.focused_editor()
        if editor is not None:
            editor.blur()

    def _move(self, d_row, d_col):
        if not self.rows or not self.header:
            return
        self.curr_row = max(0, min(len(self.rows) - 1, self.curr_row + d_row))
        self.curr_col = max(0, min(len(self.header) - 1, self.curr_col + d_col))
        if self.keyboard_drag:
            self._fire(self.curr_col, self.curr_row, POINTER_ENTER)
        else:
            self._fire(self.curr_col, self.curr_row, PRIMARY_DOWN)
            self.emit(POINTER_UP)

    def _toggle_keyboard_drag(self):
        if self.keyboard_drag:
            self.keyboard_drag = False
            self.emit(POINTER_UP)
            return
        if self._fire(self.curr_col, self.curr_row, PRIMARY_DOWN):
            self.keyboard_drag = True

    def handle_editor_key(self, ch):
        editor = self._focused
        buf = editor.value
        idx = self._editor_cursor
        if ch in KEY_ENTER or ch == KEY_ESC:
            editor.blur()
            return
        if ch == KEY_CTRL_C:
            editor.cancel()
            return
        if ch in KEY_BACKSPACE:
            if idx > 0:
                editor.value = buf[: idx - 1] + buf[idx:]
                self._editor_cursor -= 1
            return
        if ch == curses.KEY_LEFT:
            self._editor_cursor = max(0, idx - 1)
            return
        if ch == curses.KEY_RIGHT:
            self._editor_cursor = min(len(buf), idx + 1)
            return
        if curses.KEY_MIN <= ch <= curses.KEY_MAX:
            return
        if 32 <= ch <= 0x10FFFF:
            try:
                ch_str = chr(ch)
            except ValueError:
                return
            editor.value = buf[:idx] + ch_str + buf[idx:]
            self._editor_cursor += 1

    def handle_key(self, ch) -> bool:
        """Returns False when the user asked to quit."""
        if ch == curses.KEY_MOUSE:
            try:
                _, x, y, _, bstate = curses.getmouse()
            except curses.error:
                return True
            self.handle_mouse(y, x, bstate)
            return True

        if self.focused_editor() is not None:
            self.handle_editor_key(ch)
            return True

        if ch == ord("q"):
            return False
        if ch in (curses.KEY_UP, ord("k")):
            self._move(-1, 0)
        elif ch in (curses.KEY_DOWN, ord("j")):
            self._move(1, 0)
        elif ch in (curses.KEY_LEFT, ord("h")):
            self._move(0, -1)
        elif ch in (curses.KEY_RIGHT, ord("l")):
            self._move(0, 1)
        elif ch == ord("v"):
            self._toggle_keyboard_drag()
        elif ch == KEY_ESC:
            if self.keyboard_drag:
                self._toggle_keyboard_drag()
        elif ch in KEY_ENTER or ch == ord("i"):
            self._fire(self.curr_col, self.curr_row, ACTIVATE)
        elif ch in KEY_DELETE or ch in KEY_BACKSPACE:
            self.emit(DELETE_KEY)
        return True

    def run(self, stdscr=None):
        stdscr = stdscr or self.win
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        curses.mousemask(curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION)
        # report raw presses; double clicks are paired in handle_mouse
        curses.mouseinterval(0)
        # ask the terminal for motion events while a button is held
        print("\033[?1002h", end="", flush=True)
        stdscr.keypad(True)
        stdscr.timeout(100)
        self.running = True
        try:
            while self.running:
                self.run_pending()
                self.draw()
                ch = stdscr.getch()
                if ch == -1:
                    continue
                if not self.handle_key(ch):
                    self.running = False
        finally:
            print("\033[?1002l", end="", flush=True)
