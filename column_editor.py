import base64
import binascii
import logging
import threading
from typing import Callable, Optional

from cell_coercion import coerce_text, format_value
from render_surface import EditableSurface

logger = logging.getLogger(__name__)


class ColumnEditor:
    """
    Per-column render/edit capability.

    render() must clear the cell before drawing so repeated calls leave no
    leftovers. create_editor() returns an EditableSurface, or None to let
    the grid open its default text input; parse() turns committed text
    back into a cell value.
    """

    def format(self, value) -> str:
        return format_value(value)

    def render(self, value, cell):
        cell.clear()
        cell.set_text(self.format(value))

    def create_editor(self, value, cell) -> Optional[EditableSurface]:
        return None

    def parse(self, text, previous=None):
        return text

    @property
    def editable(self) -> bool:
        return True


class PlainTextEditor(ColumnEditor):
    def __init__(self, kind: str = "str"):
        # fail early on unknown kinds
        coerce_text("", kind)
        self.kind = kind

    def create_editor(self, value, cell):
        return EditableSurface(self.format(value))

    def parse(self, text, previous=None):
        return coerce_text(text, self.kind)


DEFAULT_EDITOR = PlainTextEditor()


class LookupEditor(ColumnEditor):
    """
    Renders the label a lookup table maps the cell value to.

    The table comes from loader(), run once in a daemon thread. Until it
    arrives, and forever if the loader fails, cells show the placeholder.
    """

    def __init__(
        self,
        loader: Callable[[], object],
        placeholder: str = "",
        on_loaded: Optional[Callable[["LookupEditor"], None]] = None,
        autostart: bool = True,
    ):
        self.loader = loader
        self.placeholder = placeholder
        self.on_loaded = on_loaded
        self.table: dict = {}
        self.loading = False
        self.loaded = False
        self.error: Optional[BaseException] = None
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        if autostart:
            self.start()

    def start(self):
        with self._lock:
            if self._thread is not None:
                return
            self.loading = True
            self._thread = threading.Thread(target=self._load, daemon=True)
        self._thread.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def _load(self):
        try:
            table = self._as_table(self.loader())
        except Exception as exc:
            logger.warning("Lookup load failed: %s", exc)
            self.error = exc
        else:
            self.table = table
            self.loaded = True
        finally:
            self.loading = False
            self._done.set()

        if self.on_loaded is not None:
            try:
                self.on_loaded(self)
            except Exception:
                logger.exception("on_loaded callback failed")

    @staticmethod
    def _as_table(payload) -> dict:
        if isinstance(payload, dict):
            return dict(payload)
        table = {}
        for item in payload or []:
            if isinstance(item, dict):
                table[item.get("key")] = item.get("value")
            else:
                key, value = item
                table[key] = value
        return table

    def format(self, value) -> str:
        label = self.table.get(value) if self.loaded else None
        if label is None:
            return self.placeholder
        return format_value(label)

    def create_editor(self, value, cell):
        # edit the raw key, not the label
        return EditableSurface(format_value(value))


class DataUriEditor(ColumnEditor):
    """Summarizes data: URIs and raw bytes; the payload itself is not editable."""

    @staticmethod
    def describe(value) -> str:
        if isinstance(value, (bytes, bytearray)):
            return f"[binary {_human_size(len(value))}]"
        text = format_value(value)
        if not text:
            return ""
        if not text.startswith("data:") or "," not in text:
            return text
        header, payload = text[5:].split(",", 1)
        parts = header.split(";")
        mime = parts[0] or "text/plain"
        if "base64" in parts[1:]:
            try:
                size = len(base64.b64decode(payload, validate=False))
            except (binascii.Error, ValueError):
                return f"[{mime} invalid]"
        else:
            size = len(payload)
        return f"[{mime} {_human_size(size)}]"

    def format(self, value) -> str:
        return self.describe(value)

    @property
    def editable(self) -> bool:
        return False


def _human_size(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KB"
    return f"{n / (1024 * 1024):.1f} MB"
