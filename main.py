import sys
import os
import curses

# Make ESC snappy
os.environ.setdefault("ESCDELAY", "25")

from column_editor import DataUriEditor, LookupEditor, PlainTextEditor
from config_paths import ensure_config_dirs, load_config
from curses_surface import CursesSurface
from file_type_handler import FileTypeHandler
from grid_controller import GridController
from grid_errors import GridError
from grid_model import collect_keys
from grid_logging import configure_logging
import demo_data

try:
    from _version import __version__
except Exception:
    __version__ = "0.0.0"

USAGE = (
    "fuzzytable - terminal data grid\n\nUsage:\n"
    "  fuzzytable [path] [--columns a,b,c]\n  fuzzytable -v\n"
)


def parse_args(args):
    """Returns (path, columns); raises ValueError on malformed arguments."""
    path = None
    columns = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--columns":
            if i + 1 >= len(args):
                raise ValueError("--columns needs a comma separated list")
            columns = [c.strip() for c in args[i + 1].split(",") if c.strip()]
            i += 2
            continue
        if arg.startswith("--columns="):
            columns = [c.strip() for c in arg.split("=", 1)[1].split(",") if c.strip()]
        elif arg.startswith("-"):
            raise ValueError(f"Unknown option {arg}")
        elif path is None:
            path = arg
        else:
            raise ValueError("Only one path may be given")
        i += 1
    return path, columns


def _looks_like_data_uri(records, column) -> bool:
    seen = False
    for record in records:
        if not isinstance(record, dict):
            continue
        value = record.get(column)
        if value in (None, ""):
            continue
        if isinstance(value, (bytes, bytearray)):
            seen = True
            continue
        if not (isinstance(value, str) and value.startswith("data:")):
            return False
        seen = True
    return seen


def build_column_editors(columns, records, column_kinds=None):
    column_kinds = column_kinds or {}
    editors = {}
    for name in columns:
        if _looks_like_data_uri(records, name):
            editors[name] = DataUriEditor()
        elif name in column_kinds:
            editors[name] = PlainTextEditor(column_kinds[name])
    return editors


def main():
    args = sys.argv[1:]

    if "-v" in args or "-V" in args:
        print(__version__)
        return

    if "-h" in args or "--help" in args:
        print(USAGE)
        return

    try:
        path, columns = parse_args(args)
    except ValueError as exc:
        print(f"{exc}\n\n{USAGE}", file=sys.stderr)
        sys.exit(2)

    cfg = load_config()
    try:
        ensure_config_dirs()
        configure_logging(cfg["LOG_LEVEL"], cfg["LOG_FILE"])
    except OSError:
        configure_logging(cfg["LOG_LEVEL"])

    lookup = None
    if path:
        file_columns, records = FileTypeHandler(path).load()
        columns = columns or file_columns
    else:
        records = demo_data.demo_rows()
        columns = columns or list(demo_data.COLUMNS)

    known = columns if columns is not None else collect_keys(records)
    editors = build_column_editors(known, records, cfg["COLUMN_KINDS"])
    if not path and "flag" in (columns or []):
        lookup = LookupEditor(demo_data.load_flags, placeholder="...", autostart=False)
        editors["flag"] = lookup

    def curses_main(stdscr):
        surface = CursesSurface(stdscr, max_col_width=cfg["MAX_COL_WIDTH"])
        with GridController(
            surface, columns=columns, rows=records, column_editors=editors
        ) as controller:
            if lookup is not None:
                col = controller.column_index_of("flag")
                lookup.on_loaded = lambda _ed: surface.call_soon(
                    lambda: controller.refresh_column(col)
                )
                lookup.start()
            surface.run(stdscr)

    try:
        curses.wrapper(curses_main)
    except GridError as exc:
        print(f"Cannot build grid: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
