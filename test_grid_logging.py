import logging
import tempfile
from pathlib import Path

import grid_logging


def _file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def test_configure_logging_writes_to_file_once():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "logs" / "grid.log"
        try:
            grid_logging.configure_logging("debug", str(path))
            grid_logging.configure_logging("debug", str(path))
            assert len(_file_handlers(root)) == 1
            assert root.level == logging.DEBUG

            logging.getLogger("grid_controller").debug("Committed cell (%d, %d)", 1, 0)
            for handler in _file_handlers(root):
                handler.flush()

            line = path.read_text(encoding="utf-8").strip()
            assert "DEBUG grid_controller Committed cell (1, 0)" in line
            assert line.split(" ")[0].endswith("Z")
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
            if hasattr(root, grid_logging._CONFIGURED_FLAG):
                delattr(root, grid_logging._CONFIGURED_FLAG)


def test_unknown_level_falls_back_to_warning():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        grid_logging.configure_logging("chatty")
        assert root.level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        if hasattr(root, grid_logging._CONFIGURED_FLAG):
            delattr(root, grid_logging._CONFIGURED_FLAG)
