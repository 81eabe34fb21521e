import os

from cell_coercion import KINDS

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "fuzzytable")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
MAX_COL_WIDTH_DEFAULT = 40
LOG_LEVEL_DEFAULT = "WARNING"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
COLUMN_KINDS_DEFAULT = {}


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)


def load_config():
    cfg = {
        "MAX_COL_WIDTH": MAX_COL_WIDTH_DEFAULT,
        "LOG_LEVEL": LOG_LEVEL_DEFAULT,
        "LOG_FILE": os.path.join(CONFIG_DIR, "fuzzytable.log"),
        "COLUMN_KINDS": dict(COLUMN_KINDS_DEFAULT),
    }

    if os.path.exists(CONFIG_JSON):
        try:
            import json

            with open(CONFIG_JSON, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            data = None

        if isinstance(data, dict):
            width = data.get("max_col_width")
            if isinstance(width, int) and not isinstance(width, bool) and width >= 4:
                cfg["MAX_COL_WIDTH"] = width

            level = data.get("log_level")
            if isinstance(level, str) and level.upper() in LOG_LEVELS:
                cfg["LOG_LEVEL"] = level.upper()

            log_file = data.get("log_file")
            if isinstance(log_file, str) and log_file.strip():
                cfg["LOG_FILE"] = os.path.expanduser(log_file)

            kinds = data.get("column_kinds")
            if isinstance(kinds, dict):
                for name, kind in kinds.items():
                    if not isinstance(name, str):
                        continue
                    if kind not in KINDS:
                        continue
                    cfg["COLUMN_KINDS"][name] = kind

    return cfg
