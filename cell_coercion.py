import pandas as pd

KINDS = ("str", "int", "float", "bool", "datetime")

TRUE_WORDS = {"1", "true", "t", "yes", "y", "on"}
FALSE_WORDS = {"0", "false", "f", "no", "n", "off"}


def coerce_text(text, kind="str"):
    """Convert committed input text to a value of the column's kind; "" stays empty."""
    text = "" if text is None else str(text)
    if kind not in KINDS:
        raise ValueError(f"Unknown column kind '{kind}'")

    stripped = text.strip()
    if kind == "str":
        return text
    if stripped == "":
        return ""

    if kind == "int":
        return int(stripped)

    if kind == "float":
        return float(stripped)

    if kind == "bool":
        lowered = stripped.lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        raise ValueError(f"Cannot coerce '{text}' to boolean")

    return pd.to_datetime(stripped, errors="raise")


def format_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return str(value)
