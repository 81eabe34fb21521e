from collections.abc import Mapping
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from grid_errors import SchemaError, OutOfRangeError, ColumnNotFoundError

EMPTY = ""


def _is_index(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class CellCoord:
    col: int
    row: int
    key: str | None = field(default=None, compare=False)

    def as_tuple(self):
        return (self.col, self.row)


def collect_keys(rows) -> list[str]:
    seen = {}
    for record in rows:
        if not isinstance(record, Mapping):
            continue
        for key in record:
            if key not in seen:
                seen[key] = None
    return list(seen)


def normalize(columns, rows):
    """
    Align raw row mappings to the column order.
    Returns (columns, frame); missing keys become EMPTY, unknown keys are dropped.
    """
    rows = list(rows or [])
    for i, record in enumerate(rows):
        if not isinstance(record, Mapping):
            raise SchemaError(f"Row {i} is not a mapping")

    if columns is None:
        cols = collect_keys(rows)
    else:
        cols = list(columns)
        if not cols and rows:
            raise SchemaError("Empty column list for non-empty rows")

    if len(set(cols)) != len(cols):
        dupes = sorted({c for c in cols if cols.count(c) > 1})
        raise SchemaError(f"Duplicate column keys: {', '.join(dupes)}")

    if not cols:
        return cols, pd.DataFrame(index=range(len(rows)))

    values = [[record.get(c, EMPTY) for c in cols] for record in rows]
    frame = pd.DataFrame(values, columns=cols, dtype=object)
    return cols, frame


class DataModel:
    """
    Owns the column labels and the normalized rows.
    No rendering or input logic.
    """

    def __init__(self, columns=None, rows=None):
        self._columns, self._df = normalize(columns, rows)
        self._index = {key: i for i, key in enumerate(self._columns)}

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def row_count(self) -> int:
        return len(self._df)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    # ---------- lookups ----------
    def _check(self, row, col):
        if not _is_index(row) or not _is_index(col):
            raise OutOfRangeError(row, col)
        if row < 0 or row >= self.row_count or col < 0 or col >= self.column_count:
            raise OutOfRangeError(row, col)

    def column_by_index(self, index: int) -> str:
        if not _is_index(index) or index < 0 or index >= self.column_count:
            raise OutOfRangeError(col=index)
        return self._columns[index]

    def column_by_key(self, key: str) -> int:
        try:
            return self._index[key]
        except (KeyError, TypeError):
            raise ColumnNotFoundError(key) from None

    def column_index_of(self, key: str) -> int:
        return self.column_by_key(key)

    def coord(self, col: int, row: int) -> CellCoord:
        self._check(row, col)
        return CellCoord(col, row, self._columns[col])

    # ---------- cells ----------
    def read(self, row: int, col: int):
        self._check(row, col)
        return self._df.iat[row, col]

    def write(self, row: int, col: int, value):
        self._check(row, col)
        self._df.iat[row, col] = value
        return value

    # ---------- export ----------
    def records(self) -> list[dict]:
        return [
            {key: self._df.iat[r, c] for c, key in enumerate(self._columns)}
            for r in range(self.row_count)
        ]

    def to_frame(self) -> pd.DataFrame:
        return self._df.copy()
