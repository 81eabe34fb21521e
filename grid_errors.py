class GridError(Exception):
    """Base class for grid construction and lookup errors."""


class SchemaError(GridError, ValueError):
    pass


class OutOfRangeError(GridError, IndexError):
    def __init__(self, row=None, col=None, message=None):
        self.row = row
        self.col = col
        if message is None:
            message = f"Cell out of range (row={row}, col={col})"
        super().__init__(message)


class ColumnNotFoundError(GridError, KeyError):
    def __init__(self, key):
        self.key = key
        super().__init__(key)

    def __str__(self):
        return f"Unknown column '{self.key}'"
