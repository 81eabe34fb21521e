import json
import os
import sys

import pandas as pd


class FileTypeHandler:
    """Loads row records and column order from a file on disk."""

    SUPPORTED = {".json", ".csv", ".parquet", ".xlsx"}

    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext not in self.SUPPORTED:
            print("Unsupported file type (use .json, .csv, .parquet, or .xlsx)")
            sys.exit(1)

    def load(self) -> tuple[list | None, list[dict]]:
        """Returns (columns, records); columns is None when the file has no fixed header."""
        if not os.path.exists(self.path):
            print(f"No such file: {self.path}")
            sys.exit(1)

        if self.ext == ".json":
            return self._load_json()
        if self.ext == ".csv":
            try:
                df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
            except pd.errors.EmptyDataError:
                return [], []
            return self._from_frame(df)
        if self.ext == ".parquet":
            self._ensure_parquet_engine()
            return self._from_frame(pd.read_parquet(self.path))
        self._ensure_excel_engine()
        return self._from_frame(pd.read_excel(self.path, dtype=str, keep_default_na=False))

    def _load_json(self):
        with open(self.path, "r", encoding="utf-8") as f:
            payload = json.load(f)

        columns = None
        if isinstance(payload, dict):
            columns = payload.get("columns")
            payload = payload.get("rows", payload.get("data", []))
        if not isinstance(payload, list):
            print("JSON input must be a list of records or {columns, rows}")
            sys.exit(1)
        return columns, payload

    @staticmethod
    def _from_frame(df: pd.DataFrame):
        columns = [str(c) for c in df.columns]
        df = df.copy()
        df.columns = columns
        df = df.astype(object).where(pd.notna(df), "")
        return columns, df.to_dict("records")

    def _ensure_parquet_engine(self):
        try:
            import pyarrow  # noqa: F401

            return
        except ImportError:
            pass
        print("Parquet support requires pyarrow. Install via: pip install pyarrow")
        sys.exit(1)

    def _ensure_excel_engine(self):
        try:
            import openpyxl  # noqa: F401

            return
        except ImportError:
            pass
        print("XLSX support requires openpyxl. Install via: pip install openpyxl")
        sys.exit(1)
