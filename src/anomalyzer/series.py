"""Loading numeric series from disk."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd


def _parse_text(text: str) -> list[float]:
    values: list[float] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        values.append(float(stripped))
    return values


def load_series(path: str | Path, value_column: str | None = None) -> np.ndarray:
    """Load observations, oldest first, from JSON, JSONL, CSV or plain text.

    CSV files are read with pandas; ``value_column`` picks the column and
    defaults to the first one. JSONL lines may hold bare numbers or objects
    carrying ``value_column``.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Series file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        values = []
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            obj = json.loads(line)
            if isinstance(obj, dict):
                if not value_column or value_column not in obj:
                    raise ValueError(f"JSONL object is missing value column {value_column!r}")
                obj = obj[value_column]
            values.append(float(obj))
        return np.asarray(values, dtype=float)
    if suffix == ".json":
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(loaded, list):
            raise ValueError("JSON series file must contain a list of numbers")
        return np.asarray(loaded, dtype=float)
    if suffix == ".csv":
        df = pd.read_csv(path)
        if df.empty:
            raise ValueError(f"Series file {path} is empty")
        column = value_column if value_column is not None else df.columns[0]
        if column not in df.columns:
            raise ValueError(f"Column {column!r} not found in {path} (columns: {list(df.columns)})")
        return df[column].astype(float).to_numpy()
    return np.asarray(_parse_text(path.read_text(encoding="utf-8")), dtype=float)
