"""Fixed-capacity observation window split into reference and active segments."""

from __future__ import annotations

from collections import deque
from typing import Iterable

import numpy as np


class Window:
    """Rolling buffer holding ``active_size * (n_seasons + 1)`` observations.

    The newest ``active_size`` values form the active segment; everything
    before them is the reference segment. Appending to a full window drops
    the oldest value.
    """

    def __init__(self, active_size: int, n_seasons: int, history: Iterable[float] = ()) -> None:
        if active_size <= 0:
            raise ValueError("active_size must be positive")
        if n_seasons <= 0:
            raise ValueError("n_seasons must be positive")
        self.active_size = int(active_size)
        self.n_seasons = int(n_seasons)
        self.capacity = self.active_size * (self.n_seasons + 1)
        self._buffer: deque[float] = deque(maxlen=self.capacity)
        self.extend(history)

    def append(self, value: float) -> None:
        self._buffer.append(float(value))

    def extend(self, values: Iterable[float]) -> None:
        self._buffer.extend(float(v) for v in values)

    def values(self) -> np.ndarray:
        return np.fromiter(self._buffer, dtype=float, count=len(self._buffer))

    def active_segment(self) -> np.ndarray:
        return self.values()[-self.active_size :]

    def reference_segment(self) -> np.ndarray:
        arr = self.values()
        return arr[: max(arr.size - self.active_size, 0)]

    @property
    def is_full(self) -> bool:
        return len(self._buffer) == self.capacity

    def clear(self) -> None:
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"Window(active_size={self.active_size}, n_seasons={self.n_seasons}, length={len(self)})"
