"""Abstract method definitions shared by every anomaly test."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class MethodContext:
    """Per-evaluation parameters handed to every method.

    ``rng`` is always supplied by the caller, seeded as it sees fit.
    """

    rng: np.random.Generator
    upper_bound: Optional[float] = None
    lower_bound: Optional[float] = None
    sensitivity: float = 0.1
    perm_count: int = 500


class BaseMethod(ABC):
    """Base class for the anomaly tests run by the engine."""

    name: str = "method"

    @abstractmethod
    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        """Return the raw anomaly probability for the two segments."""

    def probability(
        self,
        reference: Sequence[float] | np.ndarray,
        active: Sequence[float] | np.ndarray,
        context: MethodContext,
    ) -> float:
        """Score the segments and clamp the result into [0, 1].

        A non-finite score means the statistic was undefined for this data
        and maps to 0.
        """

        ref = np.asarray(reference, dtype=float)
        act = np.asarray(active, dtype=float)
        value = float(self.score(ref, act, context))
        if not math.isfinite(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def is_constant(values: np.ndarray) -> bool:
    return values.size == 0 or bool(np.ptp(values) == 0)
