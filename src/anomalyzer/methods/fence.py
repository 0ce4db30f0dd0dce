"""Bound-exceedance test against configured upper/lower fences."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .base import BaseMethod, MethodContext

EXCURSION_RATE = 3.0


def _scale(bound: float, other: Optional[float]) -> float:
    if other is not None and other != bound:
        return abs(bound - other)
    return abs(bound) or 1.0


class FenceMethod(BaseMethod):
    """Combines the share of active values outside the fence with how far the worst one strays.

    ``fraction + (1 - fraction) * severity`` where severity grows from 0 to 1
    with the normalized excursion of the worst offender.
    """

    name = "fence"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        upper, lower = context.upper_bound, context.lower_bound
        if active.size == 0 or (upper is None and lower is None):
            return 0.0

        excursion = np.zeros(active.size, dtype=float)
        if upper is not None:
            excursion = np.maximum(excursion, (active - upper) / _scale(upper, lower))
        if lower is not None:
            excursion = np.maximum(excursion, (lower - active) / _scale(lower, upper))

        violating = excursion > 0
        if not violating.any():
            return 0.0
        fraction = float(np.mean(violating))
        severity = 1.0 - math.exp(-EXCURSION_RATE * float(excursion.max()))
        return fraction + (1.0 - fraction) * severity
