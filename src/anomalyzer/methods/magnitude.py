"""Relative change in level between the active and reference segments."""

from __future__ import annotations

import numpy as np

from .base import BaseMethod, MethodContext

GROWTH_BASE = 10.0


def relative_change(reference: np.ndarray, active: np.ndarray) -> float:
    """Change in mean relative to the reference mean, or absolute when that mean is 0."""

    ref_mean = float(np.mean(reference))
    diff = abs(float(np.mean(active)) - ref_mean)
    if ref_mean == 0:
        return diff
    return diff / abs(ref_mean)


class MagnitudeMethod(BaseMethod):
    """Zero below ``sensitivity``, then rising exponentially to 1 at a 100% change."""

    name = "magnitude"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        if reference.size == 0 or active.size == 0:
            return 0.0
        change = relative_change(reference, active)
        if change < context.sensitivity:
            return 0.0
        if change >= 1.0:
            return 1.0
        return (GROWTH_BASE**change - 1.0) / (GROWTH_BASE - 1.0)
