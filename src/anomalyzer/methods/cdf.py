"""Empirical CDF placement of the active mean."""

from __future__ import annotations

import numpy as np
from scipy import stats

from .base import BaseMethod, MethodContext


class CDFMethod(BaseMethod):
    """Scores how far into either tail of the reference distribution the active mean falls.

    The percentile uses mid-rank ties, so an active mean equal to a constant
    reference lands on the median and scores 0.
    """

    name = "cdf"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        if reference.size < 2 or active.size == 0:
            return 0.0
        percentile = stats.percentileofscore(reference, float(np.mean(active)), kind="mean") / 100.0
        return abs(2.0 * percentile - 1.0)
