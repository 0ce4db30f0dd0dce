"""Permutation rank-sum tests for upward and downward shifts."""

from __future__ import annotations

import numpy as np
from scipy import stats

from .base import BaseMethod, MethodContext, is_constant

_TOLERANCE = 1e-9


def rank_sum_pvalue(
    reference: np.ndarray,
    active: np.ndarray,
    perm_count: int,
    rng: np.random.Generator,
    *,
    tail: str = "high",
) -> float:
    """Monte Carlo p-value of the active segment's rank sum.

    ``tail="high"`` counts permutations whose rank sum is at least the
    observed one, ``tail="low"`` those at most the observed one.
    """

    if tail not in {"high", "low"}:
        raise ValueError(f"tail must be 'high' or 'low' (got {tail!r})")
    pooled = np.concatenate([reference, active])
    if reference.size == 0 or active.size == 0 or is_constant(pooled):
        return 1.0

    ranks = stats.rankdata(pooled)
    observed = float(ranks[reference.size :].sum())
    shuffled = rng.permuted(np.tile(ranks, (perm_count, 1)), axis=1)
    permuted = shuffled[:, reference.size :].sum(axis=1)
    if tail == "high":
        extreme = permuted >= observed - _TOLERANCE
    else:
        extreme = permuted <= observed + _TOLERANCE
    return float(np.mean(extreme))


class HighRankMethod(BaseMethod):
    """High when the active values rank above the reference values."""

    name = "highrank"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        return 1.0 - rank_sum_pvalue(reference, active, context.perm_count, context.rng, tail="high")


class LowRankMethod(BaseMethod):
    """High when the active values rank below the reference values."""

    name = "lowrank"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        return 1.0 - rank_sum_pvalue(reference, active, context.perm_count, context.rng, tail="low")
