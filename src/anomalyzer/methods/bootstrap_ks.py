"""Kolmogorov-Smirnov permutation tests on raw values and on first differences."""

from __future__ import annotations

import numpy as np

from .base import BaseMethod, MethodContext, is_constant

_TOLERANCE = 1e-12


def _ks_from_labels(tie_ends: np.ndarray, labels: np.ndarray, n_reference: int, n_active: int) -> np.ndarray:
    """KS statistic for label rows laid over the sorted pooled values.

    ``labels`` is True where the sorted value belongs to the active segment.
    The ECDFs are compared only at the last index of each run of ties.
    """

    active_cdf = np.cumsum(labels, axis=-1) / n_active
    reference_cdf = np.cumsum(~labels, axis=-1) / n_reference
    gaps = np.abs(active_cdf - reference_cdf)[..., tie_ends]
    return gaps.max(axis=-1)


def ks_statistic(reference: np.ndarray, active: np.ndarray) -> float:
    """Maximum absolute distance between the two empirical CDFs."""

    if reference.size == 0 or active.size == 0:
        return 0.0
    pooled = np.concatenate([reference, active])
    order = np.argsort(pooled, kind="mergesort")
    sorted_values = pooled[order]
    tie_ends = np.append(sorted_values[1:] != sorted_values[:-1], True)
    return float(_ks_from_labels(tie_ends, order >= reference.size, reference.size, active.size))


def bootstrap_ks_pvalue(
    reference: np.ndarray,
    active: np.ndarray,
    perm_count: int,
    rng: np.random.Generator,
) -> float:
    """Fraction of label permutations whose KS statistic reaches the observed one."""

    pooled = np.concatenate([reference, active])
    if reference.size == 0 or active.size == 0 or is_constant(pooled):
        return 1.0

    order = np.argsort(pooled, kind="mergesort")
    sorted_values = pooled[order]
    tie_ends = np.append(sorted_values[1:] != sorted_values[:-1], True)
    labels = order >= reference.size

    observed = _ks_from_labels(tie_ends, labels, reference.size, active.size)
    shuffled = rng.permuted(np.tile(labels, (perm_count, 1)), axis=1)
    permuted = _ks_from_labels(tie_ends, shuffled, reference.size, active.size)
    return float(np.mean(permuted >= observed - _TOLERANCE))


class BootstrapKSMethod(BaseMethod):
    """Detects a change in the overall distribution of values."""

    name = "ks"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        return 1.0 - bootstrap_ks_pvalue(reference, active, context.perm_count, context.rng)


class DiffMethod(BaseMethod):
    """Bootstrap-KS over successive deltas, sensitive to volatility rather than level."""

    name = "diff"

    def score(self, reference: np.ndarray, active: np.ndarray, context: MethodContext) -> float:
        if reference.size < 2 or active.size < 2:
            return 0.0
        return 1.0 - bootstrap_ks_pvalue(np.diff(reference), np.diff(active), context.perm_count, context.rng)
