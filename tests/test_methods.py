from __future__ import annotations

import math

import numpy as np
import pytest

from anomalyzer import ConfigurationError, Method, MethodContext, get_method
from anomalyzer.methods import METHODS, bootstrap_ks_pvalue, ks_statistic, rank_sum_pvalue


def _ctx(**overrides) -> MethodContext:
    params = {"upper_bound": 5.0, "lower_bound": 0.0, "perm_count": 500, "rng": np.random.default_rng(7)}
    params.update(overrides)
    return MethodContext(**params)


def test_registry_covers_every_method() -> None:
    assert set(METHODS) == set(Method)
    for method, impl in METHODS.items():
        assert impl.name == method.value


def test_get_method_accepts_names_and_rejects_unknown() -> None:
    assert get_method("KS") is METHODS[Method.KS]
    assert get_method(Method.CDF) is METHODS[Method.CDF]
    with pytest.raises(ConfigurationError):
        get_method("zscore")


@pytest.mark.parametrize("method", list(Method))
def test_empty_segments_score_zero(method: Method) -> None:
    impl = get_method(method)

    assert impl.probability([], [], _ctx()) == 0.0
    assert impl.probability([], [1.0, 2.0], _ctx(upper_bound=None, lower_bound=None)) == 0.0


@pytest.mark.parametrize("method", list(Method))
def test_constant_data_scores_zero(method: Method) -> None:
    reference = [3.0] * 12
    active = [3.0] * 3

    assert get_method(method).probability(reference, active, _ctx()) == 0.0


def test_cdf_is_zero_at_median_and_one_at_tails() -> None:
    cdf = get_method("cdf")
    reference = [1.0, 2.0, 3.0, 4.0, 5.0]

    assert cdf.probability(reference, [3.0], _ctx()) == pytest.approx(0.0)
    assert cdf.probability(reference, [10.0], _ctx()) == pytest.approx(1.0)
    assert cdf.probability(reference, [-10.0], _ctx()) == pytest.approx(1.0)
    assert 0.0 < cdf.probability(reference, [4.5], _ctx()) < 1.0


def test_cdf_needs_two_reference_points() -> None:
    assert get_method("cdf").probability([1.0], [100.0], _ctx()) == 0.0


def test_rank_methods_are_directional() -> None:
    reference = np.arange(20, dtype=float)
    high_active = np.arange(100, 105, dtype=float)
    low_active = -np.arange(1, 6, dtype=float)

    high = get_method("highrank")
    low = get_method("lowrank")

    assert high.probability(reference, high_active, _ctx()) > 0.99
    assert low.probability(reference, high_active, _ctx()) == 0.0
    assert low.probability(reference, low_active, _ctx()) > 0.99
    assert high.probability(reference, low_active, _ctx()) == 0.0


def test_rank_sum_pvalue_rejects_unknown_tail() -> None:
    with pytest.raises(ValueError):
        rank_sum_pvalue(np.ones(3), np.arange(2.0), 10, np.random.default_rng(0), tail="both")


def test_ks_statistic_matches_ecdf_definition() -> None:
    assert ks_statistic(np.array([1.0, 2.0, 3.0]), np.array([10.0, 11.0])) == pytest.approx(1.0)
    assert ks_statistic(np.array([1.0, 2.0, 3.0, 4.0]), np.array([1.0, 2.0, 3.0, 4.0])) == pytest.approx(0.0)
    # Gap is read after the tied 2.0s, never between them.
    assert ks_statistic(np.array([1.0, 2.0, 3.0]), np.array([2.0, 5.0])) == pytest.approx(0.5)
    assert ks_statistic(np.array([1.0, 2.0]), np.array([2.0])) == pytest.approx(0.5)


def test_bootstrap_ks_same_distribution_tends_to_zero() -> None:
    ks = get_method("ks")
    reference = np.tile([1.0, 2.0, 3.0, 4.0, 5.0], 4)
    active = np.array([1.0, 2.0, 3.0, 4.0, 5.0])

    assert ks.probability(reference, active, _ctx()) == 0.0
    assert bootstrap_ks_pvalue(reference, active, 100, np.random.default_rng(1)) == 1.0


def test_bootstrap_ks_far_shift_tends_to_one() -> None:
    ks = get_method("ks")
    reference = np.arange(20, dtype=float)

    assert ks.probability(reference, reference[-5:] + 100.0, _ctx()) > 0.95


def test_bootstrap_ks_is_reproducible_with_seed() -> None:
    ks = get_method("ks")
    rng = np.random.default_rng(123)
    reference = rng.normal(size=30)
    active = rng.normal(loc=0.5, size=6)

    first = ks.probability(reference, active, _ctx(rng=np.random.default_rng(42)))
    second = ks.probability(reference, active, _ctx(rng=np.random.default_rng(42)))
    assert first == second


def test_diff_ignores_pure_level_shift() -> None:
    diff = get_method("diff")
    reference = [1.0, 2.0] * 4
    active = [11.0, 12.0, 11.0, 12.0]

    assert diff.probability(reference, active, _ctx()) == 0.0
    assert get_method("cdf").probability(reference, active, _ctx()) == pytest.approx(1.0)


def test_diff_flags_volatility_increase() -> None:
    reference = [0.0, 1.0] * 8
    active = [0.0, 10.0, 0.0, 10.0]

    assert get_method("diff").probability(reference, active, _ctx()) > 0.8


def test_diff_needs_two_points_per_segment() -> None:
    assert get_method("diff").probability([1.0, 5.0, 1.0], [50.0], _ctx()) == 0.0


def test_fence_within_bounds_is_zero() -> None:
    assert get_method("fence").probability([], [0.5, 4.9, 5.0, 0.0], _ctx()) == 0.0


def test_fence_upper_only_uses_bound_scale() -> None:
    fence = get_method("fence")
    ctx = _ctx(upper_bound=5.0, lower_bound=None)

    expected = 0.5 + 0.5 * (1.0 - math.exp(-3.0 * 0.6))
    assert fence.probability([], [1.1, 8.0], ctx) == pytest.approx(expected)
    assert fence.probability([], [8.0, 9.0], ctx) == pytest.approx(1.0)


def test_fence_lower_bound_uses_span_when_both_set() -> None:
    fence = get_method("fence")
    ctx = _ctx(upper_bound=10.0, lower_bound=0.0)

    expected = 0.5 + 0.5 * (1.0 - math.exp(-3.0 * 0.5))
    assert fence.probability([], [-5.0, 5.0], ctx) == pytest.approx(expected)


def test_fence_zero_bound_falls_back_to_unit_scale() -> None:
    ctx = _ctx(upper_bound=None, lower_bound=0.0)

    expected = 0.25 + 0.75 * (1.0 - math.exp(-3.0 * 2.0))
    assert get_method("fence").probability([], [1.0, 1.0, 1.0, -2.0], ctx) == pytest.approx(expected)


def test_fence_is_monotone_in_fraction_exceeding() -> None:
    fence = get_method("fence")
    ctx = _ctx(upper_bound=5.0, lower_bound=None)

    probs = [fence.probability([], [6.0] * k + [1.0] * (4 - k), ctx) for k in range(5)]
    assert probs[0] == 0.0
    assert probs == sorted(probs)
    assert probs[-1] == pytest.approx(1.0)


def test_magnitude_zero_below_sensitivity() -> None:
    magnitude = get_method("magnitude")
    ctx = _ctx(sensitivity=0.1)

    assert magnitude.probability([10.0, 10.0], [10.5], ctx) == 0.0
    assert magnitude.probability([10.0, 10.0], [11.0], ctx) == pytest.approx((10**0.1 - 1) / 9)
    assert magnitude.probability([10.0, 10.0], [40.0], ctx) == 1.0


def test_magnitude_uses_absolute_change_for_zero_reference_mean() -> None:
    magnitude = get_method("magnitude")
    ctx = _ctx(sensitivity=0.1)

    assert magnitude.probability([-1.0, 1.0], [0.05], ctx) == 0.0
    assert magnitude.probability([-1.0, 1.0], [0.5], ctx) == pytest.approx((10**0.5 - 1) / 9)


def test_magnitude_handles_huge_changes() -> None:
    assert get_method("magnitude").probability([1.0], [1e300], _ctx()) == 1.0


def test_probability_maps_non_finite_scores_to_zero() -> None:
    class Broken(type(get_method("cdf"))):
        def score(self, reference, active, context):  # type: ignore[override]
            return float("nan")

    assert Broken().probability([1.0, 2.0], [3.0], _ctx()) == 0.0


def test_method_context_requires_explicit_generator() -> None:
    with pytest.raises(TypeError):
        MethodContext(upper_bound=1.0)  # type: ignore[call-arg]


def test_bootstrap_ks_same_distribution_scores_below_shifted() -> None:
    ks = get_method("ks")
    same, shifted = [], []
    for seed in range(20):
        draws = np.random.default_rng(seed)
        reference = draws.normal(size=40)
        active = draws.normal(size=10)
        same.append(ks.probability(reference, active, _ctx(perm_count=200, rng=np.random.default_rng(seed))))
        shifted.append(ks.probability(reference, active + 4.0, _ctx(perm_count=200, rng=np.random.default_rng(seed))))

    assert np.mean(same) < 0.75
    assert min(shifted) > 0.95
