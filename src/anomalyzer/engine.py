"""Stateful evaluator combining a window with the configured anomaly tests."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

import numpy as np

from .aggregate import WeightedAggregator
from .config import AnomalyzerConfig, Method
from .errors import DataError
from .methods import BaseMethod, MethodContext, get_method
from .window import Window

logger = logging.getLogger(__name__)

_METHOD_ORDINALS: Dict[Method, int] = {method: idx for idx, method in enumerate(Method)}


@dataclass
class MethodResult:
    method: str
    probability: float
    weight: float

    def as_dict(self) -> Dict[str, Any]:
        return {"method": self.method, "probability": self.probability, "weight": self.weight}


def _validate_history(history: Iterable[float] | None) -> np.ndarray:
    if history is None:
        return np.empty(0, dtype=float)
    try:
        arr = np.asarray(list(history), dtype=float)
    except (TypeError, ValueError) as exc:
        raise DataError(f"Initial history must contain only numbers: {exc}") from exc
    if arr.ndim != 1:
        raise DataError(f"Initial history must be one-dimensional (got shape {arr.shape})")
    bad = np.flatnonzero(~np.isfinite(arr))
    if bad.size:
        raise DataError(f"Initial history contains non-finite values at positions {bad.tolist()}")
    return arr


class Anomalyzer:
    """Scores how anomalous the newest observations are against the ones before them.

    The instance owns its window. ``push`` is the only mutating call and must
    be serialized by the caller; concurrent ``eval`` calls are safe while no
    ``push`` is running.

    Permutation-based methods draw from generators derived from ``seed`` (or
    ``config.seed``) and rebuilt on every evaluation, so results depend only
    on the seed and the window contents.
    """

    def __init__(
        self,
        config: AnomalyzerConfig | Mapping[str, Any],
        history: Iterable[float] | None = None,
        *,
        seed: int | None = None,
    ) -> None:
        self.config = config if isinstance(config, AnomalyzerConfig) else AnomalyzerConfig.from_mapping(config)
        values = _validate_history(history)

        self.window = Window(self.config.active_size, self.config.n_seasons, values)
        self._methods: List[tuple[Method, BaseMethod]] = [(m, get_method(m)) for m in self.config.methods]
        self._aggregator = WeightedAggregator(self.config.resolved_weights())

        if seed is None:
            seed = self.config.seed
        self._entropy = np.random.SeedSequence(seed).entropy

        if values.size > self.window.capacity:
            logger.debug(
                "Initial history of %d values exceeds capacity %d; keeping the newest",
                values.size,
                self.window.capacity,
            )
        logger.debug(
            "Anomalyzer ready: methods=%s capacity=%d filled=%d",
            [m.value for m, _ in self._methods],
            self.window.capacity,
            len(self.window),
        )

    @property
    def capacity(self) -> int:
        return self.window.capacity

    @property
    def is_warm(self) -> bool:
        """True while the window has not yet reached capacity."""

        return not self.window.is_full

    def _context(self, method: Method) -> MethodContext:
        seq = np.random.SeedSequence(self._entropy, spawn_key=(_METHOD_ORDINALS[method],))
        return MethodContext(
            upper_bound=self.config.upper_bound,
            lower_bound=self.config.lower_bound,
            sensitivity=self.config.sensitivity,
            perm_count=self.config.perm_count,
            rng=np.random.default_rng(seq),
        )

    def evaluate_methods(self) -> List[MethodResult]:
        """Per-method probabilities for the current window, in configured order."""

        reference = self.window.reference_segment()
        active = self.window.active_segment()
        weights = self._aggregator.weights
        return [
            MethodResult(
                method=method.value,
                probability=impl.probability(reference, active, self._context(method)),
                weight=weights[method],
            )
            for method, impl in self._methods
        ]

    def eval(self) -> float:
        """Aggregated anomaly probability for the current window."""

        if self.config.delay and self.is_warm:
            return 0.0
        results = self.evaluate_methods()
        return self._aggregator.combine({Method(r.method): r.probability for r in results})

    def push(self, value: float) -> float:
        """Append ``value`` (evicting the oldest when full) and re-evaluate."""

        value = float(value)
        if not math.isfinite(value):
            logger.warning("Ignoring non-finite observation %r", value)
            return self.eval()
        self.window.append(value)
        return self.eval()

    def extend(self, values: Iterable[float]) -> List[float]:
        """Push each value in order and return the probability after each one."""

        return [self.push(value) for value in values]

    def __len__(self) -> int:
        return len(self.window)

    def __repr__(self) -> str:
        return (
            f"Anomalyzer(methods={[m.value for m, _ in self._methods]}, "
            f"length={len(self.window)}, capacity={self.window.capacity})"
        )
