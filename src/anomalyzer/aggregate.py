"""Weighted combination of per-method probabilities."""

from __future__ import annotations

import math
from typing import Dict, Hashable, Mapping

from .errors import ConfigurationError


class WeightedAggregator:
    """Weighted mean of method probabilities, clipped to [0, 1]."""

    def __init__(self, weights: Mapping[Hashable, float]) -> None:
        if not weights:
            raise ConfigurationError("At least one weighted method is required")
        for key, weight in weights.items():
            if not math.isfinite(weight) or weight <= 0:
                raise ConfigurationError(f"Weight for '{key}' must be positive (got {weight})")
        self.weights: Dict[Hashable, float] = {key: float(w) for key, w in weights.items()}

    def combine(self, probabilities: Mapping[Hashable, float]) -> float:
        if not probabilities:
            return 0.0
        total = sum(self.weights[key] for key in probabilities)
        value = sum(self.weights[key] * float(prob) for key, prob in probabilities.items()) / total
        return min(max(value, 0.0), 1.0)
