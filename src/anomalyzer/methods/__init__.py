"""Closed registry of anomaly test implementations."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..config import Method
from ..errors import ConfigurationError
from .base import BaseMethod, MethodContext
from .bootstrap_ks import BootstrapKSMethod, DiffMethod, bootstrap_ks_pvalue, ks_statistic
from .cdf import CDFMethod
from .fence import FenceMethod
from .magnitude import MagnitudeMethod, relative_change
from .rank import HighRankMethod, LowRankMethod, rank_sum_pvalue

METHODS: Mapping[Method, BaseMethod] = MappingProxyType(
    {
        Method.CDF: CDFMethod(),
        Method.DIFF: DiffMethod(),
        Method.HIGHRANK: HighRankMethod(),
        Method.LOWRANK: LowRankMethod(),
        Method.FENCE: FenceMethod(),
        Method.MAGNITUDE: MagnitudeMethod(),
        Method.KS: BootstrapKSMethod(),
    }
)


def get_method(name: str | Method) -> BaseMethod:
    """Return the implementation registered for ``name``."""

    try:
        return METHODS[Method(name.lower() if isinstance(name, str) else name)]
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(
            f"Unknown method '{name}'. Registered methods: {sorted(m.value for m in Method)}"
        ) from exc


__all__ = [
    "METHODS",
    "BaseMethod",
    "BootstrapKSMethod",
    "CDFMethod",
    "DiffMethod",
    "FenceMethod",
    "HighRankMethod",
    "LowRankMethod",
    "MagnitudeMethod",
    "MethodContext",
    "bootstrap_ks_pvalue",
    "get_method",
    "ks_statistic",
    "rank_sum_pvalue",
    "relative_change",
]
