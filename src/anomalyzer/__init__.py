"""Windowed multi-method anomaly scoring for univariate streams."""

from importlib import metadata

from .aggregate import WeightedAggregator
from .config import AnomalyzerConfig, Method, load_config
from .engine import Anomalyzer, MethodResult
from .errors import AnomalyzerError, ConfigurationError, DataError
from .methods import METHODS, BaseMethod, MethodContext, get_method
from .series import load_series
from .window import Window

try:
    __version__ = metadata.version("anomalyzer")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.1.0"

__all__ = [
    "Anomalyzer",
    "AnomalyzerConfig",
    "AnomalyzerError",
    "BaseMethod",
    "ConfigurationError",
    "DataError",
    "METHODS",
    "Method",
    "MethodContext",
    "MethodResult",
    "WeightedAggregator",
    "Window",
    "get_method",
    "load_config",
    "load_series",
    "__version__",
]
