"""Exceptions raised while building an anomalyzer."""

from __future__ import annotations


class AnomalyzerError(Exception):
    """Base class for anomalyzer errors."""


class ConfigurationError(AnomalyzerError, ValueError):
    """Raised when an anomalyzer configuration is invalid."""


class DataError(AnomalyzerError, ValueError):
    """Raised when initial history contains unusable values."""
