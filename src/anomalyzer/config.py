"""Anomalyzer configuration model and loaders."""

from __future__ import annotations

import json
import math
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigurationError


class Method(str, Enum):
    """Closed set of anomaly tests an anomalyzer can run."""

    CDF = "cdf"
    DIFF = "diff"
    HIGHRANK = "highrank"
    LOWRANK = "lowrank"
    FENCE = "fence"
    MAGNITUDE = "magnitude"
    KS = "ks"


DEFAULT_METHODS: Tuple[Method, ...] = (
    Method.CDF,
    Method.FENCE,
    Method.HIGHRANK,
    Method.LOWRANK,
    Method.MAGNITUDE,
)


def _describe_errors(exc: ValidationError) -> str:
    errors = exc.errors()
    failed = {err["loc"][:1] for err in errors if err["type"] != "too_short"}
    # an invalid item also empties the tuple, so drop the follow-on length error
    kept = [err for err in errors if err["type"] != "too_short" or err["loc"][:1] not in failed]
    problems = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in kept)
    return f"Invalid anomalyzer config: {problems}"


class AnomalyzerConfig(BaseModel):
    """Validated, immutable settings for an :class:`~anomalyzer.engine.Anomalyzer`.

    ``upper_bound``/``lower_bound`` use ``None`` to mean "no bound on this
    side". Methods without an explicit weight are weighted 1.0, so leaving
    ``weights`` empty gives a plain mean over the configured methods.
    Invalid settings raise :class:`ConfigurationError` from both the
    constructor and :meth:`from_mapping`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    active_size: int = Field(gt=0)
    n_seasons: int = Field(default=4, gt=0)
    upper_bound: Optional[float] = None
    lower_bound: Optional[float] = None
    sensitivity: float = Field(default=0.1, gt=0.0, le=1.0)
    perm_count: int = Field(default=500, gt=0)
    methods: Tuple[Method, ...] = Field(default=DEFAULT_METHODS, min_length=1)
    weights: Dict[Method, float] = Field(default_factory=dict)
    delay: bool = False
    seed: Optional[int] = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigurationError(_describe_errors(exc)) from exc

    @field_validator("methods", mode="before")
    @classmethod
    def _normalize_methods(cls, value: Any) -> Any:
        if isinstance(value, (str, Method)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value
        seen: list[Any] = []
        for item in value:
            key = item.strip().lower() if isinstance(item, str) else item
            if key not in seen:
                seen.append(key)
        return tuple(seen)

    @field_validator("weights", mode="before")
    @classmethod
    def _normalize_weight_keys(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {(k.strip().lower() if isinstance(k, str) else k): v for k, v in value.items()}
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "AnomalyzerConfig":
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative (got {self.seed})")
        for side, bound in (("upper_bound", self.upper_bound), ("lower_bound", self.lower_bound)):
            if bound is not None and not math.isfinite(bound):
                raise ValueError(f"{side} must be finite or null (got {bound})")
        if (
            self.upper_bound is not None
            and self.lower_bound is not None
            and self.upper_bound < self.lower_bound
        ):
            raise ValueError(
                f"upper_bound ({self.upper_bound}) must be >= lower_bound ({self.lower_bound})"
            )
        if Method.FENCE in self.methods and self.upper_bound is None and self.lower_bound is None:
            raise ValueError("fence method requires upper_bound and/or lower_bound")
        for method, weight in self.weights.items():
            if method not in self.methods:
                raise ValueError(f"weight given for unconfigured method '{method.value}'")
            if not math.isfinite(weight) or weight <= 0:
                raise ValueError(f"weight for '{method.value}' must be positive (got {weight})")
        return self

    @property
    def reference_size(self) -> int:
        return self.active_size * self.n_seasons

    @property
    def capacity(self) -> int:
        return self.active_size * (self.n_seasons + 1)

    def resolved_weights(self) -> Dict[Method, float]:
        """Weight for every configured method, defaulting to 1.0."""

        return {method: float(self.weights.get(method, 1.0)) for method in self.methods}

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "AnomalyzerConfig":
        """Validate a plain mapping, raising :class:`ConfigurationError` on failure."""

        if not isinstance(cfg, Mapping):
            raise ConfigurationError("Anomalyzer config must be a mapping/object")
        try:
            return cls.model_validate(dict(cfg))
        except ValidationError as exc:
            raise ConfigurationError(_describe_errors(exc)) from exc


def load_config(path: str | Path) -> AnomalyzerConfig:
    """Load and validate a YAML or JSON config file.

    A top-level ``anomalyzer`` key is unwrapped so the settings can live in a
    larger application config.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if isinstance(data, Mapping) and isinstance(data.get("anomalyzer"), Mapping):
        data = data["anomalyzer"]
    if not isinstance(data, Mapping):
        raise ConfigurationError("Config file must contain a mapping/object at the top level")
    return AnomalyzerConfig.from_mapping(data)
