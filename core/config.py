"""
Engine configuration value.

All numeric policy used by the aggregator, the rule evaluator, the payroll
calculator and the burnout scorer lives in a single immutable ``EngineConfig``
that callers pass explicitly into each computation. ``get_engine_config`` is
the only place that reads Django settings; the computations themselves never
look configuration up on their own, which keeps them deterministic and lets
one process serve several tenants with different policies.
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class OvertimeBasis(Enum):
    """Bucket over which the standard-hours threshold is applied"""

    WEEKLY = "weekly"
    DAILY = "daily"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class BurnoutWeights:
    """Maximum points each signal can contribute to the risk score"""

    overtime: float = 50.0
    workload: float = 30.0
    absence: float = 20.0


@dataclass(frozen=True)
class BurnoutCaps:
    """Signal value at which a component saturates at its full weight"""

    overtime_hours: float = 20.0  # avg weekly overtime
    workload_hours: float = 60.0  # avg weekly worked hours
    attendance_events: float = 10.0  # late arrivals + absences


@dataclass(frozen=True)
class BurnoutNotable:
    """Sub-thresholds above which a signal raises an explanatory flag"""

    overtime_hours: float = 10.0
    workload_hours: float = 50.0
    late_arrivals: int = 5
    absences: int = 3


@dataclass(frozen=True)
class RiskLevelThresholds:
    """Inclusive lower bounds of each risk level"""

    critical: float = 80.0
    high: float = 60.0
    medium: float = 35.0

    def __post_init__(self):
        if not (self.critical >= self.high >= self.medium >= 0):
            raise ValueError(
                "Risk level thresholds must satisfy critical >= high >= medium >= 0"
            )


@dataclass(frozen=True)
class EngineConfig:
    standard_hours_per_week: float = 40.0
    standard_hours_per_day: float = 8.0
    overtime_basis: OvertimeBasis = OvertimeBasis.WEEKLY
    overtime_cap_hours: Optional[float] = None
    burnout_weights: BurnoutWeights = field(default_factory=BurnoutWeights)
    burnout_caps: BurnoutCaps = field(default_factory=BurnoutCaps)
    burnout_notable: BurnoutNotable = field(default_factory=BurnoutNotable)
    risk_level_thresholds: RiskLevelThresholds = field(
        default_factory=RiskLevelThresholds
    )
    currency: str = "USD"
    minor_units: int = 2

    def __post_init__(self):
        if self.standard_hours_per_week <= 0 or self.standard_hours_per_day <= 0:
            raise ValueError("Standard hours thresholds must be positive")
        if self.overtime_cap_hours is not None and self.overtime_cap_hours < 0:
            raise ValueError("overtime_cap_hours cannot be negative")
        if self.minor_units < 0:
            raise ValueError("minor_units cannot be negative")

    @property
    def standard_threshold_hours(self) -> float:
        """Standard hours for the configured overtime bucket"""
        if self.overtime_basis is OvertimeBasis.DAILY:
            return self.standard_hours_per_day
        return self.standard_hours_per_week

    def with_overrides(self, **changes) -> "EngineConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["overtime_basis"] = self.overtime_basis.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EngineConfig":
        """
        Build a config from a plain mapping (settings, request payload, fixture).

        Unknown keys are rejected so that typos in deployment configuration fail
        loudly instead of silently falling back to defaults.
        """
        if not data:
            return cls()

        data = dict(data)
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown engine configuration keys: {sorted(unknown)}")

        nested = {
            "burnout_weights": BurnoutWeights,
            "burnout_caps": BurnoutCaps,
            "burnout_notable": BurnoutNotable,
            "risk_level_thresholds": RiskLevelThresholds,
        }
        for key, nested_cls in nested.items():
            if key in data and isinstance(data[key], Mapping):
                data[key] = nested_cls(**data[key])

        if "overtime_basis" in data and not isinstance(
            data["overtime_basis"], OvertimeBasis
        ):
            data["overtime_basis"] = OvertimeBasis(str(data["overtime_basis"]).lower())

        return cls(**data)


def get_engine_config(overrides: Optional[Mapping[str, Any]] = None) -> EngineConfig:
    """
    Resolve the engine configuration for the service layer.

    Reads ``settings.WORKFORCE_ENGINE`` and applies per-call overrides on top.
    """
    from django.conf import settings

    data = dict(getattr(settings, "WORKFORCE_ENGINE", {}) or {})
    if overrides:
        data.update(overrides)
    return EngineConfig.from_dict(data)
