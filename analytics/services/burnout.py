"""
Burnout risk scoring.

Turns one employee's ``PeriodMetrics`` into a 0-100 risk score, a risk level
and a set of explanatory flags. Each signal is normalized against a cap and
weighted:

    overtime = min(avg weekly overtime / cap, 1) * weight
    workload = min(avg weekly worked hours / cap, 1) * weight
    absence  = min((late arrivals + absences) / cap, 1) * weight

Weights, caps, "notable" flag thresholds and level boundaries all come from
``EngineConfig``. The score never decreases when a single signal grows.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from core.config import EngineConfig, RiskLevelThresholds

FLAG_EXCESSIVE_OVERTIME = "Excessive overtime"
FLAG_HEAVY_WORKLOAD = "Heavy workload"
FLAG_FREQUENT_LATENESS = "Frequent lateness"
FLAG_FREQUENT_ABSENCES = "Frequent absences"


class RiskLevel(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class BurnoutMetrics:
    avg_overtime_hours: float
    total_work_hours: float
    avg_weekly_work_hours: float
    late_count: int
    absence_count: int

    @classmethod
    def from_period(cls, metrics) -> "BurnoutMetrics":
        return cls(
            avg_overtime_hours=metrics.avg_weekly_overtime_hours,
            total_work_hours=metrics.total_worked_hours,
            avg_weekly_work_hours=metrics.avg_weekly_worked_hours,
            late_count=metrics.late_count,
            absence_count=metrics.absence_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_overtime_hours": round(self.avg_overtime_hours, 2),
            "total_work_hours": round(self.total_work_hours, 2),
            "avg_weekly_work_hours": round(self.avg_weekly_work_hours, 2),
            "late_count": self.late_count,
            "absence_count": self.absence_count,
        }


@dataclass(frozen=True)
class BurnoutEmployee:
    employee_id: int
    risk_score: float
    risk_level: RiskLevel
    flags: FrozenSet[str] = frozenset()
    metrics: Optional[BurnoutMetrics] = None
    components: Dict[str, float] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "flags": sorted(self.flags),
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "components": dict(self.components),
        }


def risk_level_for(risk_score: float, thresholds: Optional[RiskLevelThresholds] = None) -> RiskLevel:
    """Level for a score; each boundary belongs to the higher level"""
    thresholds = thresholds or RiskLevelThresholds()
    if risk_score >= thresholds.critical:
        return RiskLevel.CRITICAL
    if risk_score >= thresholds.high:
        return RiskLevel.HIGH
    if risk_score >= thresholds.medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _component(value: float, cap: float, weight: float) -> float:
    if cap <= 0:
        return weight if value > 0 else 0.0
    return min(max(value, 0.0) / cap, 1.0) * weight


def score(metrics, config: Optional[EngineConfig] = None) -> BurnoutEmployee:
    """
    Score one employee.

    Args:
        metrics: PeriodMetrics of the employee
        config: Engine configuration (weights, caps, notable thresholds, levels)

    Returns:
        BurnoutEmployee with per-signal components for explainability
    """
    config = config or EngineConfig()
    weights = config.burnout_weights
    caps = config.burnout_caps
    notable = config.burnout_notable
    signals = BurnoutMetrics.from_period(metrics)

    components = {
        "overtime": _component(signals.avg_overtime_hours, caps.overtime_hours, weights.overtime),
        "workload": _component(
            signals.avg_weekly_work_hours, caps.workload_hours, weights.workload
        ),
        "absence": _component(
            signals.late_count + signals.absence_count,
            caps.attendance_events,
            weights.absence,
        ),
    }
    risk_score = round(min(max(sum(components.values()), 0.0), 100.0), 2)

    flags = set()
    if signals.avg_overtime_hours > notable.overtime_hours:
        flags.add(FLAG_EXCESSIVE_OVERTIME)
    if signals.avg_weekly_work_hours > notable.workload_hours:
        flags.add(FLAG_HEAVY_WORKLOAD)
    if signals.late_count > notable.late_arrivals:
        flags.add(FLAG_FREQUENT_LATENESS)
    if signals.absence_count > notable.absences:
        flags.add(FLAG_FREQUENT_ABSENCES)

    return BurnoutEmployee(
        employee_id=metrics.employee_id,
        risk_score=risk_score,
        risk_level=risk_level_for(risk_score, config.risk_level_thresholds),
        flags=frozenset(flags),
        metrics=signals,
        components={name: round(value, 2) for name, value in components.items()},
    )
