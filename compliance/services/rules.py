"""
Compliance rule strategies.

Each rule type is one strategy class with a uniform contract: pull a value
out of ``PeriodMetrics`` and compare it against the rule's threshold. "Max"
rules are violated when the value is strictly above the threshold, "min"
rules when it is strictly below. Adding a rule type means writing one class
and registering it; nothing else changes.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type

from compliance.exceptions import UnsupportedRuleType

logger = logging.getLogger(__name__)


class Direction(Enum):
    MAX = "max"
    MIN = "min"

    def __str__(self):
        return self.value


def format_threshold(threshold) -> str:
    """Render ``Decimal('40.00')`` as ``40`` and ``Decimal('7.50')`` as ``7.5``"""
    value = Decimal(str(threshold))
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")


class AbstractRuleStrategy(ABC):
    rule_type: str = ""
    label: str = ""
    direction: Direction = Direction.MAX

    @abstractmethod
    def extract(self, metrics) -> Optional[float]:
        """Metric value the threshold applies to, or None when not measurable"""

    def is_violated(self, value, threshold) -> bool:
        if value is None:
            return False
        if self.direction is Direction.MAX:
            return value > float(threshold)
        return value < float(threshold)

    @abstractmethod
    def describe(self, value, threshold) -> str:
        """Human-readable explanation including actual vs. threshold"""

    def _limit_word(self) -> str:
        return "limit" if self.direction is Direction.MAX else "minimum"


class MaxHoursPerWeek(AbstractRuleStrategy):
    rule_type = "max_hours_per_week"
    label = "Maximum hours per week"

    def extract(self, metrics):
        return metrics.total_worked_hours

    def describe(self, value, threshold):
        return f"Worked {value:.2f} hours ({self._limit_word()}: {format_threshold(threshold)})"


class MinHoursPerWeek(MaxHoursPerWeek):
    rule_type = "min_hours_per_week"
    label = "Minimum hours per week"
    direction = Direction.MIN


class MaxOvertimeHours(AbstractRuleStrategy):
    rule_type = "max_overtime_hours"
    label = "Maximum overtime hours"

    def extract(self, metrics):
        return metrics.total_overtime_hours

    def describe(self, value, threshold):
        return f"Overtime {value:.2f} hours ({self._limit_word()}: {format_threshold(threshold)})"


class MaxLateArrivals(AbstractRuleStrategy):
    rule_type = "max_late_arrivals"
    label = "Maximum late arrivals"

    def extract(self, metrics):
        return metrics.late_count

    def describe(self, value, threshold):
        return f"Late {value} times ({self._limit_word()}: {format_threshold(threshold)})"


class MaxAbsences(AbstractRuleStrategy):
    rule_type = "max_absences"
    label = "Maximum absences"

    def extract(self, metrics):
        return metrics.absence_count

    def describe(self, value, threshold):
        return f"Absent {value} times ({self._limit_word()}: {format_threshold(threshold)})"


class MaxConsecutiveDays(AbstractRuleStrategy):
    rule_type = "max_consecutive_days"
    label = "Maximum consecutive working days"

    def extract(self, metrics):
        return metrics.longest_consecutive_days

    def describe(self, value, threshold):
        return (
            f"Worked {value} consecutive days "
            f"({self._limit_word()}: {format_threshold(threshold)})"
        )


class MinRestBetweenShifts(AbstractRuleStrategy):
    rule_type = "min_rest_between_shifts"
    label = "Minimum rest between shifts"
    direction = Direction.MIN

    def extract(self, metrics):
        # None with fewer than two shifts: nothing to measure
        return metrics.shortest_rest_hours

    def describe(self, value, threshold):
        return (
            f"Rested {value:.2f} hours between shifts "
            f"({self._limit_word()}: {format_threshold(threshold)})"
        )


class RuleRegistry:
    """Maps rule type strings to strategy classes"""

    def __init__(self):
        self._strategies: Dict[str, Type[AbstractRuleStrategy]] = {}

    def register(self, strategy_class: Type[AbstractRuleStrategy]) -> Type[AbstractRuleStrategy]:
        if not issubclass(strategy_class, AbstractRuleStrategy):
            raise ValueError(
                f"Rule class {strategy_class} must inherit from AbstractRuleStrategy"
            )
        if not strategy_class.rule_type:
            raise ValueError(f"Rule class {strategy_class.__name__} has no rule_type")

        self._strategies[strategy_class.rule_type] = strategy_class
        logger.debug(
            f"Registered compliance rule {strategy_class.rule_type}",
            extra={
                "rule_type": strategy_class.rule_type,
                "strategy_class": strategy_class.__name__,
                "action": "rule_strategy_registered",
            },
        )
        return strategy_class

    def get(self, rule_type: str, rule_id=None) -> AbstractRuleStrategy:
        try:
            return self._strategies[rule_type]()
        except KeyError:
            raise UnsupportedRuleType(rule_type, rule_id=rule_id) from None

    def is_supported(self, rule_type: str) -> bool:
        return rule_type in self._strategies

    def available_types(self) -> List[str]:
        return sorted(self._strategies)

    def choices(self) -> List[Tuple[str, str]]:
        return [(key, self._strategies[key].label) for key in self.available_types()]


_global_registry = RuleRegistry()

for _strategy in (
    MaxHoursPerWeek,
    MinHoursPerWeek,
    MaxOvertimeHours,
    MaxLateArrivals,
    MaxAbsences,
    MaxConsecutiveDays,
    MinRestBetweenShifts,
):
    _global_registry.register(_strategy)


def get_rule_registry() -> RuleRegistry:
    return _global_registry
