"""
Compliance rule evaluation.

Only the pure parts are exported here; storage, persistence and the batch
check service import models and live in their own modules.
"""

from .contracts import ComplianceLogEntry, ComplianceRuleData, EvaluationResult
from .evaluator import evaluate
from .rules import AbstractRuleStrategy, RuleRegistry, get_rule_registry

__all__ = [
    "AbstractRuleStrategy",
    "ComplianceLogEntry",
    "ComplianceRuleData",
    "EvaluationResult",
    "RuleRegistry",
    "evaluate",
    "get_rule_registry",
]
