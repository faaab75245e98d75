"""
Burnout analytics.

``score`` is pure; the report service reads employees and attendance and
lives in ``analytics.services.report``.
"""

from .burnout import BurnoutEmployee, BurnoutMetrics, RiskLevel, risk_level_for, score

__all__ = ["BurnoutEmployee", "BurnoutMetrics", "RiskLevel", "risk_level_for", "score"]
