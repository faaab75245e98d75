from typing import List

from compliance.models import ComplianceRule

from .contracts import ComplianceRuleData


def get_active_compliance_rules() -> List[ComplianceRuleData]:
    """Snapshot of every active rule, in id order"""
    return [
        ComplianceRuleData.from_model(rule)
        for rule in ComplianceRule.objects.filter(is_active=True).order_by("pk")
    ]
