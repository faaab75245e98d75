from rest_framework import status

from core.exceptions import APIError


class UnsupportedRuleType(APIError):
    """
    Raised for a rule whose ``type`` has no registered strategy.

    Isolated to that single rule: the evaluator records it and moves on.
    """

    default_code = "UNSUPPORTED_RULE_TYPE"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, rule_type, rule_id=None, employee_id=None):
        self.rule_type = rule_type
        self.rule_id = rule_id
        super().__init__(
            f"Unsupported compliance rule type '{rule_type}'",
            details={
                "rule_type": rule_type,
                "rule_id": rule_id,
                "employee_id": employee_id,
            },
        )


class RuleInUse(APIError):
    """Raised when deleting a rule that violation logs still point at."""

    default_code = "RULE_IN_USE"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, rule_id, log_count):
        super().__init__(
            f"Compliance rule {rule_id} has {log_count} violation logs; deactivate it instead",
            details={"rule_id": rule_id, "log_count": log_count},
        )
