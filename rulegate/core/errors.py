"""
Rulegate error taxonomy.
"""

from __future__ import annotations

from rulegate.models.rule_models import Location, RuleCategory, Severity, Violation

RULE_EVALUATION_ERROR_ID = "rule_evaluation_error"


class RulegateError(Exception):
    """Base class for all engine errors."""


class FacetExtractionError(RulegateError):
    """The source unit is unusable; analysis of this unit aborts."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class DuplicateRuleError(RulegateError):
    """A rule id was registered twice."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Duplicate rule id: {rule_id}")
        self.rule_id = rule_id


class UnknownProfileError(RulegateError):
    def __init__(self, profile: str) -> None:
        super().__init__(f"Unknown rule set profile: {profile}")
        self.profile = profile


class RuleEvaluationError(RulegateError):
    """A single rule failed; reported as an OPTIONAL violation."""

    def __init__(self, rule_id: str, cause: str) -> None:
        super().__init__(f"Rule '{rule_id}' failed: {cause}")
        self.rule_id = rule_id
        self.cause = cause

    def to_violation(self) -> Violation:
        return Violation(
            rule_id=RULE_EVALUATION_ERROR_ID,
            severity=Severity.OPTIONAL,
            category=RuleCategory.ENGINE,
            location=Location(symbol=f"rule {self.rule_id}"),
            message=f"Rule '{self.rule_id}' internal error",
            evidence=(f"Cause: {self.cause}",),
        )
