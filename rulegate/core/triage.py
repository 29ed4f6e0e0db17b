"""
Severity Triage — Stable regrouping of violations by tier.
"""

from __future__ import annotations

from typing import Iterable

from rulegate.models.report_models import TierCounts, TierGroup, TriageResult
from rulegate.models.rule_models import TIER_ORDER, RuleCategory, Severity, Violation


def triage(violations: Iterable[Violation]) -> TriageResult:
    """
    Group violations by severity tier, preserving evaluation order within
    each tier, and count them. No rule is re-evaluated.
    """
    buckets: dict[Severity, list[Violation]] = {tier: [] for tier in TIER_ORDER}
    for v in violations:
        buckets[v.severity].append(v)

    fundamental = sum(
        1 for v in buckets[Severity.BLOCKING] if v.category is RuleCategory.FUNDAMENTAL_DESIGN
    )
    counts = TierCounts(
        blocking=len(buckets[Severity.BLOCKING]),
        should_fix=len(buckets[Severity.SHOULD_FIX]),
        optional=len(buckets[Severity.OPTIONAL]),
        fundamental_design_blocking=fundamental,
    )
    return TriageResult(
        counts=counts,
        groups=tuple(
            TierGroup(severity=tier, violations=tuple(buckets[tier])) for tier in TIER_ORDER
        ),
    )
