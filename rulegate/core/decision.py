"""
Decision Engine — Maps a violation profile plus context to a verdict.

    BLOCKING > 0
        fundamental-design BLOCKING > threshold and not prototype → REJECT
        otherwise                                                  → REQUEST_CHANGES
    SHOULD_FIX > 0 and not a hotfix                                → REQUEST_CHANGES
    otherwise                                                      → APPROVE

Pure and total: every (counts, context) pair maps to exactly one verdict.
"""

from __future__ import annotations

from rulegate.config import settings
from rulegate.models.report_models import (
    Context,
    DeploymentRisk,
    Maturity,
    TierCounts,
    Verdict,
)


def decide(
    counts: TierCounts,
    context: Context | None = None,
    fundamental_design_threshold: int | None = None,
) -> Verdict:
    """
    Compute the verdict for one unit.

    Args:
        counts: Tier counts from triage.
        context: Deployment risk and maturity; defaults to a regular change
            to production-critical code.
        fundamental_design_threshold: Overrides
            settings.fundamental_design_threshold.
    """
    context = context or Context()
    threshold = (
        settings.fundamental_design_threshold
        if fundamental_design_threshold is None
        else fundamental_design_threshold
    )
    if threshold < 0:
        raise ValueError(f"fundamental_design_threshold must be >= 0, got {threshold}")

    if counts.blocking > 0:
        if (
            counts.fundamental_design_blocking > threshold
            and context.maturity is not Maturity.PROTOTYPE
        ):
            return Verdict.REJECT
        return Verdict.REQUEST_CHANGES

    # Hotfixes only block on BLOCKING violations
    if counts.should_fix > 0 and context.deployment_risk is not DeploymentRisk.HOTFIX:
        return Verdict.REQUEST_CHANGES

    return Verdict.APPROVE
