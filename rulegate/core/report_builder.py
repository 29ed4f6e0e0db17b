"""
Report Builder — Assembles the frozen report from triage output and the
verdict.

Reports carry no timestamps or host data: identical inputs produce
byte-identical canonical JSON.
"""

from __future__ import annotations

from rulegate.models.report_models import (
    Report,
    RuleSetInfo,
    TierCounts,
    TriageResult,
    Verdict,
)
from rulegate.models.source_models import SourceUnit, UnitKind


def build_report(
    unit: SourceUnit,
    triage_result: TriageResult,
    verdict: Verdict,
    ruleset: RuleSetInfo,
) -> Report:
    return Report(
        unit_id=unit.unit_id,
        language=unit.language,
        unit_kind=unit.unit_kind,
        ruleset=ruleset,
        verdict=verdict,
        counts=triage_result.counts,
        violations=triage_result.ordered_violations(),
        summary=summarize(triage_result.counts, verdict),
    )


def build_failed_report(
    unit_id: str,
    language: str,
    unit_kind: UnitKind,
    reason: str,
    ruleset: RuleSetInfo,
) -> Report:
    """Minimal fail-closed report for a unit that could not be analysed."""
    return Report(
        unit_id=unit_id,
        language=language,
        unit_kind=unit_kind,
        ruleset=ruleset,
        verdict=Verdict.REQUEST_CHANGES,
        counts=TierCounts(),
        extraction_error=reason,
        summary=f"extraction failed: {reason}",
    )


def summarize(counts: TierCounts, verdict: Verdict) -> str:
    if not counts.total:
        return f"{verdict.value}: no violations."
    parts = []
    if counts.blocking:
        parts.append(f"{counts.blocking} blocking")
    if counts.should_fix:
        parts.append(f"{counts.should_fix} should-fix")
    if counts.optional:
        parts.append(f"{counts.optional} optional")
    return f"{verdict.value}: {counts.total} violations ({', '.join(parts)})."
