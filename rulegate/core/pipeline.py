"""
Analysis Pipeline — extract → evaluate → triage → decide → build for a
single unit.

Stages run strictly in sequence and share nothing with other units'
pipelines, so independent units can be analysed concurrently.
"""

from __future__ import annotations

import logging

from rulegate.core.decision import decide
from rulegate.core.errors import FacetExtractionError
from rulegate.core.extractor import extract, normalize_language, stable_unit_id
from rulegate.core.registry import RuleSetRegistry
from rulegate.core.report_builder import build_failed_report, build_report
from rulegate.core.rule_engine import evaluate
from rulegate.core.triage import triage
from rulegate.models.report_models import Context, Report
from rulegate.models.source_models import SourceUnit, UnitKind

logger = logging.getLogger("rulegate.pipeline")


def analyze_unit(
    unit: SourceUnit,
    registry: RuleSetRegistry,
    context: Context | None = None,
    fundamental_design_threshold: int | None = None,
) -> Report:
    """Analyse an already-extracted unit."""
    violations = evaluate(unit, registry)
    triaged = triage(violations)
    verdict = decide(triaged.counts, context, fundamental_design_threshold)
    return build_report(unit, triaged, verdict, registry.info())


def analyze_source(
    raw_text: str,
    language: str,
    unit_kind: UnitKind | str,
    registry: RuleSetRegistry,
    context: Context | None = None,
    unit_id: str | None = None,
    data_provider: bool = False,
    fundamental_design_threshold: int | None = None,
) -> Report:
    """
    Extract and analyse one unit.

    An unusable unit yields a fail-closed report (REQUEST_CHANGES) rather
    than an exception.
    """
    unit_kind = UnitKind(unit_kind)
    language = normalize_language(language)
    unit_id = unit_id or stable_unit_id(raw_text, language, unit_kind)
    try:
        unit = extract(raw_text, language, unit_kind, unit_id, data_provider)
    except FacetExtractionError as e:
        logger.info(f"[{unit_id}] Extraction failed: {e.reason}")
        return build_failed_report(unit_id, language, unit_kind, e.reason, registry.info())

    return analyze_unit(unit, registry, context, fundamental_design_threshold)
