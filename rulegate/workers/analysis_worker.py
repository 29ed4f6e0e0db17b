"""
Analysis Worker — Runs the per-unit pipeline for single units and batches.

Pipeline per unit:
1. Resolve the rule set profile
2. Extract facets (with caching)
3. Evaluate rules
4. Triage by severity
5. Decide the verdict
6. Build the report and append an audit entry

Units share only the immutable registry and the facet cache, so a batch
runs its units concurrently in worker threads without further locking.
"""

from __future__ import annotations

import asyncio
import logging
import time

from rulegate.audit.logger import AuditLogger
from rulegate.cache.facet_cache import FacetCache
from rulegate.config import settings
from rulegate.core.errors import FacetExtractionError
from rulegate.core.extractor import extract_facets, normalize_language, stable_unit_id
from rulegate.core.pipeline import analyze_unit
from rulegate.core.registry import RuleSetRegistry, get_registry
from rulegate.core.report_builder import build_failed_report
from rulegate.models.api_models import AnalyzeRequest, AuditEntry
from rulegate.models.report_models import Report
from rulegate.models.source_models import Facets, SourceUnit

logger = logging.getLogger("rulegate.worker")


class AnalysisWorker:
    """Orchestrates analysis of single units and concurrent batches."""

    def __init__(
        self,
        cache: FacetCache | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self.cache = cache if cache is not None else FacetCache()
        self.audit = audit

    def registry_for(self, profile: str | None) -> RuleSetRegistry:
        return get_registry(profile or settings.default_profile)

    def analyze(self, request: AnalyzeRequest) -> Report:
        """Analyse one unit synchronously."""
        start = time.monotonic()
        registry = self.registry_for(request.profile)
        language = normalize_language(request.language)
        unit_id = request.unit_id or stable_unit_id(request.content, language, request.unit_kind)

        try:
            report = self._run(request, registry, language, unit_id)
        except Exception as e:
            # Fail closed: never approve a unit the engine could not analyse
            logger.exception(f"[{unit_id}] Unexpected analysis error")
            report = build_failed_report(
                unit_id,
                language,
                request.unit_kind,
                f"internal error: {type(e).__name__}",
                registry.info(),
            )

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(
            f"[{unit_id}] {report.verdict.value} in {elapsed_ms:.1f}ms — "
            f"{report.counts.blocking} blocking, {report.counts.should_fix} should-fix, "
            f"{report.counts.optional} optional"
        )
        if self.audit is not None:
            self.audit.log(
                AuditEntry(
                    unit_id=unit_id,
                    profile=registry.profile,
                    verdict=report.verdict,
                    blocking=report.counts.blocking,
                    should_fix=report.counts.should_fix,
                    optional=report.counts.optional,
                    extraction_failed=report.extraction_error is not None,
                    duration_ms=round(elapsed_ms, 2),
                )
            )
        return report

    def _run(
        self,
        request: AnalyzeRequest,
        registry: RuleSetRegistry,
        language: str,
        unit_id: str,
    ) -> Report:
        try:
            facets = self._facets(request, language)
        except FacetExtractionError as e:
            logger.info(f"[{unit_id}] Extraction failed: {e.reason}")
            return build_failed_report(
                unit_id, language, request.unit_kind, e.reason, registry.info()
            )

        unit = SourceUnit(
            unit_id=unit_id,
            raw_text=request.content,
            language=language,
            unit_kind=request.unit_kind,
            facets=facets,
        )
        return analyze_unit(unit, registry, request.context)

    def _facets(self, request: AnalyzeRequest, language: str) -> Facets:
        if not settings.cache_enabled:
            return extract_facets(
                request.content, language, request.unit_kind, request.data_provider
            )

        cached = self.cache.get(
            request.content, language, request.unit_kind, request.data_provider
        )
        if cached is not None:
            logger.debug(f"Facet cache hit ({language}, {request.unit_kind.value})")
            return cached

        facets = extract_facets(request.content, language, request.unit_kind, request.data_provider)
        self.cache.put(request.content, language, request.unit_kind, facets, request.data_provider)
        return facets

    async def analyze_batch(self, requests: list[AnalyzeRequest]) -> list[Report]:
        """
        Analyse independent units concurrently.

        Reports come back in request order. Unknown profiles fail the whole
        batch before any unit runs; cancelling the awaiting task abandons
        units that have not started yet.
        """
        for request in requests:
            self.registry_for(request.profile)

        semaphore = asyncio.Semaphore(settings.max_concurrent_units)
        batch_start = time.monotonic()

        async def run_one(request: AnalyzeRequest) -> Report:
            async with semaphore:
                return await asyncio.to_thread(self.analyze, request)

        reports = await asyncio.gather(*(run_one(r) for r in requests))

        logger.info(
            f"Batch of {len(requests)} units complete in "
            f"{(time.monotonic() - batch_start) * 1000:.0f}ms"
        )
        return list(reports)
