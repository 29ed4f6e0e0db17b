"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from rulegate.audit.logger import AuditLogger
from rulegate.cache.facet_cache import FacetCache
from rulegate.workers.analysis_worker import AnalysisWorker


@lru_cache
def get_facet_cache() -> FacetCache:
    """Shared facet cache singleton."""
    return FacetCache()


@lru_cache
def get_audit_logger() -> AuditLogger:
    """Shared audit logger singleton."""
    return AuditLogger()


@lru_cache
def get_analysis_worker() -> AnalysisWorker:
    """Shared analysis worker singleton."""
    return AnalysisWorker(
        cache=get_facet_cache(),
        audit=get_audit_logger(),
    )
