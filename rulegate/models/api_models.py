"""
Analysis Request/Response Models — API contract schemas.

These are the public-facing Pydantic models used by FastAPI endpoints
and the batch worker.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from rulegate.models.report_models import Context, Report, Verdict
from rulegate.models.source_models import UnitKind


class AnalyzeRequest(BaseModel):
    """One source unit submitted for analysis."""

    unit_id: str | None = Field(
        default=None, description="Stable identifier; derived from content when omitted"
    )
    content: str = Field(..., description="File content, or a single-file unified diff")
    language: str = Field(..., min_length=1, description="Language tag, e.g. 'java'")
    unit_kind: UnitKind = UnitKind.FULL_FILE
    profile: str | None = Field(
        default=None, description="Rule set profile; settings.default_profile when omitted"
    )
    context: Context = Field(default_factory=Context)
    data_provider: bool = Field(
        default=False, description="Unit is a parameterized-data-provider"
    )


class BatchAnalyzeRequest(BaseModel):
    """Request body for /analyze/batch."""

    units: list[AnalyzeRequest] = Field(default_factory=list)


class BatchAnalyzeResponse(BaseModel):
    """Reports in request order."""

    message: str = "analysis_complete"
    reports: list[Report] = Field(default_factory=list)


class RuleInfo(BaseModel):
    """Rule metadata for listings."""

    id: str
    title: str
    severity: str
    category: str
    version: int
    fix_hint: str = ""
    languages: list[str] | None = None
    unit_kinds: list[str] = Field(default_factory=list)
    diff_scoped: bool = True


class RuleListResponse(BaseModel):
    profile: str
    version: str
    fingerprint: str
    rules: list[RuleInfo] = Field(default_factory=list)


class AuditEntry(BaseModel):
    """Audit metadata for one analysed unit."""

    unit_id: str
    profile: str
    verdict: Verdict
    blocking: int = 0
    should_fix: int = 0
    optional: int = 0
    extraction_failed: bool = False
    duration_ms: float = 0.0
