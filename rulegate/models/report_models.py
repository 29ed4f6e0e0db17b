"""
Report Data Models — Context modifiers, triage output, verdicts and the
frozen report artifact.
"""

from __future__ import annotations

import json
from enum import Enum

from pydantic import BaseModel, Field

from rulegate.models.rule_models import Severity, Violation
from rulegate.models.source_models import UnitKind


class DeploymentRisk(str, Enum):
    HOTFIX = "hotfix"
    REGULAR = "regular"
    EXPERIMENTAL = "experimental"


class Maturity(str, Enum):
    PROTOTYPE = "prototype"
    PRODUCTION_CRITICAL = "production-critical"
    INTERNAL_TOOL = "internal-tool"


class Context(BaseModel):
    """External modifiers supplied alongside a source unit."""

    deployment_risk: DeploymentRisk = DeploymentRisk.REGULAR
    maturity: Maturity = Maturity.PRODUCTION_CRITICAL

    model_config = {"frozen": True}


class Verdict(str, Enum):
    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    REJECT = "REJECT"


class TierCounts(BaseModel):
    """Aggregate violation counts per severity tier."""

    blocking: int = Field(default=0, ge=0)
    should_fix: int = Field(default=0, ge=0)
    optional: int = Field(default=0, ge=0)
    fundamental_design_blocking: int = Field(
        default=0, ge=0, description="BLOCKING violations in the fundamental_design category"
    )

    model_config = {"frozen": True}

    def of(self, severity: Severity) -> int:
        return getattr(self, severity.value)

    @property
    def total(self) -> int:
        return self.blocking + self.should_fix + self.optional


class TierGroup(BaseModel):
    """All violations of one tier, in rule evaluation order."""

    severity: Severity
    violations: tuple[Violation, ...] = ()

    model_config = {"frozen": True}


class TriageResult(BaseModel):
    """Violations regrouped by tier plus their counts."""

    counts: TierCounts
    groups: tuple[TierGroup, ...]

    model_config = {"frozen": True}

    def ordered_violations(self) -> tuple[Violation, ...]:
        return tuple(v for group in self.groups for v in group.violations)


class RuleSetInfo(BaseModel):
    """Identifies the registry snapshot a report was produced with."""

    profile: str
    version: str
    fingerprint: str

    model_config = {"frozen": True}


class Report(BaseModel):
    """The frozen result of analysing one source unit."""

    unit_id: str
    language: str
    unit_kind: UnitKind
    ruleset: RuleSetInfo
    verdict: Verdict
    counts: TierCounts = Field(default_factory=TierCounts)
    violations: tuple[Violation, ...] = ()
    extraction_error: str | None = None
    summary: str = ""

    model_config = {"frozen": True}

    def to_canonical_json(self) -> str:
        """Deterministic serialized form: stable field, tier and rule order."""
        return json.dumps(
            self.model_dump(mode="json"),
            ensure_ascii=False,
            separators=(",", ":"),
        )
