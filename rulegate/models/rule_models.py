"""
Rule Data Models — Severity tiers, violations, and rule metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from pydantic import BaseModel, Field

from rulegate.models.source_models import Facets, SourceUnit, UnitKind


class Severity(str, Enum):
    BLOCKING = "blocking"
    SHOULD_FIX = "should_fix"
    OPTIONAL = "optional"


# Report order of the tiers
TIER_ORDER: tuple[Severity, ...] = (
    Severity.BLOCKING,
    Severity.SHOULD_FIX,
    Severity.OPTIONAL,
)


class RuleCategory(str, Enum):
    FUNDAMENTAL_DESIGN = "fundamental_design"
    IMPORTS = "imports"
    TEST_STRUCTURE = "test_structure"
    SECURITY = "security"
    HYGIENE = "hygiene"
    ENGINE = "engine"


class Location(BaseModel):
    """Where a violation was found: a line/column, a symbol, or both."""

    line: int | None = None
    column: int | None = None
    symbol: str = Field(default="", description="Symbolic reference, e.g. 'test ProductTest.testPrice'")

    model_config = {"frozen": True}


class Violation(BaseModel):
    """A single rule failure instance."""

    rule_id: str = Field(..., description="Unique rule identifier, e.g. 'wildcard_import'")
    severity: Severity
    category: RuleCategory
    location: Location = Field(default_factory=Location)
    message: str
    suggested_fix: str | None = None
    evidence: tuple[str, ...] = Field(
        default=(), description="Deterministic evidence chain (facet values that triggered the rule)"
    )

    model_config = {"frozen": True}


# Type for a rule predicate
RuleCheckFn = Callable[[SourceUnit, Facets], list[Violation]]


@dataclass(frozen=True)
class Rule:
    """A named, versioned predicate plus its metadata."""

    id: str
    title: str
    severity: Severity
    category: RuleCategory
    check: RuleCheckFn
    fix_hint: str = ""
    version: int = 1
    languages: frozenset[str] | None = None
    unit_kinds: frozenset[UnitKind] = field(default_factory=lambda: frozenset(UnitKind))
    diff_scoped: bool = True

    def applies_to(self, language: str, unit_kind: UnitKind) -> bool:
        if self.languages is not None and language not in self.languages:
            return False
        return unit_kind in self.unit_kinds

    def describe(self) -> dict:
        """Metadata without the predicate, for listings."""
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.value,
            "category": self.category.value,
            "version": self.version,
            "fix_hint": self.fix_hint,
            "languages": sorted(self.languages) if self.languages is not None else None,
            "unit_kinds": sorted(k.value for k in self.unit_kinds),
            "diff_scoped": self.diff_scoped,
        }
