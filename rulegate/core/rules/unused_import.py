"""
Unused Import Rule — Detects imports whose bound name is never referenced.
"""

from __future__ import annotations

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import Facets, SourceUnit, UnitKind

RULE_ID = "unused_import"


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    violations: list[Violation] = []
    referenced = set(facets.identifier_references)

    for entry in facets.imports:
        if entry.is_wildcard or not entry.bound_name:
            continue
        if entry.symbol_path.startswith("__future__."):
            continue
        if entry.bound_name in referenced:
            continue
        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.OPTIONAL,
                category=RuleCategory.HYGIENE,
                location=Location(line=entry.line or None, symbol=entry.symbol_path),
                message=f"Import '{entry.symbol_path}' is never used",
                suggested_fix=RULE.fix_hint,
                evidence=(f"Bound name: {entry.bound_name}",),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="Unused import",
    severity=Severity.OPTIONAL,
    category=RuleCategory.HYGIENE,
    check=check,
    fix_hint="Remove the import.",
    unit_kinds=frozenset({UnitKind.FULL_FILE}),
)
