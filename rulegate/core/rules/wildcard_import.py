"""
Wildcard Import Rule — Detects `import pkg.*` / `from pkg import *`.

Wildcard imports hide where names come from and make invented or
shortened class names impossible to verify.
"""

from __future__ import annotations

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import Facets, SourceUnit

RULE_ID = "wildcard_import"


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    """Flag every wildcard import entry."""
    violations: list[Violation] = []

    for entry in facets.imports:
        if not entry.is_wildcard:
            continue
        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.BLOCKING,
                category=RuleCategory.IMPORTS,
                location=Location(line=entry.line or None, symbol=entry.symbol_path),
                message=f"Wildcard import '{entry.symbol_path}'",
                suggested_fix=RULE.fix_hint,
                evidence=(
                    f"Import: {entry.symbol_path}",
                    "Static import" if entry.is_static else "Type import",
                ),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="Wildcard import present",
    severity=Severity.BLOCKING,
    category=RuleCategory.IMPORTS,
    check=check,
    fix_hint="Import each symbol explicitly.",
)
