"""
Inline Test Construction Rule — Detects objects built directly inside
test bodies instead of through a factory method.

Allowed: constructions whose arguments are all primitive or string
literals, constructions inside factory methods, and every construction
in a unit marked as a parameterized-data-provider.
"""

from __future__ import annotations

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import Facets, SourceUnit

RULE_ID = "inline_test_construction"


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    """Flag non-trivial constructions inside test bodies."""
    if facets.is_data_provider:
        return []

    violations: list[Violation] = []
    for site in facets.construction_sites:
        if not site.is_inside_test_body or site.is_inside_factory_method:
            continue
        if site.literal_arguments_only:
            continue

        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.SHOULD_FIX,
                category=RuleCategory.TEST_STRUCTURE,
                location=Location(
                    line=site.line or None,
                    symbol=f"constructor inside test {site.enclosing_test}",
                ),
                message=(
                    f"'{site.constructed_type}' is constructed inline in test "
                    f"'{site.enclosing_test}'"
                ),
                suggested_fix=RULE.fix_hint,
                evidence=(
                    f"Test: {site.enclosing_test}",
                    f"Constructed type: {site.constructed_type}",
                    f"Arguments: {', '.join(site.arguments) or '(none)'}",
                ),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="Inline object construction inside a test body",
    severity=Severity.SHOULD_FIX,
    category=RuleCategory.TEST_STRUCTURE,
    check=check,
    fix_hint="Move the construction into a factory method and call it from the test.",
)
