"""
Duplicate Test Construction Rule — Detects the same object, built with
equivalent literal arguments, in two or more tests without a shared factory.
"""

from __future__ import annotations

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import ConstructionSite, Facets, SourceUnit, UnitKind

RULE_ID = "duplicate_test_construction"


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    """Group test-body constructions by (type, arguments) across tests."""
    if facets.is_data_provider:
        return []

    groups: dict[tuple[str, tuple[str, ...]], list[ConstructionSite]] = {}
    for site in facets.construction_sites:
        if not site.is_inside_test_body or site.is_inside_factory_method:
            continue
        if not site.arguments or not site.literal_arguments_only:
            continue
        groups.setdefault((site.constructed_type, site.arguments), []).append(site)

    factory_types = {
        site.constructed_type
        for site in facets.construction_sites
        if site.is_inside_factory_method
    }

    violations: list[Violation] = []
    for (constructed_type, arguments), sites in groups.items():
        tests = list(dict.fromkeys(site.enclosing_test for site in sites))
        if len(tests) < 2:
            continue

        fix = RULE.fix_hint
        if constructed_type in factory_types:
            fix = f"A factory already builds '{constructed_type}'; call it from these tests."

        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.SHOULD_FIX,
                category=RuleCategory.TEST_STRUCTURE,
                location=Location(line=sites[0].line or None, symbol=constructed_type),
                message=(
                    f"'{constructed_type}({', '.join(arguments)})' is built in "
                    f"{len(tests)} tests: {', '.join(tests)}"
                ),
                suggested_fix=fix,
                evidence=tuple(f"{site.enclosing_test} (line {site.line})" for site in sites),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="Duplicate object construction across tests",
    severity=Severity.SHOULD_FIX,
    category=RuleCategory.TEST_STRUCTURE,
    check=check,
    fix_hint="Extract a shared factory method for the repeated construction.",
    unit_kinds=frozenset({UnitKind.FULL_FILE}),
    diff_scoped=False,
)
