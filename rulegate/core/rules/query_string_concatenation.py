"""
Query String Concatenation Rule — Detects query-like string literals
combined with non-literal operands in assignments or call arguments.

Textual heuristic: the literal part must contain a query keyword.
"""

from __future__ import annotations

import re

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import Facets, SourceUnit

RULE_ID = "query_string_concatenation"

QUERY_KEYWORDS = re.compile(
    r"\b(select\s+.+\s+from|insert\s+into|update\s+\w+\s+set|delete\s+from|"
    r"where|union\s+select|drop\s+table|order\s+by)\b",
    re.IGNORECASE,
)


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    """Flag concatenation sites whose literal text looks like a query."""
    violations: list[Violation] = []

    for site in facets.concatenation_sites:
        match = QUERY_KEYWORDS.search(site.literal)
        if not match:
            continue
        sink = "a call argument" if site.sink == "call_argument" else "an assignment"
        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.BLOCKING,
                category=RuleCategory.SECURITY,
                location=Location(line=site.line or None),
                message=(
                    f"Query text is built by {site.kind} with non-literal "
                    f"'{site.operand}' in {sink}"
                ),
                suggested_fix=RULE.fix_hint,
                evidence=(
                    f"Query keyword: {match.group(1)}",
                    f"Literal: {site.literal[:80]}",
                    f"Operand: {site.operand}",
                ),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="String concatenation into a query",
    severity=Severity.BLOCKING,
    category=RuleCategory.SECURITY,
    check=check,
    fix_hint="Use a parameterized query or prepared statement with bound parameters.",
)
