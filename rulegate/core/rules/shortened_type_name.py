"""
Shortened Type Name Rule — Detects type references that are a strict
suffix of a type the unit really declares or imports.

`Attribute` used where only `ProductAttribute` exists signals a shortened
or invented class name that will not compile or resolve.
"""

from __future__ import annotations

import builtins

from rulegate.models.rule_models import Location, Rule, RuleCategory, Severity, Violation
from rulegate.models.source_models import Facets, SourceUnit

RULE_ID = "shortened_type_name"

JAVA_LANG_TYPES = frozenset({
    "Appendable", "ArithmeticException", "AutoCloseable", "Boolean", "Byte",
    "CharSequence", "Character", "Class", "ClassCastException", "Cloneable",
    "Comparable", "Deprecated", "Double", "Enum", "Error", "Exception", "Float",
    "FunctionalInterface", "IllegalArgumentException", "IllegalStateException",
    "IndexOutOfBoundsException", "Integer", "InterruptedException", "Iterable",
    "Long", "Math", "NullPointerException", "Number", "Object", "Override",
    "Record", "Runnable", "RuntimeException", "SafeVarargs", "Short", "String",
    "StringBuilder", "SuppressWarnings", "System", "Thread", "Throwable",
    "UnsupportedOperationException", "Void",
})
PYTHON_BUILTIN_TYPES = frozenset(name for name in dir(builtins) if name[:1].isupper())

BUILTIN_TYPES = {
    "java": JAVA_LANG_TYPES,
    "python": PYTHON_BUILTIN_TYPES,
}


def check(unit: SourceUnit, facets: Facets) -> list[Violation]:
    """Compare every referenced type name against known longer names."""
    imported = {entry.bound_name for entry in facets.imports if entry.bound_name}
    known = set(facets.declared_types) | imported | BUILTIN_TYPES.get(unit.language, frozenset())
    candidates = sorted(name for name in set(facets.declared_types) | imported if name[:1].isupper())

    violations: list[Violation] = []
    reported: set[str] = set()
    for ref in facets.type_references:
        name = ref.name
        if name in reported or name in known or not name[:1].isupper():
            continue
        if not unit.in_scope(ref.line):
            continue

        longer = [c for c in candidates if c != name and c.endswith(name)]
        if not longer:
            continue

        reported.add(name)
        violations.append(
            Violation(
                rule_id=RULE_ID,
                severity=Severity.BLOCKING,
                category=RuleCategory.FUNDAMENTAL_DESIGN,
                location=Location(line=ref.line or None, symbol=name),
                message=(
                    f"Type '{name}' is not declared or imported; did you mean "
                    f"'{longer[0]}'?"
                ),
                suggested_fix=f"Use the full type name '{longer[0]}'.",
                evidence=(
                    f"Referenced type: {name}",
                    f"Known types ending with it: {', '.join(longer)}",
                ),
            )
        )

    return violations


RULE = Rule(
    id=RULE_ID,
    title="Shortened or invented type name",
    severity=Severity.BLOCKING,
    category=RuleCategory.FUNDAMENTAL_DESIGN,
    check=check,
    fix_hint="Use the exact class name that is declared or imported.",
)
