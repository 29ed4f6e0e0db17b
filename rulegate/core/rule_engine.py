"""
Rule Engine — Evaluates every applicable rule against one source unit.

Rules are pure functions over the unit's facets: no I/O, no shared state,
no randomness. One broken rule never suppresses the rest of the report.
"""

from __future__ import annotations

import logging

from rulegate.core.errors import RuleEvaluationError
from rulegate.core.registry import RuleSetRegistry
from rulegate.models.rule_models import Rule, Violation
from rulegate.models.source_models import SourceUnit, UnitKind

logger = logging.getLogger("rulegate.engine")


class RuleEngine:
    """
    Deterministic rule engine.

    Runs the registry's applicable rules in registry order and returns
    their violations in that order.
    """

    def __init__(self, registry: RuleSetRegistry) -> None:
        self.registry = registry

    def evaluate(self, unit: SourceUnit) -> tuple[Violation, ...]:
        violations: list[Violation] = []
        for rule in self.registry.for_language_and_kind(unit.language, unit.unit_kind):
            violations.extend(self.run_rule(rule, unit))
        return tuple(violations)

    def run_rule(self, rule: Rule, unit: SourceUnit) -> list[Violation]:
        """Run one rule, converting any failure into a single soft violation."""
        try:
            found = list(rule.check(unit, unit.facets))
            for v in found:
                if v.rule_id != rule.id or v.severity != rule.severity:
                    raise RuleEvaluationError(
                        rule.id,
                        f"produced '{v.rule_id}' at '{v.severity.value}', "
                        f"declared '{rule.id}' at '{rule.severity.value}'",
                    )
        except RuleEvaluationError as e:
            logger.warning(f"[{unit.unit_id}] {e}")
            return [e.to_violation()]
        except Exception as e:
            # Rule failures should not crash the engine
            logger.warning(f"[{unit.unit_id}] Rule '{rule.id}' raised {type(e).__name__}: {e}")
            return [RuleEvaluationError(rule.id, f"{type(e).__name__}: {e}").to_violation()]

        if unit.unit_kind is UnitKind.DIFF and rule.diff_scoped:
            found = [v for v in found if unit.in_scope(v.location.line)]
        return found


def evaluate(unit: SourceUnit, registry: RuleSetRegistry) -> tuple[Violation, ...]:
    """Evaluate `registry` against `unit`, in registry order."""
    return RuleEngine(registry).evaluate(unit)
