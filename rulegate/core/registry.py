"""
Rule Set Registry — Immutable, ordered, deduplicated rule collections.

A registry is a snapshot: registering or removing a rule returns a new
registry, so concurrent analyses never observe a rule set that changes
mid-evaluation. Registry order is the within-tier order of reports.
"""

from __future__ import annotations

import hashlib
import logging
from functools import lru_cache
from typing import Iterable

from rulegate.core.errors import DuplicateRuleError, UnknownProfileError
from rulegate.core.rules import (
    duplicate_test_construction,
    inline_test_construction,
    query_string_concatenation,
    shortened_type_name,
    unused_import,
    wildcard_import,
)
from rulegate.models.report_models import RuleSetInfo
from rulegate.models.rule_models import Rule
from rulegate.models.source_models import UnitKind

logger = logging.getLogger("rulegate.registry")

RULESET_VERSION = "1.0.0"

# Canonical catalog in priority order
CATALOG: tuple[Rule, ...] = (
    wildcard_import.RULE,
    shortened_type_name.RULE,
    query_string_concatenation.RULE,
    inline_test_construction.RULE,
    duplicate_test_construction.RULE,
    unused_import.RULE,
)

PROFILES: dict[str, tuple[str, ...]] = {
    "default": tuple(rule.id for rule in CATALOG),
    "code-review": (
        wildcard_import.RULE_ID,
        shortened_type_name.RULE_ID,
        query_string_concatenation.RULE_ID,
        unused_import.RULE_ID,
    ),
    "test-generation": (
        wildcard_import.RULE_ID,
        shortened_type_name.RULE_ID,
        inline_test_construction.RULE_ID,
        duplicate_test_construction.RULE_ID,
        unused_import.RULE_ID,
    ),
}


class RuleSetRegistry:
    """An immutable snapshot of rules in priority order."""

    __slots__ = ("_rules", "_index", "profile", "version")

    def __init__(
        self,
        rules: Iterable[Rule] = (),
        profile: str = "custom",
        version: str = RULESET_VERSION,
    ) -> None:
        ordered: list[Rule] = []
        index: dict[str, Rule] = {}
        for rule in rules:
            if rule.id in index:
                raise DuplicateRuleError(rule.id)
            index[rule.id] = rule
            ordered.append(rule)
        self._rules: tuple[Rule, ...] = tuple(ordered)
        self._index = index
        self.profile = profile
        self.version = version

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._index

    @property
    def rule_ids(self) -> tuple[str, ...]:
        return tuple(rule.id for rule in self._rules)

    def get(self, rule_id: str) -> Rule:
        try:
            return self._index[rule_id]
        except KeyError:
            raise ValueError(f"Unknown rule: {rule_id}") from None

    def register(self, rule: Rule) -> RuleSetRegistry:
        """Return a new registry with `rule` appended."""
        if rule.id in self._index:
            raise DuplicateRuleError(rule.id)
        return RuleSetRegistry((*self._rules, rule), self.profile, self.version)

    def without(self, rule_id: str) -> RuleSetRegistry:
        """Return a new registry without `rule_id`."""
        self.get(rule_id)
        return RuleSetRegistry(
            (r for r in self._rules if r.id != rule_id), self.profile, self.version
        )

    def for_language_and_kind(self, language: str, unit_kind: UnitKind) -> tuple[Rule, ...]:
        """Applicable rules in registry order."""
        return tuple(rule for rule in self._rules if rule.applies_to(language, unit_kind))

    @property
    def fingerprint(self) -> str:
        """Content hash over rule ids, versions and severities."""
        payload = "|".join(
            f"{r.id}:{r.version}:{r.severity.value}:{r.category.value}" for r in self._rules
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def info(self) -> RuleSetInfo:
        return RuleSetInfo(profile=self.profile, version=self.version, fingerprint=self.fingerprint)


def build_registry(profile: str) -> RuleSetRegistry:
    """Build the registry for a named profile from the canonical catalog."""
    if profile not in PROFILES:
        raise UnknownProfileError(profile)
    by_id = {rule.id: rule for rule in CATALOG}
    registry = RuleSetRegistry(
        (by_id[rule_id] for rule_id in PROFILES[profile]), profile=profile
    )
    logger.debug(f"Built rule set '{profile}' with {len(registry)} rules")
    return registry


@lru_cache
def get_registry(profile: str) -> RuleSetRegistry:
    """Shared registry snapshot per profile."""
    return build_registry(profile)


def load_profiles() -> dict[str, RuleSetRegistry]:
    """Build every profile up front so registry errors surface at startup."""
    registries = {name: get_registry(name) for name in PROFILES}
    logger.info(
        f"Loaded {len(registries)} rule set profiles "
        f"({', '.join(f'{n}={len(r)}' for n, r in registries.items())})"
    )
    return registries
