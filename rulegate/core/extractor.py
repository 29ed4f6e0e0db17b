"""
Facet Extractor — Converts raw text plus a language tag into a SourceUnit.

Extraction is tolerant: constructs that cannot be classified are recorded
as unknown, and unsupported languages degrade to lexical extraction.
FacetExtractionError is raised only for unusable input.
"""

from __future__ import annotations

import hashlib
import logging
import re

from rulegate.core.diff_parser import parse_unified_diff
from rulegate.core.errors import FacetExtractionError
from rulegate.core.java_facets import extract_java_facets
from rulegate.core.lexical_facets import extract_lexical_facets
from rulegate.core.python_facets import anchor_fragment, extract_python_facets
from rulegate.models.source_models import Facets, LineRange, SourceUnit, UnitKind

logger = logging.getLogger("rulegate.extractor")

LANGUAGE_ALIASES = {
    "py": "python",
    "python3": "python",
    "kt": "kotlin",
    "kts": "kotlin",
    "js": "javascript",
    "ts": "typescript",
    "cs": "csharp",
    "c#": "csharp",
}

DATA_PROVIDER_PRAGMA = re.compile(r"(#|//|/\*)\s*rulegate:\s*data-provider\b")


def normalize_language(language: str) -> str:
    tag = language.strip().lower()
    return LANGUAGE_ALIASES.get(tag, tag)


def stable_unit_id(raw_text: str, language: str, unit_kind: UnitKind) -> str:
    """Derive a deterministic id from the unit's content."""
    digest = hashlib.sha256(
        f"{language}\0{unit_kind.value}\0{raw_text}".encode("utf-8")
    ).hexdigest()
    return f"unit-{digest[:12]}"


def extract_facets(
    raw_text: str,
    language: str,
    unit_kind: UnitKind,
    data_provider: bool = False,
) -> Facets:
    """
    Extract facets without wrapping them in a SourceUnit.

    Raises:
        FacetExtractionError: binary content, malformed diffs, or a full
            file that cannot be parsed at all.
    """
    language = normalize_language(language)
    if "\x00" in raw_text:
        raise FacetExtractionError("binary content")

    changed_lines: tuple[LineRange, ...] = ()
    hunks: tuple[LineRange, ...] = ()
    text = raw_text
    if unit_kind is UnitKind.DIFF:
        parsed = parse_unified_diff(raw_text)
        text = parsed.post_image
        changed_lines = parsed.changed_lines
        hunks = parsed.hunks

    try:
        facets = _extract_for_language(text, language, unit_kind, hunks)
    except RecursionError as e:
        raise FacetExtractionError("source nesting too deep") from e
    return facets.model_copy(
        update={
            "changed_lines": changed_lines,
            "is_data_provider": data_provider or bool(DATA_PROVIDER_PRAGMA.search(text)),
        }
    )


def _extract_for_language(
    text: str,
    language: str,
    unit_kind: UnitKind,
    hunks: tuple[LineRange, ...] = (),
) -> Facets:
    if language == "python":
        try:
            return extract_python_facets(text)
        except SyntaxError as e:
            if unit_kind is UnitKind.FULL_FILE:
                raise FacetExtractionError(f"SyntaxError at line {e.lineno}: {e.msg}") from e
            anchored = anchor_fragment(text, hunks)
            if anchored is not None:
                try:
                    return extract_python_facets(anchored)
                except SyntaxError as anchored_error:
                    logger.debug(f"Anchored fragment does not parse either ({anchored_error.msg})")
            logger.debug(f"Python fragment does not parse ({e.msg}); using lexical extraction")
            return extract_lexical_facets(
                text,
                f"line {e.lineno}: python fragment not parseable; lexical extraction only",
                python_style=True,
            )

    if language == "java":
        facets, has_error, recovered = extract_java_facets(text)
        if has_error and unit_kind is UnitKind.FULL_FILE and not recovered:
            raise FacetExtractionError("java source could not be parsed")
        return facets

    return extract_lexical_facets(
        text, f"no parser for language '{language}'; lexical extraction only"
    )


def extract(
    raw_text: str,
    language: str,
    unit_kind: UnitKind | str = UnitKind.FULL_FILE,
    unit_id: str | None = None,
    data_provider: bool = False,
) -> SourceUnit:
    """
    Build a SourceUnit with populated facets.

    Args:
        raw_text: File content, or a single-file unified diff for diff units.
        language: Language tag, e.g. 'java' or 'python'.
        unit_kind: 'diff' or 'full-file'.
        unit_id: Stable identifier; derived from content when omitted.
        data_provider: Marks the unit as a parameterized-data-provider.

    Raises:
        FacetExtractionError: when the unit is unusable.
    """
    unit_kind = UnitKind(unit_kind)
    language = normalize_language(language)
    facets = extract_facets(raw_text, language, unit_kind, data_provider)
    return SourceUnit(
        unit_id=unit_id or stable_unit_id(raw_text, language, unit_kind),
        raw_text=raw_text,
        language=language,
        unit_kind=unit_kind,
        facets=facets,
    )
