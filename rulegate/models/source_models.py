"""
Source Unit Models — Normalized, language-agnostic representation of one
reviewable unit (a diff or a full file) and its extracted facets.

These models are the output of facet extraction and the only input
the rule engine reads.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class UnitKind(str, Enum):
    DIFF = "diff"
    FULL_FILE = "full-file"


class LineRange(BaseModel):
    """An inclusive range of 1-based line numbers."""

    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1)

    model_config = {"frozen": True}

    def contains(self, line: int) -> bool:
        return self.start <= line <= self.end


class ImportEntry(BaseModel):
    """A single imported symbol."""

    symbol_path: str = Field(..., description="Dotted path, e.g. 'org.junit.*'")
    is_wildcard: bool = False
    bound_name: str = Field(
        default="", description="Name introduced into scope (empty for wildcards)"
    )
    line: int = 0
    is_static: bool = False

    model_config = {"frozen": True}


class TypeReference(BaseModel):
    """An identifier used as a type or class name."""

    name: str
    line: int = 0

    model_config = {"frozen": True}


class ConstructionSite(BaseModel):
    """One object construction expression."""

    enclosing_test: str = Field(
        default="", description="Qualified test name, empty outside test bodies"
    )
    constructed_type: str
    is_inside_test_body: bool = False
    is_inside_factory_method: bool = False
    line: int = 0
    arguments: tuple[str, ...] = Field(
        default=(), description="Normalized source text of each argument"
    )
    literal_arguments_only: bool = Field(
        default=True, description="True when every argument is a primitive or string literal"
    )

    model_config = {"frozen": True}


class ConcatenationSite(BaseModel):
    """A string literal combined with a non-literal operand."""

    line: int = 0
    literal: str = Field(..., description="Joined text of the literal parts")
    operand: str = Field(default="", description="First non-literal operand")
    sink: str = Field(..., description="'assignment' or 'call_argument'")
    kind: str = Field(default="concat", description="'concat', 'interpolation' or 'format'")

    model_config = {"frozen": True}


class Facets(BaseModel):
    """Structural properties extracted from a source unit."""

    imports: tuple[ImportEntry, ...] = ()
    type_references: tuple[TypeReference, ...] = ()
    declared_types: tuple[str, ...] = Field(
        default=(), description="Type names the unit itself declares (sorted)"
    )
    construction_sites: tuple[ConstructionSite, ...] = ()
    test_methods: tuple[str, ...] = ()
    changed_lines: tuple[LineRange, ...] = ()
    concatenation_sites: tuple[ConcatenationSite, ...] = ()
    identifier_references: tuple[str, ...] = Field(
        default=(), description="Identifiers referenced outside imports (sorted)"
    )
    is_data_provider: bool = False
    unknown_constructs: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @property
    def declared_type_references(self) -> tuple[str, ...]:
        return tuple(sorted({ref.name for ref in self.type_references}))


class SourceUnit(BaseModel):
    """One analyzable artifact, immutable once constructed."""

    unit_id: str
    raw_text: str = ""
    language: str = Field(..., description="Normalized lowercase language tag")
    unit_kind: UnitKind = UnitKind.FULL_FILE
    facets: Facets = Field(default_factory=Facets)

    model_config = {"frozen": True}

    def in_scope(self, line: int | None) -> bool:
        """True when a line lies inside the part of the unit under review."""
        if self.unit_kind is not UnitKind.DIFF or not line:
            return True
        return any(r.contains(line) for r in self.facets.changed_lines)
