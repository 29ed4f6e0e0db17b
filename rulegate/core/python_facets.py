"""
Python Facet Extraction — Deterministic structure extraction with the
built-in `ast` module.

Walks a parsed module and collects imports, type references, declared
types, construction sites, test entries, string concatenation sites and
referenced identifiers.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from typing import Iterable

from rulegate.models.source_models import (
    ConcatenationSite,
    ConstructionSite,
    Facets,
    ImportEntry,
    LineRange,
    TypeReference,
)

FACTORY_NAME = re.compile(r"^_?(make|create|build|new|given|sample)_\w+|\w+_factory$")
FACTORY_CLASS_SUFFIXES = ("Factory", "Builder", "Fixtures", "Mother", "TestData")
FIXTURE_DECORATORS = {"fixture", "pytest.fixture"}


@dataclass(frozen=True)
class _Scope:
    """Function currently being visited."""

    test_name: str = ""
    is_factory: bool = False


class _PythonFacetVisitor(ast.NodeVisitor):
    """Walks a Python AST and collects facets."""

    def __init__(self) -> None:
        self.imports: list[ImportEntry] = []
        self.type_references: list[TypeReference] = []
        self.declared_types: set[str] = set()
        self.construction_sites: list[ConstructionSite] = []
        self.test_methods: list[str] = []
        self.concatenation_sites: list[ConcatenationSite] = []
        self.identifiers: set[str] = set()

        self._scope = _Scope()
        self._name_stack: list[str] = []

    # ── Helpers ──

    def _extract_name(self, node: ast.AST) -> str:
        """Extract a dotted name from Name/Attribute/Call/Subscript nodes."""
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            value_name = self._extract_name(node.value)
            return f"{value_name}.{node.attr}" if value_name else node.attr
        if isinstance(node, ast.Call):
            return self._extract_name(node.func)
        if isinstance(node, ast.Subscript):
            return self._extract_name(node.value)
        return ""

    def _collect_annotation(self, node: ast.AST | None) -> None:
        """Record every bare name used inside an annotation as a type reference."""
        if node is None:
            return
        for child in ast.walk(node):
            if isinstance(child, ast.Name):
                self.type_references.append(TypeReference(name=child.id, line=child.lineno))
            elif isinstance(child, ast.Constant) and isinstance(child.value, str):
                # Forward reference: "Product" or "list[Product]"
                try:
                    inner = ast.parse(child.value, mode="eval")
                except SyntaxError:
                    continue
                for ref in ast.walk(inner):
                    if isinstance(ref, ast.Name):
                        self.type_references.append(TypeReference(name=ref.id, line=child.lineno))
                        self.identifiers.add(ref.id)

    @staticmethod
    def _is_literal(node: ast.AST) -> bool:
        if isinstance(node, ast.Constant):
            return True
        if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
            return isinstance(node.operand, ast.Constant) and isinstance(
                node.operand.value, (int, float, complex)
            )
        return False

    def _is_factory(self, node: ast.FunctionDef | ast.AsyncFunctionDef, is_test: bool) -> bool:
        # A test named like a factory is still a test
        if not is_test and FACTORY_NAME.match(node.name):
            return True
        if any(self._extract_name(d) in FIXTURE_DECORATORS for d in node.decorator_list):
            return True
        return bool(self._name_stack) and self._name_stack[-1].endswith(FACTORY_CLASS_SUFFIXES)

    def _qualified(self, name: str) -> str:
        return ".".join([*self._name_stack, name])

    # ── Imports ──

    def visit_Import(self, node: ast.Import) -> None:  # noqa: N802
        for alias in node.names:
            self.imports.append(
                ImportEntry(
                    symbol_path=alias.name,
                    bound_name=alias.asname or alias.name.split(".")[0],
                    line=node.lineno,
                )
            )

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:  # noqa: N802
        module = "." * (node.level or 0) + (node.module or "")
        for alias in node.names:
            if alias.name == "*":
                self.imports.append(
                    ImportEntry(symbol_path=f"{module}.*", is_wildcard=True, line=node.lineno)
                )
                continue
            path = f"{module}.{alias.name}" if not module.endswith(".") else f"{module}{alias.name}"
            self.imports.append(
                ImportEntry(
                    symbol_path=path,
                    bound_name=alias.asname or alias.name,
                    line=node.lineno,
                )
            )

    # ── Declarations ──

    def visit_ClassDef(self, node: ast.ClassDef) -> None:  # noqa: N802
        self.declared_types.add(node.name)
        for param in getattr(node, "type_params", []):
            self.declared_types.add(param.name)
        for decorator in node.decorator_list:
            self.visit(decorator)
        for base in node.bases:
            self._collect_annotation(base)
            self.visit(base)
        for keyword in node.keywords:
            self.visit(keyword.value)

        self._name_stack.append(node.name)
        for stmt in node.body:
            self.visit(stmt)
        self._name_stack.pop()

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        # Decorators, defaults and annotations belong to the enclosing scope
        for decorator in node.decorator_list:
            self.visit(decorator)
        for default in [*node.args.defaults, *node.args.kw_defaults]:
            if default is not None:
                self.visit(default)
        all_args = [*node.args.posonlyargs, *node.args.args, *node.args.kwonlyargs]
        if node.args.vararg:
            all_args.append(node.args.vararg)
        if node.args.kwarg:
            all_args.append(node.args.kwarg)
        for arg in all_args:
            self._collect_annotation(arg.annotation)
            if arg.annotation is not None:
                self.visit(arg.annotation)
        self._collect_annotation(node.returns)
        if node.returns is not None:
            self.visit(node.returns)
        for param in getattr(node, "type_params", []):
            self.declared_types.add(param.name)

        outer = self._scope
        test_name = outer.test_name
        is_test = not test_name and node.name.startswith("test")
        if is_test:
            test_name = self._qualified(node.name)
            self.test_methods.append(test_name)

        self._scope = _Scope(
            test_name=test_name,
            is_factory=outer.is_factory or self._is_factory(node, is_test),
        )
        self._name_stack.append(node.name)
        for stmt in node.body:
            self.visit(stmt)
        self._name_stack.pop()
        self._scope = outer

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:  # noqa: N802
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:  # noqa: N802
        self._visit_function(node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:  # noqa: N802
        self._collect_annotation(node.annotation)
        if node.value is not None:
            self._record_concatenation(node.value, "assignment")
        self.generic_visit(node)

    # ── Expressions ──

    def visit_Assign(self, node: ast.Assign) -> None:  # noqa: N802
        self._record_concatenation(node.value, "assignment")
        # `__all__` re-exports count as references
        for target in node.targets:
            if isinstance(target, ast.Name) and target.id == "__all__":
                if isinstance(node.value, (ast.List, ast.Tuple)):
                    for elt in node.value.elts:
                        if isinstance(elt, ast.Constant) and isinstance(elt.value, str):
                            self.identifiers.add(elt.value)
        self.generic_visit(node)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:  # noqa: N802
        if isinstance(node.op, ast.Add):
            self._record_concatenation(node.value, "assignment", extra_operand=node.target)
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:  # noqa: N802
        for arg in node.args:
            self._record_concatenation(arg, "call_argument")
        for keyword in node.keywords:
            self._record_concatenation(keyword.value, "call_argument")

        callee = self._extract_name(node.func)
        simple = callee.rsplit(".", 1)[-1]
        if simple[:1].isupper():
            arguments = [ast.unparse(a) for a in node.args]
            arguments += [
                f"{k.arg}={ast.unparse(k.value)}" if k.arg else f"**{ast.unparse(k.value)}"
                for k in node.keywords
            ]
            values = [*node.args, *(k.value for k in node.keywords)]
            self.construction_sites.append(
                ConstructionSite(
                    enclosing_test=self._scope.test_name,
                    constructed_type=callee,
                    is_inside_test_body=bool(self._scope.test_name),
                    is_inside_factory_method=self._scope.is_factory,
                    line=node.lineno,
                    arguments=tuple(arguments),
                    literal_arguments_only=all(self._is_literal(v) for v in values),
                )
            )
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:  # noqa: N802
        self.identifiers.add(node.id)

    # ── String building ──

    def _record_concatenation(
        self, node: ast.AST, sink: str, extra_operand: ast.AST | None = None
    ) -> None:
        literals: list[str] = []
        operands: list[ast.AST] = []
        kind = "concat"

        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
            parts = self._flatten_add(node)
            literals = [p.value for p in parts if isinstance(p, ast.Constant) and isinstance(p.value, str)]
            operands = [p for p in parts if not self._is_literal(p)]
        elif isinstance(node, ast.JoinedStr):
            kind = "interpolation"
            literals = [
                v.value for v in node.values if isinstance(v, ast.Constant) and isinstance(v.value, str)
            ]
            operands = [v.value for v in node.values if isinstance(v, ast.FormattedValue)]
        elif (
            isinstance(node, ast.BinOp)
            and isinstance(node.op, ast.Mod)
            and isinstance(node.left, ast.Constant)
            and isinstance(node.left.value, str)
        ):
            kind = "format"
            literals = [node.left.value]
            operands = [] if self._is_literal(node.right) else [node.right]
        elif (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr == "format"
            and isinstance(node.func.value, ast.Constant)
            and isinstance(node.func.value.value, str)
        ):
            kind = "format"
            literals = [node.func.value.value]
            values = [*node.args, *(k.value for k in node.keywords)]
            operands = [v for v in values if not self._is_literal(v)]
        elif extra_operand is not None and isinstance(node, ast.Constant) and isinstance(node.value, str):
            literals = [node.value]

        if extra_operand is not None and literals:
            operands = [extra_operand, *operands]
        if not literals or not operands:
            return

        self.concatenation_sites.append(
            ConcatenationSite(
                line=node.lineno,
                literal=" ".join(literals),
                operand=ast.unparse(operands[0]),
                sink=sink,
                kind=kind,
            )
        )

    def _flatten_add(self, node: ast.AST) -> list[ast.AST]:
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
            return self._flatten_add(node.left) + self._flatten_add(node.right)
        return [node]


def extract_python_facets(source: str) -> Facets:
    """
    Extract facets from Python source.

    Raises:
        SyntaxError: when the source does not parse. The caller decides
            whether that is fatal (full files) or degrades to lexical
            extraction (diff fragments).
    """
    tree = ast.parse(source)
    visitor = _PythonFacetVisitor()
    visitor.visit(tree)

    return Facets(
        imports=tuple(visitor.imports),
        type_references=tuple(visitor.type_references),
        declared_types=tuple(sorted(visitor.declared_types)),
        construction_sites=tuple(visitor.construction_sites),
        test_methods=tuple(visitor.test_methods),
        concatenation_sites=tuple(
            sorted(visitor.concatenation_sites, key=lambda s: s.line)
        ),
        identifier_references=tuple(sorted(visitor.identifiers)),
    )


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def anchor_fragment(source: str, hunks: Iterable[LineRange]) -> str | None:
    """
    Make a diff post-image parseable without moving any line.

    A hunk that starts inside a block gets synthetic `if True:` openers,
    one per enclosing indentation level, in the unseen lines above it. A
    hunk that ends on a block header gets a `pass` body in the unseen line
    below it.

    Returns None when nothing changed or there is no room for the
    synthetic lines.
    """
    lines = source.split("\n")
    spans = sorted(hunks, key=lambda r: r.start)
    floor = 0
    changed = False

    for i, span in enumerate(spans):
        first, last = span.start - 1, min(span.end, len(lines)) - 1
        body = [n for n in range(first, last + 1) if lines[n].strip()]
        if not body:
            floor = last + 1
            continue

        start = _indent(lines[body[0]])
        if start:
            levels = sorted({_indent(lines[n]) for n in body if _indent(lines[n]) < start} | {0})
            slot = body[0] - len(levels)
            if slot < floor or any(lines[n].strip() for n in range(slot, body[0])):
                return None
            for offset, level in enumerate(levels):
                lines[slot + offset] = " " * level + "if True:"
            changed = True

        tail = lines[body[-1]]
        if tail.rstrip().endswith(":"):
            after = body[-1] + 1
            ceiling = spans[i + 1].start - 1 if i + 1 < len(spans) else len(lines) + 1
            if after >= ceiling or (after < len(lines) and lines[after].strip()):
                return None
            filler = " " * (_indent(tail) + 4) + "pass"
            if after < len(lines):
                lines[after] = filler
            else:
                lines.append(filler)
            changed = True

        floor = last + 1

    return "\n".join(lines) if changed else None
