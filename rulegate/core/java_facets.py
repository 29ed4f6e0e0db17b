"""
Java Facet Extraction — tree-sitter based.

tree-sitter recovers from syntax errors, so diff fragments and unusual
sources still yield facets; unparsed regions are reported as unknown
constructs instead of failing the whole unit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

from rulegate.models.source_models import (
    ConcatenationSite,
    ConstructionSite,
    Facets,
    ImportEntry,
    TypeReference,
)

JAVA_LANGUAGE = Language(tsjava.language())

TEST_ANNOTATIONS = {"Test", "ParameterizedTest", "RepeatedTest", "TestFactory", "TestTemplate"}
FACTORY_NAME = re.compile(r"^(create|make|build|new|given|sample|fixture|an?)[A-Z_]|\w*Factory$")
FACTORY_CLASS_SUFFIXES = ("Factory", "Builder", "Fixtures", "Mother", "TestData")

TYPE_DECLARATIONS = {
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
    "annotation_type_declaration",
}
LITERAL_TYPES = {
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
    "decimal_floating_point_literal",
    "hex_floating_point_literal",
    "true",
    "false",
    "character_literal",
    "string_literal",
    "text_block",
    "null_literal",
}
STRING_TYPES = {"string_literal", "text_block"}
# `{@link Foo#bar}`, `@see Foo`, `@throws FooException`
JAVADOC_REFERENCE = re.compile(r"(?:\{@link(?:plain)?|@see|@throws|@exception)\s+([A-Za-z_]\w*)")


@dataclass(frozen=True)
class _Scope:
    class_name: str = ""
    factory_class: bool = False
    test_name: str = ""
    is_factory: bool = False


@dataclass
class _Collector:
    imports: list[ImportEntry] = field(default_factory=list)
    type_references: list[TypeReference] = field(default_factory=list)
    declared_types: set[str] = field(default_factory=set)
    construction_sites: list[ConstructionSite] = field(default_factory=list)
    test_methods: list[str] = field(default_factory=list)
    concatenation_sites: list[ConcatenationSite] = field(default_factory=list)
    identifiers: set[str] = field(default_factory=set)
    unknown: list[str] = field(default_factory=list)
    recovered_declaration: bool = False


class JavaFacetExtractor:
    """Walks a tree-sitter Java tree and collects facets."""

    def __init__(self, source: str) -> None:
        self.source_bytes = source.encode("utf-8")
        self.out = _Collector()

    # ── Helpers ──

    def _text(self, node: Node | None) -> str:
        if node is None:
            return ""
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf-8", "replace")

    @staticmethod
    def _line(node: Node) -> int:
        return node.start_point[0] + 1

    def _is_literal(self, node: Node) -> bool:
        while node.type == "parenthesized_expression" and node.named_child_count == 1:
            node = node.named_children[0]
        if node.type in LITERAL_TYPES:
            return True
        if node.type == "unary_expression":
            operand = node.child_by_field_name("operand")
            return operand is not None and operand.type in LITERAL_TYPES
        return False

    def _string_value(self, node: Node) -> str:
        text = self._text(node)
        if node.type == "text_block":
            return text[3:-3].strip()
        return text[1:-1]

    def _annotations(self, node: Node) -> list[str]:
        names: list[str] = []
        for child in node.children:
            if child.type != "modifiers":
                continue
            for mod in child.named_children:
                if mod.type in ("marker_annotation", "annotation"):
                    name = self._text(mod.child_by_field_name("name"))
                    names.append(name.rsplit(".", 1)[-1])
        return names

    def _type_name(self, node: Node | None) -> str:
        """Strip generic arguments: `List<Product>` -> `List`."""
        if node is None:
            return ""
        if node.type == "generic_type" and node.named_child_count:
            return self._text(node.named_children[0])
        return self._text(node)

    # ── Walk ──

    def walk(self, node: Node, scope: _Scope) -> None:
        node_type = node.type

        if node.is_missing:
            self.out.unknown.append(f"line {self._line(node)}: missing '{node_type}'")
            return
        if node_type == "ERROR":
            self.out.unknown.append(f"line {self._line(node)}: unparsed fragment")
        elif node_type == "import_declaration":
            self._visit_import(node)
            return
        elif node_type == "block_comment":
            self._visit_javadoc(node)
            return
        elif node_type in ("package_declaration", "line_comment"):
            return
        elif node_type in TYPE_DECLARATIONS:
            self._visit_type_declaration(node, scope)
            return
        elif node_type in ("method_declaration", "constructor_declaration"):
            self._visit_method(node, scope)
            return
        elif node_type == "type_parameter":
            name = node.named_children[0] if node.named_child_count else None
            if name is not None:
                self.out.declared_types.add(self._text(name))
        elif node_type == "object_creation_expression":
            self._visit_creation(node, scope)
        elif node_type == "binary_expression":
            self._visit_binary(node)
        elif node_type == "type_identifier":
            name = self._text(node)
            self.out.type_references.append(TypeReference(name=name, line=self._line(node)))
            self.out.identifiers.add(name)
        elif node_type == "identifier":
            self.out.identifiers.add(self._text(node))

        for child in node.children:
            self.walk(child, scope)

    def _visit_import(self, node: Node) -> None:
        is_static = any(c.type == "static" for c in node.children)
        is_wildcard = any(c.type == "asterisk" for c in node.children)
        name_node = next(
            (c for c in node.named_children if c.type in ("scoped_identifier", "identifier")),
            None,
        )
        path = self._text(name_node)
        self.out.imports.append(
            ImportEntry(
                symbol_path=f"{path}.*" if is_wildcard else path,
                is_wildcard=is_wildcard,
                bound_name="" if is_wildcard else path.rsplit(".", 1)[-1],
                line=self._line(node),
                is_static=is_static,
            )
        )

    def _visit_javadoc(self, node: Node) -> None:
        text = self._text(node)
        if text.startswith("/**"):
            self.out.identifiers.update(JAVADOC_REFERENCE.findall(text))

    def _visit_type_declaration(self, node: Node, scope: _Scope) -> None:
        name = self._text(node.child_by_field_name("name"))
        if name:
            self.out.declared_types.add(name)
            if not scope.class_name:
                self.out.recovered_declaration = True
        qualified = f"{scope.class_name}.{name}" if scope.class_name else name
        inner = _Scope(
            class_name=qualified,
            factory_class=name.endswith(FACTORY_CLASS_SUFFIXES),
            test_name=scope.test_name,
            is_factory=scope.is_factory,
        )
        for child in node.children:
            if child.type == "identifier" and child == node.child_by_field_name("name"):
                continue
            self.walk(child, inner)

    def _visit_method(self, node: Node, scope: _Scope) -> None:
        name = self._text(node.child_by_field_name("name"))
        annotations = self._annotations(node)
        test_name = scope.test_name
        is_test = False
        if not test_name and node.type == "method_declaration":
            if TEST_ANNOTATIONS.intersection(annotations) or name.startswith("test"):
                test_name = f"{scope.class_name}.{name}" if scope.class_name else name
                self.out.test_methods.append(test_name)
                is_test = True
        # A test named like a factory is still a test
        named_factory = not is_test and bool(FACTORY_NAME.match(name))
        inner = _Scope(
            class_name=scope.class_name,
            factory_class=scope.factory_class,
            test_name=test_name,
            is_factory=scope.is_factory or scope.factory_class or named_factory,
        )
        for child in node.children:
            self.walk(child, inner)

    def _visit_creation(self, node: Node, scope: _Scope) -> None:
        type_node = node.child_by_field_name("type")
        args_node = node.child_by_field_name("arguments")
        args = list(args_node.named_children) if args_node is not None else []
        args = [a for a in args if a.type not in ("line_comment", "block_comment")]
        self.out.construction_sites.append(
            ConstructionSite(
                enclosing_test=scope.test_name,
                constructed_type=self._type_name(type_node),
                is_inside_test_body=bool(scope.test_name),
                is_inside_factory_method=scope.is_factory,
                line=self._line(node),
                arguments=tuple(" ".join(self._text(a).split()) for a in args),
                literal_arguments_only=all(self._is_literal(a) for a in args),
            )
        )

    def _visit_binary(self, node: Node) -> None:
        if not self._is_plus(node) or self._is_plus(node.parent):
            return
        operands = self._flatten_plus(node)
        literals = [self._string_value(o) for o in operands if o.type in STRING_TYPES]
        others = [o for o in operands if not self._is_literal(o)]
        if not literals or not others:
            return

        parent = node.parent
        while parent is not None and parent.type == "parenthesized_expression":
            parent = parent.parent
        if parent is None:
            return
        if parent.type in ("variable_declarator", "assignment_expression"):
            sink = "assignment"
        elif parent.type == "argument_list":
            sink = "call_argument"
        else:
            return
        self.out.concatenation_sites.append(
            ConcatenationSite(
                line=self._line(node),
                literal=" ".join(literals),
                operand=self._text(others[0]),
                sink=sink,
            )
        )

    def _is_plus(self, node: Node | None) -> bool:
        if node is None or node.type != "binary_expression":
            return False
        operator = node.child_by_field_name("operator")
        return operator is not None and operator.type == "+"

    def _flatten_plus(self, node: Node) -> list[Node]:
        """Operands of a `+` chain, left to right."""
        operands: list[Node] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if self._is_plus(current):
                stack.append(current.child_by_field_name("right"))
                stack.append(current.child_by_field_name("left"))
            else:
                operands.append(current)
        return operands


def parse_java(source: str):
    """Parse Java source and return the tree-sitter tree."""
    parser = Parser(JAVA_LANGUAGE)
    return parser.parse(source.encode("utf-8"))


def extract_java_facets(source: str) -> tuple[Facets, bool, bool]:
    """
    Extract facets from Java source.

    Returns:
        (facets, has_error, recovered_declaration). The caller decides
        whether a tree with errors is usable.
    """
    tree = parse_java(source)
    extractor = JavaFacetExtractor(source)
    extractor.walk(tree.root_node, _Scope())
    out = extractor.out

    facets = Facets(
        imports=tuple(out.imports),
        type_references=tuple(out.type_references),
        declared_types=tuple(sorted(out.declared_types)),
        construction_sites=tuple(out.construction_sites),
        test_methods=tuple(out.test_methods),
        concatenation_sites=tuple(out.concatenation_sites),
        identifier_references=tuple(sorted(out.identifiers)),
        unknown_constructs=tuple(out.unknown),
    )
    return facets, tree.root_node.has_error, out.recovered_declaration
