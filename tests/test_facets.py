"""
Tests for facet extraction — Python (ast), Java (tree-sitter) and the
lexical fallback.
"""

import ast

import pytest

from rulegate.core.errors import FacetExtractionError
from rulegate.core.extractor import extract, normalize_language, stable_unit_id
from rulegate.core.python_facets import anchor_fragment
from rulegate.core.rules import inline_test_construction, unused_import
from rulegate.models.source_models import LineRange, UnitKind


# --- Java ---

def test_java_imports(java_test_source):
    unit = extract(java_test_source, "java")
    paths = [i.symbol_path for i in unit.facets.imports]
    assert paths == [
        "org.junit.jupiter.api.Test",
        "java.util.List",
        "java.util.Map",
        "com.shop.model.Product",
        "com.shop.model.ProductAttribute",
        "org.junit.jupiter.api.Assertions.assertEquals",
    ]
    assert not any(i.is_wildcard for i in unit.facets.imports)
    static = unit.facets.imports[-1]
    assert static.is_static
    assert static.bound_name == "assertEquals"


def test_java_wildcard_import():
    unit = extract("import org.junit.*;\n\nclass A {}\n", "java")
    entry = unit.facets.imports[0]
    assert entry.symbol_path == "org.junit.*"
    assert entry.is_wildcard
    assert entry.bound_name == ""
    assert entry.line == 1


def test_java_test_methods(java_test_source):
    unit = extract(java_test_source, "java")
    assert unit.facets.test_methods == (
        "ProductServiceTest.computesPrice",
        "ProductServiceTest.computesDiscount",
    )


def test_java_construction_sites(java_test_source):
    unit = extract(java_test_source, "java")
    sites = unit.facets.construction_sites
    assert [s.constructed_type for s in sites] == [
        "Product",
        "ProductAttribute",
        "Product",
        "Product",
    ]

    literal, inline, _, factory = sites
    assert literal.is_inside_test_body
    assert literal.literal_arguments_only
    assert literal.arguments == ('"shoe"', "42")
    assert literal.enclosing_test == "ProductServiceTest.computesPrice"

    assert inline.is_inside_test_body
    assert not inline.literal_arguments_only

    assert not factory.is_inside_test_body
    assert factory.is_inside_factory_method
    assert factory.enclosing_test == ""


def test_java_type_references(java_test_source):
    unit = extract(java_test_source, "java")
    refs = unit.facets.declared_type_references
    assert "Attribute" in refs
    assert "ProductAttribute" in refs
    assert "String" in refs
    assert "ProductServiceTest" in unit.facets.declared_types


def test_java_concatenation_site(java_test_source):
    unit = extract(java_test_source, "java")
    (site,) = unit.facets.concatenation_sites
    assert site.sink == "assignment"
    assert "SELECT * FROM products" in site.literal
    assert site.operand == "product.getName()"


def test_java_identifiers_include_annotations(java_test_source):
    unit = extract(java_test_source, "java")
    refs = set(unit.facets.identifier_references)
    assert "Test" in refs
    assert "assertEquals" in refs
    assert "Map" not in refs


def test_java_factory_class_methods_are_factories():
    source = '''
class ProductMother {
    static Product standard() {
        return new Product(new Price(10));
    }
}
'''
    unit = extract(source, "java")
    assert all(s.is_inside_factory_method for s in unit.facets.construction_sites)


def test_java_unparseable_full_file_fails():
    with pytest.raises(FacetExtractionError):
        extract("}}}} ((( @@@ ;;;", "java")


def test_java_recoverable_errors_are_unknown_constructs():
    source = "class A {\n    void m() { int x = ; }\n}\n"
    unit = extract(source, "java")
    assert unit.facets.unknown_constructs
    assert "A" in unit.facets.declared_types


# --- Python ---

def test_python_imports(python_test_source):
    unit = extract(python_test_source, "python")
    bound = [i.bound_name for i in unit.facets.imports]
    assert bound == ["os", "sqlite3", "Product", "ProductAttribute"]
    assert unit.facets.imports[2].symbol_path == "shop.models.Product"


def test_python_wildcard_import():
    unit = extract("from helpers import *\n", "python")
    entry = unit.facets.imports[0]
    assert entry.is_wildcard
    assert entry.symbol_path == "helpers.*"


def test_python_test_methods_and_sites(python_test_source):
    unit = extract(python_test_source, "python")
    facets = unit.facets
    assert facets.test_methods == ("test_price", "test_discount")

    by_line = {s.line: s for s in facets.construction_sites}
    factory_site = by_line[7]
    assert factory_site.is_inside_factory_method
    assert not factory_site.is_inside_test_body

    inline = by_line[12]
    assert inline.constructed_type == "ProductAttribute"
    assert inline.enclosing_test == "test_price"
    assert not inline.literal_arguments_only

    assert by_line[11].arguments == ("'shoe'", "42")
    assert by_line[11].literal_arguments_only


def test_python_class_based_tests():
    source = '''
class TestCart:
    def test_total(self):
        cart = Cart(items)
        assert cart.total == 0
'''
    unit = extract(source, "python")
    assert unit.facets.test_methods == ("TestCart.test_total",)
    assert unit.facets.construction_sites[0].enclosing_test == "TestCart.test_total"


def test_python_fixture_is_factory():
    source = '''
import pytest

@pytest.fixture
def cart():
    return Cart(items)
'''
    unit = extract(source, "python")
    assert unit.facets.construction_sites[0].is_inside_factory_method


def test_python_annotations_are_type_references(python_test_source):
    unit = extract(python_test_source, "python")
    assert "Attribute" in unit.facets.declared_type_references


def test_python_concatenation_kinds():
    source = '''
def queries(cursor, name, table):
    a = "SELECT * FROM users WHERE name = '" + name + "'"
    cursor.execute(f"DELETE FROM {table} WHERE id = 1")
    b = "UPDATE users SET name = '%s'" % name
    c = "plain" + "literal"
'''
    unit = extract(source, "python")
    kinds = [(s.line, s.kind, s.sink) for s in unit.facets.concatenation_sites]
    assert kinds == [
        (3, "concat", "assignment"),
        (4, "interpolation", "call_argument"),
        (5, "format", "assignment"),
    ]


def test_python_syntax_error_full_file_fails():
    with pytest.raises(FacetExtractionError) as exc_info:
        extract("def broken(:\n  pass", "python")
    assert "SyntaxError" in exc_info.value.reason


def test_data_provider_pragma():
    source = "# rulegate: data-provider\nCASES = [Cart(items)]\n"
    unit = extract(source, "python")
    assert unit.facets.is_data_provider


def test_data_provider_flag():
    unit = extract("x = 1\n", "python", data_provider=True)
    assert unit.facets.is_data_provider


# --- General ---

def test_binary_content_fails():
    with pytest.raises(FacetExtractionError) as exc_info:
        extract("abc\x00def", "python")
    assert exc_info.value.reason == "binary content"


def test_unknown_language_uses_lexical_extraction():
    source = "import kotlinx.coroutines.*\nimport org.example.Unused\n\nfun main() = println(1)\n"
    unit = extract(source, "kt")
    assert unit.language == "kotlin"
    assert unit.facets.imports[0].is_wildcard
    assert unit.facets.imports[1].bound_name == "Unused"
    assert "println" in unit.facets.identifier_references
    assert unit.facets.unknown_constructs


def test_language_normalization():
    assert normalize_language(" PY ") == "python"
    assert normalize_language("Java") == "java"


def test_stable_unit_id_is_deterministic():
    a = stable_unit_id("x = 1", "python", UnitKind.FULL_FILE)
    b = stable_unit_id("x = 1", "python", UnitKind.FULL_FILE)
    c = stable_unit_id("x = 2", "python", UnitKind.FULL_FILE)
    assert a == b
    assert a != c
    assert a.startswith("unit-")


def test_extracted_unit_is_immutable(python_test_source):
    unit = extract(python_test_source, "python")
    with pytest.raises(Exception):
        unit.language = "java"


# --- Tests named like factories ---

def test_java_test_named_like_factory_is_not_a_factory():
    source = '''
class OrderTest {
    @Test
    void createOrderRejectsNegativeQuantity() {
        Order order = new Order(customer, -1);
    }

    private Order anOrder() {
        return new Order(customer, 1);
    }
}
'''
    unit = extract(source, "java")
    test_site, factory_site = unit.facets.construction_sites
    assert unit.facets.test_methods == ("OrderTest.createOrderRejectsNegativeQuantity",)
    assert test_site.is_inside_test_body
    assert not test_site.is_inside_factory_method
    assert factory_site.is_inside_factory_method

    violations = inline_test_construction.check(unit, unit.facets)
    assert [v.location.line for v in violations] == [5]


def test_python_test_named_like_factory_is_not_a_factory():
    source = '''
def test_order_factory(customer):
    order = Order(customer, -1)
'''
    unit = extract(source, "python")
    (site,) = unit.facets.construction_sites
    assert site.is_inside_test_body
    assert not site.is_inside_factory_method
    assert len(inline_test_construction.check(unit, unit.facets)) == 1


def test_helper_inside_test_can_still_be_a_factory():
    source = '''
def test_total():
    def make_cart(items):
        return Cart(items)
    assert make_cart([]).total == 0
'''
    unit = extract(source, "python")
    (site,) = unit.facets.construction_sites
    assert site.is_inside_factory_method


# --- Javadoc references ---

def test_javadoc_links_count_as_references():
    source = '''import com.shop.model.Product;
import com.shop.model.PriceException;
import java.util.Map;

/**
 * Prices {@link Product#price} values.
 *
 * @see Product
 * @throws PriceException when the price is negative
 */
class PriceCalculator {}
'''
    unit = extract(source, "java")
    refs = set(unit.facets.identifier_references)
    assert {"Product", "PriceException"} <= refs
    unused = unused_import.check(unit, unit.facets)
    assert [v.location.symbol for v in unused] == ["java.util.Map"]


# --- Diff fragments ---

def test_anchor_fragment_opens_enclosing_blocks():
    source = "\n".join(["", "", "        x = 1", "    def close(self):"])
    anchored = anchor_fragment(source, [LineRange(start=3, end=4)])
    assert anchored.split("\n") == [
        "if True:",
        "    if True:",
        "        x = 1",
        "    def close(self):",
        "        pass",
    ]
    ast.parse(anchored)


def test_anchor_fragment_without_room():
    assert anchor_fragment("    x = 1", [LineRange(start=1, end=1)]) is None


def test_anchor_fragment_leaves_top_level_hunks_alone():
    assert anchor_fragment("\nx = 1", [LineRange(start=2, end=2)]) is None


def test_python_diff_inside_method_body():
    diff = "\n".join([
        "@@ -40,2 +40,3 @@",
        "         product = self.repo.find(name)",
        "+        attr: Attribute = product.attribute",
        "         return Price(product, attr)",
    ])
    unit = extract(diff, "python", UnitKind.DIFF)
    assert unit.facets.unknown_constructs == ()
    assert [s.constructed_type for s in unit.facets.construction_sites] == ["Price"]
    assert "Attribute" in unit.facets.declared_type_references


def test_python_fragment_without_room_is_lexical():
    diff = "\n".join([
        "@@ -1,2 +1,3 @@",
        "     if ready:",
        "+        from helpers import *",
        "         run()",
    ])
    unit = extract(diff, "python", UnitKind.DIFF)
    assert unit.facets.imports[0].is_wildcard
    assert "lexical extraction only" in unit.facets.unknown_constructs[0]


def test_deep_nesting_is_an_extraction_error():
    source = "class A {\n    String s = \"a\" + " + " + ".join(["x"] * 3000) + ";\n}\n"
    with pytest.raises(FacetExtractionError) as exc_info:
        extract(source, "java")
    assert exc_info.value.reason == "source nesting too deep"
