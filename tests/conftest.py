"""
Test fixtures shared across all Rulegate tests.
"""

import os

# Keep the audit trail out of the working directory during tests
os.environ.setdefault("AUDIT_ENABLED", "false")

import pytest

from rulegate.core.registry import get_registry
from rulegate.models.source_models import Facets, SourceUnit, UnitKind


@pytest.fixture
def java_test_source():
    """Generated JUnit test with one issue per rule in the catalog."""
    return '''package com.shop;

import org.junit.jupiter.api.Test;
import java.util.List;
import java.util.Map;
import com.shop.model.Product;
import com.shop.model.ProductAttribute;

import static org.junit.jupiter.api.Assertions.assertEquals;

class ProductServiceTest {

    private Attribute color;

    @Test
    void computesPrice() {
        Product product = new Product("shoe", 42);
        ProductAttribute size = new ProductAttribute(product, "size");
        List<ProductAttribute> attributes = List.of(size);
        String query = "SELECT * FROM products WHERE name = '" + product.getName() + "'";
        assertEquals(42, product.getPrice());
    }

    @Test
    void computesDiscount() {
        Product product = new Product("shoe", 42);
        assertEquals(40, product.discounted());
    }

    private Product createProduct(String name) {
        return new Product(name, 10);
    }
}
'''


@pytest.fixture
def python_test_source():
    """Generated pytest module with one issue per rule in the catalog."""
    return '''import os
import sqlite3
from shop.models import Product, ProductAttribute


def make_product(name):
    return Product(name, 10)


def test_price(db):
    product = Product("shoe", 42)
    size = ProductAttribute(product, "size")
    assert product.price == 42


def test_discount():
    product = Product("shoe", 42)
    attr: Attribute = None
    assert product.discounted() == 40


def find(conn: sqlite3.Connection, name):
    return conn.execute("SELECT * FROM products WHERE name = '" + name + "'")
'''


@pytest.fixture
def clean_python_source():
    """Clean Python code with no violations."""
    return '''from shop.models import Product


def make_product(name: str) -> Product:
    return Product(name, 10)


def test_price():
    product = make_product("shoe")
    assert product.price == 10
'''


@pytest.fixture
def default_registry():
    return get_registry("default")


@pytest.fixture
def make_unit():
    """Build a SourceUnit directly from facets, bypassing extraction."""

    def _make(facets=None, language="java", unit_kind=UnitKind.FULL_FILE, unit_id="unit-1"):
        return SourceUnit(
            unit_id=unit_id,
            language=language,
            unit_kind=unit_kind,
            facets=facets or Facets(),
        )

    return _make
