"""Tests for the catalog HTTP routes."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from conftest import make_product
from database import PRODUCTS, CatalogStore, create_document
from main import create_app

ROUTES = [
    "/categories",
    "/categories/banarasi-silk",
    "/products",
    f"/products/{ObjectId()}",
    "/products/category/banarasi-silk",
    "/collections/trending",
    "/search?q=silk",
]


def _names(resp):
    return sorted(p["name"] for p in resp.json())


# --- Categories ---

def test_list_categories(client, catalog):
    resp = client.get("/categories")
    assert resp.status_code == 200
    body = resp.json()
    assert [c["slug"] for c in body] == ["banarasi-silk", "cotton-handloom", "party-wear"]
    assert all(isinstance(c["id"], str) for c in body)
    assert "_id" not in body[0]
    assert "createdAt" in body[0]


@pytest.mark.parametrize("slug", ["banarasi-silk", "cotton-handloom", "party-wear"])
def test_get_category_by_slug(client, catalog, slug):
    resp = client.get(f"/categories/{slug}")
    assert resp.status_code == 200
    assert resp.json()["slug"] == slug


def test_get_missing_category_returns_404(client, catalog):
    resp = client.get("/categories/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Category not found"}


def test_blank_slug_returns_400(client, catalog):
    resp = client.get("/categories/%20")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid slug parameter"}


# --- Product listing ---

def test_list_all_products(client, catalog):
    resp = client.get("/products")
    assert resp.status_code == 200
    assert len(resp.json()) == 6


def test_products_price_and_material_scenario(client, catalog):
    resp = client.get("/products?priceMin=1000&priceMax=2000&material=silk")
    assert resp.status_code == 200
    body = resp.json()
    assert [p["name"] for p in body] == ["Silk Saree"]
    for p in body:
        assert p["material"] == "silk"
        assert 1000 <= p["price"] <= 2000


def test_empty_result_is_200_with_empty_list(client, catalog):
    resp = client.get("/products?priceMin=1000&priceMax=2000&material=chiffon")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.parametrize("lo,hi", [(0, 100000), (900, 900), (1000, 1500), (1201, 1999), (2000, 2500)])
def test_price_bounds_return_exactly_in_range_products(client, catalog, lo, hi):
    expected = sorted(p.name for p in catalog["products"] if lo <= p.price <= hi)
    resp = client.get(f"/products?priceMin={lo}&priceMax={hi}")
    assert resp.status_code == 200
    assert _names(resp) == expected


def test_single_price_bound(client, catalog):
    assert _names(client.get("/products?priceMin=2000")) == ["Mustard Handloom", "Temple Border Saree"]
    assert _names(client.get("/products?priceMax=1000")) == ["Blush Georgette", "Budget Silk Blend"]


def test_search_term_is_case_insensitive_on_name_or_description(client, catalog):
    resp = client.get("/products?search=SILK")
    assert _names(resp) == ["Budget Silk Blend", "Silk Saree", "Temple Border Saree"]


def test_search_term_with_regex_characters_is_literal(client, catalog):
    resp = client.get("/products?search=(party)")
    assert resp.status_code == 200
    assert _names(resp) == ["Blush Georgette"]


def test_category_all_means_no_category_filter(client, catalog):
    assert len(client.get("/products?category=all").json()) == 6
    assert _names(client.get("/products?category=party-wear")) == ["Blush Georgette", "Budget Silk Blend"]


def test_collection_type_filter(client, catalog):
    resp = client.get("/products?collectionType=new-arrival")
    assert _names(resp) == ["Indigo Print", "Mustard Handloom"]


@pytest.mark.parametrize("query", ["priceMin=abc", "priceMax=nan", "priceMin=-5", "collectionType=clearance"])
def test_invalid_query_shape_returns_400(client, catalog, query):
    resp = client.get(f"/products?{query}")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid query parameters"}


def test_blank_query_values_are_ignored(client, catalog):
    resp = client.get("/products?search=&priceMin=&category=")
    assert resp.status_code == 200
    assert len(resp.json()) == 6


def test_malformed_stored_product_does_not_break_listing(client, store, catalog):
    create_document(store.db, PRODUCTS, {"name": "Legacy", "price": 500})
    resp = client.get("/products")
    assert resp.status_code == 200
    assert len(resp.json()) == 6
    assert "Legacy" not in _names(resp)


# --- Single product ---

def test_get_product_by_id(client, catalog):
    product = catalog["products"][0]
    resp = client.get(f"/products/{product.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == product.id
    assert body["collectionType"] == "exclusive"
    assert body["reviewCount"] == 10


def test_get_unknown_product_returns_404(client, catalog):
    resp = client.get(f"/products/{ObjectId()}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}


def test_malformed_product_id_returns_400(client, catalog):
    resp = client.get("/products/not-an-object-id")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid product ID"}


# --- By category / collection / search ---

def test_products_by_category(client, catalog):
    resp = client.get("/products/category/cotton-handloom")
    assert resp.status_code == 200
    assert _names(resp) == ["Indigo Print", "Mustard Handloom"]


def test_products_by_unknown_category_is_empty(client, catalog):
    resp = client.get("/products/category/kanjivaram")
    assert resp.status_code == 200
    assert resp.json() == []


def test_collection_limit(client, store):
    for i in range(8):
        store.create_product(make_product(name=f"Trend {i}", collection_type="trending"))

    assert len(client.get("/collections/trending?limit=3").json()) == 3
    assert len(client.get("/collections/trending").json()) == 6
    assert len(client.get("/collections/trending?limit=100").json()) == 8


def test_collection_with_six_products_and_limit_three(client, store):
    for i in range(6):
        store.create_product(make_product(name=f"Exclusive {i}", collection_type="exclusive"))
    resp = client.get("/collections/exclusive?limit=3")
    assert resp.status_code == 200
    assert len(resp.json()) == 3


@pytest.mark.parametrize("path,error", [
    ("/collections/clearance", "Invalid collection type"),
    ("/collections/trending?limit=abc", "Invalid limit parameter"),
    ("/collections/trending?limit=0", "Invalid limit parameter"),
])
def test_collection_rejects_bad_input(client, catalog, path, error):
    resp = client.get(path)
    assert resp.status_code == 400
    assert resp.json() == {"error": error}


def test_search_matches_name_description_and_material(client, catalog):
    assert _names(client.get("/search?q=georgette")) == ["Blush Georgette"]
    assert _names(client.get("/search?q=COTTON")) == ["Indigo Print", "Mustard Handloom"]
    assert _names(client.get("/search?q=pure silk")) == ["Temple Border Saree"]


@pytest.mark.parametrize("path", ["/search", "/search?q=", "/search?q=%20%20"])
def test_search_requires_query(client, catalog, path):
    resp = client.get(path)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Search query is required"}


# --- Errors ---

@pytest.mark.parametrize("path", ROUTES)
@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
def test_non_get_returns_405(client, catalog, path, method):
    resp = client.request(method, path)
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}


def test_store_failure_returns_500_without_details():
    broken = MagicMock(spec=CatalogStore)
    broken.get_categories.side_effect = RuntimeError("connection refused to 10.0.0.5")
    broken.search_products.side_effect = RuntimeError("socket timeout")
    client = TestClient(create_app(store=broken))

    resp = client.get("/categories")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch categories"}

    resp = client.get("/search?q=silk")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to search products"}


def test_unconfigured_database_returns_500():
    client = TestClient(create_app(store=None))
    resp = client.get("/products")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Database not configured"}


def test_unknown_route_uses_error_body(client):
    resp = client.get("/orders")
    assert resp.status_code == 404
    assert "error" in resp.json()


# --- Diagnostics ---

def test_root(client):
    assert client.get("/").json() == {"name": "Saree Catalog API", "status": "ok"}


def test_database_diagnostics(client, catalog):
    body = client.get("/test").json()
    assert body["backend"] == "running"
    assert body["database"] == "connected"
    assert set(body["collections"]) == {"categories", "products"}


def test_database_diagnostics_without_store():
    body = TestClient(create_app(store=None)).get("/test").json()
    assert body == {"backend": "running", "database": "not configured"}
