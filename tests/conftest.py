"""Shared pytest fixtures: an in-memory Mongo database and an API client bound to it."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import CatalogStore
from main import create_app
from schemas import Category, Product


def make_product(**overrides) -> Product:
    data = {
        "name": "Plain Saree",
        "description": "Everyday drape",
        "price": 1000,
        "material": "cotton",
        "collection_type": "new-arrival",
        "category": "cotton-handloom",
        "images": ["/img/plain.jpg"],
        "colors": ["white"],
    }
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def db():
    return mongomock.MongoClient()["saree_catalog"]


@pytest.fixture
def store(db) -> CatalogStore:
    return CatalogStore(db)


@pytest.fixture
def catalog(store):
    """A small catalog: three categories and six products."""
    categories = [
        store.create_category(Category(name="Banarasi Silk", slug="banarasi-silk", image="/img/b.jpg")),
        store.create_category(Category(name="Cotton Handloom", slug="cotton-handloom", image="/img/c.jpg")),
        store.create_category(Category(name="Party Wear", slug="party-wear", image="/img/p.jpg")),
    ]
    products = [
        store.create_product(make_product(
            name="Silk Saree", description="Zari border", price=1500, material="silk",
            collection_type="exclusive", category="banarasi-silk", colors=["red"], review_count=10,
        )),
        store.create_product(make_product(
            name="Temple Border Saree", description="Pure silk fabric", price=2500, material="silk",
            collection_type="trending", category="banarasi-silk", colors=["gold"], review_count=3,
        )),
        store.create_product(make_product(
            name="Budget Silk Blend", description="Soft drape", price=900, material="silk",
            collection_type="trending", category="party-wear", colors=["pink"],
        )),
        store.create_product(make_product(
            name="Indigo Print", description="Block printed", price=1200, material="cotton",
            collection_type="new-arrival", category="cotton-handloom", colors=["blue", "white"],
        )),
        store.create_product(make_product(
            name="Mustard Handloom", description="Handwoven", price=2000, material="cotton",
            collection_type="new-arrival", category="cotton-handloom", colors=["yellow"],
        )),
        store.create_product(make_product(
            name="Blush Georgette", description="Sequinned (party) drape", price=1000, material="georgette",
            collection_type="trending", category="party-wear", colors=["pink"], review_count=25,
        )),
    ]
    return {"categories": categories, "products": products}


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))
