"""Load sample categories and products into the catalog database.

Usage:
    python seed.py            # insert sample data
    python seed.py --drop     # empty both collections first
"""
import argparse
import sys
from typing import Dict

from database import CATEGORIES, PRODUCTS, CatalogStore, connect
from logging_config import get_logger
from schemas import Category, CollectionType, Product
from settings import Settings

logger = get_logger("seed")

SAMPLE_CATEGORIES = [
    Category(name="Banarasi Silk", slug="banarasi-silk", image="/images/categories/banarasi.jpg"),
    Category(name="Cotton Handloom", slug="cotton-handloom", image="/images/categories/cotton.jpg"),
    Category(name="Party Wear", slug="party-wear", image="/images/categories/party.jpg"),
]

SAMPLE_PRODUCTS = [
    Product(
        name="Crimson Banarasi Silk Saree",
        description="Pure silk fabric with zari border",
        price=1899,
        original_price=2499,
        discount_percentage=24,
        material="silk",
        collection_type=CollectionType.EXCLUSIVE,
        category="banarasi-silk",
        images=["/images/products/crimson-1.jpg", "/images/products/crimson-2.jpg"],
        colors=["red", "gold"],
        review_count=42,
    ),
    Product(
        name="Ivory Tissue Silk Saree",
        description="Lightweight tissue weave for festive evenings",
        price=1499,
        material="silk",
        collection_type=CollectionType.TRENDING,
        category="banarasi-silk",
        images=["/images/products/ivory-1.jpg"],
        colors=["ivory"],
        review_count=17,
    ),
    Product(
        name="Indigo Block Print Saree",
        description="Hand block printed cotton for daily wear",
        price=899,
        original_price=1099,
        material="cotton",
        collection_type=CollectionType.NEW_ARRIVAL,
        category="cotton-handloom",
        images=["/images/products/indigo-1.jpg"],
        colors=["blue", "white"],
    ),
    Product(
        name="Blush Georgette Saree",
        description="Sequinned georgette drape",
        price=1299,
        material="georgette",
        collection_type=CollectionType.TRENDING,
        category="party-wear",
        images=["/images/products/blush-1.jpg"],
        colors=["pink"],
        review_count=8,
    ),
]


def seed(store: CatalogStore, drop: bool = False) -> Dict[str, int]:
    if drop:
        store.db[CATEGORIES].delete_many({})
        store.db[PRODUCTS].delete_many({})
        logger.info("Emptied '%s' and '%s'", CATEGORIES, PRODUCTS)

    for category in SAMPLE_CATEGORIES:
        store.create_category(category)
    for product in SAMPLE_PRODUCTS:
        store.create_product(product)

    return {"categories": len(SAMPLE_CATEGORIES), "products": len(SAMPLE_PRODUCTS)}


def main() -> None:
    parser = argparse.ArgumentParser(prog="seed", description="Insert sample saree catalog data.")
    parser.add_argument("--drop", action="store_true", help="Delete existing categories and products first.")
    args = parser.parse_args()

    try:
        client = connect()
    except RuntimeError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        counts = seed(CatalogStore(client[Settings.DATABASE_NAME]), drop=args.drop)
    finally:
        client.close()
    logger.info("Seeded %(categories)d categories and %(products)d products", counts)


if __name__ == "__main__":
    main()
