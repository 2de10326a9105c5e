"""
Database helpers for MongoDB.

``connect`` builds the pooled client once per process; ``CatalogStore`` wraps
the catalog database and exposes typed accessors for the ``categories`` and
``products`` collections. The web app creates the store in its lifespan and
hands it to handlers through a dependency, so nothing here is global.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo import MongoClient
from pymongo.database import Database

from logging_config import get_logger
from query import ProductFilter, build_product_filter, text_search_filter
from schemas import Category, CategoryRecord, Product, ProductRecord, ProductSearch
from settings import Settings

logger = get_logger("database")

CATEGORIES = "categories"
PRODUCTS = "products"

_RECORD_FIELDS = {"id", "created_at", "updated_at"}


def connect(uri: Optional[str] = None) -> MongoClient:
    """Create the MongoDB client. Connections are opened lazily by the driver."""
    uri = uri or Settings.MONGODB_URI
    if not uri:
        raise RuntimeError("Please add your MongoDB URI to .env")
    return MongoClient(
        uri,
        maxPoolSize=Settings.MAX_POOL_SIZE,
        minPoolSize=Settings.MIN_POOL_SIZE,
        maxIdleTimeMS=Settings.MAX_IDLE_TIME_MS,
        serverSelectionTimeoutMS=Settings.SERVER_SELECTION_TIMEOUT_MS,
        socketTimeoutMS=Settings.SOCKET_TIMEOUT_MS,
    )


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Insert a document stamped with createdAt/updatedAt and return it with its _id."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(by_alias=True, exclude=_RECORD_FIELDS)
    else:
        data_dict = dict(data)

    now = datetime.now(timezone.utc)
    data_dict["createdAt"] = now
    data_dict["updatedAt"] = now

    result = db[collection_name].insert_one(data_dict)
    data_dict["_id"] = result.inserted_id
    return data_dict


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def _valid_records(model, docs: Iterable[Dict[str, Any]], collection_name: str) -> list:
    """Convert documents to ``model`` records, skipping (and logging) any that do not fit."""
    records = []
    for doc in docs:
        try:
            records.append(model.from_document(doc))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed %s document %s: %d validation error(s)",
                collection_name, doc.get("_id"), e.error_count(),
            )
    return records


class CatalogStore:
    """Typed read/insert access to the catalog collections."""

    def __init__(self, db: Database):
        self.db = db

    # --- Categories ---

    def get_categories(self) -> List[CategoryRecord]:
        return _valid_records(CategoryRecord, get_documents(self.db, CATEGORIES), CATEGORIES)

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        doc = self.db[CATEGORIES].find_one({"slug": slug})
        return CategoryRecord.from_document(doc) if doc else None

    def create_category(self, category: Category) -> CategoryRecord:
        doc = create_document(self.db, CATEGORIES, category)
        logger.info("Created category '%s' (%s)", category.slug, doc["_id"])
        return CategoryRecord.from_document(doc)

    # --- Products ---

    def find_products(self, product_filter: ProductFilter, limit: Optional[int] = None) -> List[ProductRecord]:
        query = product_filter.to_mongo()
        logger.debug("products.find(%s, limit=%s)", query, limit)
        docs = get_documents(self.db, PRODUCTS, query, limit=limit)
        return _valid_records(ProductRecord, docs, PRODUCTS)

    def get_products(self, search: Optional[ProductSearch] = None) -> List[ProductRecord]:
        return self.find_products(build_product_filter(search))

    def get_products_by_collection(
        self, collection_type: str, limit: int = Settings.DEFAULT_COLLECTION_LIMIT
    ) -> List[ProductRecord]:
        return self.find_products(ProductFilter(collection_type=collection_type), limit=limit)

    def get_product_by_id(self, product_id: str) -> Optional[ProductRecord]:
        """Look up one product. Raises ``bson.errors.InvalidId`` for malformed ids."""
        doc = self.db[PRODUCTS].find_one({"_id": ObjectId(product_id)})
        return ProductRecord.from_document(doc) if doc else None

    def get_products_by_category(self, category: str) -> List[ProductRecord]:
        return self.find_products(ProductFilter(category=category))

    def create_product(self, product: Product) -> ProductRecord:
        doc = create_document(self.db, PRODUCTS, product)
        logger.info("Created product '%s' (%s)", product.name, doc["_id"])
        return ProductRecord.from_document(doc)

    def search_products(self, query: str) -> List[ProductRecord]:
        return self.find_products(text_search_filter(query))

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()
