"""
Saree Catalog Schemas

Define MongoDB collection schemas using Pydantic models.
- Category -> "categories" collection
- Product -> "products" collection

Documents and API payloads use camelCase keys (``collectionType``,
``createdAt``); Python code uses the snake_case attribute names.
The ``*Record`` models are what the store hands back: the stored shape plus
the stringified identifier and timestamps.
"""
import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CollectionType(str, Enum):
    """Marketing groupings shown on the storefront."""

    NEW_ARRIVAL = "new-arrival"
    TRENDING = "trending"
    EXCLUSIVE = "exclusive"


COLLECTION_TYPES = [c.value for c in CollectionType]


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


def _record_data(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(doc)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    return data


class Category(CatalogModel):
    name: str = Field(..., description="Display name")
    slug: str = Field(..., min_length=1, description="URL-friendly slug")
    image: str = Field("", description="Image URL")


class CategoryRecord(Category):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CategoryRecord":
        return cls.model_validate(_record_data(doc))


class Product(CatalogModel):
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    price: float = Field(..., ge=0, description="Selling price in INR")
    original_price: Optional[float] = Field(None, ge=0, description="Price before discount")
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    material: str = Field(..., description="Fabric, e.g. silk, cotton")
    collection_type: CollectionType
    # Category slug as a free string; nothing checks it against categories
    category: str
    images: List[str] = Field(default_factory=list, description="Image URLs, display order")
    colors: List[str] = Field(default_factory=list)
    review_count: Optional[int] = Field(None, ge=0)

    @property
    def effective_original_price(self) -> float:
        return self.original_price or self.price

    @property
    def has_discount(self) -> bool:
        if self.discount_percentage and self.discount_percentage > 0:
            return True
        return self.effective_original_price > self.price

    @property
    def savings(self) -> float:
        return self.effective_original_price - self.price

    @property
    def effective_discount_percentage(self) -> float:
        """Stored percentage, else derived from the original price (rounded half up)."""
        if self.discount_percentage:
            return self.discount_percentage
        if not self.has_discount:
            return 0
        ratio = self.savings / self.effective_original_price * 100
        return math.floor(ratio + 0.5)


class ProductRecord(Product):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ProductRecord":
        return cls.model_validate(_record_data(doc))


class ProductSearch(CatalogModel):
    """Optional criteria narrowing a product listing. Never persisted."""

    search: Optional[str] = None
    category: Optional[str] = None
    material: Optional[str] = None
    collection_type: Optional[CollectionType] = None
    price_min: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    price_max: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
