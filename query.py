"""Product query builder.

``build_product_filter`` turns a :class:`~schemas.ProductSearch` into a
:class:`ProductFilter`, an immutable value that renders to a MongoDB
filter document and also evaluates in memory against a product.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from schemas import Product, ProductSearch

# Category value the storefront sends for "every category"
ALL_CATEGORIES = "all"

NAME_DESCRIPTION = ("name", "description")
NAME_DESCRIPTION_MATERIAL = ("name", "description", "material")


def _icontains(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


@dataclass(frozen=True)
class ProductFilter:
    """AND of every present condition; the free-text term ORs across ``term_fields``."""

    term: Optional[str] = None
    category: Optional[str] = None
    material: Optional[str] = None
    collection_type: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    term_fields: Tuple[str, ...] = NAME_DESCRIPTION

    def to_mongo(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if self.term:
            query["$or"] = [{field: _icontains(self.term)} for field in self.term_fields]
        if self.category is not None:
            query["category"] = self.category
        if self.material is not None:
            query["material"] = self.material
        if self.collection_type is not None:
            query["collectionType"] = self.collection_type

        price: Dict[str, float] = {}
        if self.price_min is not None:
            price["$gte"] = self.price_min
        if self.price_max is not None:
            price["$lte"] = self.price_max
        if price:
            query["price"] = price
        return query

    def matches(self, product: Product) -> bool:
        if self.term:
            needle = self.term.lower()
            haystacks = (getattr(product, field) or "" for field in self.term_fields)
            if not any(needle in text.lower() for text in haystacks):
                return False
        if self.category is not None and product.category != self.category:
            return False
        if self.material is not None and product.material != self.material:
            return False
        if self.collection_type is not None and product.collection_type != self.collection_type:
            return False
        if self.price_min is not None and product.price < self.price_min:
            return False
        if self.price_max is not None and product.price > self.price_max:
            return False
        return True

    @property
    def is_empty(self) -> bool:
        return not self.to_mongo()


def build_product_filter(search: Optional[ProductSearch] = None) -> ProductFilter:
    """Build the filter for a product listing request.

    Empty strings count as absent, and a category of ``"all"`` means no
    category restriction.
    """
    if search is None:
        return ProductFilter()

    category = search.category or None
    if category == ALL_CATEGORIES:
        category = None

    return ProductFilter(
        term=search.search or None,
        category=category,
        material=search.material or None,
        collection_type=search.collection_type or None,
        price_min=search.price_min,
        price_max=search.price_max,
    )


def text_search_filter(term: str) -> ProductFilter:
    """Free-text search across name, description and material."""
    return ProductFilter(term=term, term_fields=NAME_DESCRIPTION_MATERIAL)
