"""HTTP client for the catalog API.

Responses are cached in a :class:`ResponseCache` keyed by request path and
query parameters. The cache is never invalidated automatically: the catalog
is read-only, so an entry stays until ``invalidate`` or ``clear`` is called.
"""
from typing import Any, Dict, Hashable, List, Optional, Tuple
from urllib.parse import quote

import requests

from listing import is_collection_slug, parse_price_bucket, similar_products
from logging_config import get_logger
from schemas import CategoryRecord, ProductRecord
from settings import Settings

logger = get_logger("client")

# Category pages show a whole collection, not the home page teaser
COLLECTION_PAGE_LIMIT = 100


class ApiError(Exception):
    """Raised for any non-2xx response."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ResponseCache:
    def __init__(self) -> None:
        self._entries: Dict[Hashable, Any] = {}

    @staticmethod
    def key_for(path: str, params: Optional[Dict[str, Any]] = None) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
        items = sorted((k, str(v)) for k, v in (params or {}).items())
        return path, tuple(items)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Any:
        return self._entries[key]

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, path: str) -> int:
        """Drop every entry for ``path`` regardless of its parameters."""
        stale = [key for key in self._entries if key[0] == path]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


class CatalogClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.base_url = (base_url or Settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else Settings.CLIENT_TIMEOUT
        self.session = session or requests.Session()
        self.cache = cache if cache is not None else ResponseCache()

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        params = {k: v for k, v in (params or {}).items() if v is not None}
        key = ResponseCache.key_for(path, params)
        if key in self.cache:
            logger.debug("Cache hit: %s %s", path, params)
            return self.cache.get(key)

        url = f"{self.base_url}{path}"
        logger.debug("Fetching: %s %s", url, params)
        r = self.session.get(url, params=params or None, timeout=self.timeout)
        logger.debug("%s - Status: %s", url, r.status_code)
        if not r.ok:
            raise ApiError(r.status_code, r.text or r.reason)

        data = r.json()
        self.cache.set(key, data)
        return data

    # Categories
    def list_categories(self) -> List[CategoryRecord]:
        return [CategoryRecord.model_validate(c) for c in self._get_json("/categories")]

    def get_category(self, slug: str) -> CategoryRecord:
        return CategoryRecord.model_validate(self._get_json(f"/categories/{quote(slug, safe='')}"))

    # Products
    def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        material: Optional[str] = None,
        collection_type: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        price_range: Optional[str] = None,
    ) -> List[ProductRecord]:
        """List products; ``price_range`` is a dropdown value such as ``"5000-15000"``."""
        if price_range:
            price_min, price_max = parse_price_bucket(price_range)
        params = {
            "search": search,
            "category": category,
            "material": material,
            "collectionType": collection_type,
            "priceMin": price_min,
            "priceMax": price_max,
        }
        return [ProductRecord.model_validate(p) for p in self._get_json("/products", params)]

    def get_product(self, product_id: str) -> ProductRecord:
        return ProductRecord.model_validate(self._get_json(f"/products/{quote(product_id, safe='')}"))

    def products_by_category(self, category: str) -> List[ProductRecord]:
        data = self._get_json(f"/products/category/{quote(category, safe='')}")
        return [ProductRecord.model_validate(p) for p in data]

    def collection(self, collection_type: str, limit: Optional[int] = None) -> List[ProductRecord]:
        data = self._get_json(f"/collections/{quote(collection_type, safe='')}", {"limit": limit})
        return [ProductRecord.model_validate(p) for p in data]

    def search(self, q: str) -> List[ProductRecord]:
        return [ProductRecord.model_validate(p) for p in self._get_json("/search", {"q": q})]

    # Views
    def listing_products(self, slug: str) -> List[ProductRecord]:
        """Products behind a /category/<slug> page: a collection tag or a category slug."""
        if is_collection_slug(slug):
            return self.collection(slug, limit=COLLECTION_PAGE_LIMIT)
        return self.products_by_category(slug)

    def similar_to(self, product: ProductRecord) -> List[ProductRecord]:
        if not product.category:
            return []
        return similar_products(product, self.list_products(category=product.category))
