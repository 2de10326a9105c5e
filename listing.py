"""Client-side listing logic for the storefront.

Everything here works on products already fetched for a view: the filter
predicate, the sort orders, the filter and sort panels, and the facets the
panels offer. Results are recomputed on every call.
"""
import math
import re
import unicodedata
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from schemas import COLLECTION_TYPES, Product

PRICE_STEP = 50
DEFAULT_MAX_PRICE = 2000
SIMILAR_PRODUCTS_LIMIT = 4

COLLECTION_TITLES = {
    "new-arrival": "New Arrival",
    "trending": "Trending Collection",
    "exclusive": "Exclusive Collection",
}

PRICE_BUCKETS = {
    "0-5000": "₹0 - ₹5,000",
    "5000-15000": "₹5,000 - ₹15,000",
    "15000-50000": "₹15,000 - ₹50,000",
    "50000+": "₹50,000+",
}

MATERIAL_OPTIONS = ["silk", "cotton", "chiffon", "georgette"]


class SortOption(str, Enum):
    FEATURED = "featured"
    BEST_SELLING = "best-selling"
    ALPHABETICALLY_AZ = "alphabetically-az"
    ALPHABETICALLY_ZA = "alphabetically-za"
    PRICE_LOW_HIGH = "price-low-high"
    PRICE_HIGH_LOW = "price-high-low"
    DATE_OLD_NEW = "date-old-new"
    DATE_NEW_OLD = "date-new-old"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortOption.FEATURED: "Featured",
    SortOption.BEST_SELLING: "Best selling",
    SortOption.ALPHABETICALLY_AZ: "Alphabetically, A-Z",
    SortOption.ALPHABETICALLY_ZA: "Alphabetically, Z-A",
    SortOption.PRICE_LOW_HIGH: "Price, low to high",
    SortOption.PRICE_HIGH_LOW: "Price, high to low",
    SortOption.DATE_OLD_NEW: "Date, old to new",
    SortOption.DATE_NEW_OLD: "Date, new to old",
}


class PanelState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


# --- Helpers ---------------------------------------------------------------


def _name_key(product: Product) -> Tuple[str, str]:
    """Accent- and case-insensitive first, so "Élan" sorts among the E names."""
    decomposed = unicodedata.normalize("NFKD", product.name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold()


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text: str) -> int:
    """Integer prefix of ``text`` ("1500.5" -> 1500); 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _review_count(product: Product) -> int:
    return product.review_count or 0


def _created_timestamp(product: Product) -> float:
    created_at: Optional[datetime] = getattr(product, "created_at", None)
    return created_at.timestamp() if created_at else 0.0


def is_collection_slug(slug: str) -> bool:
    return slug in COLLECTION_TYPES


def category_title(slug: str) -> str:
    """Page heading for a category or collection slug."""
    if slug in COLLECTION_TITLES:
        return COLLECTION_TITLES[slug]
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def parse_price_bucket(value: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Turn a price dropdown value ("0-5000", "50000+") into (min, max) bounds."""
    if not value:
        return None, None
    value = value.strip()
    try:
        if value.endswith("+"):
            return float(value[:-1]), None
        low, high = value.split("-", 1)
        return float(low), float(high)
    except ValueError:
        raise ValueError(f"Invalid price range: {value!r}")


def available_materials(products: Iterable[Product]) -> List[str]:
    return sorted({p.material for p in products if p.material})


def available_colors(products: Iterable[Product]) -> List[str]:
    return sorted({color for p in products for color in p.colors})


def max_price_for(products: Sequence[Product], step: int = PRICE_STEP) -> int:
    """Upper bound of the price slider: the highest price rounded up to ``step``."""
    if not products:
        return DEFAULT_MAX_PRICE
    highest = max(p.price for p in products)
    return max(step, int(math.ceil(highest / step) * step))


def similar_products(product: Product, candidates: Iterable[Product], limit: int = SIMILAR_PRODUCTS_LIMIT) -> list:
    """Other products from the same fetch, excluding ``product`` itself."""
    product_id = getattr(product, "id", None)
    others = [p for p in candidates if getattr(p, "id", None) != product_id]
    return others[:limit]


# --- Filtering and sorting -------------------------------------------------


@dataclass
class ListingFilters:
    search_query: str = ""
    price_range: Tuple[float, float] = (0, DEFAULT_MAX_PRICE)
    materials: Set[str] = field(default_factory=set)
    colors: Set[str] = field(default_factory=set)

    def matches(self, product: Product) -> bool:
        if self.search_query:
            needle = self.search_query.lower()
            if needle not in product.name.lower() and needle not in product.description.lower():
                return False
        low, high = self.price_range
        if not low <= product.price <= high:
            return False
        if self.materials and product.material not in self.materials:
            return False
        if self.colors and not any(color in self.colors for color in product.colors):
            return False
        return True

    def copy(self) -> "ListingFilters":
        return replace(self, materials=set(self.materials), colors=set(self.colors))


def filter_products(products: Iterable[Product], filters: ListingFilters) -> list:
    return [p for p in products if filters.matches(p)]


def sort_products(products: Iterable[Product], option: Union[SortOption, str] = SortOption.FEATURED) -> list:
    """Return a new list in ``option`` order. Ties keep their input order."""
    option = SortOption(option)
    items = list(products)

    if option is SortOption.FEATURED:
        return items
    if option is SortOption.BEST_SELLING:
        return sorted(items, key=_review_count, reverse=True)
    if option is SortOption.ALPHABETICALLY_AZ:
        return sorted(items, key=_name_key)
    if option is SortOption.ALPHABETICALLY_ZA:
        return sorted(items, key=_name_key, reverse=True)
    if option is SortOption.PRICE_LOW_HIGH:
        return sorted(items, key=lambda p: p.price)
    if option is SortOption.PRICE_HIGH_LOW:
        return sorted(items, key=lambda p: p.price, reverse=True)
    if option is SortOption.DATE_OLD_NEW:
        return sorted(items, key=_created_timestamp)
    if option is SortOption.DATE_NEW_OLD:
        return sorted(items, key=_created_timestamp, reverse=True)
    raise ValueError(f"Unhandled sort option: {option}")


class ListingView:
    """Products for one category/collection page plus its filter and sort state."""

    def __init__(self, products: Iterable[Product], sort: Union[SortOption, str] = SortOption.FEATURED):
        self.products = list(products)
        self.max_price = max_price_for(self.products)
        self.filters = ListingFilters(price_range=(0, self.max_price))
        self.sort = SortOption(sort)
        self.filter_panel = FilterPanel(self)
        self.sort_panel = SortPanel(self)

    @property
    def available_materials(self) -> List[str]:
        return available_materials(self.products)

    @property
    def available_colors(self) -> List[str]:
        return available_colors(self.products)

    def set_search(self, query: str) -> None:
        self.filters.search_query = query

    def visible_products(self) -> list:
        return sort_products(filter_products(self.products, self.filters), self.sort)


class FilterPanel:
    """Two states, closed and open.

    Opening copies the listing's filters into ``pending``; edits only touch
    ``pending`` until ``apply`` commits them and closes. ``clear`` resets both
    the pending and the applied selections.
    """

    def __init__(self, listing: ListingView):
        self.listing = listing
        self.state = PanelState.CLOSED
        self.pending = listing.filters.copy()
        self.sections = {"price": True, "color": False, "material": False}

    @property
    def is_open(self) -> bool:
        return self.state is PanelState.OPEN

    def open(self) -> None:
        self.pending = self.listing.filters.copy()
        self.state = PanelState.OPEN

    def close(self) -> None:
        self.state = PanelState.CLOSED

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def toggle_section(self, name: str) -> bool:
        if name not in self.sections:
            raise KeyError(name)
        self.sections[name] = not self.sections[name]
        return self.sections[name]

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError("Filter panel is closed")

    def _clamp(self, value: Union[str, float, None]) -> float:
        if isinstance(value, str):
            number = _leading_int(value)
        else:
            number = value if value is not None and not math.isnan(value) else 0
        return min(max(number, 0), self.listing.max_price)

    def set_price_range(self, low, high) -> None:
        self._require_open()
        self.pending.price_range = (self._clamp(low), self._clamp(high))

    def set_price_bound(self, index: int, value) -> None:
        """Edit one end of the range from a text input; unparsable input counts as 0."""
        self._require_open()
        bounds = list(self.pending.price_range)
        bounds[index] = self._clamp(value)
        self.pending.price_range = (bounds[0], bounds[1])

    def toggle_material(self, material: str) -> None:
        self._require_open()
        self.pending.materials ^= {material}

    def toggle_color(self, color: str) -> None:
        self._require_open()
        self.pending.colors ^= {color}

    @property
    def has_active_filters(self) -> bool:
        low, high = self.pending.price_range
        return bool(
            self.pending.materials
            or self.pending.colors
            or low > 0
            or high < self.listing.max_price
        )

    def clear(self) -> None:
        full_range = (0, self.listing.max_price)
        for filters in (self.pending, self.listing.filters):
            filters.price_range = full_range
            filters.materials = set()
            filters.colors = set()

    def apply(self) -> None:
        self._require_open()
        committed = self.pending.copy()
        committed.search_query = self.listing.filters.search_query
        self.listing.filters = committed
        self.close()


class SortPanel:
    def __init__(self, listing: ListingView):
        self.listing = listing
        self.state = PanelState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is PanelState.OPEN

    def open(self) -> None:
        self.state = PanelState.OPEN

    def close(self) -> None:
        self.state = PanelState.CLOSED

    @staticmethod
    def options() -> List[Tuple[str, str]]:
        return [(option.value, option.label) for option in SortOption]

    def select(self, option: Union[SortOption, str]) -> None:
        self.listing.sort = SortOption(option)
        self.close()
