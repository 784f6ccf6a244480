# catalog.py
"""
Storefront catalog helpers: pricing, filtering, sorting and the small
selections shown on the home and detail pages.

Everything here is a pure function over an in-memory list of products, so it
is re-derived on every request instead of being cached or pushed into SQL.
"""

import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from nainzaka.schemas import ProductOut

ALL_CATEGORIES = "all"

SORT_KEYS = (
    "name",
    "price-low",
    "price-high",
    "views-high",
    "views-low",
    "clicks-high",
    "clicks-low",
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# --- Pricing ---

def effective_price(product: ProductOut) -> float:
    """The price actually charged: the sale price when set, else the regular price."""
    return product.salePrice or product.price or 0


def discount_percent(product: ProductOut) -> Optional[int]:
    """Whole-number discount shown on sale badges, or None when not on sale."""
    if not product.salePrice or not product.price:
        return None
    ratio = (1 - product.salePrice / product.price) * 100
    # Half-up rounding, the way the storefront badge renders it
    return int(math.floor(ratio + 0.5))


def plain_number(amount: float):
    """1500.0 -> 1500, 1499.5 -> 1499.5 (no separators, for prompts)."""
    return int(amount) if float(amount).is_integer() else amount


def format_price(amount: float) -> str:
    """1500.0 -> '1,500'; 1499.5 -> '1,499.5'."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}".rstrip("0").rstrip(".")


# --- Filtering ---

def matches_search(product: ProductOut, search: str) -> bool:
    term = (search or "").strip().lower()
    if not term:
        return True
    return term in (product.name or "").lower() or term in (product.description or "").lower()


def matches_category(
    product: ProductOut,
    category_id: Optional[str],
    category_names: Optional[Dict[str, str]] = None,
) -> bool:
    """
    Products store the category *name* picked in the admin form while the
    storefront filters by category id, so both are accepted: equality with
    the id or the name, or the product's category containing the name.

    An id missing from `category_names` does not filter at all. Without a
    category table only the raw id is compared.
    """
    if not category_id or category_id == ALL_CATEGORIES:
        return True
    if category_names is not None and category_id not in category_names:
        return True

    product_category = (product.category or "").strip().lower()
    if not product_category:
        return False

    wanted_id = category_id.strip().lower()
    wanted_name = ((category_names or {}).get(category_id) or "").strip().lower()

    if product_category == wanted_id:
        return True
    if wanted_name:
        return product_category == wanted_name or wanted_name in product_category
    return False


def matches_price(product: ProductOut, price_range: Tuple[float, float]) -> bool:
    low, high = price_range
    return low <= effective_price(product) <= high


# --- Sorting ---

def sort_products(products: Iterable[ProductOut], sort_by: str) -> List[ProductOut]:
    items = list(products)
    if sort_by == "name":
        return sorted(items, key=lambda p: (p.name or "").casefold())
    if sort_by == "price-low":
        return sorted(items, key=effective_price)
    if sort_by == "price-high":
        return sorted(items, key=effective_price, reverse=True)
    if sort_by == "views-high":
        return sorted(items, key=lambda p: p.views or 0, reverse=True)
    if sort_by == "views-low":
        return sorted(items, key=lambda p: p.views or 0)
    if sort_by == "clicks-high":
        return sorted(items, key=lambda p: p.clicks or 0, reverse=True)
    if sort_by == "clicks-low":
        return sorted(items, key=lambda p: p.clicks or 0)
    return items


def filter_products(
    products: Sequence[ProductOut],
    search: str = "",
    category: str = ALL_CATEGORIES,
    price_range: Tuple[float, float] = (0, math.inf),
    sort_by: str = "name",
    category_names: Optional[Dict[str, str]] = None,
) -> List[ProductOut]:
    """Apply the search, category and price predicates, then sort the survivors."""
    survivors = [
        p for p in products
        if matches_search(p, search)
        and matches_category(p, category, category_names)
        and matches_price(p, price_range)
    ]
    return sort_products(survivors, sort_by)


# --- Selections ---

def featured_products(products: Sequence[ProductOut], limit: int = 8) -> List[ProductOut]:
    return [p for p in products if p.featured][:limit]


def recent_products(products: Sequence[ProductOut], limit: int = 3) -> List[ProductOut]:
    def _created(p: ProductOut) -> datetime:
        if p.createdAt is None:
            return _EPOCH
        if p.createdAt.tzinfo is None:
            return p.createdAt.replace(tzinfo=timezone.utc)
        return p.createdAt

    return sorted(products, key=_created, reverse=True)[:limit]


def recommended_products(
    products: Sequence[ProductOut], product: ProductOut, limit: int = 4
) -> List[ProductOut]:
    return [
        p for p in products
        if p.id != product.id and p.category == product.category
    ][:limit]


def gallery(product: ProductOut) -> List[str]:
    """Primary image first, then the additional ones; blanks dropped."""
    return [url for url in [product.imageUrl, *product.additionalImages] if url]
