# products.py
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nainzaka import catalog, store
from nainzaka.chat import load_store_context
from nainzaka.db import get_db
from nainzaka.schemas import (
    CategoryOut, HomeOut, ProductDetailOut, ProductOut, serialize_product
)
from nainzaka.settings import settings

# --- Configuration & Setup ---
log = logging.getLogger(__name__)
router = APIRouter(tags=["Storefront"])


async def _all_products(db: AsyncSession) -> List[ProductOut]:
    return [serialize_product(p) for p in await store.list_products(db)]


def require_sort_key(sort: str) -> None:
    """Listing and dashboard both reject sort keys they don't know."""
    if sort not in catalog.SORT_KEYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown sort key '{sort}'. Use one of: {', '.join(catalog.SORT_KEYS)}.",
        )


async def record_view(db: AsyncSession, product_id: str) -> None:
    """Best-effort view count; never blocks the detail page."""
    try:
        await store.increment_counter(db, product_id, "views")
    except Exception as e:
        await db.rollback()
        log.error(f"Error incrementing views for {product_id}: {e}")


# --- API Endpoints ---

@router.get("/home", response_model=HomeOut)
async def home(db: AsyncSession = Depends(get_db)):
    """Featured products and the newest arrivals."""
    products = await _all_products(db)
    return HomeOut(
        featured=catalog.featured_products(products),
        recent=catalog.recent_products(products),
    )


@router.get("/about")
async def about() -> Dict[str, Any]:
    context = load_store_context()
    return {
        "storeName": context["storeName"],
        **context["about"],
        "contactDetails": context["contactDetails"],
        "socialLinks": context["socialLinks"],
        "businessHours": context["businessHours"],
    }


@router.get("/categories", response_model=List[CategoryOut])
async def categories(db: AsyncSession = Depends(get_db)):
    return await store.list_categories(db)


@router.get("/products", response_model=List[ProductOut])
async def list_products(
    search: str = "",
    category: str = catalog.ALL_CATEGORIES,
    min_price: float = Query(0, ge=0),
    max_price: float = Query(settings.CATALOG_MAX_PRICE, ge=0),
    sort: str = "name",
    db: AsyncSession = Depends(get_db),
):
    """
    Storefront listing. The whole collection is read and then filtered and
    sorted in memory, so every request sees the current counters.
    """
    require_sort_key(sort)

    products = await _all_products(db)
    names = await store.category_names(db)
    return catalog.filter_products(
        products,
        search=search,
        category=category,
        price_range=(min_price, max_price),
        sort_by=sort,
        category_names=names,
    )


@router.get("/products/{product_id}", response_model=ProductDetailOut)
async def product_detail(product_id: str, db: AsyncSession = Depends(get_db)):
    row = await store.get_product(db, product_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")

    product = serialize_product(row)
    await record_view(db, product_id)

    others = await _all_products(db)
    return ProductDetailOut(
        product=product,
        images=catalog.gallery(product),
        effectivePrice=catalog.effective_price(product),
        discountPercent=catalog.discount_percent(product),
        recommended=catalog.recommended_products(others, product),
    )
