# store.py
"""
Data-access layer for the `products` and `categories` collections.

The storefront only ever needs whole-collection reads followed by in-memory
filtering, single-document reads and writes, and atomic counter bumps, so
that is all this module offers.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from nainzaka.models import Product, Category
from nainzaka.schemas import ProductCreate, PRODUCT_FIELD_COLUMNS

log = logging.getLogger(__name__)

COUNTER_FIELDS = {"views": Product.views, "clicks": Product.clicks}

DEFAULT_CATEGORIES = [
    ("cleansers", "Cleansers", "🧴"),
    ("moisturizers", "Moisturizers", "✨"),
    ("serums", "Serums & Treatments", "💧"),
    ("sunscreens", "Sunscreens", "☀️"),
    ("masks", "Face Masks", "🎭"),
    ("lipbody", "Lip & Body Care", "💋"),
]


def generate_sku(now: Optional[datetime] = None) -> str:
    """`SKU-<milliseconds since epoch>` for products submitted without one."""
    now = now or datetime.now(timezone.utc)
    return f"SKU-{int(now.timestamp() * 1000)}"


# -----------------------
# Products
# -----------------------

async def list_products(db: AsyncSession) -> List[Product]:
    result = await db.execute(select(Product))
    return list(result.scalars().all())


async def get_product(db: AsyncSession, product_id: str) -> Optional[Product]:
    return await db.get(Product, product_id)


async def add_product(db: AsyncSession, data: ProductCreate) -> Product:
    now = datetime.now(timezone.utc)
    sku = (data.sku or "").strip() or generate_sku(now)

    product = Product(
        name=data.name.strip(),
        description=(data.description or "").strip(),
        category=data.category,
        sub_category=data.subCategory,
        brand=data.brand,
        sku=sku,
        tags=data.tags,
        price=data.price,
        sale_price=data.salePrice,
        stock_quantity=data.stockQuantity,
        in_stock=data.inStock,
        featured=data.featured,
        image_url=data.imageUrl,
        additional_images=data.additionalImages,
        views=0,
        clicks=0,
        created_at=now,
        updated_at=now,
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    log.info(f"Product added: {product.id} ({product.name}, sku={product.sku})")
    return product


async def update_product(db: AsyncSession, product: Product, changes: Dict[str, Any]) -> Product:
    """Write only the given API fields; `updatedAt` is always refreshed."""
    for field, value in changes.items():
        column = PRODUCT_FIELD_COLUMNS.get(field)
        if column is None:
            log.warning(f"Ignoring unknown product field in update: {field}")
            continue
        if isinstance(value, str) and field in ("name", "description", "imageUrl"):
            value = value.strip()
        setattr(product, column, value)

    product.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(product)
    log.info(f"Product updated: {product.id} fields={sorted(changes)}")
    return product


async def delete_product(db: AsyncSession, product_id: str) -> bool:
    result = await db.execute(delete(Product).where(Product.id == product_id))
    await db.commit()
    deleted = (result.rowcount or 0) > 0
    if deleted:
        log.info(f"Product deleted: {product_id}")
    return deleted


async def increment_counter(db: AsyncSession, product_id: str, field: str, amount: int = 1) -> bool:
    """
    Atomic `field = field + amount` on one product. Returns False when the
    product does not exist. No dedupe: every call counts.
    """
    column = COUNTER_FIELDS.get(field)
    if column is None:
        raise ValueError(f"Unknown counter field: {field}")

    result = await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values({column: func.coalesce(column, 0) + amount})
    )
    await db.commit()
    return (result.rowcount or 0) > 0


# -----------------------
# Categories
# -----------------------

async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return list(result.scalars().all())


async def category_names(db: AsyncSession) -> Dict[str, str]:
    return {c.id: c.name for c in await list_categories(db)}


async def seed_categories(db: AsyncSession) -> int:
    """Insert the default storefront categories when the collection is empty."""
    existing = await db.execute(select(func.count(Category.id)))
    if existing.scalar_one() > 0:
        return 0
    for slug, name, icon in DEFAULT_CATEGORIES:
        db.add(Category(id=slug, name=name, icon=icon))
    await db.commit()
    log.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories.")
    return len(DEFAULT_CATEGORIES)
