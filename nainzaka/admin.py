# admin.py
"""
Admin panel API.

Handles:
- Dashboard statistics and the views/clicks chart series.
- Product creation from the multipart add-product form, with image
  pre-validation and sequential uploads to the image host.
- Single-product read, partial update and delete.
- LLM-written product descriptions.

Every route depends on `get_current_admin`, so no write reaches the store
without a valid, unrevoked admin token.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from nainzaka import analytics, catalog, store
from nainzaka.auth import get_current_admin
from nainzaka.db import get_db
from nainzaka.llm import LLMClient, LLMError, get_llm_client
from nainzaka.models import AdminUser
from nainzaka.products import require_sort_key
from nainzaka.schemas import (
    DashboardOut, DescriptionOut, DescriptionRequest, ProductCreate,
    ProductOut, ProductUpdate, serialize_product,
)
from nainzaka.settings import settings
from nainzaka.uploads import (
    ImageHost, ImageUploadError, ImageValidationError, get_image_host,
    read_upload, upload_images, validate_images,
)

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin)],
)

DASHBOARD_CHART_LIMIT = 10


# ===================================================================
# HELPERS
# ===================================================================

def _validation_message(e: ValidationError) -> str:
    """First human-readable message out of a pydantic error."""
    errors = e.errors()
    if not errors:
        return "Invalid product data."
    first = errors[0]
    msg = first.get("msg", "Invalid value")
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {msg}" if field else msg


def _parse_float(value: Optional[str], field: str) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{field} must be a number.")


def _parse_int(value: Optional[str], field: str, default: int = 0) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{field} must be a whole number.")


def _parse_tags(value: Optional[str]) -> List[str]:
    return [t.strip() for t in (value or "").split(",") if t.strip()]


async def _get_or_404(db: AsyncSession, product_id: str):
    product = await store.get_product(db, product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")
    return product


def description_prompt(req: DescriptionRequest) -> str:
    sale = f"₨{catalog.plain_number(req.salePrice)}" if req.salePrice else "₨N/A"
    price = catalog.plain_number(req.price) if req.price is not None else ""
    return (
        "Rules to follow:\n"
        "- no introducing lines wrapping\n"
        "- always be attractive toward products\n"
        "\n"
        "Generate a product description for:\n"
        f"Name: {req.name}\n"
        f"Category: {req.category or ''}\n"
        f"Price: ₨{price}\n"
        f"Sale Price: {sale}\n"
        f"Stock Status: {'In Stock' if req.inStock else 'Out of Stock'}\n"
        f"Featured: {'Yes' if req.featured else 'No'}"
    )


# ===================================================================
# DASHBOARD
# ===================================================================

@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(
    search: str = "",
    sort: str = "views-high",
    limit: int = DASHBOARD_CHART_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    """Totals over the whole catalog; the product table and chart follow search and sort."""
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be at least 1.")
    require_sort_key(sort)

    products = [serialize_product(p) for p in await store.list_products(db)]
    visible = catalog.filter_products(products, search=search, sort_by=sort)
    return DashboardOut(
        stats=analytics.dashboard_stats(products),
        products=visible,
        chart=analytics.engagement_chart(visible, limit=limit),
    )


# ===================================================================
# PRODUCTS
# ===================================================================

@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    name: str = Form(""),
    price: str = Form(""),
    category: str = Form(""),
    salePrice: Optional[str] = Form(None),
    description: str = Form(""),
    subCategory: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    sku: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    stockQuantity: Optional[str] = Form(None),
    inStock: bool = Form(True),
    featured: bool = Form(False),
    images: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db),
    host: ImageHost = Depends(get_image_host),
):
    """
    Add-product form. Checked in order: required fields, numbers, sale price,
    then the selected images. Nothing is uploaded until all of those pass,
    and nothing is written unless every upload succeeds.
    """
    if not name.strip() or not price.strip() or not category.strip():
        raise HTTPException(status_code=400, detail="Please fill in all required fields")

    try:
        data = ProductCreate(
            name=name.strip(),
            description=description,
            category=category.strip(),
            subCategory=subCategory or None,
            brand=brand or None,
            sku=sku,
            tags=_parse_tags(tags),
            price=_parse_float(price, "Price"),
            salePrice=_parse_float(salePrice, "Sale price"),
            stockQuantity=_parse_int(stockQuantity, "Stock quantity"),
            inStock=inStock,
            featured=featured,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    files = [await read_upload(f) for f in (images or []) if f.filename]
    try:
        validate_images(files)
    except ImageValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        urls = await upload_images(host, files)
    except ImageUploadError as e:
        log.error(f"Error adding product '{data.name}': {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    data = data.model_copy(update={"imageUrl": urls[0], "additionalImages": urls[1:]})
    product = await store.add_product(db, data)
    return serialize_product(product)


@router.post("/products/generate-description", response_model=DescriptionOut)
async def generate_description(
    req: DescriptionRequest,
    llm: LLMClient = Depends(get_llm_client),
):
    try:
        text = await llm.complete(description_prompt(req), model=settings.GROQ_DESCRIPTION_MODEL)
    except LLMError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Description generation failed: {e}",
        )
    return DescriptionOut(description=text)


@router.get("/products/{product_id}", response_model=ProductOut)
async def read_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return serialize_product(await _get_or_404(db, product_id))


@router.patch("/products/{product_id}", response_model=ProductOut)
async def edit_product(
    product_id: str,
    changes: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Writes only the fields sent; the merged result must still be a valid product."""
    product = await _get_or_404(db, product_id)
    fields = changes.model_dump(exclude_unset=True)
    if not fields:
        return serialize_product(product)

    merged = serialize_product(product).model_dump(
        exclude={"id", "views", "clicks", "createdAt", "updatedAt"}
    )
    merged.update(fields)
    try:
        ProductCreate(**merged)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_validation_message(e),
        )

    product = await store.update_product(db, product, fields)
    log.info(f"Admin {admin.email} edited product {product_id}.")
    return serialize_product(product)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    if not await store.delete_product(db, product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")
    log.info(f"Admin {admin.email} deleted product {product_id}.")
