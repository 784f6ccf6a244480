# orders.py
"""
Order handoff.

There is no cart or checkout: ordering a product means opening a WhatsApp chat
with a prefilled message. The link is built here, and every request counts as
one click on the product.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from nainzaka import store
from nainzaka.catalog import effective_price, format_price
from nainzaka.db import get_db
from nainzaka.schemas import OrderLinkOut, ProductOut, serialize_product
from nainzaka.settings import settings

log = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Orders"])

WHATSAPP_URL = "https://wa.me/{number}?text={text}"

# Same set of characters a browser's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def order_message(product: ProductOut) -> str:
    price = format_price(effective_price(product))
    return f"Hi Nainzaka Aesthetics! I'm interested in {product.name} (₨{price})"


def build_whatsapp_link(number: str, message: str) -> str:
    return WHATSAPP_URL.format(number=number, text=quote(message, safe=_URI_COMPONENT_SAFE))


async def record_click(db: AsyncSession, product_id: str) -> None:
    """Best-effort: a failed increment is logged and the order still goes through."""
    try:
        if not await store.increment_counter(db, product_id, "clicks"):
            log.warning(f"Click not recorded, product {product_id} vanished.")
    except Exception as e:
        await db.rollback()
        log.error(f"Error updating product clicks for {product_id}: {e}")


@router.post("/{product_id}/order", response_model=OrderLinkOut)
async def order_product(product_id: str, db: AsyncSession = Depends(get_db)):
    """Counts the click and returns the WhatsApp link to open."""
    row = await store.get_product(db, product_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")

    product = serialize_product(row)
    await record_click(db, product_id)

    message = order_message(product)
    return OrderLinkOut(
        productId=product.id,
        message=message,
        url=build_whatsapp_link(settings.WHATSAPP_NUMBER, message),
    )
