"""
API Schemas

Pydantic models for the JSON the storefront and admin panel exchange.
Field names follow the document shape the frontend reads (camelCase), so
`serialize_product` is the single place where ORM rows are mapped onto them.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from nainzaka.models import Product


# ------------------------- Products -------------------------

class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, description="Product name")
    description: Optional[str] = Field("", description="Product description")
    category: Optional[str] = Field(None, description="Category name as chosen in the admin form")
    subCategory: Optional[str] = None
    brand: Optional[str] = None
    sku: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    price: float = Field(..., ge=0, description="Regular price in PKR")
    salePrice: Optional[float] = Field(None, ge=0, description="Discounted price, below `price`")
    stockQuantity: int = Field(0, ge=0)
    inStock: bool = True
    featured: bool = False
    imageUrl: Optional[str] = None
    additionalImages: List[str] = Field(default_factory=list)


STRIPPED_FIELDS = ("name", "description", "imageUrl")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class ProductCreate(ProductBase):
    """Validated payload of the add-product form (images already uploaded)."""

    # Stripped before the length checks, so a blank name is rejected, not stored
    strip_text = field_validator(*STRIPPED_FIELDS, mode="before")(_strip)

    @model_validator(mode="after")
    def _sale_below_price(self):
        if self.salePrice is not None and self.salePrice >= self.price:
            raise ValueError("Sale price must be less than the regular price.")
        return self


class ProductUpdate(BaseModel):
    """Partial update: only the fields sent are written."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    subCategory: Optional[str] = None
    brand: Optional[str] = None
    sku: Optional[str] = None
    tags: Optional[List[str]] = None
    price: Optional[float] = Field(None, ge=0)
    salePrice: Optional[float] = Field(None, ge=0)
    stockQuantity: Optional[int] = Field(None, ge=0)
    inStock: Optional[bool] = None
    featured: Optional[bool] = None
    imageUrl: Optional[str] = None
    additionalImages: Optional[List[str]] = None

    strip_text = field_validator(*STRIPPED_FIELDS, mode="before")(_strip)


class ProductOut(ProductBase):
    id: str
    views: int = 0
    clicks: int = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ProductDetailOut(BaseModel):
    product: ProductOut
    images: List[str]
    effectivePrice: float
    discountPercent: Optional[int] = None
    recommended: List[ProductOut]


class HomeOut(BaseModel):
    featured: List[ProductOut]
    recent: List[ProductOut]


class CategoryOut(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class OrderLinkOut(BaseModel):
    productId: str
    message: str
    url: str


# ------------------------- Admin -------------------------

class DashboardStats(BaseModel):
    totalProducts: int
    totalViews: int
    totalClicks: int
    averageViews: int


class ChartDataset(BaseModel):
    label: str
    data: List[int]


class ChartData(BaseModel):
    title: str
    labels: List[str]
    datasets: List[ChartDataset]


class DashboardOut(BaseModel):
    stats: DashboardStats
    products: List[ProductOut]
    chart: ChartData


class DescriptionRequest(BaseModel):
    name: str = Field(..., min_length=1)
    category: Optional[str] = ""
    price: Optional[float] = None
    salePrice: Optional[float] = None
    inStock: bool = True
    featured: bool = False


class DescriptionOut(BaseModel):
    description: str


class AdminPublic(BaseModel):
    id: str
    email: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
    admin: AdminPublic


# ------------------------- Chat -------------------------

class ChatIn(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class ChatOut(BaseModel):
    reply: str
    source: str  # "contact" | "social" | "hours" | "llm" | "fallback"


# ------------------------- Helpers -------------------------

def serialize_product(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description or "",
        category=product.category,
        subCategory=product.sub_category,
        brand=product.brand,
        sku=product.sku,
        tags=list(product.tags or []),
        price=float(product.price or 0),
        salePrice=product.sale_price,
        stockQuantity=product.stock_quantity or 0,
        inStock=bool(product.in_stock),
        featured=bool(product.featured),
        imageUrl=product.image_url,
        additionalImages=list(product.additional_images or []),
        views=product.views or 0,
        clicks=product.clicks or 0,
        createdAt=product.created_at,
        updatedAt=product.updated_at,
    )


# Maps API field names onto ORM column attributes for partial updates.
PRODUCT_FIELD_COLUMNS: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "category": "category",
    "subCategory": "sub_category",
    "brand": "brand",
    "sku": "sku",
    "tags": "tags",
    "price": "price",
    "salePrice": "sale_price",
    "stockQuantity": "stock_quantity",
    "inStock": "in_stock",
    "featured": "featured",
    "imageUrl": "image_url",
    "additionalImages": "additional_images",
}
