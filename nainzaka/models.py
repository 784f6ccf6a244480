# models.py
"""
Database models for Nainzaka Aesthetics.

Products and categories are stored as flat documents: no foreign keys, no
cross-field constraints. A product's `category` is the free-text name picked
in the admin form and is not tied to a row in `categories`.
"""

import uuid

from sqlalchemy import (
    Column, String, Boolean, DateTime, Text, Integer, Float, JSON, func
)

from nainzaka.db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


# -----------------------
# Models
# -----------------------
class Product(Base):
    __tablename__ = "products"
    id = Column(String(32), primary_key=True, default=_new_id)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(120), nullable=True, index=True)
    sub_category = Column(String(120), nullable=True)
    brand = Column(String(120), nullable=True)
    sku = Column(String(64), nullable=True, index=True)
    tags = Column(JSON, nullable=True)  # list[str]

    price = Column(Float, nullable=False, default=0)
    sale_price = Column(Float, nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)

    image_url = Column(String(1024), nullable=True)
    additional_images = Column(JSON, nullable=True)  # list[str]

    # Vanity counters, bumped straight from storefront actions
    views = Column(Integer, nullable=False, default=0)
    clicks = Column(Integer, nullable=False, default=0)

    # Written by the application at mutation time
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class Category(Base):
    __tablename__ = "categories"
    id = Column(String(64), primary_key=True)  # slug, e.g. "serums"
    name = Column(String(120), nullable=False)
    icon = Column(String(16), nullable=True)


class AdminUser(Base):
    __tablename__ = "admin_users"
    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    hashed_password = Column(String(512), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Bumped on sign-out; tokens carrying an older version are rejected
    token_version = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
