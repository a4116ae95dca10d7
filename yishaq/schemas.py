"""Pydantic request schemas.

Field names follow the storefront's camelCase JSON through aliases. Most
fields are optional here on purpose: missing business fields are reported by
the services with their own messages, pydantic only rejects wrong types.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CheckoutItemIn(CamelModel):
    """A cart line. ``price``/``name``/``image`` are the client's cached copy
    and are never used for pricing."""

    product_id: str = Field(alias="productId")
    quantity: int = 1
    size: Optional[str] = None
    name: Optional[str] = None
    price: Any = None
    image: Any = None


class ShippingInfoIn(CamelModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    country: Optional[str] = None


class CheckoutRequest(CamelModel):
    items: List[CheckoutItemIn] = Field(default_factory=list)
    shipping_info: Optional[ShippingInfoIn] = Field(default=None, alias="shippingInfo")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    customer_notes: Optional[str] = Field(default=None, alias="customerNotes", max_length=2000)


class OrderUpdateIn(CamelModel):
    order_id: Optional[str] = Field(default=None, alias="orderId")
    status: Optional[str] = None
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    tracking_number: Optional[str] = Field(default=None, alias="trackingNumber")
    tracking_url: Optional[str] = Field(default=None, alias="trackingUrl")
    admin_notes: Optional[str] = Field(default=None, alias="adminNotes")


class LoginIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


class ProductIn(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    slug: Optional[str] = None
    description: str = ""
    compare_at_price: Optional[Decimal] = Field(default=None, alias="compareAtPrice", ge=0)
    image_url: str = Field(default="", alias="imageUrl")
    sku: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    low_stock_threshold: int = Field(default=5, alias="lowStockThreshold", ge=0)
    featured: bool = False
    is_active: bool = Field(default=True, alias="isActive")


class ProductUpdateIn(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    slug: Optional[str] = None
    description: Optional[str] = None
    compare_at_price: Optional[Decimal] = Field(default=None, alias="compareAtPrice", ge=0)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    sku: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    low_stock_threshold: Optional[int] = Field(default=None, alias="lowStockThreshold", ge=0)
    featured: Optional[bool] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class ProfileUpdateIn(CamelModel):
    # "profile" | "address"; data keeps the storefront's camelCase keys
    type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
