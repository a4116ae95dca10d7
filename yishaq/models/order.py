import uuid
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yishaq.db import Base
from yishaq.utils.enums import OrderStatus, PaymentStatus, enum_values


def _uuid() -> str:
    return str(uuid.uuid4())


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    order_number: Mapped[str] = mapped_column(String(40), nullable=False)
    # null means guest checkout
    user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, native_enum=False, length=24, values_callable=enum_values, validate_strings=True),
        default=OrderStatus.PENDING,
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, native_enum=False, length=24, values_callable=enum_values, validate_strings=True),
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(24), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    # totals are always computed server side
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    # shipping address snapshot, independent of later profile edits
    shipping_first_name: Mapped[str] = mapped_column(String(120))
    shipping_last_name: Mapped[str] = mapped_column(String(120), default="")
    shipping_email: Mapped[str] = mapped_column(String(255))
    shipping_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    shipping_address: Mapped[str] = mapped_column(String(500))
    shipping_city: Mapped[str] = mapped_column(String(120))
    shipping_postal_code: Mapped[str] = mapped_column(String(20))
    shipping_country: Mapped[str] = mapped_column(String(120))

    customer_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tracking_number: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    tracking_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    shipped_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.position"
    )

    __table_args__ = (
        # the real uniqueness backstop for generated order numbers
        UniqueConstraint("order_number", name="uq_orders_order_number"),
    )


class OrderItem(Base):
    """One purchased line.

    ``product_id`` is only a weak reference for admin lookups and becomes NULL
    when the product is deleted. The ``product_*``/``unit_price`` columns are
    the owned snapshot taken at purchase time and are never updated.
    """

    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    # weak reference
    product_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )

    # snapshot
    product_name: Mapped[str] = mapped_column(String(255))
    product_image: Mapped[str] = mapped_column(String(500), default="")
    product_sku: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    size: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    order: Mapped["Order"] = relationship("Order", back_populates="items")
