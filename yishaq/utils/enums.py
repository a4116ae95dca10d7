from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


class OrderStatus(str, Enum):
    """Fulfilment stage of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    """Payment state, tracked independently from OrderStatus."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CARD = "card"
    OXXO = "oxxo"
    TRANSFER = "transfer"


class StockChange(str, Enum):
    DECREASE = "DECREASE"
    SET = "SET"


def enum_values(enum_cls) -> list:
    # stored values for sqlalchemy.Enum(values_callable=...)
    return [m.value for m in enum_cls]
