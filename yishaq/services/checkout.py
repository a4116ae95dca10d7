"""Order aggregate builder.

Turns a submitted cart into a persisted Order with its OrderItems:

1. every line is checked against the live product (exists, active, enough
   stock) and re-priced with the product's current price; whatever price the
   client sent is never read;
2. subtotal, shipping, tax, discount and total are computed here;
3. the order, its item snapshots and the stock decrements are written in a
   single transaction. Any failure rolls the whole unit back.

A clash on ``orders.order_number`` rolls back and retries the unit once
with a fresh number.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from yishaq import config
from yishaq.errors import (
    InsufficientStock,
    OrderNumberCollision,
    PersistenceFailure,
    ProductInactive,
    ProductNotFound,
    ShopError,
    ValidationError,
)
from yishaq.models.catalog import Product
from yishaq.models.order import Order, OrderItem
from yishaq.services import inventory
from yishaq.utils.enums import OrderStatus, PaymentMethod, PaymentStatus
from yishaq.utils.order_numbers import make_order_number

logger = logging.getLogger("yishaq.checkout")

CENTS = Decimal("0.01")
MAX_ATTEMPTS = 2

REQUIRED_SHIPPING_FIELDS = ("first_name", "email", "address", "city", "postal_code")


@dataclass(frozen=True)
class CartLine:
    """A line as requested by the client. ``name`` is only used in messages."""

    product_id: str
    quantity: int
    size: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ShippingInfo:
    first_name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    product: Product
    unit_price: Decimal

    @property
    def total_price(self) -> Decimal:
        return (self.unit_price * self.line.quantity).quantize(CENTS)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def shipping_cost_for(subtotal: Decimal) -> Decimal:
    if subtotal >= config.FREE_SHIPPING_THRESHOLD:
        return Decimal("0.00")
    return Decimal(config.SHIPPING_FLAT_FEE).quantize(CENTS)


def compute_totals(subtotal: Decimal) -> Totals:
    subtotal = Decimal(subtotal).quantize(CENTS)
    shipping = shipping_cost_for(subtotal)
    tax = Decimal("0.00")  # prices already include taxes
    discount = Decimal("0.00")  # coupons are not redeemed yet
    return Totals(
        subtotal=subtotal,
        shipping_cost=shipping,
        tax=tax,
        discount=discount,
        total=subtotal + shipping + tax - discount,
    )


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _is_order_number_violation(exc: IntegrityError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return "order_number" in text


class OrderBuilder:
    """Builds and persists orders from carts.

    Args:
        db: request-scoped session; the builder commits or rolls it back.
        number_generator: callable returning a fresh order number.
        clock: returns the naive UTC "now" stamped on the order.
    """

    def __init__(
        self,
        db: Session,
        number_generator: Optional[Callable[[], str]] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.number_generator = number_generator or make_order_number
        self.clock = clock

    # ---- validation ----
    def validate_request(
        self,
        lines: Sequence[CartLine],
        shipping: Optional[ShippingInfo],
        payment_method: Optional[str],
    ) -> PaymentMethod:
        if not lines:
            raise ValidationError("El carrito está vacío")

        if shipping is None or any(_blank(getattr(shipping, f)) for f in REQUIRED_SHIPPING_FIELDS):
            raise ValidationError("Información de envío incompleta")

        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError("Método de pago inválido")

        for line in lines:
            if _blank(line.product_id):
                raise ValidationError("Producto inválido en el carrito")
            if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
                raise ValidationError("Cantidad inválida para {0}".format(line.name or line.product_id))
        return method

    def price_lines(self, lines: Sequence[CartLine]) -> List[PricedLine]:
        """Check every line against live inventory and re-price it."""
        products = {}
        demand = {}
        priced: List[PricedLine] = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                product = inventory.get_product(self.db, line.product_id, for_update=True)
                if product is None:
                    logger.warning("product not found", extra={"product_id": line.product_id})
                    raise ProductNotFound(line.product_id, line.name)
                products[line.product_id] = product

            if not product.is_active:
                raise ProductInactive(product.id, product.name)

            # several sizes of one product share a single counter
            demand[product.id] = demand.get(product.id, 0) + line.quantity
            if int(product.stock) < demand[product.id]:
                raise InsufficientStock(product.id, product.name, int(product.stock))

            priced.append(PricedLine(line=line, product=product, unit_price=Decimal(str(product.price)).quantize(CENTS)))
        return priced

    # ---- build ----
    def build_order(
        self,
        lines: Sequence[CartLine],
        shipping: Optional[ShippingInfo],
        payment_method: Optional[str],
        user_id: Optional[str] = None,
        customer_notes: Optional[str] = None,
    ) -> Order:
        """Validate, price and persist an order.

        Raises:
            ValidationError, ProductNotFound, ProductInactive, InsufficientStock:
                the cart was rejected; nothing was written.
            OrderNumberCollision: the order number clashed twice in a row.
            PersistenceFailure: the store failed; nothing was written.
        """
        method = self.validate_request(lines, shipping, payment_method)

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return self._build_once(lines, shipping, method, user_id, customer_notes)
            except ShopError:
                self.db.rollback()
                raise
            except IntegrityError as e:
                self.db.rollback()
                if not _is_order_number_violation(e):
                    logger.exception("checkout integrity error")
                    raise PersistenceFailure() from e
                if attempt == MAX_ATTEMPTS:
                    logger.error("order number collision persisted after retry")
                    raise OrderNumberCollision() from e
                logger.warning("order number collision, retrying", extra={"attempt": attempt})
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("checkout persistence failure")
                raise PersistenceFailure() from e
        raise OrderNumberCollision()

    def _build_once(
        self,
        lines: Sequence[CartLine],
        shipping: ShippingInfo,
        method: PaymentMethod,
        user_id: Optional[str],
        customer_notes: Optional[str],
    ) -> Order:
        priced = self.price_lines(lines)
        totals = compute_totals(sum((p.total_price for p in priced), Decimal("0")))
        now = self.clock()
        number = self.number_generator()

        order = Order(
            order_number=number,
            user_id=user_id,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=method.value,
            # OXXO and transfer payments quote the order number
            payment_reference=None if method == PaymentMethod.CARD else number,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.total,
            shipping_first_name=_clean(shipping.first_name),
            shipping_last_name=_clean(shipping.last_name) or "",
            shipping_email=_clean(shipping.email).lower(),
            shipping_phone=_clean(shipping.phone),
            shipping_address=_clean(shipping.address),
            shipping_city=_clean(shipping.city),
            shipping_postal_code=_clean(shipping.postal_code),
            shipping_country=_clean(shipping.country) or config.DEFAULT_COUNTRY,
            customer_notes=_clean(customer_notes),
            created_at=now,
            updated_at=now,
        )
        for pos, p in enumerate(priced):
            order.items.append(OrderItem(
                position=pos,
                product_id=p.product.id,
                product_name=p.product.name,
                product_image=p.product.image_url or "",
                product_sku=p.product.sku,
                unit_price=p.unit_price,
                size=_clean(p.line.size),
                quantity=p.line.quantity,
                total_price=p.total_price,
            ))

        self.db.add(order)
        self.db.flush()  # unique order_number is enforced here

        for p in priced:
            inventory.decrement_stock(self.db, p.product, p.line.quantity, note=order.order_number, user=user_id)

        self.db.commit()
        self.db.refresh(order)
        logger.info(
            "order created",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "total": str(order.total),
                "items": len(priced),
                "guest": user_id is None,
            },
        )
        return order
