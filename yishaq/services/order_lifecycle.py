"""Order lifecycle: status and payment status transitions.

``status`` and ``payment_status`` move independently. Entering ``shipped``,
``delivered`` or payment ``paid`` stamps the matching timestamp once; moving
away later never clears it, so the timestamps double as an audit trail.

Only values outside the known sets are rejected. An update is validated in
full before anything is written, so a rejected update leaves the order as it
was.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yishaq.errors import InvalidStatus, OrderNotFound, PersistenceFailure, ValidationError
from yishaq.models.order import Order
from yishaq.models.order_status_log import OrderStatusLog
from yishaq.utils.enums import OrderStatus, PaymentStatus

logger = logging.getLogger("yishaq.lifecycle")

STATUS_TIMESTAMPS = {
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
}

PAYMENT_TIMESTAMPS = {
    PaymentStatus.PAID: "paid_at",
}

# free-form fields an admin may set alongside a transition
EDITABLE_FIELDS = ("tracking_number", "tracking_url", "admin_notes")


def parse_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatus("Estado de pedido inválido: {0}".format(value))


def parse_payment_status(value: Any) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidStatus("Estado de pago inválido: {0}".format(value))


def _stamp_once(order: Order, attr: Optional[str], now: datetime) -> None:
    if attr and getattr(order, attr) is None:
        setattr(order, attr, now)


def transition(
    db: Session,
    order_id: Optional[str],
    changes: Dict[str, Any],
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Apply an admin update to an order.

    Args:
        db: request-scoped session, committed on success.
        order_id: id of the order to update.
        changes: any of ``status``, ``payment_status``, ``tracking_number``,
            ``tracking_url``, ``admin_notes``. Empty ``status`` or
            ``payment_status`` values are ignored; the free-form fields are
            written as given, ``None`` included.
        actor_id: id of the admin performing the change, kept in the log.
        now: timestamp to stamp, defaults to ``datetime.utcnow()``.

    Returns:
        The updated order.

    Raises:
        ValidationError: ``order_id`` missing.
        InvalidStatus: unknown status or payment status.
        OrderNotFound: no order with that id.
        PersistenceFailure: the store rejected the update.
    """
    if not order_id:
        raise ValidationError("ID de pedido requerido")

    unknown = set(changes) - {"status", "payment_status"} - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError("Campos no permitidos: {0}".format(", ".join(sorted(unknown))))

    status = parse_status(changes["status"]) if changes.get("status") else None
    payment_status = parse_payment_status(changes["payment_status"]) if changes.get("payment_status") else None

    order: Optional[Order] = db.get(Order, order_id)
    if order is None:
        raise OrderNotFound()

    now = now or datetime.utcnow()
    logs: List[OrderStatusLog] = []

    if status is not None:
        if status != order.status:
            logs.append(OrderStatusLog(
                order_id=order.id, field="status",
                old_value=order.status.value, new_value=status.value, user=actor_id,
            ))
        order.status = status
        _stamp_once(order, STATUS_TIMESTAMPS.get(status), now)

    if payment_status is not None:
        if payment_status != order.payment_status:
            logs.append(OrderStatusLog(
                order_id=order.id, field="payment_status",
                old_value=order.payment_status.value, new_value=payment_status.value, user=actor_id,
            ))
        order.payment_status = payment_status
        _stamp_once(order, PAYMENT_TIMESTAMPS.get(payment_status), now)

    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(order, field, changes[field])

    order.updated_at = now
    db.add_all(logs)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("order update failed", extra={"order_id": order_id})
        raise PersistenceFailure("Error del servidor") from e

    db.refresh(order)
    logger.info(
        "order updated",
        extra={
            "order_id": order.id,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "actor": actor_id,
        },
    )
    return order
