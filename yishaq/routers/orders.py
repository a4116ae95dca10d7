from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from yishaq.db import get_db
from yishaq.errors import Forbidden, OrderNotFound
from yishaq.models.order import Order
from yishaq.routers.deps import require_user
from yishaq.services.auth import Identity
from yishaq.utils.serializers import order_to_dict

router = APIRouter(tags=["orders"])


@router.get("/users/orders")
def my_orders(db: Session = Depends(get_db), identity: Identity = Depends(require_user)):
    rows = db.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.user_id == identity.user_id)
        .order_by(Order.created_at.desc())
    ).scalars().all()
    orders = [order_to_dict(o) for o in rows]
    return {"success": True, "orders": orders, "count": len(orders)}


@router.get("/orders/{order_id}")
def order_detail(order_id: str, db: Session = Depends(get_db), identity: Identity = Depends(require_user)):
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFound("Orden no encontrada")
    # owners see their own orders, admins see all
    if order.user_id != identity.user_id and not identity.is_admin:
        raise Forbidden()
    return {"success": True, "order": order_to_dict(order)}
