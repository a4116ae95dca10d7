from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from yishaq.db import get_db
from yishaq.models.order import Order
from yishaq.routers.deps import require_admin
from yishaq.schemas import OrderUpdateIn
from yishaq.services.auth import Identity
from yishaq.services.order_lifecycle import parse_status, transition
from yishaq.utils.serializers import order_to_dict

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"])


@router.get("")
def list_orders(
    status: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    q = select(Order).options(selectinload(Order.items)).order_by(Order.created_at.desc())
    if status and status != "all":
        q = q.where(Order.status == parse_status(status))
    rows = db.execute(q.limit(limit).offset(offset)).scalars().all()
    return {"success": True, "orders": [order_to_dict(o) for o in rows]}


@router.put("")
def update_order(
    payload: OrderUpdateIn,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"order_id"})
    order = transition(db, payload.order_id, changes, actor_id=admin.user_id)
    return {
        "success": True,
        "message": "Pedido actualizado correctamente",
        "order": order_to_dict(order),
    }
