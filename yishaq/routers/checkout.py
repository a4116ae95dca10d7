from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from yishaq.db import get_db
from yishaq.routers.deps import current_identity
from yishaq.schemas import CheckoutRequest
from yishaq.services.auth import Identity
from yishaq.services.checkout import CartLine, OrderBuilder, ShippingInfo
from yishaq.services.payments import payment_instructions

router = APIRouter(tags=["checkout"])


@router.post("/checkout", status_code=201)
def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(current_identity),
):
    # guests may check out; signed-in users get the order linked to them
    lines = [
        CartLine(product_id=i.product_id, quantity=i.quantity, size=i.size, name=i.name)
        for i in payload.items
    ]
    s = payload.shipping_info
    shipping = None
    if s is not None:
        shipping = ShippingInfo(
            first_name=s.first_name,
            last_name=s.last_name,
            email=s.email,
            phone=s.phone,
            address=s.address,
            city=s.city,
            postal_code=s.postal_code,
            country=s.country,
        )

    order = OrderBuilder(db).build_order(
        lines,
        shipping,
        payload.payment_method,
        user_id=identity.user_id if identity else None,
        customer_notes=payload.customer_notes,
    )
    return {
        "success": True,
        "order": {
            "id": order.id,
            "orderNumber": order.order_number,
            "total": float(order.total),
            "status": order.status.value,
            "paymentMethod": order.payment_method,
            "message": payment_instructions(order.payment_method, order.order_number, order.total),
        },
    }
