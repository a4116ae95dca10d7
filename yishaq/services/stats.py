from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from yishaq.models.catalog import Product
from yishaq.models.order import Order
from yishaq.utils.enums import OrderStatus, PaymentStatus

RECENT_ORDERS = 5


def dashboard_stats(db: Session, now: Optional[datetime] = None) -> dict:
    """Numbers for the admin dashboard. Sales only count paid orders."""
    now = now or datetime.utcnow()
    first_of_month = datetime(now.year, now.month, 1)

    paid = Order.payment_status == PaymentStatus.PAID
    total_sales = db.execute(select(func.coalesce(func.sum(Order.total), 0)).where(paid)).scalar_one()
    monthly_sales = db.execute(
        select(func.coalesce(func.sum(Order.total), 0)).where(paid, Order.created_at >= first_of_month)
    ).scalar_one()

    total_orders = db.execute(select(func.count(Order.id))).scalar_one()
    pending_orders = db.execute(
        select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING)
    ).scalar_one()

    active = Product.is_active.is_(True)
    total_products = db.execute(select(func.count(Product.id)).where(active)).scalar_one()
    low_stock = db.execute(
        select(func.count(Product.id)).where(active, Product.stock <= Product.low_stock_threshold)
    ).scalar_one()

    recent = db.execute(
        select(Order).order_by(Order.created_at.desc()).limit(RECENT_ORDERS)
    ).scalars().all()

    return {
        "stats": {
            "totalSales": float(total_sales or 0),
            "totalOrders": int(total_orders or 0),
            "totalProducts": int(total_products or 0),
            "lowStockItems": int(low_stock or 0),
            "pendingOrders": int(pending_orders or 0),
            "monthlySales": float(monthly_sales or 0),
        },
        "recent_orders": recent,
    }
