from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from yishaq.models.catalog import Product
from yishaq.models.order import Order, OrderItem
from yishaq.models.user import User


def _money(value: Optional[Decimal]) -> float:
    return float(value or 0)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    # naive UTC in the db
    return dt.isoformat() + "Z" if dt else None


def product_to_dict(p: Product, admin: bool = False) -> Dict[str, Any]:
    """Converts a Product into the storefront JSON shape."""
    data = {
        "id": p.id,
        "name": p.name,
        "slug": p.slug,
        "description": p.description,
        "price": _money(p.price),
        "compareAtPrice": float(p.compare_at_price) if p.compare_at_price is not None else None,
        "image": p.image_url,
        "category": p.category.name if getattr(p, "category", None) else "Sin categoría",
        "categoryId": p.category_id,
        "stock": p.stock,
        "featured": bool(p.featured),
    }
    if admin:
        data.update({
            "sku": p.sku,
            "isActive": bool(p.is_active),
            "lowStockThreshold": p.low_stock_threshold,
            "createdAt": _iso(p.created_at),
            "updatedAt": _iso(p.updated_at),
        })
    return data


def order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "productId": item.product_id,
        "productName": item.product_name,
        "productImage": item.product_image,
        "productSku": item.product_sku,
        "size": item.size,
        "quantity": item.quantity,
        "unitPrice": _money(item.unit_price),
        "totalPrice": _money(item.total_price),
    }


def order_to_dict(o: Order, include_items: bool = True) -> Dict[str, Any]:
    data = {
        "id": o.id,
        "orderNumber": o.order_number,
        "userId": o.user_id,
        "status": o.status.value,
        "paymentStatus": o.payment_status.value,
        "paymentMethod": o.payment_method,
        "paymentReference": o.payment_reference,
        "subtotal": _money(o.subtotal),
        "shippingCost": _money(o.shipping_cost),
        "tax": _money(o.tax),
        "discount": _money(o.discount),
        "total": _money(o.total),
        "shippingFirstName": o.shipping_first_name,
        "shippingLastName": o.shipping_last_name,
        "shippingEmail": o.shipping_email,
        "shippingPhone": o.shipping_phone,
        "shippingAddress": o.shipping_address,
        "shippingCity": o.shipping_city,
        "shippingPostalCode": o.shipping_postal_code,
        "shippingCountry": o.shipping_country,
        "trackingNumber": o.tracking_number,
        "trackingUrl": o.tracking_url,
        "customerNotes": o.customer_notes,
        "adminNotes": o.admin_notes,
        "createdAt": _iso(o.created_at),
        "updatedAt": _iso(o.updated_at),
        "paidAt": _iso(o.paid_at),
        "shippedAt": _iso(o.shipped_at),
        "deliveredAt": _iso(o.delivered_at),
    }
    if include_items:
        data["items"] = [order_item_to_dict(i) for i in o.items]
    return data


def order_summary_to_dict(o: Order) -> Dict[str, Any]:
    """Short form used by the dashboard's recent orders."""
    return {
        "id": o.id,
        "orderNumber": o.order_number,
        "status": o.status.value,
        "paymentStatus": o.payment_status.value,
        "total": _money(o.total),
        "createdAt": _iso(o.created_at),
        "shippingFirstName": o.shipping_first_name,
        "shippingLastName": o.shipping_last_name,
    }


def user_to_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "role": u.role,
        "phone": u.phone,
        "address": u.address,
        "city": u.city,
        "postalCode": u.postal_code,
        "country": u.country,
    }
