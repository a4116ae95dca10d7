import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yishaq.db import get_db
from yishaq.errors import ShopError, ValidationError
from yishaq.models.catalog import Product
from yishaq.routers.deps import require_admin
from yishaq.schemas import ProductIn, ProductUpdateIn
from yishaq.services import inventory
from yishaq.services.auth import Identity
from yishaq.utils.serializers import product_to_dict

logger = logging.getLogger("yishaq.admin.products")

router = APIRouter(prefix="/admin/products", tags=["admin-products"])

# a null for these is ignored rather than written
NOT_NULL_FIELDS = ("name", "price", "description", "image_url", "featured", "is_active", "low_stock_threshold")


class ProductNotFoundError(ShopError):
    status_code = 404
    default_message = "Producto no encontrado"


def _is_unique_violation(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed", postgres: "duplicate key value violates unique constraint"
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate" in text


def _commit(db: Session, flush_only: bool = False) -> None:
    try:
        if flush_only:
            db.flush()
        else:
            db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            raise ValidationError("Ya existe un producto con ese slug o SKU")
        logger.warning("product rejected by the store", extra={"error": str(e.orig)})
        raise ValidationError("Datos de producto inválidos")


# list, inactive included
@router.get("")
def products_index(db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    rows = db.execute(select(Product).order_by(Product.created_at.desc())).scalars().all()
    return {"success": True, "products": [product_to_dict(p, admin=True) for p in rows]}


@router.post("", status_code=201)
def product_create(payload: ProductIn, db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    data = payload.model_dump()
    stock = data.pop("stock")
    product = Product(**data, stock=0)
    db.add(product)
    _commit(db, flush_only=True)
    inventory.set_stock(db, product, stock, note="alta de producto", user=admin.user_id)
    _commit(db)
    db.refresh(product)
    logger.info("product created", extra={"product_id": product.id, "actor": admin.user_id})
    return {"success": True, "product": product_to_dict(product, admin=True)}


@router.put("/{product_id}")
def product_update(
    product_id: str,
    payload: ProductUpdateIn,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError()

    data = payload.model_dump(exclude_unset=True)
    stock = data.pop("stock", None)
    for field, value in data.items():
        if value is None and field in NOT_NULL_FIELDS:
            continue
        setattr(product, field, value)

    # stock edits go through the ledger so they are audited
    if stock is not None:
        inventory.set_stock(db, product, stock, note="ajuste manual", user=admin.user_id)

    _commit(db)
    db.refresh(product)
    logger.info("product updated", extra={"product_id": product.id, "actor": admin.user_id})
    return {"success": True, "product": product_to_dict(product, admin=True)}
