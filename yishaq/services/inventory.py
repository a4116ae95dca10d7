"""Inventory ledger: per-product stock counters.

The ledger does not own a transaction. Callers run these helpers inside
their unit of work and commit or roll back as a whole.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from yishaq.errors import InsufficientStock, ValidationError
from yishaq.models.catalog import Product
from yishaq.models.stock_audit import StockAudit
from yishaq.utils.enums import StockChange

logger = logging.getLogger("yishaq.inventory")


def get_product(db: Session, product_id: str, for_update: bool = False) -> Optional[Product]:
    q = select(Product).where(Product.id == product_id)
    if for_update:
        # row lock on backends that have one (ignored by sqlite)
        q = q.with_for_update()
    return db.execute(q).scalar_one_or_none()


def _current_stock(db: Session, product_id: str) -> int:
    return db.execute(select(Product.stock).where(Product.id == product_id)).scalar_one_or_none() or 0


def decrement_stock(
    db: Session,
    product: Product,
    amount: int,
    note: Optional[str] = None,
    user: Optional[str] = None,
) -> int:
    """Take ``amount`` units off ``product`` and return the new stock.

    The update only matches while ``stock >= amount``, so two concurrent
    checkouts can never both take the last unit. The resulting stock is read
    back and checked again before the audit row is written.

    Raises:
        InsufficientStock: if the counter cannot cover ``amount``.
    """
    if amount <= 0:
        raise ValidationError("Cantidad inválida")

    res = db.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock >= amount)
        .values(stock=Product.stock - amount, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise InsufficientStock(product.id, product.name, _current_stock(db, product.id))

    new_stock = _current_stock(db, product.id)
    if new_stock < 0:
        raise InsufficientStock(product.id, product.name, new_stock + amount)

    db.refresh(product, attribute_names=["stock", "updated_at"])
    db.add(StockAudit(
        product_id=product.id,
        change_type=StockChange.DECREASE.value,
        delta_units=amount,
        old_stock=new_stock + amount,
        new_stock=new_stock,
        note=note,
        user=user,
    ))
    logger.info(
        "stock decremented",
        extra={"product_id": product.id, "amount": amount, "new_stock": new_stock, "note": note},
    )
    return new_stock


def set_stock(
    db: Session,
    product: Product,
    new_stock: int,
    note: Optional[str] = None,
    user: Optional[str] = None,
) -> int:
    """Admin correction of the counter (SET)."""
    new_stock = int(new_stock)
    if new_stock < 0:
        raise ValidationError("El stock no puede ser negativo")

    old_stock = int(product.stock or 0)
    if old_stock == new_stock:
        return new_stock

    product.stock = new_stock
    db.add(StockAudit(
        product_id=product.id,
        change_type=StockChange.SET.value,
        delta_units=new_stock,
        old_stock=old_stock,
        new_stock=new_stock,
        note=note,
        user=user,
    ))
    logger.info("stock set", extra={"product_id": product.id, "old_stock": old_stock, "new_stock": new_stock})
    return new_stock
