from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from yishaq.db import get_db
from yishaq.models.catalog import Category, Product
from yishaq.utils.serializers import product_to_dict

router = APIRouter(tags=["products"])


@router.get("/products")
def list_products(
    category: Optional[str] = Query(None, description="category slug"),
    featured: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    q = (
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.is_active.is_(True))
        .order_by(Product.created_at.desc())
    )
    if category:
        # an unknown slug leaves the list unfiltered
        cat = db.execute(select(Category).where(Category.slug == category)).scalar_one_or_none()
        if cat:
            q = q.where(Product.category_id == cat.id)
    if featured:
        q = q.where(Product.featured.is_(True))

    products = [product_to_dict(p) for p in db.execute(q).scalars().all()]
    return {"success": True, "products": products, "count": len(products)}
