# reset_and_seed: drops every table and loads the demo catalog
import os
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import configure_mappers

import yishaq.models  # noqa: F401
from yishaq.db import Base, SessionLocal, engine
from yishaq.models.catalog import Category, Product
from yishaq.models.user import User
from yishaq.services import inventory
from yishaq.utils.enums import UserRole
from yishaq.utils.security import hash_password

CATEGORIES = [
    ("Playeras", "playeras"),
    ("Sudaderas", "sudaderas"),
    ("Accesorios", "accesorios"),
]

# name, slug, category slug, price, stock, featured
PRODUCTS = [
    ("Playera Yishaq Negra", "playera-yishaq-negra", "playeras", "280.00", 25, True),
    ("Playera Yishaq Blanca", "playera-yishaq-blanca", "playeras", "280.00", 25, False),
    ("Playera Oversize Arena", "playera-oversize-arena", "playeras", "350.00", 12, True),
    ("Sudadera Logo", "sudadera-logo", "sudaderas", "650.00", 10, True),
    ("Sudadera Zip Gris", "sudadera-zip-gris", "sudaderas", "720.00", 4, False),
    ("Gorra Bordada", "gorra-bordada", "accesorios", "250.00", 30, False),
    ("Tote Bag", "tote-bag", "accesorios", "180.00", 0, False),
]


def run_seed():
    # === RESET ===
    Base.metadata.drop_all(bind=engine)
    print("🗑 Tablas eliminadas")

    configure_mappers()
    Base.metadata.create_all(bind=engine)
    print("✅ Tablas creadas")

    db = SessionLocal()
    try:
        categories = {}
        for order, (name, slug) in enumerate(CATEGORIES):
            category = Category(name=name, slug=slug, sort_order=order)
            db.add(category)
            categories[slug] = category
        db.commit()
        print(f"✅ Categorías: {len(categories)}")

        for i, (name, slug, cat_slug, price, stock, featured) in enumerate(PRODUCTS, start=1):
            product = Product(
                name=name,
                slug=slug,
                sku=f"YSQ{i:03d}",
                price=Decimal(price),
                stock=0,
                image_url=f"/images/{slug}.jpg",
                featured=featured,
                category_id=categories[cat_slug].id,
            )
            db.add(product)
            db.flush()
            inventory.set_stock(db, product, stock, note="seed", user="seed")
            db.commit()
            print(f"✅ Producto: {product.name}")

        email = os.getenv("ADMIN_EMAIL", "admin@yishaq.mx").lower()
        password = os.getenv("ADMIN_PASSWORD", "cambiar123")
        exists = db.execute(select(User.id).where(User.email == email)).first()
        if not exists:
            db.add(User(
                email=email,
                password_hash=hash_password(password),
                first_name="Admin",
                role=UserRole.ADMIN.value,
            ))
            db.commit()
            print(f"✅ Admin creado (email='{email}')")
        else:
            print(f"ℹ️ Admin '{email}' ya existe")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
