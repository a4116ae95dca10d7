from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import yishaq.models  # noqa: F401
from yishaq.db import Base, get_db
from yishaq.main import app
from yishaq.models.catalog import Category, Product
from yishaq.models.user import User
from yishaq.routers import auth as auth_router
from yishaq.services.checkout import CartLine, OrderBuilder, ShippingInfo
from yishaq.utils.enums import UserRole
from yishaq.utils.security import hash_password

PASSWORD = "secreto123"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    auth_router.login_attempts.clear()
    # no "with" block: startup would create the on-disk database
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    auth_router.login_attempts.clear()


@pytest.fixture
def make_product(db_session):
    counter = {"n": 0}

    def _make(name="Playera Yishaq", price="280.00", stock=5, is_active=True, **kw):
        counter["n"] += 1
        p = Product(
            name=name,
            slug=kw.pop("slug", "producto-{0}".format(counter["n"])),
            sku=kw.pop("sku", "SKU-{0:03d}".format(counter["n"])),
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
            image_url=kw.pop("image_url", "/img/{0}.jpg".format(counter["n"])),
            **kw,
        )
        db_session.add(p)
        db_session.commit()
        db_session.refresh(p)
        return p

    return _make


@pytest.fixture
def make_category(db_session):
    def _make(name="Playeras", slug="playeras"):
        c = Category(name=name, slug=slug)
        db_session.add(c)
        db_session.commit()
        db_session.refresh(c)
        return c

    return _make


@pytest.fixture
def make_user(db_session):
    def _make(email="cliente@example.com", role=UserRole.CLIENT, is_active=True):
        u = User(
            email=email,
            password_hash=hash_password(PASSWORD),
            first_name="Ana",
            last_name="López",
            role=role.value,
            is_active=is_active,
        )
        db_session.add(u)
        db_session.commit()
        db_session.refresh(u)
        return u

    return _make


@pytest.fixture
def shipping():
    return ShippingInfo(
        first_name="Ana",
        last_name="López",
        email="Ana@Example.com",
        phone="5512345678",
        address="Av. Reforma 100",
        city="CDMX",
        postal_code="06600",
    )


@pytest.fixture
def place_order(db_session, shipping):
    def _place(product, quantity=1, user_id=None, method="oxxo"):
        return OrderBuilder(db_session).build_order(
            [CartLine(product_id=product.id, quantity=quantity, size="M")],
            shipping,
            method,
            user_id=user_id,
        )

    return _place


@pytest.fixture
def login_as(client):
    def _login(email):
        r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        return r

    return _login


@pytest.fixture
def admin_client(client, make_user, login_as):
    make_user(email="admin@example.com", role=UserRole.ADMIN)
    login_as("admin@example.com")
    return client


@pytest.fixture
def user(make_user):
    return make_user(email="cliente@example.com")


@pytest.fixture
def user_client(client, user, login_as):
    login_as(user.email)
    return client
