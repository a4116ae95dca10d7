"""HTTP tests for POST /checkout."""
from types import SimpleNamespace

from sqlalchemy import func, select

from yishaq.models.order import Order
from yishaq.services import checkout as checkout_service

SHIPPING = {
    "firstName": "Ana",
    "lastName": "López",
    "email": "ana@example.com",
    "phone": "5512345678",
    "address": "Av. Reforma 100",
    "city": "CDMX",
    "postalCode": "06600",
    "country": "México",
}


def _payload(product, quantity=2, price=999, method="oxxo"):
    return {
        "items": [{
            "productId": product.id,
            "name": product.name,
            "price": price,
            "quantity": quantity,
            "size": "M",
            "image": "/img/otra.jpg",
        }],
        "shippingInfo": SHIPPING,
        "paymentMethod": method,
    }


def test_guest_checkout(client, db_session, make_product):
    p = make_product(price="280.00", stock=5)

    r = client.post("/checkout", json=_payload(p))

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["order"]["total"] == 659.0
    assert body["order"]["status"] == "pending"
    assert body["order"]["paymentMethod"] == "oxxo"
    assert body["order"]["orderNumber"] in body["order"]["message"]
    assert "$659.00 MXN" in body["order"]["message"]
    assert r.headers["X-Request-ID"]

    db_session.expire_all()
    order = db_session.get(Order, body["order"]["id"])
    assert order.user_id is None
    assert order.items[0].unit_price == 280
    assert order.items[0].product_image == p.image_url
    assert db_session.get(type(p), p.id).stock == 3


def test_signed_in_checkout_links_user(user_client, user, db_session, make_product):
    p = make_product()

    r = user_client.post("/checkout", json=_payload(p, quantity=1, method="card"))

    assert r.status_code == 201
    db_session.expire_all()
    assert db_session.get(Order, r.json()["order"]["id"]).user_id == user.id


def test_insufficient_stock(client, db_session, make_product):
    p = make_product(name="Gorra", stock=1)

    r = client.post("/checkout", json=_payload(p, quantity=2))

    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Stock insuficiente para Gorra. Disponible: 1"}
    db_session.expire_all()
    assert db_session.execute(select(func.count(Order.id))).scalar_one() == 0
    assert db_session.get(type(p), p.id).stock == 1


def test_empty_cart(client):
    r = client.post("/checkout", json={"items": [], "shippingInfo": SHIPPING, "paymentMethod": "card"})
    assert r.status_code == 400
    assert r.json()["error"] == "El carrito está vacío"


def test_incomplete_shipping(client, make_product):
    payload = _payload(make_product())
    payload["shippingInfo"] = {"firstName": "Ana", "email": "ana@example.com"}

    r = client.post("/checkout", json=payload)
    assert r.status_code == 400
    assert r.json()["error"] == "Información de envío incompleta"


def test_invalid_payment_method(client, make_product):
    r = client.post("/checkout", json=_payload(make_product(), method="bitcoin"))
    assert r.status_code == 400
    assert r.json()["error"] == "Método de pago inválido"


def test_unknown_and_inactive_products(client, make_product):
    gone = SimpleNamespace(id="no-existe", name="Pants")
    r = client.post("/checkout", json=_payload(gone))
    assert r.status_code == 400
    assert r.json()["error"] == "Producto no encontrado: Pants"

    inactive = make_product(name="Chamarra", is_active=False)
    r = client.post("/checkout", json=_payload(inactive))
    assert r.status_code == 400
    assert r.json()["error"] == "Producto no disponible: Chamarra"


def test_malformed_body(client):
    r = client.post("/checkout", json={"items": [{"productId": "x", "quantity": "muchos"}]})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_order_number_collision_twice_is_500(client, db_session, make_product, monkeypatch):
    p = make_product(stock=5)
    monkeypatch.setattr(checkout_service, "make_order_number", lambda: "YSQ-2026-FIJO")

    assert client.post("/checkout", json=_payload(p, quantity=1)).status_code == 201
    r = client.post("/checkout", json=_payload(p, quantity=1))

    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Error al procesar la orden"}
    db_session.expire_all()
    assert db_session.get(type(p), p.id).stock == 4


def test_unexpected_error_does_not_leak(client, make_product, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("connection string postgres://secret")

    monkeypatch.setattr(checkout_service.OrderBuilder, "build_order", boom)

    r = client.post("/checkout", json=_payload(make_product()))
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Error del servidor"}
    assert "secret" not in r.text


def test_unexpected_error_keeps_request_id(client, make_product, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(checkout_service.OrderBuilder, "build_order", boom)

    r = client.post("/checkout", json=_payload(make_product()), headers={"X-Request-ID": "req-123"})
    assert r.status_code == 500
    assert r.headers["X-Request-ID"] == "req-123"


def test_client_cached_fields_are_not_validated(client, make_product):
    payload = _payload(make_product(price="280.00"), quantity=1)
    payload["items"][0]["price"] = "gratis"
    payload["items"][0]["image"] = {"url": "/img/x.jpg"}

    r = client.post("/checkout", json=payload)
    assert r.status_code == 201
    assert r.json()["order"]["total"] == 379.0


def test_payment_reference(client, db_session, make_product):
    p = make_product(stock=5)

    oxxo = client.post("/checkout", json=_payload(p, quantity=1, method="oxxo")).json()["order"]
    card = client.post("/checkout", json=_payload(p, quantity=1, method="card")).json()["order"]

    db_session.expire_all()
    assert db_session.get(Order, oxxo["id"]).payment_reference == oxxo["orderNumber"]
    assert db_session.get(Order, card["id"]).payment_reference is None
