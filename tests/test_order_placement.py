"""
Order placement: totals, stock bookkeeping, cart clearing, and all-or-nothing
behavior when validation, stock or the store itself fails.
"""

import threading

import pytest
from sqlalchemy.exc import OperationalError

from common.exceptions import InsufficientStockError, StorefrontError
from modules.cart.models import Cart
from modules.catalog.models import Product
from modules.order.models import Order
from modules.order.schemas import OrderLineRequest
from modules.order.service import order_service


def _place(client, headers, lines, address="12 Main St"):
    return client.post(
        "/api/orders",
        json={"items": [{"productId": pid, "quantity": q} for pid, q in lines], "address": address},
        headers=headers,
    )


def _stock(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).stock


def _order_count(db):
    db.expire_all()
    return db.query(Order).count()


def _fill_cart(client, headers, product_id, quantity=1):
    resp = client.post("/api/cart", json={"productId": product_id, "quantity": quantity}, headers=headers)
    assert resp.status_code == 200


# ==========================================
# Happy path
# ==========================================

def test_place_order_computes_total_and_decrements_stock(client, db, customer, make_product, auth_headers):
    a = make_product("Lamp", price="19.99", stock=5)
    b = make_product("Mug", price="5.25", stock=10)

    resp = _place(client, auth_headers(customer), [(a.id, 2), (b.id, 3)])

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "pending"
    assert body["userId"] == customer.id
    assert body["total"] == pytest.approx(55.73)
    assert body["address"] == "12 Main St"
    assert [(line["productId"], line["quantity"]) for line in body["items"]] == [(a.id, 2), (b.id, 3)]
    assert body["items"][0]["title"] == "Lamp"
    assert body["items"][0]["price"] == pytest.approx(19.99)

    assert _stock(db, a.id) == 3
    assert _stock(db, b.id) == 7


def test_place_order_clears_cart(client, db, customer, make_product, auth_headers):
    headers = auth_headers(customer)
    p = make_product(stock=5)
    _fill_cart(client, headers, p.id, 2)

    resp = _place(client, headers, [(p.id, 2)])
    assert resp.status_code == 201

    db.expire_all()
    assert db.query(Cart).filter(Cart.user_id == customer.id).first() is None
    assert client.get("/api/cart", headers=headers).json()["items"] == []


def test_order_total_survives_later_price_change(client, db, customer, admin, make_product, auth_headers):
    p = make_product(price="40.00", stock=5)
    order_id = _place(client, auth_headers(customer), [(p.id, 2)]).json()["id"]

    resp = client.put(f"/api/products/{p.id}", json={"price": 55.0}, headers=auth_headers(admin))
    assert resp.status_code == 200

    order = client.get(f"/api/orders/{order_id}", headers=auth_headers(customer)).json()
    assert order["total"] == pytest.approx(80.0)
    assert order["items"][0]["price"] == pytest.approx(40.0)
    # the live product is joined for display
    assert order["items"][0]["product"]["price"] == pytest.approx(55.0)


def test_duplicate_lines_are_merged(client, db, customer, make_product, auth_headers):
    p = make_product(price="3.00", stock=5)

    resp = _place(client, auth_headers(customer), [(p.id, 2), (p.id, 3)])

    assert resp.status_code == 201
    items = resp.json()["items"]
    assert len(items) == 1
    assert items[0]["productId"] == p.id
    assert items[0]["quantity"] == 5
    assert resp.json()["total"] == pytest.approx(15.0)
    assert _stock(db, p.id) == 0


def test_order_can_drain_stock_to_zero(client, db, customer, make_product, auth_headers):
    p = make_product(stock=2)
    assert _place(client, auth_headers(customer), [(p.id, 2)]).status_code == 201
    assert _stock(db, p.id) == 0

    resp = _place(client, auth_headers(customer), [(p.id, 1)])
    assert resp.status_code == 400
    assert resp.json() == {"error": f"insufficient stock for {p.title}"}


# ==========================================
# Rejections leave nothing behind
# ==========================================

def test_insufficient_stock_rejects_whole_order(client, db, customer, make_product, auth_headers):
    headers = auth_headers(customer)
    plenty = make_product("Plenty", stock=10)
    scarce = make_product("Scarce", stock=1)
    _fill_cart(client, headers, plenty.id)

    resp = _place(client, headers, [(plenty.id, 2), (scarce.id, 3)])

    assert resp.status_code == 400
    assert resp.json() == {"error": "insufficient stock for Scarce"}
    assert _stock(db, plenty.id) == 10
    assert _stock(db, scarce.id) == 1
    assert _order_count(db) == 0
    assert len(client.get("/api/cart", headers=headers).json()["items"]) == 1


def test_unknown_product_rejects_order(client, db, customer, make_product, auth_headers):
    p = make_product(stock=5)
    missing = "0" * 32

    resp = _place(client, auth_headers(customer), [(p.id, 1), (missing, 1)])

    assert resp.status_code == 400
    assert resp.json() == {"error": f"product not found: {missing}"}
    assert _stock(db, p.id) == 5
    assert _order_count(db) == 0


def test_blank_address_rejected(client, db, customer, make_product, auth_headers):
    p = make_product(stock=5)

    resp = _place(client, auth_headers(customer), [(p.id, 1)], address="   ")

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("address:")
    assert _stock(db, p.id) == 5
    assert _order_count(db) == 0


def test_address_is_trimmed(client, customer, make_product, auth_headers):
    p = make_product(stock=5)
    resp = _place(client, auth_headers(customer), [(p.id, 1)], address="  9 Oak Ave \n")
    assert resp.json()["address"] == "9 Oak Ave"


def test_total_beyond_money_precision_rejected(client, db, customer, make_product, auth_headers):
    p = make_product("Island", price="5000000000.00", stock=10)

    resp = _place(client, auth_headers(customer), [(p.id, 3)])

    assert resp.status_code == 400
    assert resp.json() == {"error": "Order total too large"}
    assert _stock(db, p.id) == 10
    assert _order_count(db) == 0


def test_malformed_product_id_rejected(client, customer, auth_headers):
    resp = _place(client, auth_headers(customer), [("not-an-id", 1)])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid product ID"}


@pytest.mark.parametrize("payload", [
    {"items": [], "address": "x"},
    {"items": [{"productId": "a" * 32, "quantity": 0}], "address": "x"},
    {"items": [{"productId": "a" * 32, "quantity": 1}], "address": ""},
    {"address": "x"},
])
def test_invalid_order_body_is_400(client, customer, auth_headers, payload):
    resp = client.post("/api/orders", json=payload, headers=auth_headers(customer))
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_place_order_requires_auth(client):
    resp = client.post("/api/orders", json={"items": [{"productId": "a" * 32, "quantity": 1}], "address": "x"})
    assert resp.status_code == 401


def test_store_failure_mid_transaction_rolls_back_everything(
    client, db, customer, make_product, auth_headers, monkeypatch,
):
    headers = auth_headers(customer)
    first = make_product("First", stock=5)
    second = make_product("Second", stock=5)
    _fill_cart(client, headers, first.id)

    original = order_service._decrement_stock
    calls = []

    def flaky(session, product, quantity):
        calls.append(product.id)
        if len(calls) == 2:
            raise OperationalError("UPDATE products", {}, Exception("simulated store fault"))
        return original(session, product, quantity)

    monkeypatch.setattr(order_service, "_decrement_stock", flaky)

    resp = _place(client, headers, [(first.id, 2), (second.id, 1)])

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to create order"}
    assert calls == [first.id, second.id]
    assert _stock(db, first.id) == 5
    assert _stock(db, second.id) == 5
    assert _order_count(db) == 0

    db.expire_all()
    cart = db.query(Cart).filter(Cart.user_id == customer.id).first()
    assert cart is not None
    assert cart.items == [{"productId": first.id, "quantity": 1}]


def test_decrement_is_conditional_without_precheck(
    client, db, customer, make_product, auth_headers, monkeypatch,
):
    """
    The pre-check rejects shortfalls up front; the decrement itself is
    guarded too (stock >= quantity), unlike a blind increment by -quantity.
    With the pre-check skipped the order still fails and stock stays put.
    """
    headers = auth_headers(customer)
    plenty = make_product("Plenty", stock=10)
    scarce = make_product("Scarce", stock=2)
    monkeypatch.setattr(order_service, "_check_stock", lambda lines, products: None)

    resp = _place(client, headers, [(plenty.id, 4), (scarce.id, 3)])

    assert resp.status_code == 400
    assert resp.json() == {"error": "insufficient stock for Scarce"}
    assert _stock(db, plenty.id) == 10
    assert _stock(db, scarce.id) == 2
    assert _order_count(db) == 0


def test_stock_drained_after_check_aborts_order(
    app, client, db, customer, make_product, auth_headers, monkeypatch,
):
    """Another checkout empties the shelf between our stock check and our write."""
    headers = auth_headers(customer)
    p = make_product("Last One", stock=1)
    _fill_cart(client, headers, p.id)

    original = order_service._check_stock

    def check_then_lose_race(lines, products):
        original(lines, products)
        other = app.state.store.session()
        try:
            other.query(Product).filter(Product.id == p.id).update({"stock": 0})
            other.commit()
        finally:
            other.close()

    monkeypatch.setattr(order_service, "_check_stock", check_then_lose_race)

    resp = _place(client, headers, [(p.id, 1)])

    assert resp.status_code == 400
    assert resp.json() == {"error": "insufficient stock for Last One"}
    assert _stock(db, p.id) == 0
    assert _order_count(db) == 0
    db.expire_all()
    assert db.query(Cart).filter(Cart.user_id == customer.id).first() is not None


# ==========================================
# Concurrency
# ==========================================

def test_concurrent_checkouts_never_oversell(app, client, db, make_user, make_product):
    p = make_product("Hot Item", stock=5)
    buyers = [make_user() for _ in range(8)]
    buyer_ids = [u.id for u in buyers]
    product_id = p.id

    outcomes = []
    lock = threading.Lock()

    def checkout(user_id):
        session = app.state.store.session()
        try:
            order_service.place_order(
                session, user_id, [OrderLineRequest(productId=product_id, quantity=1)], "addr",
            )
            result = "ok"
        except InsufficientStockError:
            result = "short"
        except StorefrontError as e:
            result = e.message
        finally:
            session.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=checkout, args=(uid,)) for uid in buyer_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 5
    assert outcomes.count("short") == 3
    assert _stock(db, product_id) == 0
    assert _order_count(db) == 5
