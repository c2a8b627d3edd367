"""
HTTP-level checks: status codes, the shared error envelope and bearer auth.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.database.connection import get_db
from app.main import app


@pytest.fixture()
def client(db):
    def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    # lifespan is not entered, so the configured database is never touched
    yield TestClient(app)
    app.dependency_overrides.clear()


def _auth(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


def test_place_order_returns_201(client, customer, tiered_product):
    resp = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": 5}]},
        headers=_auth(customer),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["order"]["status"] == "pending"
    assert body["order"]["total_amount"] in ("450.00", 450.0)


def test_empty_order_envelope(client, customer):
    resp = client.post("/orders/", json={"items": []}, headers=_auth(customer))

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] is True
    assert body["code"] == "empty_order"
    assert body["status_code"] == 400


def test_insufficient_stock_envelope(client, customer, tiered_product):
    resp = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": 11}]},
        headers=_auth(customer),
    )

    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "insufficient_stock"
    assert body["details"] == {
        "product_id": tiered_product.id,
        "requested": 11,
        "available": 10,
        "shortfall": 1,
    }


def test_unknown_product_envelope(client, customer):
    resp = client.post(
        "/orders/",
        json={"items": [{"product_id": 999, "quantity": 1}]},
        headers=_auth(customer),
    )

    assert resp.status_code == 404
    assert resp.json()["code"] == "product_not_found"


def test_non_positive_quantity_is_a_validation_error(client, customer, tiered_product):
    resp = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": 0}]},
        headers=_auth(customer),
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"][0]["field"].endswith("quantity")


def test_orders_require_a_token(client):
    resp = client.post("/orders/", json={"items": []})

    assert resp.status_code == 401


def test_other_customers_order_is_not_found(client, customer, user_factory, tiered_product):
    placed = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": 1}]},
        headers=_auth(customer),
    ).json()

    resp = client.get(f"/orders/{placed['order']['id']}", headers=_auth(user_factory()))

    assert resp.status_code == 404
    assert resp.json()["code"] == "order_not_found"


def test_status_update_is_admin_only(client, customer, admin, tiered_product):
    placed = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": 1}]},
        headers=_auth(customer),
    ).json()
    url = f"/orders/{placed['order']['id']}/status"

    assert client.put(url, json={"status": "confirmed"}, headers=_auth(customer)).status_code == 403

    resp = client.put(url, json={"status": "confirmed"}, headers=_auth(admin))
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = client.put(url, json={"status": "pending"}, headers=_auth(admin))
    assert resp.status_code == 409
    assert resp.json()["code"] == "invalid_status_transition"


def test_login_and_refresh(client, customer):
    resp = client.post("/auth/login", data={"username": customer.username, "password": "secret"})
    assert resp.status_code == 200
    tokens = resp.json()

    resp = client.post("/auth/refresh", params={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"

    resp = client.post("/auth/refresh", params={"refresh_token": tokens["access_token"]})
    assert resp.status_code == 401


def test_self_registration_cannot_claim_admin(client):
    resp = client.post(
        "/auth/register",
        json={"username": "mallory", "email": "m@example.com", "password": "pw", "role": "admin"},
    )

    assert resp.status_code == 403


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["db_ok"] is True


@pytest.mark.parametrize("quantity", [10**20, 2.7])
def test_out_of_range_or_fractional_quantity_is_a_validation_error(
    client, customer, tiered_product, quantity
):
    resp = client.post(
        "/orders/",
        json={"items": [{"product_id": tiered_product.id, "quantity": quantity}]},
        headers=_auth(customer),
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


def test_cart_line_update_and_removal(client, customer, user_factory, tiered_product):
    cart = client.post(
        "/cart/",
        json={"product_id": tiered_product.id, "quantity": 2},
        headers=_auth(customer),
    ).json()
    item_id = cart["items"][0]["id"]

    resp = client.put(f"/cart/{item_id}", json={"quantity": 5}, headers=_auth(customer))
    assert resp.status_code == 200
    assert resp.json()["items"][0]["quantity"] == 5

    resp = client.put(f"/cart/{item_id}", json={"quantity": 11}, headers=_auth(customer))
    assert resp.status_code == 409
    assert resp.json()["code"] == "insufficient_stock"

    resp = client.delete(f"/cart/{item_id}", headers=_auth(user_factory()))
    assert resp.status_code == 404
    assert resp.json()["code"] == "cart_item_not_found"

    resp = client.delete(f"/cart/{item_id}", headers=_auth(customer))
    assert resp.status_code == 200
    assert resp.json()["items"] == []
