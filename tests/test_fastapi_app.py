"""HTTP surface tests through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from pos_checkout.adapters.inbound.web.fastapi_app import create_app
from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore

from conftest import FakeChangeService, build_session

SOAP = {"id": "4", "name": "Sunlight Soap 100g", "unit_price": "95.00", "quantity": 2}
RICE = {"id": "9", "name": "Rice 1kg", "unit_price": "310.00"}


def make_client(store=None, change_service=None):
    h = build_session(change_service=change_service, store=store)
    return TestClient(create_app(h.session, h.store)), h


@pytest.fixture
def client():
    c, _ = make_client()
    return c


def checkout_cash(client, received="1000"):
    client.post("/cart/items", json=SOAP)
    client.post("/cart/items", json=RICE)
    client.post("/checkout/begin", json={"collect_customer": False})
    client.post("/checkout/payment-method", json={"method": "cash"})
    return client.post("/checkout/cash", json={"amount_received": received})


class TestCart:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_add_and_merge(self, client):
        client.post("/cart/items", json=SOAP)
        r = client.post("/cart/items", json={**SOAP, "quantity": 1})

        assert r.status_code == 201
        body = r.json()
        assert body["item_count"] == 1
        assert body["items"][0]["quantity"] == 3
        assert body["totals"]["total"] == "285.00"
        assert body["totals"]["currency"] == "LKR"

    def test_update_and_remove(self, client):
        client.post("/cart/items", json=SOAP)

        r = client.patch("/cart/items/4", json={"quantity": 5})
        assert r.json()["total_quantity"] == 5

        r = client.patch("/cart/items/4", json={"quantity": 0})
        assert r.json()["items"] == []

    def test_unknown_item_is_404(self, client):
        r = client.delete("/cart/items/nope")
        assert r.status_code == 404
        assert r.json()["type"] == "ItemNotInCart"

    def test_invalid_body_is_400(self, client):
        r = client.post("/cart/items", json={"id": "1", "name": "x", "unit_price": "-1"})
        assert r.status_code == 400
        assert r.json()["type"] == "RequestValidationError"

    def test_oversized_price_is_400(self, client):
        r = client.post("/cart/items", json={**SOAP, "unit_price": "1e30"})
        assert r.status_code == 400
        assert r.json()["type"] == "ValidationError"

    def test_clear(self, client):
        client.post("/cart/items", json=SOAP)
        assert client.delete("/cart").json()["item_count"] == 0


class TestCheckout:
    def test_begin_with_empty_cart_is_400(self, client):
        r = client.post("/checkout/begin", json={})
        assert r.status_code == 400
        assert r.json()["type"] == "EmptyCart"

    def test_customer_prompt_flow(self, client):
        client.post("/cart/items", json=SOAP)
        assert client.post("/checkout/begin").json()["state"] == "customer_info_prompt"

        r = client.post("/checkout/customer", json={"name": "Nimal", "phone": "0771234567"})

        assert r.json()["state"] == "payment_selection"
        assert r.json()["customer_name"] == "Nimal"

    def test_cash_sale_and_receipt(self, client):
        r = checkout_cash(client)
        assert r.status_code == 200
        assert r.json() == {"change": "500.00", "source": "remote", "reason": None}

        r = client.post("/checkout/complete")
        assert r.status_code == 201
        sale = r.json()
        assert sale["totals"]["total"] == "500.00"
        assert sale["change"] == "500.00"
        assert sale["payment_method"] == "cash"

        assert client.get("/checkout").json()["state"] == "completed"
        assert client.get("/cart").json()["item_count"] == 0

        r = client.get(f"/sales/{sale['sale_id']}")
        assert r.json()["sale_id"] == sale["sale_id"]

        receipt = client.get(f"/sales/{sale['sale_id']}/receipt").json()
        assert receipt["title"] == "SALE RECEIPT"
        assert receipt["total"]["value"] == "Rs. 500.00"
        assert "Thank you for your business!" in receipt["text"]

    def test_insufficient_cash_is_402(self, client):
        r = checkout_cash(client, received="100")
        assert r.status_code == 402
        assert r.json()["type"] == "InsufficientPayment"
        assert client.get("/checkout").json()["state"] == "cash_entry"

    def test_cart_locked_is_409(self, client):
        checkout_cash(client)
        r = client.post("/cart/items", json=RICE)
        assert r.status_code == 409

    def test_submission_failure_is_502(self):
        client, _ = make_client(store=InMemorySaleStore(fail=True))
        checkout_cash(client)

        r = client.post("/checkout/complete")

        assert r.status_code == 502
        assert r.json()["type"] == "SubmissionFailure"
        assert client.get("/cart").json()["item_count"] == 2

    def test_fallback_change_reported(self):
        client, _ = make_client(change_service=FakeChangeService(down=True))
        body = checkout_cash(client).json()
        assert body["source"] == "fallback"
        assert body["change"] == "500.00"
        assert body["reason"]

    def test_cancel_and_new_transaction(self, client):
        checkout_cash(client)

        r = client.post("/checkout/cancel")
        assert r.json()["state"] == "idle"
        assert r.json()["cart"]["item_count"] == 2

        r = client.post("/checkout/new")
        assert r.json()["cart"]["item_count"] == 0

    def test_new_transaction_mid_checkout_is_409(self, client):
        checkout_cash(client)

        r = client.post("/checkout/new")

        assert r.status_code == 409
        assert client.get("/cart").json()["item_count"] == 2

    def test_unknown_sale_is_404(self, client):
        r = client.get("/sales/does-not-exist")
        assert r.status_code == 404
        assert r.json()["type"] == "SaleNotFound"

    def test_bad_payment_method_is_400(self, client):
        client.post("/cart/items", json=SOAP)
        client.post("/checkout/begin", json={"collect_customer": False})
        r = client.post("/checkout/payment-method", json={"method": "cheque"})
        assert r.status_code == 400
