"""Tests for the cart and checkout HTTP routers."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from storefront.api.deps import reset_shoppers
from storefront.main import create_app

PIZZA = {"id": "pizza-margherita", "name": "Pizza Margherita", "price": "35.00"}
SODA = {"id": "refri-2l", "name": "Refrigerante 2L", "price": "15.00"}


@pytest.fixture
def client():
    reset_shoppers()
    with TestClient(create_app()) as c:
        yield c
    reset_shoppers()


def _login(client, shopper="s1"):
    r = client.post(f"/checkout/{shopper}/login", json={"contact": "11999998888", "password": "1234"})
    assert r.status_code == 200
    return r


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestCarts:
    def test_add_and_merge(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        r = client.post("/carts/s1/items", json=PIZZA)
        body = r.json()
        assert body["total_items"] == 2
        assert body["total_price"] == "70.00"

    def test_update_to_zero_removes(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        r = client.patch("/carts/s1/items/pizza-margherita", json={"quantity": 0})
        assert r.json()["items"] == []

    def test_update_unknown_item(self, client):
        r = client.patch("/carts/s1/items/nope", json={"quantity": 2})
        assert r.status_code == 404

    def test_carts_are_isolated_per_shopper(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        assert client.get("/carts/s2").json()["total_items"] == 0

    def test_remove_and_clear(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        client.post("/carts/s1/items", json=SODA)
        assert client.delete("/carts/s1/items/refri-2l").json()["total_items"] == 1
        assert client.delete("/carts/s1").json()["total_items"] == 0


class TestCheckoutFlow:
    def test_start_with_empty_cart(self, client):
        r = client.post("/checkout/s1/start")
        assert r.status_code == 400
        assert client.get("/checkout/s1").json()["step"] == "auth"

    def test_guest_then_login_skips_auth(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        assert client.post("/checkout/s1/start").json()["step"] == "auth"
        assert _login(client).json()["step"] == "delivery"

    def test_wrong_password(self, client):
        r = client.post("/checkout/s1/login", json={"contact": "11999998888", "password": "x"})
        assert r.status_code == 401

    def test_invalid_address_returns_field_errors(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        _login(client)
        client.post("/checkout/s1/start")
        r = client.post("/checkout/s1/delivery", json={"type": "delivery", "address": {"cep": "123"}})
        assert r.status_code == 422
        errors = r.json()["detail"]["errors"]
        assert errors["cep"] == "CEP deve ter 8 dígitos"
        assert "street" in errors

    def test_insufficient_tender(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        _login(client)
        client.post("/checkout/s1/start")
        client.post("/checkout/s1/delivery", json={"type": "pickup"})
        r = client.post("/checkout/s1/payment", json={"method": "cash", "needs_change": True, "tendered": "20"})
        assert r.status_code == 422
        assert r.json()["detail"]["code"] == "InsufficientTender"
        assert client.get("/checkout/s1").json()["step"] == "payment"

    def test_full_order(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        client.post("/carts/s1/items", json=SODA)
        _login(client)
        client.post("/checkout/s1/start")

        r = client.post("/checkout/s1/delivery", json={"type": "delivery", "use_saved_address": True})
        assert r.status_code == 200
        assert r.json()["step"] == "payment"
        assert r.json()["total"] == "55.00"

        options = client.get("/checkout/s1/installments").json()
        assert options[1]["installment_amount"] == 27.5

        r = client.post("/checkout/s1/payment", json={"method": "credit", "installments": 2})
        assert r.json()["step"] == "summary"

        with patch("storefront.services.notification_service.send_order_message_task") as task:
            r = client.post("/checkout/s1/submit")
        assert r.status_code == 200
        order = r.json()
        assert order["order_id"].startswith("PD")
        assert "TOTAL DO PEDIDO: R$ 55,00" in order["text"]
        assert "Parcelamento: 2x de R$ 27,50 sem juros" in order["text"]
        task.delay.assert_called_once()

        assert client.get("/carts/s1").json()["items"] == []
        assert client.get("/checkout/s1").json()["step"] == "success"

    def test_submit_before_summary_conflicts(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        _login(client)
        client.post("/checkout/s1/start")
        assert client.post("/checkout/s1/submit").status_code == 409

    def test_back_and_reset(self, client):
        client.post("/carts/s1/items", json=PIZZA)
        _login(client)
        client.post("/checkout/s1/start")
        client.post("/checkout/s1/delivery", json={"type": "pickup"})
        assert client.post("/checkout/s1/back").json()["step"] == "delivery"
        body = client.post("/checkout/s1/reset").json()
        assert body["step"] == "auth"
        assert body["delivery"] is None


class TestPostalCodes:
    def test_lookup_not_found(self, client):
        with patch("storefront.api.routers.checkout.postal_code_client.lookup", return_value=None):
            assert client.get("/checkout/postal-codes/99999999").status_code == 404

    def test_lookup_found(self, client):
        data = {"cep": "01001000", "street": "Praça da Sé", "neighborhood": "Sé", "city": "São Paulo", "state": "SP"}
        with patch("storefront.api.routers.checkout.postal_code_client.lookup", return_value=data):
            assert client.get("/checkout/postal-codes/01001000").json() == data
