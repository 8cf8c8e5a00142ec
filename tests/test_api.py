import pytest


@pytest.fixture
def headers(seller_id):
    return {"x-seller-id": str(seller_id)}


ORDER = {
    "order_number": "WEB-1",
    "delivery_pincode": "302001",
    "actual_weight_kg": "1.7",
    "consignee": {"name": "Ravi Kumar", "phone": "9876543210"},
}


def test_status(client):
    response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {"status": "OK"}


def test_deep_status(client):
    response = client.get("/deepstatus")

    assert response.status_code == 200
    assert response.json()["db"] is True


def test_zone(client):
    response = client.post(
        "/rates/zone", json={"pickup_pincode": "110001", "delivery_pincode": "781001"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["zone"] == "SPECIAL_ZONE"


def test_zone_unknown_pincode(client):
    response = client.post(
        "/rates/zone", json={"pickup_pincode": "110001", "delivery_pincode": "999999"}
    )

    body = response.json()
    assert response.status_code == 400
    assert body["status"] is False
    assert body["data"]["code"] == "UNKNOWN_PINCODE"
    assert body["data"]["details"] == {"pincode": "999999"}


def test_calculate_rate(client, couriers):
    response = client.post(
        "/rates/calculate",
        json={
            "pickup_pincode": "110001",
            "delivery_pincode": "302001",
            "courier": "alpha",
            "mode": "SURFACE",
            "actual_weight_kg": "1.7",
        },
    )

    assert response.status_code == 200
    assert response.json()["data"]["total_amount"] == 118.0


def test_compare_rates(client, couriers):
    response = client.post(
        "/rates/compare",
        json={
            "pickup_pincode": "110001",
            "delivery_pincode": "302001",
            "actual_weight_kg": "1.7",
        },
    )

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["best_option"]["courier"] == "alpha"
    assert [c["courier"] for c in data["candidates"]] == ["alpha", "beta"]


def test_rate_card_admin(client):
    created = client.post(
        "/admin/rate-cards",
        json={
            "courier": "alpha",
            "zone": "WITHIN_CITY",
            "mode": "SURFACE",
            "base_rate": "30",
            "additional_rate": "15",
        },
    )
    assert created.status_code == 201
    card_uuid = created.json()["data"]["uuid"]

    updated = client.put(f"/admin/rate-cards/{card_uuid}", json={"base_rate": "32"})
    assert updated.status_code == 200
    assert updated.json()["data"]["version"] == 2

    listed = client.get("/admin/rate-cards", params={"courier": "alpha", "active_only": False})
    assert [card["version"] for card in listed.json()["data"]] == [1, 2]


def test_book_order(client, headers, couriers):
    response = client.post("/orders", json=ORDER, headers=headers)

    body = response.json()
    assert response.status_code == 201
    assert body["status"] is True
    assert body["data"]["state"] == "TRANSACTION_LINKED"
    assert body["data"]["order"]["courier"] == "alpha"

    balance = client.get("/wallet/balance", headers=headers).json()
    assert balance["data"]["balance"] == 882.0


def test_book_order_without_funds(client, session_factory, couriers):
    from tests.factories import make_seller

    seller_id = make_seller(session_factory, balance="10")

    response = client.post("/orders", json=ORDER, headers={"x-seller-id": str(seller_id)})

    body = response.json()
    assert response.status_code == 402
    assert body["status"] is False
    assert body["data"]["state"] == "ABORTED"
    assert body["data"]["error"]["code"] == "INSUFFICIENT_BALANCE"


def test_cancel_order(client, headers, couriers):
    order_uuid = client.post("/orders", json=ORDER, headers=headers).json()["data"]["order"]["uuid"]

    response = client.post(f"/orders/{order_uuid}/cancel", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["order"]["status"] == "CANCELLED"

    again = client.post(f"/orders/{order_uuid}/cancel", headers=headers)
    assert again.status_code == 409
    assert again.json()["data"]["code"] == "ORDER_NOT_CANCELLABLE"


def test_ship_and_track(client, headers, couriers):
    order_uuid = client.post("/orders", json=ORDER, headers=headers).json()["data"]["order"]["uuid"]

    shipped = client.post(f"/shipment/{order_uuid}/assign-awb", headers=headers)
    assert shipped.status_code == 200
    awb = shipped.json()["data"]["booking"]["awb"]

    tracking = client.get(f"/shipment/track/{awb}", headers=headers)
    assert tracking.status_code == 200
    assert tracking.json()["data"]["status"] == "in transit"


def test_wallet_recharge_and_history(client, headers):
    recharged = client.post(
        "/wallet/recharge", json={"amount": "250", "reference": "pay_123"}, headers=headers
    )
    assert recharged.status_code == 200
    assert recharged.json()["data"]["closing_balance"] == 1250.0

    duplicate = client.post(
        "/wallet/recharge", json={"amount": "250", "reference": "pay_123"}, headers=headers
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["data"]["code"] == "DUPLICATE_RECHARGE"

    history = client.post("/wallet/transactions", json={}, headers=headers).json()["data"]
    assert history["total_count"] == 1

    verification = client.get("/wallet/verify", headers=headers).json()
    assert verification["data"]["consistent"] is True


def test_unknown_seller(client):
    response = client.get("/wallet/balance", headers={"x-seller-id": "4242"})

    assert response.status_code == 404
    assert response.json()["data"]["code"] == "SELLER_NOT_FOUND"


def test_seller_header_required(client):
    assert client.get("/wallet/balance").status_code == 422


def test_invalid_order_body_uses_envelope(client, headers):
    response = client.post("/orders", json={"order_number": "X"}, headers=headers)

    body = response.json()
    assert response.status_code == 422
    assert body["status"] is False
    assert "delivery_pincode" in body["data"]["fields"]
    assert "actual_weight_kg" in body["data"]["fields"]
