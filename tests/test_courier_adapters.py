import json
from decimal import Decimal

import httpx
import pytest

from modules.rate_quote.rate_quote_schema import ShipmentParamsModel
from schema.enums import BookingType, ServiceMode, Zone
from shipping_partner.delhivery.delhivery import Delhivery, DelhiveryAir, clean_text
from shipping_partner.ekart.ekart import Ekart
from shipping_partner.provider_schema import BookingRequestModel
from shipping_partner.registry import ProviderRegistry
from shipping_partner.xpressbees.xpressbees import Xpressbees
from utils.exceptions import NotServiceable, ProviderTimeout, ProviderUnavailable

from tests.factories import add_card


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def delhivery_pincode(pre_paid="Y", cod="Y", pickup="Y"):
    return {
        "delivery_codes": [
            {"postal_code": {"pre_paid": pre_paid, "cod": cod, "pickup": pickup}}
        ]
    }


def booking_request(**overrides):
    params = dict(
        order_number="ORD-1001",
        pickup_pincode="110001",
        delivery_pincode="302001",
        weight_kg=Decimal("1.7"),
        declared_value=Decimal("1200"),
        seller_name="Acme Traders",
        consignee_name="Ravi Kumar",
        consignee_phone="9876543210",
        consignee_address="12, M.I. Road #4",
        consignee_city="Jaipur",
        consignee_state="Rajasthan",
    )
    params.update(overrides)
    return BookingRequestModel(**params)


def shipment(**overrides):
    params = dict(
        pickup_pincode="110001",
        delivery_pincode="302001",
        zone=Zone.REST_OF_INDIA,
        actual_weight_kg=Decimal("1.7"),
    )
    params.update(overrides)
    return ShipmentParamsModel(**params)


# ============================================
# DELHIVERY
# ============================================


@pytest.mark.asyncio
async def test_delhivery_serviceability():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=delhivery_pincode(cod="N"))

    async with mock_client(handler) as client:
        delhivery = Delhivery(client, None, {"token": "secret"})
        result = await delhivery.check_serviceability("302001")

    assert result.serviceable
    assert result.pickup_available
    assert not result.cod_available
    assert seen[0].url.params["filter_codes"] == "302001"
    assert seen[0].headers["Authorization"] == "Token secret"


@pytest.mark.asyncio
async def test_delhivery_unknown_pincode():
    async with mock_client(lambda request: httpx.Response(200, json={"delivery_codes": []})) as client:
        result = await Delhivery(client, None).check_serviceability("999999")

    assert not result.serviceable


@pytest.mark.asyncio
async def test_delhivery_quote_uses_rate_cards(services):
    add_card(services.rate_cards, "delhivery", Zone.REST_OF_INDIA, 40, 20)

    async with mock_client(lambda request: httpx.Response(200, json=delhivery_pincode())) as client:
        quote = await Delhivery(client, services.rate_quote).quote(shipment())

    assert quote.courier == "delhivery"
    assert quote.total_amount == Decimal("118.00")


@pytest.mark.asyncio
async def test_delhivery_quote_without_card_is_not_serviceable(services):
    async with mock_client(lambda request: httpx.Response(200, json=delhivery_pincode())) as client:
        with pytest.raises(NotServiceable):
            await Delhivery(client, services.rate_quote).quote(shipment())


@pytest.mark.asyncio
async def test_delhivery_quote_without_pickup(services):
    add_card(services.rate_cards, "delhivery", Zone.REST_OF_INDIA, 40, 20)

    async with mock_client(
        lambda request: httpx.Response(200, json=delhivery_pincode(pickup="N"))
    ) as client:
        with pytest.raises(NotServiceable):
            await Delhivery(client, services.rate_quote).quote(shipment())


@pytest.mark.asyncio
async def test_delhivery_air_only_quotes_air(services):
    async with mock_client(lambda request: httpx.Response(200, json=delhivery_pincode())) as client:
        with pytest.raises(NotServiceable):
            await DelhiveryAir(client, services.rate_quote).quote(
                shipment(mode=ServiceMode.SURFACE)
            )


@pytest.mark.asyncio
async def test_delhivery_timeout():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(ProviderTimeout):
            await Delhivery(client, None).check_serviceability("302001")


@pytest.mark.asyncio
async def test_delhivery_unreadable_response():
    async with mock_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(ProviderUnavailable):
            await Delhivery(client, None).check_serviceability("302001")


@pytest.mark.asyncio
async def test_delhivery_booking():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={"packages": [{"status": "Success", "waybill": "1490811234567"}]},
        )

    async with mock_client(handler) as client:
        booking = await Delhivery(client, None, {"token": "secret"}).book_shipment(
            booking_request()
        )

    assert booking.awb == "1490811234567"
    assert booking.booking_type == BookingType.API
    assert not booking.requires_manual_booking
    assert booking.tracking_url.endswith("1490811234567")

    body = seen[0].content.decode()
    assert body.startswith("format=json&data=")
    payload = json.loads(body[len("format=json&data="):])
    assert payload["shipments"][0]["order"] == "ORD-1001"
    assert payload["shipments"][0]["weight"] == 1700
    assert payload["shipments"][0]["shipping_mode"] == "surface"


@pytest.mark.asyncio
async def test_delhivery_booking_falls_back_to_manual():
    async with mock_client(lambda request: httpx.Response(500, json={})) as client:
        booking = await Delhivery(client, None).book_shipment(booking_request())

    assert booking.booking_type == BookingType.MANUAL_REQUIRED
    assert booking.requires_manual_booking
    assert booking.awb.startswith("MB")
    assert "500" in booking.error_reason


@pytest.mark.asyncio
async def test_delhivery_rejected_booking_falls_back_to_manual():
    response = {"packages": [{"status": "Fail", "remarks": ["Duplicate order id"]}]}

    async with mock_client(lambda request: httpx.Response(200, json=response)) as client:
        booking = await Delhivery(client, None).book_shipment(booking_request())

    assert booking.requires_manual_booking
    assert booking.error_reason == "Duplicate order id"


@pytest.mark.asyncio
async def test_delhivery_tracking():
    response = {
        "ShipmentData": [
            {
                "Shipment": {
                    "AWB": "1490811234567",
                    "Status": {"StatusType": "UD", "Status": "In Transit"},
                    "Scans": [
                        {
                            "ScanDetail": {
                                "ScanType": "UD",
                                "Scan": "Manifested",
                                "StatusDateTime": "2024-05-01T10:15:00",
                                "ScannedLocation": "Delhi_Hub",
                            }
                        },
                        {
                            "ScanDetail": {
                                "ScanType": "UD",
                                "Scan": "In Transit",
                                "StatusDateTime": "2024-05-02T08:00:00",
                                "ScannedLocation": "Jaipur_Hub",
                            }
                        },
                    ],
                }
            }
        ]
    }

    async with mock_client(lambda request: httpx.Response(200, json=response)) as client:
        tracking = await Delhivery(client, None).track_shipment("1490811234567")

    assert tracking.status == "in transit"
    assert [event.status for event in tracking.history] == ["in transit", "booked"]
    assert tracking.history[0].location == "Jaipur_Hub"


@pytest.mark.asyncio
async def test_delhivery_cancellation():
    async with mock_client(
        lambda request: httpx.Response(200, json={"status": "Failure", "remark": "already picked"})
    ) as client:
        cancellation = await Delhivery(client, None).cancel_shipment("1490811234567")

    assert not cancellation.confirmed
    assert cancellation.message == "already picked"


def test_clean_text():
    assert clean_text("12, M.I. Road #4") == "12, M I Road 4"
    assert clean_text(None) == ""


# ============================================
# XPRESSBEES
# ============================================


@pytest.mark.asyncio
async def test_xpressbees_token_is_cached():
    token_calls = []

    def handler(request):
        if request.url.path.endswith("generateToken"):
            token_calls.append(request)
            return httpx.Response(200, json={"token": "xb-token"})
        assert request.headers["token"] == "xb-token"
        return httpx.Response(
            200,
            json={"ReturnCode": 100, "Data": {"Prepaid": True, "COD": False, "Pickup": True}},
        )

    async with mock_client(handler) as client:
        xpressbees = Xpressbees(client, None, {"username": "u", "password": "p", "secretkey": "s"})
        first = await xpressbees.check_serviceability("110001")
        second = await xpressbees.check_serviceability("302001")

    assert len(token_calls) == 1
    assert first.serviceable and second.serviceable
    assert not first.cod_available


@pytest.mark.asyncio
async def test_xpressbees_booking():
    def handler(request):
        if request.url.path.endswith("generateToken"):
            return httpx.Response(200, json={"token": "xb-token"})
        return httpx.Response(200, json={"code": 100, "data": [{"AWBNo": "XB123"}]})

    async with mock_client(handler) as client:
        booking = await Xpressbees(client, None).book_shipment(booking_request(is_cod=True))

    assert booking.awb == "XB123"
    assert booking.booking_type == BookingType.API


@pytest.mark.asyncio
async def test_xpressbees_auth_failure_falls_back_to_manual():
    async with mock_client(lambda request: httpx.Response(200, json={"message": "invalid"})) as client:
        booking = await Xpressbees(client, None).book_shipment(booking_request())

    assert booking.booking_type == BookingType.MANUAL_REQUIRED


# ============================================
# EKART
# ============================================


@pytest.mark.asyncio
async def test_ekart_serviceability():
    def handler(request):
        if request.url.path == "/auth/token":
            return httpx.Response(200, json={"Authorization": "ek-token"})
        assert request.headers["Authorization"] == "ek-token"
        return httpx.Response(
            200, json={"response": {"forward_drop": True, "cod": True, "forward_pickup": False}}
        )

    async with mock_client(handler) as client:
        result = await Ekart(client, None, {"client_code": "ACME"}).check_serviceability("302001")

    assert result.serviceable
    assert result.cod_available
    assert not result.pickup_available


@pytest.mark.asyncio
async def test_ekart_error_payload():
    def handler(request):
        return httpx.Response(200, json={"unauthorised": "bad merchant code"})

    async with mock_client(handler) as client:
        with pytest.raises(ProviderUnavailable):
            await Ekart(client, None).check_serviceability("302001")


# ============================================
# REGISTRY
# ============================================


def test_registry_from_settings(settings, services):
    settings.active_couriers = ["delhivery", "xpressbees", "unknown-courier"]

    registry = ProviderRegistry.from_settings(settings, None, services.rate_quote)

    assert [adapter.slug for adapter in registry.active()] == ["delhivery", "xpressbees"]
    assert registry.get("delhivery").credentials == settings.courier_credentials["delhivery"]
    assert registry.get("ekart") is None
