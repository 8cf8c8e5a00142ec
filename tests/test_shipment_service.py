from decimal import Decimal

import pytest

from modules.orders.order_schema import OrderRequestModel
from schema.enums import BookingType
from shipping_partner.registry import ProviderRegistry
from modules.shipment.shipment_service import ShipmentService
from utils.exceptions import OrderNotFound, ValidationError


async def book(services, seller_id, order_number="ORD-2001"):
    result = await services.order_binding.book(
        seller_id,
        OrderRequestModel(
            order_number=order_number,
            delivery_pincode="302001",
            actual_weight_kg=Decimal("1.7"),
            consignee={"name": "Ravi Kumar", "phone": "9876543210"},
        ),
    )
    assert result.succeeded
    return result.order


@pytest.mark.asyncio
async def test_assign_awb(services, seller_id, couriers):
    order = await book(services, seller_id)

    shipment = await services.shipments.assign_awb(seller_id, order.uuid)

    assert shipment.booking.awb == "ALPHAORD-2001"
    assert shipment.order.awb_number == "ALPHAORD-2001"
    assert shipment.order.booking_type == BookingType.API
    assert couriers["alpha"].booked[0].seller_name == "Acme Traders"
    assert couriers["alpha"].booked[0].consignee_name == "Ravi Kumar"


@pytest.mark.asyncio
async def test_assign_awb_twice(services, seller_id, couriers):
    order = await book(services, seller_id)
    await services.shipments.assign_awb(seller_id, order.uuid)

    with pytest.raises(ValidationError):
        await services.shipments.assign_awb(seller_id, order.uuid)


@pytest.mark.asyncio
async def test_courier_failure_needs_manual_booking(services, seller_id, couriers):
    couriers["alpha"].booking_error = "courier api down"
    order = await book(services, seller_id)

    shipment = await services.shipments.assign_awb(seller_id, order.uuid)

    assert shipment.booking.requires_manual_booking
    assert shipment.booking.awb.startswith("MB")
    assert shipment.order.booking_type == BookingType.MANUAL_REQUIRED

    tracking = await services.shipments.track(shipment.booking.awb)
    assert tracking.status == "manual booking pending"


@pytest.mark.asyncio
async def test_inactive_courier_needs_manual_booking(services, seller_id, couriers):
    order = await book(services, seller_id)
    shipments = ShipmentService(services.orders, services.wallet, ProviderRegistry())

    shipment = await shipments.assign_awb(seller_id, order.uuid)

    assert shipment.booking.booking_type == BookingType.MANUAL_REQUIRED
    assert couriers["alpha"].booked == []


@pytest.mark.asyncio
async def test_cancelled_order_cannot_ship(services, seller_id, couriers):
    order = await book(services, seller_id)
    await services.order_binding.cancel(seller_id, order.uuid)

    with pytest.raises(ValidationError):
        await services.shipments.assign_awb(seller_id, order.uuid)


@pytest.mark.asyncio
async def test_track(services, seller_id, couriers):
    order = await book(services, seller_id)
    shipment = await services.shipments.assign_awb(seller_id, order.uuid)

    tracking = await services.shipments.track(shipment.booking.awb)

    assert tracking.courier == "alpha"
    assert tracking.status == "in transit"


@pytest.mark.asyncio
async def test_track_unknown_awb(services):
    with pytest.raises(OrderNotFound):
        await services.shipments.track("NOPE")
