"""
Order persistence.

Kept apart from the binding flow so the flow can be exercised against a
store that fails on demand.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from database import session_scope

# models
from models import Order

# schema
from schema.enums import OrderStatus
from modules.rate_quote.rate_quote_schema import QuoteModel, ShipmentParamsModel
from shipping_partner.provider_schema import BookingResultModel
from .order_schema import OrderModel, OrderRequestModel


class OrderRepository:

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def order_number_exists(self, seller_id: int, order_number: str) -> bool:
        with session_scope(self._session_factory) as db:
            return (
                db.query(Order.id)
                .filter(Order.seller_id == seller_id, Order.order_number == order_number)
                .first()
                is not None
            )

    def insert(
        self,
        order_uuid: UUID,
        seller_id: int,
        shipment: ShipmentParamsModel,
        request: OrderRequestModel,
        quote: QuoteModel,
        wallet_transaction_id: int,
    ) -> OrderModel:
        with session_scope(self._session_factory) as db:
            order = Order(
                uuid=order_uuid,
                order_number=request.order_number,
                seller_id=seller_id,
                pickup_pincode=shipment.pickup_pincode,
                delivery_pincode=shipment.delivery_pincode,
                actual_weight_kg=request.actual_weight_kg,
                length_cm=request.length_cm,
                width_cm=request.width_cm,
                height_cm=request.height_cm,
                chargeable_weight_kg=quote.chargeable_weight_kg,
                is_cod=request.is_cod,
                declared_value=request.declared_value,
                consignee_name=request.consignee.name,
                consignee_phone=request.consignee.phone,
                consignee_address=request.consignee.address,
                consignee_city=request.consignee.city,
                consignee_state=request.consignee.state,
                courier=quote.courier,
                mode=quote.mode.value,
                zone=quote.zone.value,
                base_rate=quote.base_rate,
                additional_charges=quote.additional_charges,
                shipping_charge=quote.shipping_cost,
                cod_charge=quote.cod_charge,
                gst=quote.gst,
                total_amount=quote.total_amount,
                wallet_transaction_id=wallet_transaction_id,
                status=OrderStatus.BOOKED.value,
            )
            db.add(order)
            db.flush()
            return order.to_model()

    def get(self, seller_id: int, order_uuid: UUID) -> Optional[OrderModel]:
        with session_scope(self._session_factory) as db:
            order = (
                db.query(Order)
                .filter(
                    Order.uuid == order_uuid,
                    Order.seller_id == seller_id,
                    Order.is_deleted.is_(False),
                )
                .first()
            )
            return order.to_model() if order else None

    def find_by_awb(self, awb_number: str) -> Optional[OrderModel]:
        with session_scope(self._session_factory) as db:
            order = (
                db.query(Order)
                .filter(Order.awb_number == awb_number, Order.is_deleted.is_(False))
                .first()
            )
            return order.to_model() if order else None

    def set_shipment(self, order_uuid: UUID, booking: BookingResultModel) -> OrderModel:
        with session_scope(self._session_factory) as db:
            order = db.query(Order).filter(Order.uuid == order_uuid).with_for_update().first()
            order.awb_number = booking.awb
            order.tracking_url = booking.tracking_url
            order.booking_type = booking.booking_type.value
            db.add(order)
            db.flush()
            return order.to_model()

    def transition_status(
        self, order_uuid: UUID, from_status: OrderStatus, to_status: OrderStatus
    ) -> bool:
        """Move the order between statuses; False when it was no longer in from_status."""
        with session_scope(self._session_factory) as db:
            result = db.execute(
                update(Order)
                .where(Order.uuid == order_uuid, Order.status == from_status.value)
                .values(status=to_status.value)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
