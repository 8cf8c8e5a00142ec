import asyncio
from uuid import UUID

from context_manager.context import context_user_data
from logger import logger

# schema
from schema.enums import BookingType, OrderStatus
from shipping_partner.provider_schema import (
    BookingRequestModel,
    BookingResultModel,
    TrackingResultModel,
)
from .shipment_schema import AssignAwbResponseModel

# service
from modules.orders.order_repository import OrderRepository
from modules.wallet.wallet_service import WalletLedgerService
from shipping_partner.base import manual_booking_reference
from shipping_partner.registry import ProviderRegistry

from utils.exceptions import OrderNotFound, ValidationError


class ShipmentService:
    """Hands booked orders to their courier and reads tracking back."""

    def __init__(
        self,
        order_repository: OrderRepository,
        wallet_service: WalletLedgerService,
        registry: ProviderRegistry,
    ):
        self.orders = order_repository
        self.wallet = wallet_service
        self.registry = registry

    async def assign_awb(self, seller_id: int, order_uuid: UUID) -> AssignAwbResponseModel:
        order = await asyncio.to_thread(self.orders.get, seller_id, order_uuid)
        if order is None:
            raise OrderNotFound(f"Order {order_uuid} not found", {"uuid": str(order_uuid)})

        if order.status != OrderStatus.BOOKED:
            raise ValidationError(
                f"Order in status {order.status.value} cannot be shipped",
                {"status": order.status.value},
            )

        if order.awb_number:
            raise ValidationError(
                f"AWB {order.awb_number} already assigned", {"awb": order.awb_number}
            )

        seller = await asyncio.to_thread(self.wallet.get_seller, seller_id)

        adapter = self.registry.get(order.courier)
        if adapter is None:
            # courier switched off after the order was paid for
            logger.warning(
                extra=context_user_data.get(),
                msg=f"Courier {order.courier} inactive, order {order.order_number} "
                "needs manual booking",
            )
            booking = BookingResultModel(
                courier=order.courier,
                awb=manual_booking_reference(),
                booking_type=BookingType.MANUAL_REQUIRED,
                requires_manual_booking=True,
                error_reason=f"Courier {order.courier} is not active",
            )
        else:
            booking = await adapter.book_shipment(
                BookingRequestModel(
                    order_number=order.order_number,
                    pickup_pincode=order.pickup_pincode,
                    delivery_pincode=order.delivery_pincode,
                    weight_kg=order.chargeable_weight_kg,
                    length_cm=order.length_cm,
                    width_cm=order.width_cm,
                    height_cm=order.height_cm,
                    is_cod=order.is_cod,
                    declared_value=order.declared_value,
                    cod_amount=order.declared_value if order.is_cod else 0,
                    seller_name=seller.name,
                    consignee_name=order.consignee_name or "",
                    consignee_phone=order.consignee_phone or "",
                    consignee_address=order.consignee_address or "",
                    consignee_city=order.consignee_city or "",
                    consignee_state=order.consignee_state or "",
                )
            )

        order = await asyncio.to_thread(self.orders.set_shipment, order_uuid, booking)

        logger.info(
            extra=context_user_data.get(),
            msg=f"Order {order.order_number} shipment {booking.awb} ({booking.booking_type.value})",
        )
        return AssignAwbResponseModel(order=order, booking=booking)

    async def track(self, awb: str) -> TrackingResultModel:
        order = await asyncio.to_thread(self.orders.find_by_awb, awb)
        if order is None:
            raise OrderNotFound(f"No order with AWB {awb}", {"awb": awb})

        if order.booking_type == BookingType.MANUAL_REQUIRED:
            return TrackingResultModel(
                courier=order.courier, awb=awb, status="manual booking pending"
            )

        adapter = self.registry.get(order.courier)
        if adapter is None:
            raise ValidationError(
                f"Courier {order.courier} is not active", {"courier": order.courier}
            )

        return await adapter.track_shipment(awb)
