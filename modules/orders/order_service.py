"""
Order Binding Service

Takes a seller's order from "which courier?" to "paid and recorded":

    QUOTING -> RATE_SELECTED -> WALLET_DEBITED -> ORDER_PERSISTED -> TRANSACTION_LINKED
       |              |                |
       +--------------+----------------+--> ABORTED

The order uuid is reserved before the wallet is touched, so the debit row is
written already pointing at its order. If the order then cannot be saved the
debit is reversed with a compensating credit before the attempt is aborted.
Nothing is retried; the caller gets one BindingResult describing what
happened.
"""

import asyncio
import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from context_manager.context import context_user_data
from logger import logger

# schema
from schema.enums import BindingState, BookingType, OrderStatus
from modules.rate_comparison.rate_comparison_schema import ComparisonResult
from modules.rate_quote.rate_quote_schema import ShipmentParamsModel
from .order_schema import (
    BindingError,
    BindingResult,
    CancellationResponseModel,
    OrderRequestModel,
)

# service
from modules.rate_comparison.rate_comparison_service import RateComparisonService
from modules.rate_quote.weight_billing_service import WeightBillingService, to_decimal
from modules.wallet.wallet_service import WalletLedgerService
from modules.zone.zone_service import ZoneResolver, normalize_pincode
from shipping_partner.base import ProviderAdapter
from shipping_partner.registry import ProviderRegistry
from .order_repository import OrderRepository

from utils.exceptions import (
    InsufficientWalletBalance,
    LedgerError,
    NoServiceableProvider,
    OrderNotCancellable,
    OrderNotFound,
    PersistenceFailure,
    SellerNotFound,
    ShippingError,
    UnknownPincode,
    ValidationError,
)


class OrderBindingService:

    def __init__(
        self,
        zone_resolver: ZoneResolver,
        weight_billing_service: WeightBillingService,
        comparison_service: RateComparisonService,
        wallet_service: WalletLedgerService,
        order_repository: OrderRepository,
        registry: ProviderRegistry,
    ):
        self.zones = zone_resolver
        self.weights = weight_billing_service
        self.comparison = comparison_service
        self.wallet = wallet_service
        self.orders = order_repository
        self.registry = registry

    # ============================================
    # QUOTING
    # ============================================

    async def quote(self, seller_id: int, request: OrderRequestModel) -> ComparisonResult:
        """Compare couriers for the order without touching the wallet."""
        shipment, providers = await asyncio.to_thread(
            self._prepare_shipment, seller_id, request
        )
        return await self.comparison.compare(shipment, providers)

    def _prepare_shipment(
        self, seller_id: int, request: OrderRequestModel
    ) -> Tuple[ShipmentParamsModel, Optional[List[ProviderAdapter]]]:
        seller = self.wallet.get_seller(seller_id)

        pickup_pincode = request.pickup_pincode or seller.pickup_pincode
        if not pickup_pincode:
            raise ValidationError("pickup_pincode is required", {"field": "pickup_pincode"})

        pickup_pincode = normalize_pincode(pickup_pincode)
        delivery_pincode = normalize_pincode(request.delivery_pincode)

        # base chargeable weight, each courier re-applies its own minimum
        dimensions = self.weights.build_dimensions(
            request.length_cm, request.width_cm, request.height_cm
        )
        self.weights.chargeable_weight(request.actual_weight_kg, dimensions)

        declared_value = to_decimal(request.declared_value, "declared_value")
        if declared_value < 0:
            raise ValidationError("declared_value cannot be negative", {"field": "declared_value"})

        zone = self.zones.resolve(pickup_pincode, delivery_pincode)

        providers = None
        if request.preferred_courier:
            adapter = self.registry.get(request.preferred_courier)
            if adapter is None:
                raise ValidationError(
                    f"Courier {request.preferred_courier} is not available",
                    {"field": "preferred_courier"},
                )
            providers = [adapter]

        shipment = ShipmentParamsModel(
            pickup_pincode=pickup_pincode,
            delivery_pincode=delivery_pincode,
            zone=zone,
            actual_weight_kg=request.actual_weight_kg,
            length_cm=request.length_cm,
            width_cm=request.width_cm,
            height_cm=request.height_cm,
            is_cod=request.is_cod,
            declared_value=declared_value,
            rate_band=seller.rate_band,
            mode=request.mode,
        )
        return shipment, providers

    # ============================================
    # BOOKING
    # ============================================

    async def book(self, seller_id: int, request: OrderRequestModel) -> BindingResult:
        result = BindingResult(state=BindingState.QUOTING, history=[BindingState.QUOTING])

        # QUOTING
        try:
            if await asyncio.to_thread(
                self.orders.order_number_exists, seller_id, request.order_number
            ):
                raise ValidationError(
                    f"Order {request.order_number} already exists",
                    {"field": "order_number"},
                )

            shipment, providers = await asyncio.to_thread(
                self._prepare_shipment, seller_id, request
            )
            comparison = await self.comparison.compare(shipment, providers)

        except NoServiceableProvider as e:
            result.failures = e.failures
            return self._abort(result, e)

        except (UnknownPincode, ValidationError, SellerNotFound, PersistenceFailure) as e:
            return self._abort(result, e)

        quote = comparison.best_option
        result.comparison = comparison
        result.failures = comparison.failures
        result.quote = quote
        self._advance(result, BindingState.RATE_SELECTED)

        # RATE_SELECTED -> WALLET_DEBITED
        order_uuid = uuid.uuid4()
        try:
            transaction = await asyncio.to_thread(
                self.wallet.debit,
                seller_id,
                quote.total_amount,
                f"Shipping charges for order {request.order_number}",
                order_uuid,
            )

        except (InsufficientWalletBalance, SellerNotFound, PersistenceFailure) as e:
            return self._abort(result, e)

        result.transaction = transaction
        self._advance(result, BindingState.WALLET_DEBITED)

        # WALLET_DEBITED -> ORDER_PERSISTED
        try:
            order = await asyncio.to_thread(
                self.orders.insert,
                order_uuid,
                seller_id,
                shipment,
                request,
                quote,
                transaction.id,
            )

        except Exception as e:
            # the debit must not outlive a failed save, whatever the cause
            if isinstance(e, PersistenceFailure):
                failure = e
            else:
                logger.exception(
                    extra=context_user_data.get(),
                    msg=f"Unexpected error saving order {request.order_number}",
                )
                failure = PersistenceFailure(f"Order could not be saved: {e}")
            logger.error(
                extra=context_user_data.get(),
                msg=f"Order {request.order_number} could not be saved after debit "
                f"{transaction.id}, reversing: {failure.message}",
            )
            await self._compensate(result, seller_id, quote.total_amount, order_uuid, request)
            return self._abort(result, failure)

        result.order = order
        self._advance(result, BindingState.ORDER_PERSISTED)

        # ORDER_PERSISTED -> TRANSACTION_LINKED
        try:
            result.transaction = await asyncio.to_thread(
                self.wallet.link_order, transaction.id, order_uuid
            )

        except (LedgerError, PersistenceFailure) as e:
            # order and debit both exist; left for reconciliation
            logger.error(
                extra=context_user_data.get(),
                msg=f"Could not confirm link of transaction {transaction.id} to order "
                f"{order_uuid}: {e.message}",
            )
            result.error = self._error(e)
            return result

        self._advance(result, BindingState.TRANSACTION_LINKED)

        logger.info(
            extra=context_user_data.get(),
            msg=f"Order {request.order_number} booked with {quote.courier} for "
            f"{quote.total_amount}",
        )
        return result

    async def _compensate(
        self,
        result: BindingResult,
        seller_id: int,
        amount: Decimal,
        order_uuid: uuid.UUID,
        request: OrderRequestModel,
    ):
        try:
            result.compensation = await asyncio.to_thread(
                self.wallet.credit,
                seller_id,
                amount,
                f"Reversal of shipping charges for order {request.order_number}",
                order_uuid,
            )

        except ShippingError as e:
            result.compensation_failed = True
            logger.critical(
                extra=context_user_data.get(),
                msg=f"Compensating credit of {amount} for seller {seller_id} FAILED, "
                f"order {request.order_number} ({order_uuid}): {e.message}",
            )

    def _advance(self, result: BindingResult, state: BindingState):
        result.state = state
        result.history.append(state)

    def _error(self, error: ShippingError) -> BindingError:
        return BindingError(
            code=error.code,
            message=error.message,
            status_code=int(error.status_code),
            data=error.data if isinstance(error.data, dict) else None,
        )

    def _abort(self, result: BindingResult, error: ShippingError) -> BindingResult:
        logger.info(
            extra=context_user_data.get(),
            msg=f"Order binding aborted in {result.state.value}: {error.code} {error.message}",
        )
        result.error = self._error(error)
        self._advance(result, BindingState.ABORTED)
        return result

    # ============================================
    # CANCELLATION
    # ============================================

    async def cancel(self, seller_id: int, order_uuid: uuid.UUID) -> CancellationResponseModel:
        """
        Cancel with the courier first, then mark the order cancelled and refund
        what the order was charged.
        """
        order = await asyncio.to_thread(self.orders.get, seller_id, order_uuid)
        if order is None:
            raise OrderNotFound(f"Order {order_uuid} not found", {"uuid": str(order_uuid)})

        if order.status != OrderStatus.BOOKED:
            raise OrderNotCancellable(
                f"Order in status {order.status.value} cannot be cancelled",
                {"status": order.status.value},
            )

        if order.awb_number and order.booking_type == BookingType.API:
            adapter = self.registry.get(order.courier)
            if adapter is not None:
                cancellation = await adapter.cancel_shipment(order.awb_number)
                if not cancellation.confirmed:
                    raise OrderNotCancellable(
                        f"{order.courier} did not confirm the cancellation",
                        {"awb": order.awb_number, "courier_message": cancellation.message},
                    )

        moved = await asyncio.to_thread(
            self.orders.transition_status, order_uuid, OrderStatus.BOOKED, OrderStatus.CANCELLED
        )
        if not moved:
            raise OrderNotCancellable("Order has already been cancelled")

        try:
            refund = await asyncio.to_thread(
                self.wallet.credit,
                seller_id,
                order.total_amount,
                f"Refund for cancelled order {order.order_number}",
                order_uuid,
            )

        except ShippingError:
            await asyncio.to_thread(
                self.orders.transition_status,
                order_uuid,
                OrderStatus.CANCELLED,
                OrderStatus.BOOKED,
            )
            raise

        order = await asyncio.to_thread(self.orders.get, seller_id, order_uuid)

        logger.info(
            extra=context_user_data.get(),
            msg=f"Order {order.order_number} cancelled, refunded {refund.amount}",
        )
        return CancellationResponseModel(order=order, refund=refund)
