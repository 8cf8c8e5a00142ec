"""
Courier partner contract.

Every courier integration implements ProviderAdapter and translates its own
payloads into the shared result models. Per-call failures are reported with
the typed provider errors (ProviderUnavailable, NotServiceable,
ProviderTimeout); booking never raises and falls back to a manual-processing
record instead.
"""

import asyncio
import random
import string
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from logger import logger

# schema
from schema.enums import BookingType, ServiceMode
from modules.rate_quote.rate_quote_schema import QuoteModel, ShipmentParamsModel
from .provider_schema import (
    BookingRequestModel,
    BookingResultModel,
    CancellationResultModel,
    ServiceabilityModel,
    TrackingResultModel,
)

# service
from modules.rate_quote.rate_quote_service import RateQuoteService

from utils.exceptions import (
    NoRateCardForZone,
    NotServiceable,
    ProviderTimeout,
    ProviderUnavailable,
)


class ProviderAdapter(ABC):

    slug: str = ""
    name: str = ""
    mode: ServiceMode = ServiceMode.SURFACE

    @abstractmethod
    async def check_serviceability(self, pincode: str) -> ServiceabilityModel:
        ...

    @abstractmethod
    async def quote(self, shipment: ShipmentParamsModel) -> QuoteModel:
        ...

    @abstractmethod
    async def book_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        ...

    @abstractmethod
    async def track_shipment(self, awb: str) -> TrackingResultModel:
        ...

    @abstractmethod
    async def cancel_shipment(self, awb: str) -> CancellationResultModel:
        ...


def manual_booking_reference() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"MB{int(time.time() * 1000)}{suffix}"


class RateCardProviderAdapter(ProviderAdapter):
    """
    Adapter whose price comes from the aggregator's own rate cards and whose
    serviceability, booking, tracking and cancellation go to the courier's
    API over a shared httpx client.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_quote_service: RateQuoteService,
        credentials: Optional[Dict[str, Any]] = None,
    ):
        self.http = http_client
        self.rate_quote = rate_quote_service
        self.credentials = credentials or {}

    # ============================================
    # QUOTE
    # ============================================

    async def quote(self, shipment: ShipmentParamsModel) -> QuoteModel:
        if shipment.mode is not None and shipment.mode != self.mode:
            raise NotServiceable(self.slug, f"{self.name} does not offer {shipment.mode.value}")

        pickup, delivery = await asyncio.gather(
            self.check_serviceability(shipment.pickup_pincode),
            self.check_serviceability(shipment.delivery_pincode),
        )

        if not pickup.pickup_available:
            raise NotServiceable(self.slug, f"Pickup not available at {pickup.pincode}")

        if not delivery.serviceable:
            raise NotServiceable(self.slug, f"Delivery not available at {delivery.pincode}")

        if shipment.is_cod and not delivery.cod_available:
            raise NotServiceable(self.slug, f"COD not available at {delivery.pincode}")

        try:
            # rate cards are read through a blocking session
            return await asyncio.to_thread(
                self.rate_quote.quote_shipment, self.slug, self.mode, shipment
            )
        except NoRateCardForZone as e:
            raise NotServiceable(self.slug, e.message)

    # ============================================
    # BOOKING
    # ============================================

    async def book_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        try:
            return await self.create_shipment(details)

        except Exception as e:
            logger.error(
                msg=f"{self.name} booking failed for {details.order_number}, "
                f"creating manual reference: {e}",
            )
            return self.manual_booking(str(e))

    @abstractmethod
    async def create_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        ...

    def manual_booking(self, error_reason: str) -> BookingResultModel:
        return BookingResultModel(
            courier=self.slug,
            awb=manual_booking_reference(),
            tracking_url=None,
            booking_type=BookingType.MANUAL_REQUIRED,
            requires_manual_booking=True,
            error_reason=error_reason,
        )

    # ============================================
    # HTTP
    # ============================================

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        """
        Perform one call against the courier and return the decoded JSON body,
        mapping transport failures onto the provider error taxonomy.
        """
        try:
            response = await self.http.request(method, url, **kwargs)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(msg=f"{self.name} {method} {url} timed out: {e}")
            raise ProviderTimeout(self.slug)

        except httpx.HTTPStatusError as e:
            logger.error(
                msg=f"{self.name} {method} {url} returned {e.response.status_code}",
            )
            raise ProviderUnavailable(
                self.slug, f"{self.name} returned HTTP {e.response.status_code}"
            )

        except httpx.HTTPError as e:
            logger.error(msg=f"{self.name} {method} {url} failed: {e}")
            raise ProviderUnavailable(self.slug, f"Unable to connect to {self.name}")

        try:
            return response.json()
        except ValueError as e:
            logger.error(msg=f"{self.name} Failed to parse JSON response: {e}")
            raise ProviderUnavailable(self.slug, f"{self.name} sent an unreadable response")
