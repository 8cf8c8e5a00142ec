# tests/factories.py
import asyncio
from decimal import Decimal
from typing import Iterable, Optional

from database import session_scope
from models import Pincode_Mapping, Seller
from modules.rate_card.rate_card_schema import RateCardInsertModel
from modules.rate_quote.rate_quote_schema import QuoteModel
from schema.enums import ServiceMode, Zone
from shipping_partner.base import ProviderAdapter, RateCardProviderAdapter
from shipping_partner.provider_schema import (
    BookingResultModel,
    CancellationResultModel,
    ServiceabilityModel,
    TrackingResultModel,
)
from utils.exceptions import ProviderUnavailable


# pincode, city, state, region
PINCODES = [
    ("110001", "New Delhi", "Delhi", "north"),
    ("110002", "New Delhi", "Delhi", "north"),
    ("400001", "Mumbai", "Maharashtra", "west"),
    ("411001", "Pune", "Maharashtra", "west"),
    ("560001", "Bengaluru", "Karnataka", "south"),
    ("302001", "Jaipur", "Rajasthan", "north"),
    ("781001", "Guwahati", "Assam", "north east"),
]


def seed_pincodes(session_factory):
    with session_scope(session_factory) as db:
        for pincode, city, state, region in PINCODES:
            db.add(Pincode_Mapping(pincode=pincode, city=city, state=state, region=region))


def make_seller(
    session_factory,
    balance="1000",
    pickup_pincode: Optional[str] = "110001",
    rate_band: Optional[str] = None,
    name: str = "Acme Traders",
) -> int:
    with session_scope(session_factory) as db:
        seller = Seller(
            name=name,
            pickup_pincode=pickup_pincode,
            rate_band=rate_band,
            wallet_balance=Decimal(balance),
        )
        db.add(seller)
        db.flush()
        return seller.id


def add_card(
    rate_card_service,
    courier: str,
    zone: Zone,
    base_rate,
    additional_rate,
    mode: ServiceMode = ServiceMode.SURFACE,
    **kwargs,
):
    return rate_card_service.create_rate_card(
        RateCardInsertModel(
            courier=courier,
            zone=zone,
            mode=mode,
            base_rate=Decimal(str(base_rate)),
            additional_rate=Decimal(str(additional_rate)),
            **kwargs,
        )
    )


def add_cards_for_all_zones(rate_card_service, courier, base_rate, additional_rate, **kwargs):
    for zone in Zone:
        add_card(rate_card_service, courier, zone, base_rate, additional_rate, **kwargs)


def make_quote(courier: str, total, zone: Zone = Zone.REST_OF_INDIA) -> QuoteModel:
    total = Decimal(str(total))
    return QuoteModel(
        courier=courier,
        mode=ServiceMode.SURFACE,
        zone=zone,
        rate_band="default",
        chargeable_weight_kg=Decimal("0.5"),
        additional_units=0,
        base_rate=total,
        additional_charges=Decimal("0"),
        shipping_cost=total,
        cod_charge=Decimal("0"),
        subtotal=total,
        gst=Decimal("0"),
        total_amount=total,
    )


class StubCourier(RateCardProviderAdapter):
    """Prices from the real rate cards, answers serviceability and booking locally."""

    def __init__(
        self,
        slug: str,
        rate_quote_service,
        mode: ServiceMode = ServiceMode.SURFACE,
        unserviceable: Iterable[str] = (),
        no_cod: Iterable[str] = (),
        booking_error: Optional[str] = None,
        confirm_cancel: bool = True,
    ):
        super().__init__(None, rate_quote_service)
        self.slug = slug
        self.name = slug.title()
        self.mode = mode
        self.unserviceable = set(unserviceable)
        self.no_cod = set(no_cod)
        self.booking_error = booking_error
        self.confirm_cancel = confirm_cancel
        self.booked = []
        self.cancelled = []

    async def check_serviceability(self, pincode):
        serviceable = pincode not in self.unserviceable
        return ServiceabilityModel(
            pincode=pincode,
            serviceable=serviceable,
            cod_available=serviceable and pincode not in self.no_cod,
            pickup_available=serviceable,
        )

    async def create_shipment(self, details):
        if self.booking_error:
            raise ProviderUnavailable(self.slug, self.booking_error)
        self.booked.append(details)
        awb = f"{self.slug.upper()}{details.order_number}"
        return BookingResultModel(
            courier=self.slug,
            awb=awb,
            tracking_url=f"https://track.example/{awb}",
        )

    async def track_shipment(self, awb):
        return TrackingResultModel(courier=self.slug, awb=awb, status="in transit")

    async def cancel_shipment(self, awb):
        self.cancelled.append(awb)
        return CancellationResultModel(
            courier=self.slug,
            awb=awb,
            confirmed=self.confirm_cancel,
            message=None if self.confirm_cancel else "shipment already manifested",
        )


class ScriptedCourier(ProviderAdapter):
    """Returns a fixed quote, raises a given error, or just hangs."""

    def __init__(self, slug: str, total=None, error: Optional[Exception] = None, delay: float = 0):
        self.slug = slug
        self.name = slug.title()
        self.total = total
        self.error = error
        self.delay = delay
        self.calls = 0
        self.finished = False

    async def check_serviceability(self, pincode):
        return ServiceabilityModel(pincode=pincode, serviceable=True, pickup_available=True)

    async def quote(self, shipment):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished = True
        if self.error is not None:
            raise self.error
        return make_quote(self.slug, self.total, shipment.zone)

    async def book_shipment(self, details):
        return BookingResultModel(courier=self.slug, awb=f"{self.slug.upper()}-1")

    async def track_shipment(self, awb):
        return TrackingResultModel(courier=self.slug, awb=awb, status="booked")

    async def cancel_shipment(self, awb):
        return CancellationResultModel(courier=self.slug, awb=awb, confirmed=True)
