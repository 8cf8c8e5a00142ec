"""
Service container.

Everything with state (engine, session factory, the shared httpx client,
caches and courier adapters) is built here once at startup and handed to the
services that need it. Tests build their own container against an in-memory
database and fake couriers.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import httpx
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config import Settings

# service
from modules.orders.order_repository import OrderRepository
from modules.orders.order_service import OrderBindingService
from modules.rate_card.rate_card_service import RateCardService
from modules.rate_comparison.rate_comparison_service import RateComparisonService
from modules.rate_quote.rate_quote_service import RateQuoteService
from modules.rate_quote.weight_billing_service import WeightBillingService
from modules.shipment.shipment_service import ShipmentService
from modules.wallet.wallet_service import WalletLedgerService
from modules.zone.zone_service import PincodeLookup, ZoneResolver
from shipping_partner.base import ProviderAdapter
from shipping_partner.registry import ProviderRegistry


@dataclass
class ServiceContainer:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    http_client: httpx.AsyncClient

    pincode_lookup: PincodeLookup
    zone_resolver: ZoneResolver
    weight_billing: WeightBillingService
    rate_cards: RateCardService
    rate_quote: RateQuoteService
    registry: ProviderRegistry
    comparison: RateComparisonService
    wallet: WalletLedgerService
    orders: OrderRepository
    order_binding: OrderBindingService
    shipments: ShipmentService


def build_services(
    settings: Settings,
    engine: Engine,
    session_factory: sessionmaker,
    http_client: httpx.AsyncClient,
    adapters: Optional[Iterable[ProviderAdapter]] = None,
) -> ServiceContainer:
    """
    Wire the services together. When adapters is given those are registered
    instead of the couriers named in settings.active_couriers.
    """
    pincode_lookup = PincodeLookup(session_factory, cache_ttl=settings.zone_cache_ttl)
    zone_resolver = ZoneResolver(
        pincode_lookup,
        metro_cities=settings.metro_cities,
        special_zone_states=settings.special_zone_states,
        special_zone_regions=settings.special_zone_regions,
    )

    weight_billing = WeightBillingService(settings.volumetric_divisor)
    rate_cards = RateCardService(session_factory, cache_ttl=settings.rate_card_cache_ttl)
    rate_quote = RateQuoteService(rate_cards, weight_billing, gst_rate=settings.gst_rate)

    if adapters is None:
        registry = ProviderRegistry.from_settings(settings, http_client, rate_quote)
    else:
        registry = ProviderRegistry(adapters)

    comparison = RateComparisonService(registry, settings.provider_timeout_seconds)
    wallet = WalletLedgerService(session_factory)
    orders = OrderRepository(session_factory)

    order_binding = OrderBindingService(
        zone_resolver, weight_billing, comparison, wallet, orders, registry
    )
    shipments = ShipmentService(orders, wallet, registry)

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        http_client=http_client,
        pincode_lookup=pincode_lookup,
        zone_resolver=zone_resolver,
        weight_billing=weight_billing,
        rate_cards=rate_cards,
        rate_quote=rate_quote,
        registry=registry,
        comparison=comparison,
        wallet=wallet,
        orders=orders,
        order_binding=order_binding,
        shipments=shipments,
    )
