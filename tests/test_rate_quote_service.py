from decimal import Decimal

import pytest

from modules.rate_quote.rate_quote_schema import ShipmentParamsModel
from schema.enums import ServiceMode, Zone
from utils.exceptions import NoRateCardForZone, NotServiceable, ValidationError

from tests.factories import add_card


def shipment(**overrides):
    params = dict(
        pickup_pincode="110001",
        delivery_pincode="302001",
        zone=Zone.REST_OF_INDIA,
        actual_weight_kg=Decimal("1.7"),
    )
    params.update(overrides)
    return ShipmentParamsModel(**params)


def test_quote_breakdown(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20)

    quote = services.rate_quote.quote_shipment("alpha", ServiceMode.SURFACE, shipment())

    assert quote.chargeable_weight_kg == Decimal("1.7")
    assert quote.additional_units == 3
    assert quote.base_rate == Decimal("40.00")
    assert quote.additional_charges == Decimal("60.00")
    assert quote.shipping_cost == Decimal("100.00")
    assert quote.cod_charge == Decimal("0.00")
    assert quote.gst == Decimal("18.00")
    assert quote.total_amount == Decimal("118.00")


def test_quote_is_deterministic(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20)

    first = services.rate_quote.quote_shipment("alpha", ServiceMode.SURFACE, shipment())
    second = services.rate_quote.quote_shipment("alpha", ServiceMode.SURFACE, shipment())

    assert first == second


def test_cod_charge_uses_percent_of_declared_value(services):
    add_card(
        services.rate_cards,
        "alpha",
        Zone.REST_OF_INDIA,
        40,
        20,
        cod_flat_amount=Decimal("25"),
        cod_percent=Decimal("1.5"),
    )

    quote = services.rate_quote.quote_shipment(
        "alpha",
        ServiceMode.SURFACE,
        shipment(is_cod=True, declared_value=Decimal("2000")),
    )

    # 25 + 1.5 % of 2000
    assert quote.cod_charge == Decimal("55.00")
    assert quote.subtotal == Decimal("155.00")
    assert quote.gst == Decimal("27.90")
    assert quote.total_amount == Decimal("182.90")


def test_prepaid_shipment_pays_no_cod(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20, cod_flat_amount=Decimal("25"))

    quote = services.rate_quote.quote_shipment(
        "alpha", ServiceMode.SURFACE, shipment(declared_value=Decimal("2000"))
    )

    assert quote.cod_charge == Decimal("0.00")


def test_gst_rounds_half_up(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, "10.25", 0)

    quote = services.rate_quote.quote_shipment(
        "alpha", ServiceMode.SURFACE, shipment(actual_weight_kg=Decimal("0.5"))
    )

    # 10.25 * 0.18 = 1.845
    assert quote.gst == Decimal("1.85")
    assert quote.total_amount == Decimal("12.10")


def test_volumetric_weight_is_billed(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20)

    quote = services.rate_quote.quote_shipment(
        "alpha",
        ServiceMode.SURFACE,
        shipment(
            actual_weight_kg=Decimal("0.4"),
            length_cm=Decimal("30"),
            width_cm=Decimal("20"),
            height_cm=Decimal("10"),
        ),
    )

    assert quote.volumetric_weight_kg == Decimal("1.2")
    assert quote.chargeable_weight_kg == Decimal("1.2")
    assert quote.additional_units == 2


def test_minimum_billable_weight_from_card(services):
    add_card(
        services.rate_cards,
        "alpha",
        Zone.REST_OF_INDIA,
        40,
        20,
        min_billable_weight_kg=Decimal("1"),
    )

    quote = services.rate_quote.quote_shipment(
        "alpha", ServiceMode.SURFACE, shipment(actual_weight_kg=Decimal("0.2"))
    )

    assert quote.chargeable_weight_kg == Decimal("1")
    assert quote.additional_units == 1


def test_overweight_shipment_not_serviceable(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20, max_weight_kg=Decimal("5"))

    with pytest.raises(NotServiceable):
        services.rate_quote.quote_shipment(
            "alpha", ServiceMode.SURFACE, shipment(actual_weight_kg=Decimal("7.5"))
        )


def test_quote_for_precomputed_weight(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20)

    quote = services.rate_quote.quote("alpha", Zone.REST_OF_INDIA, ServiceMode.SURFACE, "1.7")

    assert quote.total_amount == Decimal("118.00")
    assert quote.volumetric_weight_kg is None


def test_quote_rejects_bad_input(services):
    add_card(services.rate_cards, "alpha", Zone.REST_OF_INDIA, 40, 20)

    with pytest.raises(ValidationError):
        services.rate_quote.quote("alpha", Zone.REST_OF_INDIA, ServiceMode.SURFACE, 0)

    with pytest.raises(ValidationError):
        services.rate_quote.quote(
            "alpha",
            Zone.REST_OF_INDIA,
            ServiceMode.SURFACE,
            1,
            is_cod=True,
            declared_value=-5,
        )


def test_no_card_for_zone(services):
    with pytest.raises(NoRateCardForZone):
        services.rate_quote.quote_shipment("alpha", ServiceMode.SURFACE, shipment())
