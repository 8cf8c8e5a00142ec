"""
Rate Quote Service

Turns a rate card and a chargeable weight into a fully taxed quote:

    additional charges = additional units × additional rate
    shipping cost      = base rate + additional charges
    cod charge         = cod flat + cod percent / 100 × declared value  (COD only)
    subtotal           = shipping cost + cod charge
    gst                = round_half_up(subtotal × 18 %, 2)
    total              = subtotal + gst

Quotes are deterministic: the same inputs always give an identical quote.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from logger import logger

# schema
from schema.enums import ServiceMode, Zone
from modules.rate_card.rate_card_schema import RateCardModel
from .rate_quote_schema import QuoteModel, ShipmentParamsModel

# service
from modules.rate_card.rate_card_service import RateCardService
from .weight_billing_service import WeightBillingService, to_decimal

from utils.exceptions import NotServiceable, ValidationError


TWO_PLACES = Decimal("0.01")


def round_price(value: Decimal) -> Decimal:
    """Round value to 2 decimal places, half up"""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class RateQuoteService:

    GST_RATE = Decimal("0.18")

    def __init__(
        self,
        rate_card_service: RateCardService,
        weight_billing_service: WeightBillingService,
        gst_rate: Optional[Decimal] = None,
    ):
        self.rate_cards = rate_card_service
        self.weights = weight_billing_service
        self.gst_rate = Decimal(str(gst_rate)) if gst_rate is not None else self.GST_RATE

    def quote(
        self,
        courier: str,
        zone: Zone,
        mode: ServiceMode,
        chargeable_weight_kg,
        is_cod: bool = False,
        declared_value=Decimal("0"),
        rate_band: Optional[str] = None,
    ) -> QuoteModel:
        """Quote for an already computed chargeable weight."""
        card = self.rate_cards.get_active(courier, zone, mode, rate_band)

        chargeable = to_decimal(chargeable_weight_kg, "chargeable_weight_kg")
        if chargeable <= 0:
            raise ValidationError(
                "chargeable_weight_kg must be greater than 0",
                {"field": "chargeable_weight_kg"},
            )

        return self.price(
            card,
            max(chargeable, card.min_billable_weight_kg),
            is_cod=is_cod,
            declared_value=declared_value,
        )

    def quote_shipment(
        self,
        courier: str,
        mode: ServiceMode,
        shipment: ShipmentParamsModel,
    ) -> QuoteModel:
        """Quote from raw shipment data, applying the card's minimum billable weight."""
        card = self.rate_cards.get_active(courier, shipment.zone, mode, shipment.rate_band)

        dimensions = self.weights.build_dimensions(
            shipment.length_cm, shipment.width_cm, shipment.height_cm
        )
        breakdown = self.weights.chargeable_weight(
            shipment.actual_weight_kg, dimensions, card.min_billable_weight_kg
        )

        return self.price(
            card,
            breakdown.chargeable_weight_kg,
            is_cod=shipment.is_cod,
            declared_value=shipment.declared_value,
            volumetric_weight_kg=breakdown.volumetric_weight_kg,
        )

    def price(
        self,
        card: RateCardModel,
        chargeable_weight_kg: Decimal,
        is_cod: bool = False,
        declared_value=Decimal("0"),
        volumetric_weight_kg: Optional[Decimal] = None,
    ) -> QuoteModel:
        declared = to_decimal(declared_value if declared_value is not None else 0, "declared_value")
        if declared < 0:
            raise ValidationError("declared_value cannot be negative", {"field": "declared_value"})

        if card.max_weight_kg is not None and chargeable_weight_kg > card.max_weight_kg:
            raise NotServiceable(
                card.courier,
                f"{card.courier} does not carry {chargeable_weight_kg} kg in this band",
            )

        units = self.weights.additional_units(
            chargeable_weight_kg, card.base_weight_kg, card.weight_increment_kg
        )

        base_rate = round_price(card.base_rate)
        additional_charges = round_price(units * card.additional_rate)
        shipping_cost = base_rate + additional_charges

        cod_charge = Decimal("0.00")
        if is_cod:
            cod_charge = round_price(
                card.cod_flat_amount + card.cod_percent / Decimal("100") * declared
            )

        subtotal = round_price(shipping_cost + cod_charge)
        gst = round_price(subtotal * self.gst_rate)
        total_amount = subtotal + gst

        quote = QuoteModel(
            courier=card.courier,
            mode=card.mode,
            zone=card.zone,
            rate_band=card.rate_band,
            chargeable_weight_kg=chargeable_weight_kg,
            volumetric_weight_kg=volumetric_weight_kg,
            additional_units=units,
            base_rate=base_rate,
            additional_charges=additional_charges,
            shipping_cost=shipping_cost,
            cod_charge=cod_charge,
            subtotal=subtotal,
            gst=gst,
            total_amount=total_amount,
        )

        logger.debug(
            msg=f"quote {card.courier}/{card.zone.value}/{card.mode.value}"
            f" {chargeable_weight_kg}kg -> {total_amount}",
        )
        return quote
