from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from schema.enums import ServiceMode, Zone


class ShipmentParamsModel(BaseModel):
    """Everything a courier needs to price one shipment."""

    pickup_pincode: str
    delivery_pincode: str
    zone: Zone
    actual_weight_kg: Decimal
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None
    is_cod: bool = False
    declared_value: Decimal = Decimal("0")
    rate_band: Optional[str] = None
    mode: Optional[ServiceMode] = None


class QuoteModel(BaseModel):
    """
    Transient price quote for one courier. Never stored on its own, the
    breakdown is folded into the order that uses it.
    """

    courier: str
    mode: ServiceMode
    zone: Zone
    rate_band: str
    chargeable_weight_kg: Decimal
    volumetric_weight_kg: Optional[Decimal] = None
    additional_units: int
    base_rate: Decimal
    additional_charges: Decimal
    shipping_cost: Decimal
    cod_charge: Decimal
    subtotal: Decimal
    gst: Decimal
    total_amount: Decimal

    class Config:
        frozen = True


class RateCalculatorParamsModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    courier: str
    mode: ServiceMode
    actual_weight_kg: Decimal = Field(gt=0)
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None
    is_cod: bool = False
    declared_value: Decimal = Field(default=Decimal("0"), ge=0)
    rate_band: Optional[str] = None
