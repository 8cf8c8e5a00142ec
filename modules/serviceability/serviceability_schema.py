from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from schema.enums import ServiceMode


class RateCompareRequestModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    actual_weight_kg: Decimal = Field(gt=0)
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None
    is_cod: bool = False
    declared_value: Decimal = Field(default=Decimal("0"), ge=0)
    mode: Optional[ServiceMode] = None
    rate_band: Optional[str] = None
