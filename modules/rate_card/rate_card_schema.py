from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

# schema
from schema.base import DBBaseModel
from schema.enums import DEFAULT_RATE_BAND, ServiceMode, Zone


class RateCardBaseModel(BaseModel):
    courier: str
    zone: Zone
    mode: ServiceMode
    rate_band: str = DEFAULT_RATE_BAND

    base_rate: Decimal = Field(ge=0)
    additional_rate: Decimal = Field(ge=0)

    base_weight_kg: Decimal = Field(default=Decimal("0.5"), ge=0)
    weight_increment_kg: Decimal = Field(default=Decimal("0.5"), gt=0)
    min_billable_weight_kg: Decimal = Field(default=Decimal("0.5"), ge=0)
    max_weight_kg: Optional[Decimal] = Field(default=None, gt=0)

    cod_flat_amount: Decimal = Field(default=Decimal("0"), ge=0)
    cod_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class RateCardInsertModel(RateCardBaseModel):
    pass


class RateCardUpdateModel(BaseModel):
    base_rate: Optional[Decimal] = Field(default=None, ge=0)
    additional_rate: Optional[Decimal] = Field(default=None, ge=0)
    base_weight_kg: Optional[Decimal] = Field(default=None, ge=0)
    weight_increment_kg: Optional[Decimal] = Field(default=None, gt=0)
    min_billable_weight_kg: Optional[Decimal] = Field(default=None, ge=0)
    max_weight_kg: Optional[Decimal] = Field(default=None, gt=0)
    cod_flat_amount: Optional[Decimal] = Field(default=None, ge=0)
    cod_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


class RateCardModel(RateCardBaseModel, DBBaseModel):
    is_active: bool
    version: int


class RateCardFilterModel(BaseModel):
    courier: Optional[str] = None
    zone: Optional[Zone] = None
    mode: Optional[ServiceMode] = None
    rate_band: Optional[str] = None
    active_only: bool = True
