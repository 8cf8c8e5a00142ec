from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from schema.enums import BookingType


class ServiceabilityModel(BaseModel):
    pincode: str
    serviceable: bool
    cod_available: bool = False
    pickup_available: bool = False
    details: Dict[str, Any] = {}


class BookingRequestModel(BaseModel):
    order_number: str
    pickup_pincode: str
    delivery_pincode: str
    weight_kg: Decimal
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None
    is_cod: bool = False
    declared_value: Decimal = Decimal("0")
    cod_amount: Decimal = Decimal("0")

    seller_name: str = ""
    consignee_name: str = ""
    consignee_phone: str = ""
    consignee_address: str = ""
    consignee_city: str = ""
    consignee_state: str = ""


class BookingResultModel(BaseModel):
    courier: str
    awb: str
    tracking_url: Optional[str] = None
    booking_type: BookingType = BookingType.API
    requires_manual_booking: bool = False
    error_reason: Optional[str] = None
    raw: Dict[str, Any] = {}


class TrackingEventModel(BaseModel):
    status: str
    location: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[datetime] = None


class TrackingResultModel(BaseModel):
    courier: str
    awb: str
    status: str
    history: List[TrackingEventModel] = []


class CancellationResultModel(BaseModel):
    courier: str
    awb: str
    confirmed: bool
    message: Optional[str] = None
