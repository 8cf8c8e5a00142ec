from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

# schema
from schema.base import DBBaseModel
from schema.enums import BindingState, BookingType, OrderStatus, ServiceMode, Zone
from modules.rate_comparison.rate_comparison_schema import ComparisonResult, ProviderFailure
from modules.rate_quote.rate_quote_schema import QuoteModel
from modules.wallet.wallet_schema import WalletTransactionModel


class ConsigneeModel(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""


class OrderRequestModel(BaseModel):
    order_number: str = Field(min_length=1, max_length=64)
    pickup_pincode: Optional[str] = None
    delivery_pincode: str

    actual_weight_kg: Decimal
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None

    is_cod: bool = False
    declared_value: Decimal = Decimal("0")

    mode: Optional[ServiceMode] = None
    preferred_courier: Optional[str] = None

    consignee: ConsigneeModel = Field(default_factory=ConsigneeModel)


class OrderModel(DBBaseModel):
    order_number: str
    seller_id: int

    pickup_pincode: str
    delivery_pincode: str
    actual_weight_kg: Decimal
    length_cm: Optional[Decimal] = None
    width_cm: Optional[Decimal] = None
    height_cm: Optional[Decimal] = None
    chargeable_weight_kg: Decimal
    is_cod: bool
    declared_value: Decimal

    consignee_name: Optional[str] = None
    consignee_phone: Optional[str] = None
    consignee_address: Optional[str] = None
    consignee_city: Optional[str] = None
    consignee_state: Optional[str] = None

    courier: str
    mode: ServiceMode
    zone: Zone

    base_rate: Decimal
    additional_charges: Decimal
    shipping_charge: Decimal
    cod_charge: Decimal
    gst: Decimal
    total_amount: Decimal

    wallet_transaction_id: int

    status: OrderStatus
    awb_number: Optional[str] = None
    tracking_url: Optional[str] = None
    booking_type: Optional[BookingType] = None


class BindingError(BaseModel):
    code: str
    message: str
    status_code: int
    data: Optional[dict] = None


class BindingResult(BaseModel):
    """Outcome of one booking attempt, including the states it passed through."""

    state: BindingState
    order: Optional[OrderModel] = None
    transaction: Optional[WalletTransactionModel] = None
    quote: Optional[QuoteModel] = None
    comparison: Optional[ComparisonResult] = None
    failures: List[ProviderFailure] = []
    error: Optional[BindingError] = None
    compensation: Optional[WalletTransactionModel] = None
    compensation_failed: bool = False
    history: List[BindingState] = []

    @property
    def succeeded(self) -> bool:
        return self.state == BindingState.TRANSACTION_LINKED


class CancellationResponseModel(BaseModel):
    order: OrderModel
    refund: WalletTransactionModel
