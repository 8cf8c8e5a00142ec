from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

# schema
from schema.base import DBBaseModel, PaginationParams
from schema.enums import TransactionType


class SellerModel(DBBaseModel):
    name: str
    pickup_pincode: Optional[str] = None
    rate_band: Optional[str] = None
    wallet_balance: Decimal


class WalletResponseModel(BaseModel):
    seller_id: int
    balance: Decimal


class WalletTransactionModel(DBBaseModel):
    seller_id: int
    transaction_type: TransactionType
    amount: Decimal
    closing_balance: Decimal
    linked_order_id: Optional[UUID] = None
    reference: Optional[str] = None
    description: Optional[str] = None


class RechargeRequestModel(BaseModel):
    amount: Decimal = Field(gt=0)
    reference: str = Field(min_length=1, max_length=255)


class TransactionFilterModel(PaginationParams):
    transaction_type: Optional[TransactionType] = None


class LedgerVerificationModel(BaseModel):
    seller_id: int
    balance: Decimal
    transaction_count: int
    consistent: bool
    first_mismatch_transaction_id: Optional[int] = None
