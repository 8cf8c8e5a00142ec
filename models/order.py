"""
Order Model

An order is written only after the seller's wallet has been debited for it.
Its uuid is reserved before the debit so the funding wallet transaction is
created already linked to it.

Field naming conventions:
- Price fields: Numeric(10, 2) - 2 decimal places
- Weight/dimension fields: Numeric(10, 3) - 3 decimal places
- All datetime fields: TIMESTAMP with timezone
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase

from schema.enums import OrderStatus


class Order(DBBase, DBBaseClass):

    __tablename__ = "shipping_order"

    # ============================================
    # ORDER IDENTIFICATION
    # ============================================

    order_number = Column(String(64), nullable=False)
    seller_id = Column(Integer, ForeignKey("seller.id"), nullable=False)

    # ============================================
    # SHIPMENT DETAILS
    # ============================================

    pickup_pincode = Column(String(6), nullable=False)
    delivery_pincode = Column(String(6), nullable=False)

    actual_weight_kg = Column(Numeric(10, 3), nullable=False)
    length_cm = Column(Numeric(10, 3), nullable=True)
    width_cm = Column(Numeric(10, 3), nullable=True)
    height_cm = Column(Numeric(10, 3), nullable=True)
    chargeable_weight_kg = Column(Numeric(10, 3), nullable=False)

    is_cod = Column(Boolean, nullable=False, default=False)
    declared_value = Column(Numeric(10, 2), nullable=False, default=0)

    # ============================================
    # CONSIGNEE
    # ============================================

    consignee_name = Column(String(255), nullable=True)
    consignee_phone = Column(String(20), nullable=True)
    consignee_address = Column(String(500), nullable=True)
    consignee_city = Column(String(100), nullable=True)
    consignee_state = Column(String(100), nullable=True)

    # ============================================
    # COURIER SELECTION
    # ============================================

    courier = Column(String(100), nullable=False)
    mode = Column(String(20), nullable=False)
    zone = Column(String(30), nullable=False)

    # ============================================
    # PAYMENT BREAKDOWN (from the chosen quote)
    # ============================================

    base_rate = Column(Numeric(10, 2), nullable=False)
    additional_charges = Column(Numeric(10, 2), nullable=False)
    shipping_charge = Column(Numeric(10, 2), nullable=False)
    cod_charge = Column(Numeric(10, 2), nullable=False, default=0)
    gst = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    wallet_transaction_id = Column(
        Integer, ForeignKey("wallet_transaction.id"), nullable=False
    )

    # ============================================
    # SHIPMENT STATE
    # ============================================

    status = Column(String(20), nullable=False, default=OrderStatus.BOOKED.value)
    awb_number = Column(String(100), nullable=True)
    tracking_url = Column(String(255), nullable=True)
    booking_type = Column(String(30), nullable=True)

    seller = relationship("Seller")
    wallet_transaction = relationship("Wallet_Transaction")

    __table_args__ = (
        Index("uq_shipping_order_seller_number", "seller_id", "order_number", unique=True),
        Index("ix_shipping_order_seller_status", "seller_id", "status"),
        Index("ix_shipping_order_awb", "awb_number"),
    )

    def to_model(self):
        from modules.orders.order_schema import OrderModel

        return OrderModel.model_validate(self)
