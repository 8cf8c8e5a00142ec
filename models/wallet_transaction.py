from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Wallet_Transaction(DBBase, DBBaseClass):
    """
    Append-only wallet ledger row.

    closing_balance is the seller's balance right after this entry.
    linked_order_id is the reserved order uuid and is set at most once.
    """

    __tablename__ = "wallet_transaction"

    seller_id = Column(Integer, ForeignKey("seller.id"), nullable=False, index=True)

    transaction_type = Column(String(20), nullable=False)
    amount = Column(Numeric(20, 2), nullable=False)
    closing_balance = Column(Numeric(20, 2), nullable=False)

    linked_order_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    # external payment reference (razorpay payment id etc.) for recharges
    reference = Column(String(255), nullable=True)
    description = Column(String(255), nullable=True)

    seller = relationship("Seller")

    __table_args__ = (
        Index(
            "uq_wallet_transaction_reference",
            "seller_id",
            "transaction_type",
            "reference",
            unique=True,
        ),
    )

    def to_model(self):
        from modules.wallet.wallet_schema import WalletTransactionModel

        return WalletTransactionModel.model_validate(self)
