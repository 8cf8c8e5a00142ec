from sqlalchemy import CheckConstraint, Column, Numeric, String

from database import DBBaseClass, DBBase


class Seller(DBBase, DBBaseClass):
    __tablename__ = "seller"

    name = Column(String(255), nullable=False)
    pickup_pincode = Column(String(6), nullable=True)

    # custom tariff band, falls back to the default band when unset
    rate_band = Column(String(50), nullable=True)

    # written only by WalletLedgerService
    wallet_balance = Column(Numeric(20, 2), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="ck_seller_wallet_non_negative"),
    )

    def to_model(self):
        from modules.wallet.wallet_schema import SellerModel

        return SellerModel.model_validate(self)
