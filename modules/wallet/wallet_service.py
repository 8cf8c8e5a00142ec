"""
Wallet Ledger Service

Each seller has one prepaid balance. Every mutation is a single database
transaction that moves the balance and appends exactly one ledger row whose
closing_balance is the balance right after the move, so for any seller:

    balance == sum(credits) + sum(recharges) - sum(debits) + opening balance

Debits are an atomic conditional decrement at the storage level; two debits
racing for the same seller can never take the balance below zero.
"""

from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from context_manager.context import context_user_data
from database import session_scope
from logger import logger

# models
from models import Seller, Wallet_Transaction

# schema
from schema.enums import TransactionType
from .wallet_schema import (
    LedgerVerificationModel,
    SellerModel,
    TransactionFilterModel,
    WalletTransactionModel,
)

from utils.exceptions import (
    DuplicateRecharge,
    InsufficientWalletBalance,
    LedgerError,
    SellerNotFound,
    ValidationError,
)


CREDIT_TYPES = (TransactionType.CREDIT, TransactionType.RECHARGE)


def _validate_amount(amount) -> Decimal:
    try:
        amount = Decimal(str(amount))
    except (ArithmeticError, ValueError):
        raise ValidationError("amount must be a number", {"field": "amount"})

    if not amount.is_finite() or amount <= 0:
        raise ValidationError("amount must be greater than 0", {"field": "amount"})

    return amount


def signed_amount(transaction_type, amount: Decimal) -> Decimal:
    return amount if TransactionType(transaction_type) in CREDIT_TYPES else -amount


class WalletLedgerService:

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ============================================
    # READS
    # ============================================

    def get_seller(self, seller_id: int) -> SellerModel:
        with session_scope(self._session_factory) as db:
            return self._require_seller(db, seller_id).to_model()

    def get_balance(self, seller_id: int) -> Decimal:
        with session_scope(self._session_factory) as db:
            balance = (
                db.query(Seller.wallet_balance)
                .filter(Seller.id == seller_id, Seller.is_deleted.is_(False))
                .scalar()
            )

        if balance is None:
            raise SellerNotFound(f"Seller {seller_id} not found", {"seller_id": seller_id})

        return Decimal(balance)

    def list_transactions(
        self, seller_id: int, filters: Optional[TransactionFilterModel] = None
    ) -> Tuple[List[WalletTransactionModel], int]:
        filters = filters or TransactionFilterModel()

        with session_scope(self._session_factory) as db:
            self._require_seller(db, seller_id)

            query = db.query(Wallet_Transaction).filter(
                Wallet_Transaction.seller_id == seller_id
            )
            if filters.transaction_type:
                query = query.filter(
                    Wallet_Transaction.transaction_type == filters.transaction_type.value
                )

            total_count = query.count()

            offset = (filters.page_number - 1) * filters.batch_size
            rows = (
                query.order_by(Wallet_Transaction.id.desc())
                .offset(offset)
                .limit(filters.batch_size)
                .all()
            )

            return [row.to_model() for row in rows], total_count

    # ============================================
    # MUTATIONS
    # ============================================

    def debit(
        self,
        seller_id: int,
        amount,
        reason: str,
        order_id: Optional[UUID] = None,
    ) -> WalletTransactionModel:
        """
        Take amount from the seller's wallet. When order_id is given the
        ledger row is created already linked to that order.
        """
        amount = _validate_amount(amount)

        with session_scope(self._session_factory) as db:
            result = db.execute(
                update(Seller)
                .where(
                    Seller.id == seller_id,
                    Seller.is_deleted.is_(False),
                    Seller.wallet_balance >= amount,
                )
                .values(wallet_balance=Seller.wallet_balance - amount)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                balance = self._require_seller(db, seller_id).wallet_balance
                logger.info(
                    extra=context_user_data.get(),
                    msg=f"Debit of {amount} rejected for seller {seller_id}, balance {balance}",
                )
                raise InsufficientWalletBalance(
                    f"Insufficient wallet balance. Required {amount}, available {balance}",
                    {"required": str(amount), "available": str(balance)},
                )

            transaction = self._append(
                db, seller_id, TransactionType.DEBIT, amount, reason, order_id=order_id
            )

        logger.info(
            extra=context_user_data.get(),
            msg=f"Debited {amount} from seller {seller_id}, closing {transaction.closing_balance}",
        )
        return transaction

    def credit(
        self,
        seller_id: int,
        amount,
        reason: str,
        order_id: Optional[UUID] = None,
    ) -> WalletTransactionModel:
        amount = _validate_amount(amount)

        with session_scope(self._session_factory) as db:
            transaction = self._increment(
                db, seller_id, TransactionType.CREDIT, amount, reason, order_id=order_id
            )

        logger.info(
            extra=context_user_data.get(),
            msg=f"Credited {amount} to seller {seller_id}, closing {transaction.closing_balance}",
        )
        return transaction

    def recharge(self, seller_id: int, amount, reference: str) -> WalletTransactionModel:
        """Top up from an external payment; a payment reference is applied once."""
        amount = _validate_amount(amount)
        if not reference:
            raise ValidationError("reference is required", {"field": "reference"})

        with session_scope(self._session_factory) as db:
            self._require_seller(db, seller_id)

            existing = (
                db.query(Wallet_Transaction.id)
                .filter(
                    Wallet_Transaction.seller_id == seller_id,
                    Wallet_Transaction.transaction_type == TransactionType.RECHARGE.value,
                    Wallet_Transaction.reference == reference,
                )
                .first()
            )
            if existing is not None:
                raise DuplicateRecharge(
                    "Payment already processed", {"reference": reference}
                )

            try:
                transaction = self._increment(
                    db,
                    seller_id,
                    TransactionType.RECHARGE,
                    amount,
                    f"Wallet recharge {reference}",
                    reference=reference,
                )
            except IntegrityError as e:
                # a concurrent recharge with this reference committed first
                raise DuplicateRecharge(
                    "Payment already processed", {"reference": reference}
                ) from e

        logger.info(
            extra=context_user_data.get(),
            msg=f"Recharged {amount} for seller {seller_id} ref {reference}",
        )
        return transaction

    def link_order(self, transaction_id: int, order_id: UUID) -> WalletTransactionModel:
        with session_scope(self._session_factory) as db:
            transaction = (
                db.query(Wallet_Transaction)
                .filter(Wallet_Transaction.id == transaction_id)
                .with_for_update()
                .first()
            )
            if transaction is None:
                raise LedgerError(
                    f"Wallet transaction {transaction_id} not found",
                    {"transaction_id": transaction_id},
                )

            if transaction.linked_order_id is not None:
                if transaction.linked_order_id != order_id:
                    raise LedgerError(
                        "Wallet transaction already linked to another order",
                        {
                            "transaction_id": transaction_id,
                            "linked_order_id": str(transaction.linked_order_id),
                        },
                    )
                return transaction.to_model()

            transaction.linked_order_id = order_id
            db.add(transaction)
            db.flush()
            return transaction.to_model()

    # ============================================
    # AUDIT
    # ============================================

    def verify_ledger(self, seller_id: int) -> LedgerVerificationModel:
        """Walk the ledger in order and check every closing balance follows from the last."""
        with session_scope(self._session_factory) as db:
            seller = self._require_seller(db, seller_id)
            balance = Decimal(seller.wallet_balance)

            transactions = (
                db.query(Wallet_Transaction)
                .filter(Wallet_Transaction.seller_id == seller_id)
                .order_by(Wallet_Transaction.id)
                .all()
            )

            previous: Optional[Decimal] = None
            mismatch: Optional[int] = None
            for transaction in transactions:
                closing = Decimal(transaction.closing_balance)
                opening = closing - signed_amount(
                    transaction.transaction_type, Decimal(transaction.amount)
                )

                if (previous is not None and opening != previous) or opening < 0:
                    mismatch = transaction.id
                    break
                previous = closing

            if mismatch is None and previous is not None and previous != balance:
                mismatch = transactions[-1].id

        if mismatch is not None:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Ledger mismatch for seller {seller_id} at transaction {mismatch}",
            )

        return LedgerVerificationModel(
            seller_id=seller_id,
            balance=balance,
            transaction_count=len(transactions),
            consistent=mismatch is None,
            first_mismatch_transaction_id=mismatch,
        )

    # ============================================
    # HELPERS
    # ============================================

    def _require_seller(self, db: Session, seller_id: int) -> Seller:
        seller = Seller.get_by_id(db, seller_id)
        if seller is None:
            raise SellerNotFound(f"Seller {seller_id} not found", {"seller_id": seller_id})
        return seller

    def _increment(
        self,
        db: Session,
        seller_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        reason: str,
        order_id: Optional[UUID] = None,
        reference: Optional[str] = None,
    ) -> WalletTransactionModel:
        result = db.execute(
            update(Seller)
            .where(Seller.id == seller_id, Seller.is_deleted.is_(False))
            .values(wallet_balance=Seller.wallet_balance + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise SellerNotFound(f"Seller {seller_id} not found", {"seller_id": seller_id})

        return self._append(
            db, seller_id, transaction_type, amount, reason, order_id=order_id, reference=reference
        )

    def _append(
        self,
        db: Session,
        seller_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        reason: str,
        order_id: Optional[UUID] = None,
        reference: Optional[str] = None,
    ) -> WalletTransactionModel:
        # read back inside the same transaction, the row is still locked by the update
        closing_balance = (
            db.query(Seller.wallet_balance).filter(Seller.id == seller_id).scalar()
        )

        transaction = Wallet_Transaction(
            seller_id=seller_id,
            transaction_type=transaction_type.value,
            amount=amount,
            closing_balance=closing_balance,
            linked_order_id=order_id,
            reference=reference,
            description=reason,
        )
        db.add(transaction)
        db.flush()
        return transaction.to_model()

    def total_by_type(self, seller_id: int) -> dict:
        with session_scope(self._session_factory) as db:
            rows = (
                db.query(Wallet_Transaction.transaction_type, func.sum(Wallet_Transaction.amount))
                .filter(Wallet_Transaction.seller_id == seller_id)
                .group_by(Wallet_Transaction.transaction_type)
                .all()
            )
            return {transaction_type: Decimal(total) for transaction_type, total in rows}
