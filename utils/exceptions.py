"""
Error taxonomy for the pricing and wallet core.

Every error carries an HTTP status and a stable machine readable code so the
API layer can render it without knowing where it came from.
"""

import http
from typing import Any, List, Optional


class ShippingError(Exception):
    status_code: int = http.HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "SHIPPING_ERROR"
    default_message: str = "An internal server error occurred. Please try again later."

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ValidationError(ShippingError):
    status_code = http.HTTPStatus.UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    default_message = "Invalid shipment input"


class UnknownPincode(ShippingError):
    status_code = http.HTTPStatus.BAD_REQUEST
    code = "UNKNOWN_PINCODE"
    default_message = "Pincode not found"

    def __init__(self, pincode: str, message: Optional[str] = None):
        self.pincode = pincode
        super().__init__(message or f"Pincode {pincode} not found", {"pincode": pincode})


class NoRateCardForZone(ShippingError):
    status_code = http.HTTPStatus.NOT_FOUND
    code = "NO_RATE_CARD"
    default_message = "No active rate card for this zone"


class RateCardNotFound(ShippingError):
    status_code = http.HTTPStatus.NOT_FOUND
    code = "RATE_CARD_NOT_FOUND"
    default_message = "Rate card not found"


class SellerNotFound(ShippingError):
    status_code = http.HTTPStatus.NOT_FOUND
    code = "SELLER_NOT_FOUND"
    default_message = "Seller not found"


class OrderNotFound(ShippingError):
    status_code = http.HTTPStatus.NOT_FOUND
    code = "ORDER_NOT_FOUND"
    default_message = "Order not found"


class OrderNotCancellable(ShippingError):
    status_code = http.HTTPStatus.CONFLICT
    code = "ORDER_NOT_CANCELLABLE"
    default_message = "Order cannot be cancelled"


# ============================================
# PER-PROVIDER ERRORS (non-fatal, excluded from comparison)
# ============================================


class ProviderError(ShippingError):
    status_code = http.HTTPStatus.BAD_GATEWAY
    code = "PROVIDER_ERROR"
    reason = "PROVIDER_UNAVAILABLE"

    def __init__(self, courier: str, message: Optional[str] = None):
        self.courier = courier
        super().__init__(message or self.default_message, {"courier": courier})


class ProviderUnavailable(ProviderError):
    code = "PROVIDER_UNAVAILABLE"
    reason = "PROVIDER_UNAVAILABLE"
    default_message = "Courier partner is unavailable"


class NotServiceable(ProviderError):
    status_code = http.HTTPStatus.UNPROCESSABLE_ENTITY
    code = "NOT_SERVICEABLE"
    reason = "NOT_SERVICEABLE"
    default_message = "Pincode not serviceable by courier partner"


class ProviderTimeout(ProviderError):
    status_code = http.HTTPStatus.GATEWAY_TIMEOUT
    code = "PROVIDER_TIMEOUT"
    reason = "TIMEOUT"
    default_message = "Courier partner did not respond in time"


# ============================================
# FATAL ERRORS
# ============================================


class NoServiceableProvider(ShippingError):
    status_code = http.HTTPStatus.UNPROCESSABLE_ENTITY
    code = "NO_SERVICEABLE_PROVIDER"
    default_message = "No courier partner can service this shipment"

    def __init__(self, failures: Optional[List[Any]] = None, message: Optional[str] = None):
        self.failures = list(failures or [])
        super().__init__(
            message,
            {"failures": [getattr(f, "model_dump", lambda: f)() for f in self.failures]},
        )


class InsufficientWalletBalance(ShippingError):
    status_code = http.HTTPStatus.PAYMENT_REQUIRED
    code = "INSUFFICIENT_BALANCE"
    default_message = "Insufficient wallet balance"


class DuplicateRecharge(ShippingError):
    status_code = http.HTTPStatus.CONFLICT
    code = "DUPLICATE_RECHARGE"
    default_message = "Payment already processed"


class LedgerError(ShippingError):
    status_code = http.HTTPStatus.CONFLICT
    code = "LEDGER_ERROR"
    default_message = "Wallet ledger is inconsistent"


class PersistenceFailure(ShippingError):
    code = "PERSISTENCE_FAILURE"
    default_message = "Unable to save the record"
