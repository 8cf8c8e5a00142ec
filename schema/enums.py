from enum import Enum


class Zone(str, Enum):
    WITHIN_CITY = "WITHIN_CITY"
    WITHIN_STATE = "WITHIN_STATE"
    METRO_TO_METRO = "METRO_TO_METRO"
    REST_OF_INDIA = "REST_OF_INDIA"
    SPECIAL_ZONE = "SPECIAL_ZONE"


class ServiceMode(str, Enum):
    SURFACE = "SURFACE"
    AIR = "AIR"


class TransactionType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    RECHARGE = "RECHARGE"


class OrderStatus(str, Enum):
    BOOKED = "BOOKED"
    SHIPPED = "SHIPPED"
    CANCELLED = "CANCELLED"


class BookingType(str, Enum):
    API = "API"
    MANUAL_REQUIRED = "MANUAL_REQUIRED"


class BindingState(str, Enum):
    QUOTING = "QUOTING"
    RATE_SELECTED = "RATE_SELECTED"
    WALLET_DEBITED = "WALLET_DEBITED"
    ORDER_PERSISTED = "ORDER_PERSISTED"
    TRANSACTION_LINKED = "TRANSACTION_LINKED"
    ABORTED = "ABORTED"


DEFAULT_RATE_BAND = "default"
