from .pincode_mapping import Pincode_Mapping
from .seller import Seller

# Tariffs
from .rate_card import Rate_Card

# Wallet
from .wallet_transaction import Wallet_Transaction

from .order import Order
