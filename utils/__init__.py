from utils.exceptions import ShippingError

__all__ = ["ShippingError"]
