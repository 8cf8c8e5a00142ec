from .order_controller import order_router

__all__ = ["order_router"]
