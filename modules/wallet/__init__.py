from .wallet_controller import wallet_router

__all__ = ["wallet_router"]
