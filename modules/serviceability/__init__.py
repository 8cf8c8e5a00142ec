from .serviceability_controller import serviceability_router

__all__ = ["serviceability_router"]
