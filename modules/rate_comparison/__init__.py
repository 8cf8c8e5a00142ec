from .rate_comparison_service import RateComparisonService

__all__ = ["RateComparisonService"]
