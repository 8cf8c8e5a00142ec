from .zone_service import PincodeLookup, ZoneResolver, normalize_pincode

__all__ = ["PincodeLookup", "ZoneResolver", "normalize_pincode"]
