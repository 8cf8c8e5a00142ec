"""
Weight Billing Service

Derives the weight a shipment is billed on.

    volumetric weight  = (L × W × H) / divisor          (cm, kg)
    chargeable weight  = max(actual, volumetric, minimum billable)
    additional units   = ceil((chargeable − base weight) / increment), >= 0

Partial increments are billed as a full increment, never pro-rated.
All arithmetic is Decimal; weights are not rounded before comparison so the
chargeable weight is never below any of its three inputs.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING, InvalidOperation
from typing import Any, Optional

from utils.exceptions import ValidationError


@dataclass(frozen=True)
class Dimensions:
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal


@dataclass(frozen=True)
class WeightBreakdown:
    actual_weight_kg: Decimal
    volumetric_weight_kg: Decimal
    min_billable_weight_kg: Decimal
    chargeable_weight_kg: Decimal


def to_decimal(value: Any, field: str) -> Decimal:
    """Convert value to Decimal, raising ValidationError on garbage"""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", {"field": field})
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", {"field": field, "value": value})
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", {"field": field})
    return result


class WeightBillingService:

    # Volumetric divisor (standard for couriers)
    VOLUMETRIC_DIVISOR = Decimal("5000")

    def __init__(self, volumetric_divisor: Optional[Decimal] = None):
        self.volumetric_divisor = Decimal(str(volumetric_divisor or self.VOLUMETRIC_DIVISOR))
        if self.volumetric_divisor <= 0:
            raise ValueError("volumetric divisor must be positive")

    # ============================================
    # INPUT VALIDATION
    # ============================================

    def validate_actual_weight(self, actual_weight_kg) -> Decimal:
        weight = to_decimal(actual_weight_kg, "actual_weight_kg")
        if weight <= 0:
            raise ValidationError(
                "actual_weight_kg must be greater than 0", {"field": "actual_weight_kg"}
            )
        return weight

    def build_dimensions(self, length=None, width=None, height=None) -> Optional[Dimensions]:
        """
        Dimensions are optional, but all three must be given together and each
        must be positive.
        """
        given = [v is not None for v in (length, width, height)]
        if not any(given):
            return None
        if not all(given):
            raise ValidationError(
                "length, width and height must be provided together",
                {"field": "dimensions"},
            )

        values = {}
        for field, value in (("length_cm", length), ("width_cm", width), ("height_cm", height)):
            d = to_decimal(value, field)
            if d <= 0:
                raise ValidationError(f"{field} must be greater than 0", {"field": field})
            values[field] = d

        return Dimensions(**values)

    # ============================================
    # WEIGHT CALCULATIONS
    # ============================================

    def volumetric_weight(self, dimensions: Optional[Dimensions]) -> Decimal:
        if dimensions is None:
            return Decimal("0")
        volume = dimensions.length_cm * dimensions.width_cm * dimensions.height_cm
        return volume / self.volumetric_divisor

    def chargeable_weight(
        self,
        actual_weight_kg,
        dimensions: Optional[Dimensions] = None,
        min_billable_weight_kg=Decimal("0"),
    ) -> WeightBreakdown:
        actual = self.validate_actual_weight(actual_weight_kg)
        minimum = to_decimal(min_billable_weight_kg or 0, "min_billable_weight_kg")
        if minimum < 0:
            raise ValidationError(
                "min_billable_weight_kg cannot be negative",
                {"field": "min_billable_weight_kg"},
            )

        volumetric = self.volumetric_weight(dimensions)

        return WeightBreakdown(
            actual_weight_kg=actual,
            volumetric_weight_kg=volumetric,
            min_billable_weight_kg=minimum,
            chargeable_weight_kg=max(actual, volumetric, minimum),
        )

    def additional_units(self, chargeable_weight_kg, base_weight_kg, weight_increment_kg) -> int:
        chargeable = to_decimal(chargeable_weight_kg, "chargeable_weight_kg")
        base = to_decimal(base_weight_kg, "base_weight_kg")
        increment = to_decimal(weight_increment_kg, "weight_increment_kg")
        if increment <= 0:
            raise ValidationError(
                "weight_increment_kg must be greater than 0",
                {"field": "weight_increment_kg"},
            )

        extra = chargeable - base
        if extra <= 0:
            return 0

        return int((extra / increment).to_integral_value(rounding=ROUND_CEILING))
