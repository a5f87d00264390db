"""Unit conversion and rounding for recipe quantities.

Conversion is advisory: unknown units and cross-dimension pairs are
returned unchanged rather than raising, because a recipe with an odd
unit ("cloves", "handful") must still scale.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple


# ============================================================================
# UNIT CONVERSION TABLE
# ============================================================================
#
# CONVERSIONS[from_unit][to_unit] is the multiplier taking an amount in
# from_unit to to_unit. Units are grouped by dimension; there are no
# volume <-> mass entries because density varies by ingredient.
#
# Going from a larger unit to a smaller one the factor is the measured
# size; the reverse direction stores its exact reciprocal.
# ============================================================================

ML_PER_CUP = 236.588
ML_PER_TBSP = 14.7868
ML_PER_TSP = 4.92892

G_PER_OZ = 28.3495
G_PER_LB = 453.592

VOLUME_CONVERSIONS: Dict[str, Dict[str, float]] = {
    "ml": {"ml": 1, "l": 1 / 1000, "cup": 1 / ML_PER_CUP, "tbsp": 1 / ML_PER_TBSP, "tsp": 1 / ML_PER_TSP},
    "l": {"ml": 1000, "l": 1, "cup": 1000 / ML_PER_CUP, "tbsp": 1000 / ML_PER_TBSP, "tsp": 1000 / ML_PER_TSP},
    "cup": {"ml": ML_PER_CUP, "l": ML_PER_CUP / 1000, "cup": 1, "tbsp": 16, "tsp": 48},
    "tbsp": {"ml": ML_PER_TBSP, "l": ML_PER_TBSP / 1000, "cup": 1 / 16, "tbsp": 1, "tsp": 3},
    "tsp": {"ml": ML_PER_TSP, "l": ML_PER_TSP / 1000, "cup": 1 / 48, "tbsp": 1 / 3, "tsp": 1},
}

MASS_CONVERSIONS: Dict[str, Dict[str, float]] = {
    "g": {"g": 1, "kg": 1 / 1000, "oz": 1 / G_PER_OZ, "lb": 1 / G_PER_LB},
    "kg": {"g": 1000, "kg": 1, "oz": 1000 / G_PER_OZ, "lb": 1000 / G_PER_LB},
    "oz": {"g": G_PER_OZ, "kg": G_PER_OZ / 1000, "oz": 1, "lb": 1 / 16},
    "lb": {"g": G_PER_LB, "kg": G_PER_LB / 1000, "oz": 16, "lb": 1},
}

CONVERSIONS: Dict[str, Dict[str, float]] = {**VOLUME_CONVERSIONS, **MASS_CONVERSIONS}


# ============================================================================
# UNIT CLASSES
# ============================================================================
#
# Spellings that share a rounding precision when scaled.
# ============================================================================

TEASPOON_UNITS = frozenset({"tsp", "teaspoon", "pinch", "dash"})
TABLESPOON_UNITS = frozenset({"tbsp", "tablespoon"})
CUP_UNITS = frozenset({"cup", "cups", "l", "liter", "litre"})
GRAM_UNITS = frozenset({"g", "gram", "grams"})
KILOGRAM_UNITS = frozenset({"kg", "kilogram", "kilograms"})
OUNCE_UNITS = frozenset({"oz", "ounce", "ounces"})
POUND_UNITS = frozenset({"lb", "pound", "pounds"})
COUNT_UNITS = frozenset({"piece", "pieces", "item", "items", "whole", "each"})


def unit_dimension(unit: str) -> Optional[str]:
    """Return ``"volume"``, ``"mass"`` or None for an unknown unit."""
    unit_lower = unit.lower()
    if unit_lower in VOLUME_CONVERSIONS:
        return "volume"
    if unit_lower in MASS_CONVERSIONS:
        return "mass"
    return None


def convert_unit(amount: float, from_unit: str, to_unit: str) -> float:
    """Convert an amount between two units of the same dimension.

    Args:
        amount: Amount in from_unit
        from_unit: Source unit (case-insensitive)
        to_unit: Target unit (case-insensitive)

    Returns:
        Converted amount, or ``amount`` unchanged when the pair is not
        in the conversion table
    """
    factor = CONVERSIONS.get(from_unit.lower(), {}).get(to_unit.lower())
    if factor is None:
        return amount
    return amount * factor


def suggest_better_unit(amount: float, unit: str) -> Tuple[float, str]:
    """Move an amount to a unit that reads better at its magnitude.

    1500 ml reads better as 1.5 l, 0.5 tbsp as 1.5 tsp, and so on.

    Args:
        amount: Amount in ``unit``
        unit: Current unit

    Returns:
        (amount, unit) tuple; the input unchanged when no rule applies
    """
    unit_lower = unit.lower()

    # Metric volume
    if unit_lower == "ml" and amount >= 1000:
        return amount / 1000, "l"
    if unit_lower == "l" and amount < 1:
        return amount * 1000, "ml"

    # Spoons and cups
    if unit_lower == "tsp" and amount >= 3:
        return amount / 3, "tbsp"
    if unit_lower == "tbsp" and amount >= 16:
        return amount / 16, "cup"
    if unit_lower == "tbsp" and amount < 1:
        return amount * 3, "tsp"
    if unit_lower == "cup" and amount < 0.25:
        return amount * 16, "tbsp"

    # Metric mass
    if unit_lower == "g" and amount >= 1000:
        return amount / 1000, "kg"
    if unit_lower == "kg" and amount < 1:
        return amount * 1000, "g"

    # Imperial mass
    if unit_lower == "oz" and amount >= 16:
        return amount / 16, "lb"
    if unit_lower == "lb" and amount < 1:
        return amount * 16, "oz"

    return amount, unit


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round half away from zero to ``decimals`` places.

    Python's built-in ``round`` rounds half to even, which would turn
    2.5 servings worth of eggs into 2.

    Values already coarser than the target precision (including very
    large floats such as 1e30) are returned unchanged.
    """
    number = Decimal(repr(value))
    if not number.is_finite() or number.as_tuple().exponent >= -decimals:
        return float(number)
    exponent = Decimal(1).scaleb(-decimals)
    return float(number.quantize(exponent, rounding=ROUND_HALF_UP))


def round_to_fraction(value: float, denominator: int) -> float:
    """Round to the nearest 1/denominator (4 → quarters, 2 → halves)."""
    return round_half_up(value * denominator) / denominator
