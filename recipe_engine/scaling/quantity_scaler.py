"""Ingredient quantity scaling by serving size.

Each scaled amount is rounded to a precision that suits its unit: a
quarter teaspoon is a real measurement, 0.2731 teaspoons is not.
"""

from dataclasses import replace
from typing import List, Optional, Sequence

from recipe_engine.data_layer.models import Ingredient, Quantity
from recipe_engine.scaling.policy import (
    DEFAULT_POLICY,
    ScalingPolicy,
    scale_factor,
    validate_servings,
)
from recipe_engine.scaling.units import (
    COUNT_UNITS,
    CUP_UNITS,
    GRAM_UNITS,
    KILOGRAM_UNITS,
    OUNCE_UNITS,
    POUND_UNITS,
    TABLESPOON_UNITS,
    TEASPOON_UNITS,
    round_half_up,
    round_to_fraction,
    suggest_better_unit,
)


class QuantityScaler:
    """Scales ingredient amounts and rounds them per unit class.

    Usage:
        scaler = QuantityScaler()
        doubled = scaler.scale(recipe.ingredients, 4, 8)
    """

    def __init__(
        self,
        policy: Optional[ScalingPolicy] = None,
        normalize_units: bool = False
    ):
        """Initialize scaler.

        Args:
            policy: Rounding constants (defaults to DEFAULT_POLICY)
            normalize_units: Move scaled amounts to a more readable unit
                (e.g. 48 tsp -> 1 cup) after rounding
        """
        self.policy = policy or DEFAULT_POLICY
        self.normalize_units = normalize_units

    def scale(
        self,
        ingredients: Sequence[Ingredient],
        original_servings: int,
        new_servings: int
    ) -> List[Ingredient]:
        """Scale every ingredient for a new number of servings.

        Args:
            ingredients: Ingredients stated for original_servings
            original_servings: Servings the amounts are stated for
            new_servings: Target servings

        Returns:
            New list in the same order; only amounts (and, with
            normalize_units, units) differ

        Raises:
            ScalingPreconditionError: If either serving size is not positive
        """
        validate_servings(original_servings, new_servings)
        factor = scale_factor(original_servings, new_servings)
        return [self._scale_one(ingredient, factor) for ingredient in ingredients]

    def _scale_one(self, ingredient: Ingredient, factor: float) -> Ingredient:
        unit = ingredient.quantity.unit
        amount = self.round_amount(ingredient.quantity.amount * factor, unit)

        if self.normalize_units:
            better_amount, better_unit = suggest_better_unit(amount, unit)
            if better_unit != unit:
                amount = self.round_amount(better_amount, better_unit)
                unit = better_unit

        return replace(ingredient, quantity=Quantity(amount=amount, unit=unit))

    def round_amount(self, amount: float, unit: str) -> float:
        """Round a scaled amount to the precision of its unit class.

        Args:
            amount: Scaled amount
            unit: Unit the amount is stated in

        Returns:
            Rounded amount
        """
        policy = self.policy
        unit_lower = unit.lower()

        # Very small amounts keep extra precision whatever the unit
        if amount < policy.small_amount_threshold:
            return round_half_up(amount, policy.small_amount_decimals)

        if unit_lower in TEASPOON_UNITS:
            return round_to_fraction(amount, policy.teaspoon_fraction)

        if unit_lower in TABLESPOON_UNITS:
            return round_to_fraction(amount, policy.tablespoon_fraction)

        if unit_lower in CUP_UNITS:
            return round_to_fraction(amount, policy.cup_fraction)

        if unit_lower in GRAM_UNITS:
            if amount < policy.gram_integer_threshold:
                return round_half_up(amount, 1)
            return round_half_up(amount)

        if unit_lower in KILOGRAM_UNITS:
            return round_half_up(amount, 2)

        if unit_lower in OUNCE_UNITS:
            return round_half_up(amount, 1)

        if unit_lower in POUND_UNITS:
            return round_half_up(amount, 2)

        # Counted items (or no unit at all) are whole
        if not unit_lower or unit_lower in COUNT_UNITS:
            return round_half_up(amount)

        return round_half_up(amount, policy.default_decimals)
