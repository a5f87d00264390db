"""Nutrition scaling by serving size.

This module rescales a recipe's nutrition record when its serving size
changes. Scaling is purely multiplicative, so it is reversible up to
the rounding applied at each step:

- calories round to whole numbers
- macronutrients round to ``policy.macro_decimals``
- vitamin and mineral entries round to ``policy.micro_decimals``
  with their keys preserved

Missing nutrient fields are already zero by the time a NutritionalInfo
exists (see NutritionalInfo.from_dict and the boundary schemas), so
scaling never has to guess.
"""

from typing import Dict, Mapping, Optional

from recipe_engine.data_layer.models import MACRO_FIELDS, NutritionalInfo
from recipe_engine.scaling.policy import (
    DEFAULT_POLICY,
    ScalingPolicy,
    scale_factor,
    validate_servings,
)
from recipe_engine.scaling.units import round_half_up


class NutritionScaler:
    """Scales nutrition data to a new number of servings.

    Usage:
        scaler = NutritionScaler()

        # Nutrition stated for 4 servings, wanted for 2
        halved = scaler.scale(info, original_servings=4, new_servings=2)
        halved.serving_size  # 2
    """

    def __init__(self, policy: Optional[ScalingPolicy] = None):
        self.policy = policy or DEFAULT_POLICY

    def scale(
        self,
        nutrition: NutritionalInfo,
        original_servings: int,
        new_servings: int
    ) -> NutritionalInfo:
        """Scale nutrition data to new_servings.

        Args:
            nutrition: Nutrition stated for original_servings
            original_servings: Servings the values are stated for
            new_servings: Target servings

        Returns:
            New NutritionalInfo with serving_size set to new_servings

        Raises:
            ScalingPreconditionError: If either serving size is not positive
        """
        validate_servings(original_servings, new_servings)
        factor = scale_factor(original_servings, new_servings)

        scaled_macros = {
            name: round_half_up(getattr(nutrition, name) * factor, self.policy.macro_decimals)
            for name in MACRO_FIELDS
        }

        return NutritionalInfo(
            calories=int(round_half_up(nutrition.calories * factor)),
            serving_size=new_servings,
            vitamins=self._scale_nutrient_map(nutrition.vitamins, factor),
            minerals=self._scale_nutrient_map(nutrition.minerals, factor),
            **scaled_macros,
        )

    def _scale_nutrient_map(
        self,
        nutrients: Mapping[str, float],
        factor: float
    ) -> Dict[str, float]:
        """Scale every entry of an open-ended vitamin/mineral map.

        Args:
            nutrients: Nutrient name -> amount
            factor: Factor to multiply by

        Returns:
            New dict with the same keys
        """
        return {
            name: round_half_up(amount * factor, self.policy.micro_decimals)
            for name, amount in nutrients.items()
        }
