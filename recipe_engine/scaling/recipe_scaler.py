"""Whole-recipe scaling: ingredients, nutrition, time and difficulty."""
from dataclasses import replace
from typing import Optional

from recipe_engine.data_layer.models import Recipe
from recipe_engine.scaling.estimators import scale_cooking_time, scale_difficulty
from recipe_engine.scaling.nutrition_scaler import NutritionScaler
from recipe_engine.scaling.policy import DEFAULT_POLICY, ScalingPolicy, validate_servings
from recipe_engine.scaling.quantity_scaler import QuantityScaler


class RecipeScaler:
    """Produces a scaled copy of a recipe; the original is never touched."""

    def __init__(
        self,
        policy: Optional[ScalingPolicy] = None,
        normalize_units: bool = False
    ):
        self.policy = policy or DEFAULT_POLICY
        self.quantity_scaler = QuantityScaler(self.policy, normalize_units=normalize_units)
        self.nutrition_scaler = NutritionScaler(self.policy)

    def scale(self, recipe: Recipe, new_serving_size: int) -> Recipe:
        """Scale a recipe to new_serving_size servings.

        Args:
            recipe: Recipe stated for recipe.serving_size servings
            new_serving_size: Target servings

        Returns:
            Derived Recipe with scaled ingredients, nutrition, cooking
            time and difficulty

        Raises:
            ScalingPreconditionError: If either serving size is not positive
        """
        original = recipe.serving_size
        validate_servings(original, new_serving_size)

        nutrition = recipe.nutritional_info
        if nutrition is not None:
            # Nutrition may be stated for a different basis than the recipe
            nutrition = self.nutrition_scaler.scale(
                nutrition, nutrition.serving_size, new_serving_size
            )

        return replace(
            recipe,
            ingredients=tuple(
                self.quantity_scaler.scale(recipe.ingredients, original, new_serving_size)
            ),
            serving_size=new_serving_size,
            cooking_time=scale_cooking_time(
                recipe.cooking_time, original, new_serving_size, self.policy
            ),
            difficulty=scale_difficulty(
                recipe.difficulty, original, new_serving_size, self.policy
            ),
            nutritional_info=nutrition,
        )
