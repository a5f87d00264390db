"""Deterministic, unit-aware scaling of recipes by serving size."""

from recipe_engine.scaling.policy import (
    ScalingPolicy,
    DEFAULT_POLICY,
    scale_factor,
    validate_servings,
)

from recipe_engine.scaling.units import (
    CONVERSIONS,
    convert_unit,
    suggest_better_unit,
    unit_dimension,
    round_half_up,
    round_to_fraction,
)

from recipe_engine.scaling.quantity_scaler import QuantityScaler

from recipe_engine.scaling.nutrition_scaler import NutritionScaler

from recipe_engine.scaling.estimators import (
    scale_cooking_time,
    scale_difficulty,
    scale_cost,
    equipment_recommendations,
)

from recipe_engine.scaling.recipe_scaler import RecipeScaler

__all__ = [
    # Policy
    "ScalingPolicy",
    "DEFAULT_POLICY",
    "scale_factor",
    "validate_servings",
    # Unit conversion
    "CONVERSIONS",
    "convert_unit",
    "suggest_better_unit",
    "unit_dimension",
    "round_half_up",
    "round_to_fraction",
    # Scalers
    "QuantityScaler",
    "NutritionScaler",
    "RecipeScaler",
    # Estimators
    "scale_cooking_time",
    "scale_difficulty",
    "scale_cost",
    "equipment_recommendations",
]
