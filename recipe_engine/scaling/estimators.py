"""Non-linear estimates that change with batch size.

Cooking time and difficulty do not scale proportionally with servings:
half a batch still needs the oven preheated, and a triple batch shares
the same pan of boiling water.
"""

import math
from typing import List, Optional

from recipe_engine.scaling.policy import (
    DEFAULT_POLICY,
    ScalingPolicy,
    scale_factor,
    validate_servings,
)
from recipe_engine.scaling.units import round_half_up


def scale_cooking_time(
    original_time: int,
    original_servings: int,
    new_servings: int,
    policy: Optional[ScalingPolicy] = None
) -> int:
    """Estimate cooking time in minutes for a new number of servings.

    Shrinking: time * (floor + slope * factor).
    Growing: time * (1 + coefficient * ln(factor)).

    Args:
        original_time: Cooking time in minutes for original_servings
        original_servings: Servings the time is stated for
        new_servings: Target servings
        policy: Curve constants (defaults to DEFAULT_POLICY)

    Returns:
        Whole minutes, at least 1

    Raises:
        ScalingPreconditionError: If either serving size is not positive
    """
    policy = policy or DEFAULT_POLICY
    validate_servings(original_servings, new_servings)
    factor = scale_factor(original_servings, new_servings)

    if factor <= 1:
        estimate = original_time * (policy.time_floor + policy.time_shrink_slope * factor)
    else:
        estimate = original_time * (1 + policy.time_growth_coefficient * math.log(factor))

    return max(1, int(round_half_up(estimate)))


def scale_difficulty(
    original_difficulty: int,
    original_servings: int,
    new_servings: int,
    policy: Optional[ScalingPolicy] = None
) -> int:
    """Adjust difficulty for a new number of servings.

    Very small batches need precise measuring, very large ones need
    logistics; both add one level, capped at policy.max_difficulty.

    Raises:
        ScalingPreconditionError: If either serving size is not positive
    """
    policy = policy or DEFAULT_POLICY
    validate_servings(original_servings, new_servings)
    factor = scale_factor(original_servings, new_servings)

    if factor < policy.difficulty_low_factor or factor > policy.difficulty_high_factor:
        return min(policy.max_difficulty, original_difficulty + 1)
    return original_difficulty


def scale_cost(original_cost: float, original_servings: int, new_servings: int) -> float:
    """Scale a recipe cost linearly, rounded to cents."""
    validate_servings(original_servings, new_servings)
    return round_half_up(original_cost * scale_factor(original_servings, new_servings), 2)


def equipment_recommendations(servings: int) -> List[str]:
    """Suggest cookware sized for the number of servings."""
    if servings <= 2:
        return ["Small saucepan", "Small mixing bowl"]
    if servings <= 4:
        return ["Medium saucepan", "Medium mixing bowl"]
    if servings <= 8:
        return ["Large saucepan", "Large mixing bowl", "Consider using a large skillet"]
    return ["Extra large pot", "Multiple mixing bowls", "Consider batch cooking"]
