"""Tunable constants for recipe scaling.

The rounding precisions and the cooking-time curve are kitchen
heuristics, not nutritional facts, so they are grouped here and can be
overridden from the ``scaling:`` section of the settings file.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from recipe_engine.data_layer.errors import ScalingPreconditionError


@dataclass(frozen=True)
class ScalingPolicy:
    """Constants used by the quantity, nutrition and estimator scalers.

    Attributes:
        small_amount_threshold: Scaled amounts below this keep extra precision
        small_amount_decimals: Decimals kept for small amounts
        teaspoon_fraction: Teaspoon-class amounts round to 1/N
        tablespoon_fraction: Tablespoon-class amounts round to 1/N
        cup_fraction: Cup/liter-class amounts round to 1/N
        gram_integer_threshold: Grams at or above this round to integers
        default_decimals: Decimals for units outside every class
        macro_decimals: Decimals for protein/carbs/fat/fiber/sugar/sodium
        micro_decimals: Decimals for vitamin and mineral entries
        time_floor: Share of cooking time that does not shrink with batch size
        time_shrink_slope: Share that shrinks linearly with the scale factor
        time_growth_coefficient: Multiplier on ln(scale factor) when growing
        difficulty_low_factor: Scale factors below this raise difficulty
        difficulty_high_factor: Scale factors above this raise difficulty
        max_difficulty: Upper bound on difficulty
    """
    small_amount_threshold: float = 0.1
    small_amount_decimals: int = 3
    teaspoon_fraction: int = 4
    tablespoon_fraction: int = 2
    cup_fraction: int = 4
    gram_integer_threshold: float = 10.0
    default_decimals: int = 1
    macro_decimals: int = 1
    micro_decimals: int = 1
    time_floor: float = 0.7
    time_shrink_slope: float = 0.3
    time_growth_coefficient: float = 0.3
    difficulty_low_factor: float = 0.5
    difficulty_high_factor: float = 3.0
    max_difficulty: int = 5

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScalingPolicy":
        """Build a policy from a partial mapping; unknown keys raise.

        Raises:
            ValueError: If a key does not name a policy field
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown scaling policy fields: {unknown}")

        defaults = cls()
        values = {}
        for name, raw in data.items():
            current = getattr(defaults, name)
            values[name] = type(current)(raw)
        return cls(**values)


DEFAULT_POLICY = ScalingPolicy()


def scale_factor(original_servings: int, new_servings: int) -> float:
    """Ratio of new to original servings.

    Callers validate servings first (see ``validate_servings``).
    """
    return new_servings / original_servings


def validate_servings(original_servings: Any, new_servings: Any) -> None:
    """Check both serving sizes are positive integers.

    Raises:
        ScalingPreconditionError: Naming the first invalid serving size
    """
    for name, value in (
        ("original_servings", original_servings),
        ("new_servings", new_servings),
    ):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ScalingPreconditionError(field=name, value=value)
