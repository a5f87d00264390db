"""Domain records, boundary schemas, errors and profile stores."""

from recipe_engine.data_layer.models import (
    Quantity,
    Ingredient,
    NutritionalInfo,
    Recipe,
    Payload,
    DietaryProfile,
    payload_to_dict,
    payload_from_dict,
    normalize_restrictions,
)

from recipe_engine.data_layer.errors import (
    ErrorKind,
    RecipeEngineError,
    InvalidRequestError,
    CacheUnavailableError,
    ScalingPreconditionError,
    InvalidPayloadError,
    CacheLookupResult,
)

__all__ = [
    # Models
    "Quantity",
    "Ingredient",
    "NutritionalInfo",
    "Recipe",
    "Payload",
    "DietaryProfile",
    "payload_to_dict",
    "payload_from_dict",
    "normalize_restrictions",
    # Errors
    "ErrorKind",
    "RecipeEngineError",
    "InvalidRequestError",
    "CacheUnavailableError",
    "ScalingPreconditionError",
    "InvalidPayloadError",
    "CacheLookupResult",
]
