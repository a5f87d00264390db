"""Request fingerprinting and the bounded recipe cache."""

from recipe_engine.caching.fingerprint import (
    RequestType,
    FingerprintInputs,
    fingerprint,
    canonical_json,
    normalize_restrictions,
    ingredients_request,
    food_name_request,
)

from recipe_engine.caching.backends import (
    CacheBackend,
    CacheRecord,
    InMemoryCacheBackend,
    JsonFileCacheBackend,
    SqlCacheBackend,
)

from recipe_engine.caching.cache_store import (
    RecipeCache,
    SweepReport,
    PeriodicSweeper,
)

__all__ = [
    # Fingerprinting
    "RequestType",
    "FingerprintInputs",
    "fingerprint",
    "canonical_json",
    "normalize_restrictions",
    "ingredients_request",
    "food_name_request",
    # Storage backends
    "CacheBackend",
    "CacheRecord",
    "InMemoryCacheBackend",
    "JsonFileCacheBackend",
    "SqlCacheBackend",
    # Cache store
    "RecipeCache",
    "SweepReport",
    "PeriodicSweeper",
]
