"""Entry points used by the calling (HTTP) layer.

Typical flow for a generation request:

    inputs = ingredients_request(["chicken", "rice"], serving_size=4,
                                 restrictions=service.aggregate_restrictions(["halal"], user_id))
    recipes = service.get_or_generate(inputs, ai_client.recipes_for)

and for a serving-size change:

    scaled = service.scale_recipe(recipe, new_serving_size=8)
"""

import logging
from dataclasses import replace
from typing import Callable, FrozenSet, Iterable, Optional

from recipe_engine.caching.backends import (
    CacheBackend,
    InMemoryCacheBackend,
    JsonFileCacheBackend,
    SqlCacheBackend,
)
from recipe_engine.caching.cache_store import PeriodicSweeper, RecipeCache, SweepReport
from recipe_engine.caching.fingerprint import FingerprintInputs
from recipe_engine.config import Settings
from recipe_engine.data_layer.errors import CacheLookupResult, CacheUnavailableError
from recipe_engine.data_layer.models import Payload, Recipe
from recipe_engine.data_layer.profile_store import ProfileStore, YamlProfileStore
from recipe_engine.restrictions import RestrictionAggregator
from recipe_engine.scaling.policy import ScalingPolicy
from recipe_engine.scaling.recipe_scaler import RecipeScaler

log = logging.getLogger("recipe_engine.service")

# Generation collaborator: produces a payload for inputs that missed the cache
Generator = Callable[[FingerprintInputs], Payload]


class RecipeCacheService:
    """Cache lookups, recipe scaling and restriction aggregation.

    The cache is swept once on construction so a restarted process
    starts inside its TTL and capacity bounds.
    """

    def __init__(
        self,
        cache: RecipeCache,
        profile_store: Optional[ProfileStore] = None,
        policy: Optional[ScalingPolicy] = None,
        sweep_on_start: bool = True
    ):
        self.cache = cache
        self.aggregator = RestrictionAggregator(profile_store)
        self.scaler = RecipeScaler(policy)
        if sweep_on_start:
            self.cache.sweep()

    def lookup_or_miss(self, inputs: FingerprintInputs) -> Optional[Payload]:
        """Return the cached payload for inputs, or None on miss.

        Raises:
            InvalidRequestError: If inputs are malformed
        """
        return self.cache.get(inputs.fingerprint())

    def lookup(self, inputs: FingerprintInputs) -> CacheLookupResult:
        """Like ``lookup_or_miss`` but reports degraded misses."""
        return self.cache.lookup(inputs.fingerprint())

    def store(self, inputs: FingerprintInputs, payload: Payload) -> None:
        """Cache a generated payload under the inputs' fingerprint.

        Raises:
            InvalidRequestError: If inputs are malformed
        """
        self.cache.put(inputs.fingerprint(), payload)

    def get_or_generate(self, inputs: FingerprintInputs, generator: Generator) -> Payload:
        """Serve from cache, or generate, cache and return the payload.

        Errors raised by the generator propagate unchanged.
        """
        fp = inputs.fingerprint()
        cached = self.cache.get(fp)
        if cached is not None:
            return cached

        log.info("Generating payload for %s request %s", inputs.request_type, fp)
        payload = generator(inputs)
        self.cache.put(fp, payload)
        return payload

    def scale_recipe(self, recipe: Recipe, new_serving_size: int) -> Recipe:
        """Return a copy of recipe scaled to new_serving_size.

        Raises:
            ScalingPreconditionError: If either serving size is not positive
        """
        return self.scaler.scale(recipe, new_serving_size)

    def aggregate_restrictions(
        self,
        request_restrictions: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None
    ) -> FrozenSet[str]:
        """Union request restrictions with the user's stored profile."""
        return self.aggregator.aggregate(request_restrictions, user_id)

    def with_restrictions(
        self,
        inputs: FingerprintInputs,
        user_id: Optional[str] = None
    ) -> FingerprintInputs:
        """Return inputs whose restrictions include the user's profile."""
        return replace(
            inputs, restrictions=self.aggregate_restrictions(inputs.restrictions, user_id)
        )

    def sweep(self) -> SweepReport:
        return self.cache.sweep()


def build_backend(settings: Settings) -> CacheBackend:
    """Create the cache backend named in settings.

    A persistent backend that cannot be opened falls back to memory;
    the service keeps working, only without persistence.
    """
    try:
        if settings.cache_backend == "json":
            return JsonFileCacheBackend(cache_dir=settings.cache_path)
        if settings.cache_backend == "sql":
            return SqlCacheBackend(database_url=settings.database_url)
    except CacheUnavailableError as e:
        log.warning("Falling back to in-memory cache: %s", e)
    return InMemoryCacheBackend()


def build_service(settings: Settings) -> RecipeCacheService:
    """Wire a RecipeCacheService from settings."""
    cache = RecipeCache(
        build_backend(settings),
        ttl_hours=settings.cache_ttl_hours,
        max_entries=settings.cache_max_entries,
    )
    profile_store = (
        YamlProfileStore(settings.profiles_path) if settings.profiles_path else None
    )
    return RecipeCacheService(cache, profile_store=profile_store, policy=settings.scaling)


def build_sweeper(settings: Settings, service: RecipeCacheService) -> Optional[PeriodicSweeper]:
    """Create a periodic sweeper when an interval is configured."""
    if settings.sweep_interval_seconds is None:
        return None
    return PeriodicSweeper(service.cache, settings.sweep_interval_seconds)
