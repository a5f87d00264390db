"""Dietary restriction aggregation and recipe compatibility checks."""
from typing import FrozenSet, Iterable, List, Optional, Sequence

from recipe_engine.data_layer.models import Recipe, normalize_restrictions
from recipe_engine.data_layer.profile_store import ProfileStore


class RestrictionAggregator:
    """Merges request restrictions with a user's stored profile.

    Usage:
        aggregator = RestrictionAggregator(YamlProfileStore("config/profiles.yaml"))
        restrictions = aggregator.aggregate(["vegan"], user_id="user-123")
    """

    def __init__(self, profile_store: Optional[ProfileStore] = None):
        self.profile_store = profile_store

    def aggregate(
        self,
        request_restrictions: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None
    ) -> FrozenSet[str]:
        """Union request restrictions with the user's stored ones.

        Args:
            request_restrictions: Restrictions sent with the request
            user_id: Optional user whose profile should be included

        Returns:
            De-duplicated, normalised restriction set. An unknown user (or
            no profile store) leaves the request set unchanged.
        """
        restrictions = normalize_restrictions(request_restrictions)
        if user_id and self.profile_store is not None:
            restrictions = restrictions | self.profile_store.get_restrictions(user_id)
        return restrictions


def is_compatible(recipe: Recipe, restrictions: Iterable[str]) -> bool:
    """True when the recipe is marked compatible with every restriction.

    Compares whole identifiers, so "low_sodium" never matches "sodium".
    """
    required = normalize_restrictions(restrictions)
    return required <= normalize_restrictions(recipe.dietary_compatibility)


def filter_compatible(recipes: Sequence[Recipe], restrictions: Iterable[str]) -> List[Recipe]:
    """Keep recipes compatible with every restriction, preserving order."""
    required = normalize_restrictions(restrictions)
    return [recipe for recipe in recipes if is_compatible(recipe, required)]
