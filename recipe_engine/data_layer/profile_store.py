"""Dietary profile stores for looking up a user's stored restrictions."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional

import yaml

from recipe_engine.data_layer.models import DietaryProfile, normalize_restrictions


class ProfileStore(ABC):
    """Source of stored dietary profiles, keyed by user id."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[DietaryProfile]:
        """Return the user's profile, or None if the user has none."""
        ...

    def get_restrictions(self, user_id: str) -> FrozenSet[str]:
        """Return allergies ∪ preferences ∪ health conditions.

        An unknown user has no restrictions.
        """
        profile = self.get_profile(user_id)
        if profile is None:
            return frozenset()
        return normalize_restrictions(profile.all_restrictions())


class InMemoryProfileStore(ProfileStore):
    """Profiles held in a dict; used by tests and embedding callers."""

    def __init__(self, profiles: Iterable[DietaryProfile] = ()):
        self._profiles: Dict[str, DietaryProfile] = {p.user_id: p for p in profiles}

    def get_profile(self, user_id: str) -> Optional[DietaryProfile]:
        return self._profiles.get(user_id)

    def save_profile(self, profile: DietaryProfile) -> None:
        self._profiles[profile.user_id] = profile


class YamlProfileStore(ProfileStore):
    """Loader for dietary profiles from a YAML document.

    Expected layout::

        profiles:
          user-123:
            allergies: [nuts, shellfish]
            dietary_preferences: [vegetarian]
            health_conditions: [low_sodium]
    """

    def __init__(self, yaml_path: str):
        """Initialize profile store from YAML file.

        Args:
            yaml_path: Path to YAML file containing profiles

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If the document is not a mapping of profiles
        """
        self.yaml_path = Path(yaml_path)
        self._profiles = self._load()

    def _load(self) -> Dict[str, DietaryProfile]:
        with open(self.yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Profiles file {self.yaml_path} must contain a mapping")
        profiles_data = data.get("profiles") or {}
        if not isinstance(profiles_data, dict):
            raise ValueError(f"'profiles' in {self.yaml_path} must be a mapping")

        profiles = {}
        for user_id, entry in profiles_data.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ValueError(f"Profile {user_id!r} in {self.yaml_path} must be a mapping")
            profiles[str(user_id)] = DietaryProfile(
                user_id=str(user_id),
                allergies=tuple(str(a) for a in entry.get("allergies", [])),
                dietary_preferences=tuple(
                    str(p) for p in entry.get("dietary_preferences", [])
                ),
                health_conditions=tuple(
                    str(c) for c in entry.get("health_conditions", [])
                ),
            )
        return profiles

    def get_profile(self, user_id: str) -> Optional[DietaryProfile]:
        return self._profiles.get(user_id)
